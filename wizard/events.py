"""User-visible notices (toasts) published by the orchestrator.

In-process and synchronous: publish delivers to subscribers immediately.
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)

__all__ = ["Notice", "NoticeBus", "WizardTopics"]

ALL_TOPICS = "*"


class WizardTopics:
    """Topics the orchestrator publishes."""

    PROJECT_CREATED = "project.created"
    SYNC_COMPLETED = "project.sync.completed"
    SYNC_FAILED = "project.sync.failed"

    SOURCE_CONNECTED = "source.connected"
    CREDENTIAL_FAILED = "source.credential.failed"

    AGENT_CREATED = "agent.created"


@dataclass(frozen=True)
class Notice:
    """Immutable notice passed to subscribers."""

    topic: str
    title: str
    description: str = ""
    destructive: bool = False
    created_at: float = field(default_factory=time.time)


class NoticeBus:
    """Keeps a history of notices and fans them out to subscribers."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable[[Notice], None]]] = defaultdict(list)
        self._history: list[Notice] = []

    @property
    def history(self) -> list[Notice]:
        return list(self._history)

    def subscribe(self, topic: str, handler: Callable[[Notice], None]) -> None:
        """Register handler for topic, or for every topic with "*"."""
        self._subscribers[topic].append(handler)

    def publish(
        self,
        topic: str,
        title: str,
        description: str = "",
        *,
        destructive: bool = False,
    ) -> Notice:
        notice = Notice(topic, title, description, destructive)
        self._history.append(notice)
        for handler in [*self._subscribers[topic], *self._subscribers[ALL_TOPICS]]:
            try:
                handler(notice)
            except Exception as e:
                logger.exception("Notice handler failed for %s: %s", topic, e)
        return notice
