"""Agent draft configuration and the registry of committed agents."""

import json
import logging
import time
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from wizard.catalog import (
    AGENT_TYPES,
    DEFAULT_JSON_SCHEMA,
    OUTPUT_FORMATS,
    TOOLS,
    AgentType,
    OutputFormatId,
    ToolId,
    enabled_tools,
)
from wizard.errors import CommitError
from wizard.selection import SelectionSet

logger = logging.getLogger(__name__)


class AgentSpec(BaseModel):
    """Immutable result of committing a draft; the registry turns it into an Agent."""

    model_config = ConfigDict(frozen=True)

    type: AgentType
    tools: tuple[ToolId, ...] = ()
    output_format: OutputFormatId
    system_prompt: str = ""
    json_schema: str | None = None


class Agent(AgentSpec):
    """Committed agent. Only active changes after creation (via model_copy)."""

    id: str
    created_at: float = Field(default_factory=time.time)
    active: bool = True

    @property
    def display_name(self) -> str:
        return f"{self.type.value.capitalize()} Agent"


class AgentConfigState:
    """Draft of the agent being created."""

    def __init__(self) -> None:
        self.type: AgentType | None = None
        self.tools: SelectionSet[ToolId] = SelectionSet(allowed=enabled_tools())
        self.output_format: OutputFormatId | None = None
        self.system_prompt = ""
        self.json_schema: str | None = None

    def set_type(self, agent_type: AgentType) -> None:
        """Choose the agent type and seed its example system prompt."""
        if agent_type != self.type:
            self.system_prompt = AGENT_TYPES[agent_type].example_prompt
        self.type = agent_type

    def set_system_prompt(self, prompt: str) -> None:
        self.system_prompt = prompt

    def toggle_tool(self, tool: ToolId) -> bool:
        """Flip tool selection. Placeholder tools stay unselected."""
        if not TOOLS[tool].enabled:
            logger.debug("Tool %s is not available", tool.value)
            return False
        return self.tools.toggle(tool)

    def set_output_format(self, fmt: OutputFormatId) -> bool:
        """Choose an output format. Returns False for placeholder formats."""
        if not OUTPUT_FORMATS[fmt].enabled:
            logger.debug("Output format %s is not available", fmt.value)
            return False
        if fmt is OutputFormatId.JSON and self.json_schema is None:
            self.json_schema = DEFAULT_JSON_SCHEMA
        self.output_format = fmt
        return True

    def set_json_schema(self, schema: str) -> None:
        self.json_schema = schema

    def is_committable(self) -> bool:
        return self.type is not None and self.output_format is not None

    def _checked_schema(self) -> str | None:
        if self.output_format is not OutputFormatId.JSON:
            return None
        try:
            parsed = json.loads(self.json_schema or "")
        except json.JSONDecodeError as e:
            raise CommitError(f"JSON schema is not valid JSON: {e.msg}", "json_schema") from e
        if not isinstance(parsed, dict):
            raise CommitError("JSON schema must be an object", "json_schema")
        return self.json_schema

    def commit(self) -> AgentSpec:
        """Snapshot the draft and reset to defaults. Raises CommitError if incomplete."""
        if self.type is None:
            raise CommitError("Select an agent type", "agent_type")
        if self.output_format is None:
            raise CommitError("Select an output format", "output_format")
        spec = AgentSpec(
            type=self.type,
            tools=tuple(self.tools),
            output_format=self.output_format,
            system_prompt=self.system_prompt,
            json_schema=self._checked_schema(),
        )
        self.reset()
        return spec

    def reset(self) -> None:
        self.type = None
        self.tools.clear()
        self.output_format = None
        self.system_prompt = ""
        self.json_schema = None


class AgentRegistry:
    """Committed agents in creation order.

    Ids come from a counter that only grows, so a delete never frees an id.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._agents: dict[str, Agent] = {}
        self._next_id = 1
        self._clock = clock

    def create(self, spec: AgentSpec) -> Agent:
        agent = Agent(
            **spec.model_dump(),
            id=f"agent-{self._next_id}",
            created_at=self._clock(),
        )
        self._next_id += 1
        self._agents[agent.id] = agent
        logger.info("Created %s (%s)", agent.id, agent.type.value)
        return agent

    def get(self, agent_id: str) -> Agent | None:
        return self._agents.get(agent_id)

    def toggle_active(self, agent_id: str) -> Agent | None:
        """Flip active. Returns the updated agent, or None if absent."""
        agent = self._agents.get(agent_id)
        if agent is None:
            return None
        updated = agent.model_copy(update={"active": not agent.active})
        self._agents[agent_id] = updated
        return updated

    def delete(self, agent_id: str) -> bool:
        if self._agents.pop(agent_id, None) is None:
            return False
        logger.info("Deleted %s", agent_id)
        return True

    def list(self) -> list[Agent]:
        return list(self._agents.values())

    def __len__(self) -> int:
        return len(self._agents)
