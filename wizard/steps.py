"""Linear step controller for stepped sub-flows."""

from typing import Sequence

AGENT_STEPS = ("Type", "Tools", "Output")


class WizardStepController:
    """Bounded step index in [1, N]. Sequential only; always starts at 1."""

    def __init__(self, labels: Sequence[str] = AGENT_STEPS) -> None:
        if not labels:
            raise ValueError("at least one step is required")
        self._labels = tuple(labels)
        self._step = 1

    @property
    def step(self) -> int:
        return self._step

    @property
    def total(self) -> int:
        return len(self._labels)

    @property
    def label(self) -> str:
        return self._labels[self._step - 1]

    @property
    def is_first(self) -> bool:
        return self._step == 1

    @property
    def is_last(self) -> bool:
        return self._step == self.total

    def advance(self) -> int:
        self._step = min(self._step + 1, self.total)
        return self._step

    def retreat(self) -> int:
        self._step = max(self._step - 1, 1)
        return self._step
