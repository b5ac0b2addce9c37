"""Project configuration: name, data sources and per-source sport selections."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from wizard.catalog import DATA_SOURCES, SPORTS, DataSourceId, SportId, search_sports
from wizard.credentials import CredentialGate
from wizard.errors import ValidationError
from wizard.selection import SelectionSet

logger = logging.getLogger(__name__)

NAME_FIELD = "project_name"
DATA_SOURCES_FIELD = "data_sources"


class Project(BaseModel):
    """Immutable snapshot of the project configuration."""

    model_config = ConfigDict(frozen=True)

    name: str
    data_sources: tuple[DataSourceId, ...]
    sport_selections: dict[DataSourceId, tuple[SportId, ...]]

    @field_validator("data_sources")
    @classmethod
    def _at_least_one_source(cls, v: tuple[DataSourceId, ...]) -> tuple[DataSourceId, ...]:
        if not v:
            raise ValueError("at least one data source is required")
        return v

    @model_validator(mode="after")
    def _no_orphan_selections(self) -> "Project":
        orphans = set(self.sport_selections) - set(self.data_sources)
        if orphans:
            raise ValueError(f"sport selections for unselected sources: {sorted(orphans)}")
        return self

    def all_sports(self) -> list[SportId]:
        """Union of sports over all sources, first-seen order."""
        seen: dict[SportId, None] = {}
        for sports in self.sport_selections.values():
            for sport in sports:
                seen[sport] = None
        return list(seen)


@dataclass(frozen=True)
class ValidationResult:
    """Field -> message. Empty means valid."""

    errors: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_for(self, field_name: str) -> str | None:
        return self.errors.get(field_name)


class SportDialog:
    """Temporary sport selection for one data source.

    Seeded from the committed selection on open; nothing is visible to the
    project until ProjectConfigState.confirm_sport_dialog merges it.
    """

    def __init__(self, source: DataSourceId, committed: Iterable[SportId]) -> None:
        self.source = source
        self.selection: SelectionSet[SportId] = SelectionSet.seeded(committed)
        self.query = ""

    def toggle(self, sport: SportId) -> bool:
        return self.selection.toggle(sport)

    def select_all(self) -> None:
        self.selection.select_all(SPORTS)

    @property
    def is_all_selected(self) -> bool:
        return self.selection.is_all_selected(SPORTS)

    def search(self, query: str) -> list[SportId]:
        self.query = query
        return self.visible_sports()

    def visible_sports(self) -> list[SportId]:
        return search_sports(self.query)


class ProjectConfigState:
    """Project fields plus the cross-field rules that keep them consistent."""

    def __init__(
        self,
        gates: Mapping[DataSourceId, CredentialGate],
        default_source: DataSourceId = DataSourceId.MACHINA_CORE,
        min_name_length: int = 1,
    ) -> None:
        if DATA_SOURCES[default_source].requires_credential:
            raise ValueError(f"default source {default_source.value} cannot require a credential")
        self._gates = gates
        self._default_source = default_source
        self._min_name_length = max(1, min_name_length)
        self._name = ""
        self._sources: SelectionSet[DataSourceId] = SelectionSet([default_source])
        self._sports: dict[DataSourceId, list[SportId]] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def data_sources(self) -> list[DataSourceId]:
        return self._sources.values()

    def sports_for(self, source: DataSourceId) -> list[SportId]:
        return list(self._sports.get(source, []))

    def is_unlocked(self, source: DataSourceId) -> bool:
        if not DATA_SOURCES[source].requires_credential:
            return True
        gate = self._gates.get(source)
        return gate is not None and gate.is_connected

    def set_name(self, value: str) -> None:
        self._name = value.strip()

    def toggle_data_source(self, source: DataSourceId) -> bool:
        """Toggle source membership. Returns False when the call changed nothing.

        Locked sources cannot be toggled. Removing the last source is refused
        for the default source and substitutes the default for any other.
        """
        if not self.is_unlocked(source):
            logger.debug("Ignoring toggle of locked source %s", source.value)
            return False
        if source not in self._sources:
            self._sources.add(source)
            return True
        if len(self._sources) == 1 and source == self._default_source:
            logger.debug("Refusing to remove the last data source")
            return False
        self._sources.discard(source)
        self._sports.pop(source, None)
        if not self._sources:
            self._sources.add(self._default_source)
        return True

    def add_data_source(self, source: DataSourceId) -> bool:
        """Select source if unlocked and not yet selected."""
        if source in self._sources or not self.is_unlocked(source):
            return False
        self._sources.add(source)
        return True

    def _require_editable(self, source: DataSourceId) -> None:
        if source not in self._sources:
            raise ValidationError(
                f"{DATA_SOURCES[source].name} is not selected", DATA_SOURCES_FIELD
            )
        if not self.is_unlocked(source):
            raise ValidationError(
                f"Connect {DATA_SOURCES[source].name} before choosing sports",
                DATA_SOURCES_FIELD,
            )

    def set_sport_selection(self, source: DataSourceId, sports: Iterable[SportId]) -> None:
        """Replace the sport set of a selected, unlocked source."""
        self._require_editable(source)
        self._sports[source] = SelectionSet(sports).values()

    def remove_sport(self, source: DataSourceId, sport: SportId) -> None:
        self._require_editable(source)
        self._sports[source] = [s for s in self._sports.get(source, []) if s != sport]

    def open_sport_dialog(self, source: DataSourceId) -> SportDialog:
        self._require_editable(source)
        return SportDialog(source, self._sports.get(source, []))

    def confirm_sport_dialog(self, dialog: SportDialog) -> None:
        """Merge a dialog buffer. An empty buffer is rejected."""
        if not dialog.selection:
            raise ValidationError("Select at least one sport", DATA_SOURCES_FIELD)
        self.set_sport_selection(dialog.source, dialog.selection.values())

    def has_any_sport(self) -> bool:
        return any(self._sports.get(s) for s in self._sources)

    def validate(self) -> ValidationResult:
        """Derive errors from current state. Pure; call after every mutation."""
        errors: dict[str, str] = {}
        if len(self._name) < self._min_name_length:
            errors[NAME_FIELD] = (
                "Project name is required"
                if self._min_name_length == 1
                else f"Project name must be at least {self._min_name_length} characters"
            )
        missing = [
            DATA_SOURCES[s].name
            for s in self._sources
            if self.is_unlocked(s) and not self._sports.get(s)
        ]
        if missing:
            errors[DATA_SOURCES_FIELD] = "Select at least one sport for " + ", ".join(missing)
        return ValidationResult(errors)

    def can_submit(self) -> bool:
        return self.validate().ok and self.has_any_sport()

    def snapshot(self) -> Project:
        return Project(
            name=self._name,
            data_sources=tuple(self._sources),
            sport_selections={
                s: tuple(self._sports[s]) for s in self._sources if s in self._sports
            },
        )
