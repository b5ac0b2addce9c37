"""Top-level wizard flow: configure project -> sync -> dashboard with agents.

Intent handlers are synchronous and all-or-nothing. The two async operations,
credential verification and data sync, resolve as single transitions; sync
results carry a session generation token so a reset discards them.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Protocol

from core.settings import get_setting
from wizard.agents import Agent, AgentConfigState, AgentRegistry
from wizard.catalog import (
    DATA_SOURCES,
    AgentType,
    DataSourceId,
    OutputFormatId,
    SportId,
    ToolId,
)
from wizard.credentials import (
    CredentialGate,
    CredentialVerifier,
    GateState,
    HttpCredentialVerifier,
    SimulatedCredentialVerifier,
)
from wizard.errors import CredentialError, SyncError, ValidationError, WizardError
from wizard.events import Notice, NoticeBus, WizardTopics
from wizard.project import Project, ProjectConfigState, SportDialog, ValidationResult
from wizard.steps import WizardStepController

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    CONFIGURING = "configuring"
    SYNCING = "syncing"
    READY = "ready"


class SyncService(Protocol):
    async def sync(self, project: Project) -> None:
        """Synchronize project data. Raises SyncError on failure."""
        ...


class SimulatedSyncService:
    """Fixed-latency sync that always succeeds."""

    def __init__(self, latency: float = 3.0) -> None:
        self._latency = latency

    async def sync(self, project: Project) -> None:
        await asyncio.sleep(self._latency)


class ProjectWizardOrchestrator:
    """Owns the project configuration, credential gates and agent registry
    for one wizard session."""

    def __init__(
        self,
        verifiers: dict[DataSourceId, CredentialVerifier] | None = None,
        sync_service: SyncService | None = None,
        *,
        default_source: DataSourceId = DataSourceId.MACHINA_CORE,
        min_name_length: int = 1,
        notices: NoticeBus | None = None,
    ) -> None:
        self._verifiers = dict(verifiers or {})
        self._sync_service = sync_service or SimulatedSyncService()
        self._default_source = default_source
        self._min_name_length = min_name_length
        self.notices = notices or NoticeBus()
        self._generation = 0
        self._start_session()

    def _start_session(self) -> None:
        self._gates: dict[DataSourceId, CredentialGate] = {
            sid: CredentialGate(
                sid, self._verifiers.get(sid) or SimulatedCredentialVerifier()
            )
            for sid, info in DATA_SOURCES.items()
            if info.requires_credential
        }
        self._config = ProjectConfigState(
            self._gates, self._default_source, self._min_name_length
        )
        self._registry = AgentRegistry()
        self._phase = Phase.CONFIGURING
        self._sync_error: str | None = None
        self._credential_errors: dict[DataSourceId, str] = {}
        self._sport_dialog: SportDialog | None = None
        self._agent_draft: AgentConfigState | None = None
        self._agent_steps: WizardStepController | None = None

    def reset(self) -> None:
        """Start a new session. Pending async resolutions are discarded."""
        self._generation += 1
        for gate in self._gates.values():
            gate.cancel()
        self._start_session()
        logger.info("Wizard session reset")

    # -- read accessors --

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def project(self) -> Project:
        return self._config.snapshot()

    @property
    def config(self) -> ProjectConfigState:
        return self._config

    @property
    def validation(self) -> ValidationResult:
        return self._config.validate()

    @property
    def can_submit_project(self) -> bool:
        return self._phase is Phase.CONFIGURING and self._config.can_submit()

    @property
    def sync_error(self) -> str | None:
        return self._sync_error

    @property
    def sport_dialog(self) -> SportDialog | None:
        return self._sport_dialog

    @property
    def agents(self) -> list[Agent]:
        return self._registry.list()

    @property
    def agent_draft(self) -> AgentConfigState | None:
        return self._agent_draft

    @property
    def agent_step(self) -> int | None:
        return self._agent_steps.step if self._agent_steps else None

    @property
    def agent_steps(self) -> WizardStepController | None:
        return self._agent_steps

    @property
    def history(self) -> list[Notice]:
        return self.notices.history

    def gate_state(self, source: DataSourceId) -> GateState:
        gate = self._gates.get(source)
        return gate.state if gate else GateState.CONNECTED

    def credential_error(self, source: DataSourceId) -> str | None:
        """Message of the last rejected or failed credential for source."""
        return self._credential_errors.get(source)

    # -- project configuration intents --

    def _require_phase(self, phase: Phase, action: str) -> None:
        if self._phase is not phase:
            raise WizardError(f"Cannot {action} while {self._phase.value}")

    def set_name(self, name: str) -> ValidationResult:
        self._require_phase(Phase.CONFIGURING, "rename the project")
        self._config.set_name(name)
        return self.validation

    def toggle_data_source(self, source: DataSourceId) -> bool:
        self._require_phase(Phase.CONFIGURING, "change data sources")
        changed = self._config.toggle_data_source(source)
        if changed and self._sport_dialog and self._sport_dialog.source not in self._config.data_sources:
            self._sport_dialog = None
        return changed

    def open_sport_dialog(self, source: DataSourceId) -> SportDialog:
        self._require_phase(Phase.CONFIGURING, "choose sports")
        self._sport_dialog = self._config.open_sport_dialog(source)
        return self._sport_dialog

    def close_sport_dialog(self) -> None:
        self._sport_dialog = None

    def _dialog(self) -> SportDialog:
        if self._sport_dialog is None:
            raise WizardError("No sport selection is open")
        return self._sport_dialog

    def toggle_temp_sport(self, sport: SportId) -> bool:
        return self._dialog().toggle(sport)

    def select_all_temp_sports(self) -> None:
        self._dialog().select_all()

    def search_sports(self, query: str) -> list[SportId]:
        return self._dialog().search(query)

    def confirm_sport_selection(self) -> ValidationResult:
        """Merge the open dialog into the project and close it.

        An empty selection raises ValidationError and keeps the dialog open.
        """
        self._config.confirm_sport_dialog(self._dialog())
        self._sport_dialog = None
        return self.validation

    def remove_sport(self, source: DataSourceId, sport: SportId) -> ValidationResult:
        self._require_phase(Phase.CONFIGURING, "change sports")
        self._config.remove_sport(source, sport)
        return self.validation

    # -- credentials --

    async def submit_credential(self, source: DataSourceId, credential: str) -> bool:
        """Verify credential for source; on success auto-select the source.

        Returns True when the source was connected by this call. A rejected
        or failed credential is surfaced via credential_error() and a notice;
        the gate stays retryable. A result that arrives after the project
        was submitted is discarded.
        """
        self._require_phase(Phase.CONFIGURING, "connect data sources")
        gate = self._gates.get(source)
        if gate is None:
            raise CredentialError(f"{DATA_SOURCES[source].name} does not take a credential")
        generation = self._generation
        name = DATA_SOURCES[source].name
        try:
            connected = await gate.submit(credential)
        except CredentialError as e:
            if self._is_current(generation):
                self._credential_errors[source] = str(e)
                self.notices.publish(
                    WizardTopics.CREDENTIAL_FAILED,
                    f"Could not connect {name}",
                    str(e),
                    destructive=True,
                )
            return False
        if not connected or not self._is_current(generation):
            return False
        self._credential_errors.pop(source, None)
        self._config.add_data_source(source)
        self.notices.publish(
            WizardTopics.SOURCE_CONNECTED,
            f"{name} Connected",
            "Your API key has been saved successfully.",
        )
        return True

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._phase is Phase.CONFIGURING

    def cancel_credential(self, source: DataSourceId) -> None:
        gate = self._gates.get(source)
        if gate:
            gate.cancel()

    # -- project submission and sync --

    async def submit_project(self) -> Project:
        """Create the project and run data sync.

        Raises ValidationError (nothing changes) when the configuration is
        not submittable. A failed sync returns to CONFIGURING with
        sync_error set and the configuration intact.
        """
        self._require_phase(Phase.CONFIGURING, "submit the project")
        result = self._config.validate()
        if not result.ok:
            field, message = next(iter(result.errors.items()))
            raise ValidationError(message, field)
        if not self._config.has_any_sport():
            raise ValidationError("Select at least one sport", "data_sources")

        project = self._config.snapshot()
        generation = self._generation
        self._sport_dialog = None
        self._sync_error = None
        for gate in self._gates.values():
            gate.cancel()
        self._phase = Phase.SYNCING
        logger.info("Project %r created, syncing", project.name)
        self.notices.publish(
            WizardTopics.PROJECT_CREATED,
            "Project created successfully!",
            "Data synchronization has started.",
        )

        try:
            await self._sync_service.sync(project)
        except Exception as e:
            if generation != self._generation:
                return project
            message = str(e) if isinstance(e, SyncError) else f"Unexpected sync failure: {e}"
            logger.warning("Sync of %r failed: %s", project.name, message)
            self._phase = Phase.CONFIGURING
            self._sync_error = message
            self.notices.publish(
                WizardTopics.SYNC_FAILED,
                "Data synchronization failed",
                message,
                destructive=True,
            )
            return project

        if generation != self._generation:
            logger.warning("Discarding sync result of a reset session")
            return project
        self._phase = Phase.READY
        logger.info("Project %r ready", project.name)
        self.notices.publish(
            WizardTopics.SYNC_COMPLETED,
            "Data synchronization completed",
            "Your project is ready to use.",
        )
        return project

    # -- agent sub-flow --

    def start_agent_creation(self) -> AgentConfigState:
        self._require_phase(Phase.READY, "create agents")
        self._agent_draft = AgentConfigState()
        self._agent_steps = WizardStepController()
        return self._agent_draft

    def cancel_agent_creation(self) -> None:
        self._agent_draft = None
        self._agent_steps = None

    def _draft(self) -> AgentConfigState:
        if self._agent_draft is None:
            raise WizardError("No agent is being created")
        return self._agent_draft

    def _steps(self) -> WizardStepController:
        if self._agent_steps is None:
            raise WizardError("No agent is being created")
        return self._agent_steps

    def next_agent_step(self) -> int:
        return self._steps().advance()

    def previous_agent_step(self) -> int:
        return self._steps().retreat()

    def set_agent_type(self, agent_type: AgentType) -> None:
        self._draft().set_type(agent_type)

    def set_agent_system_prompt(self, prompt: str) -> None:
        self._draft().set_system_prompt(prompt)

    def toggle_agent_tool(self, tool: ToolId) -> bool:
        return self._draft().toggle_tool(tool)

    def set_agent_output_format(self, fmt: OutputFormatId) -> bool:
        return self._draft().set_output_format(fmt)

    def set_agent_json_schema(self, schema: str) -> None:
        self._draft().set_json_schema(schema)

    def commit_agent(self) -> Agent:
        """Commit the draft into the registry and close the sub-flow.

        Raises CommitError with the draft left untouched when incomplete.
        """
        self._require_phase(Phase.READY, "create agents")
        spec = self._draft().commit()
        agent = self._registry.create(spec)
        self.cancel_agent_creation()
        self.notices.publish(
            WizardTopics.AGENT_CREATED,
            "Agent created successfully!",
            "Your agent has been configured and is ready to use.",
        )
        return agent

    def toggle_agent_active(self, agent_id: str) -> Agent | None:
        return self._registry.toggle_active(agent_id)

    def delete_agent(self, agent_id: str) -> bool:
        return self._registry.delete(agent_id)


def create_orchestrator(settings: dict[str, Any]) -> ProjectWizardOrchestrator:
    """Build an orchestrator from settings (see core.settings defaults)."""
    credential_latency = float(get_setting(settings, "wizard.credential_latency", 1.5))
    verifiers: dict[DataSourceId, CredentialVerifier] = {}
    for sid, info in DATA_SOURCES.items():
        if not info.requires_credential:
            continue
        cfg = get_setting(settings, f"data_sources.{sid.value}", {}) or {}
        if cfg.get("verifier") == "http" and cfg.get("probe_url"):
            verifiers[sid] = HttpCredentialVerifier(
                cfg["probe_url"], float(cfg.get("timeout", 10.0))
            )
        else:
            verifiers[sid] = SimulatedCredentialVerifier(credential_latency)

    default_source = DataSourceId(
        get_setting(settings, "wizard.default_data_source", DataSourceId.MACHINA_CORE.value)
    )
    return ProjectWizardOrchestrator(
        verifiers,
        SimulatedSyncService(float(get_setting(settings, "wizard.sync_latency", 3.0))),
        default_source=default_source,
        min_name_length=int(get_setting(settings, "wizard.min_name_length", 1)),
    )
