"""Project wizard: data source, sport and agent selection state machine."""

from wizard.agents import Agent, AgentConfigState, AgentRegistry, AgentSpec
from wizard.credentials import CredentialGate, GateState
from wizard.errors import CommitError, CredentialError, SyncError, ValidationError, WizardError
from wizard.orchestrator import Phase, ProjectWizardOrchestrator, create_orchestrator
from wizard.project import Project, ProjectConfigState, ValidationResult
from wizard.selection import SelectionSet
from wizard.steps import WizardStepController

__all__ = [
    "Agent",
    "AgentConfigState",
    "AgentRegistry",
    "AgentSpec",
    "CommitError",
    "CredentialError",
    "CredentialGate",
    "GateState",
    "Phase",
    "Project",
    "ProjectConfigState",
    "ProjectWizardOrchestrator",
    "SelectionSet",
    "SyncError",
    "ValidationError",
    "ValidationResult",
    "WizardError",
    "WizardStepController",
    "create_orchestrator",
]
