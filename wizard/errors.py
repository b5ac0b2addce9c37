"""Wizard error taxonomy. Every error is recoverable; none is fatal to the session."""


class WizardError(Exception):
    """Base class for wizard errors."""


class ValidationError(WizardError):
    """A required field is missing or a required selection is empty.

    field names the input the message belongs to (e.g. "data_sources").
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class CommitError(ValidationError):
    """An agent draft was committed before it was complete."""


class CredentialError(WizardError):
    """Empty credential, rejected credential or verification already running."""


class SyncError(WizardError):
    """Project data synchronization failed."""
