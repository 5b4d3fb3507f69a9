class WizardError(RuntimeError):
    """Base class for errors raised by the booking wizard."""
    pass


class StepValidationError(WizardError):
    """Raised when a step's input is missing or invalid. The draft is left untouched."""

    def __init__(self, title: str, message: str, fields: list[str] | None = None) -> None:
        super().__init__(f"{title}: {message}")
        self.title = title
        self.message = message
        self.fields = list(fields or [])


class MissingFieldsError(StepValidationError):
    """Raised by the submission check when required draft fields are empty."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "Missing information",
            f"Please complete all steps: {', '.join(missing)}",
            missing,
        )
        self.missing = list(missing)


class StepOrderError(WizardError):
    """Raised when a step is continued out of order."""
    pass


class SubmissionInProgressError(WizardError):
    """Raised when a session already has a submission in flight."""
    pass


class AuthenticationRequiredError(WizardError):
    """Raised when submitting without a signed-in customer."""
    pass


class CatalogLookupError(WizardError):
    """Raised when a service key does not resolve against the catalog."""
    pass


class BackendError(RuntimeError):
    """Raised when the hosted backend rejects a call or cannot be reached."""

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
