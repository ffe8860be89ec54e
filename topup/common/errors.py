"""Error taxonomy shared by services and mapped to HTTP by the API app."""


class DomainError(Exception):
    """Base for failures that are reported to callers as a structured result."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None, error: str | None = None) -> None:
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(DomainError):
    status_code = 404
    default_message = "Not found"


class DuplicateTransaction(DomainError):
    status_code = 409
    default_message = "Transaction ID already exists"


class AlreadyExists(DomainError):
    status_code = 409
    default_message = "Record already exists"


class StoreUnavailable(DomainError):
    """Persistence layer failure. Not retried."""

    status_code = 503
    default_message = "Storage is unavailable"


class NotificationFailure(Exception):
    """Bot API call failed. Never leaves `NotificationService`."""
