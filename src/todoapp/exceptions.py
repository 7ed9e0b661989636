"""Error types shared by the services and screens."""


class TodoAppError(Exception):
    """Base error for the application."""

    def __init__(self, message: str, status_code: int = None, error_code: str = None):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class AuthenticationError(TodoAppError):
    """Credentials were rejected or no usable session exists."""


class PersistenceError(TodoAppError):
    """A query or mutation against the data service failed."""


class ValidationError(TodoAppError):
    """Input was rejected before any remote call was made."""


class ShareError(TodoAppError):
    """The sharing target could not be opened."""


class ConfigurationError(TodoAppError):
    """A required setting is missing."""
