"""Domain errors raised by stores and services."""


class ServiceError(Exception):
    """Base error carrying a client-facing message and optional details."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ServiceError):
    """Required input is missing or malformed."""


class ConflictError(ServiceError):
    """A unique field collides with an existing record."""


class NotFoundError(ServiceError):
    """The requested record does not exist."""


class UnauthorizedError(ServiceError):
    """Bad credentials or a missing/invalid bearer token."""


class StoreError(ServiceError):
    """Unexpected failure inside a storage backend."""
