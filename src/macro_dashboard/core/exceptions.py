"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class SourceUnavailableError(AppError):
    """Raised when an external data source failed and no cached value exists."""

    def __init__(self, source: str, reason: str = ""):
        message = f"Source unavailable: {source}"
        if reason:
            message = f"{message} ({reason})"
        self.source = source
        super().__init__(message, code="SOURCE_UNAVAILABLE")


class InsufficientDataError(AppError):
    """Raised when metrics are requested over an empty annual series."""

    def __init__(self, message: str = "No historical data available"):
        super().__init__(message, code="INSUFFICIENT_DATA")


class PersistenceError(AppError):
    """Raised when the cache store cannot be read or written."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        super().__init__(f"Cache store {operation} failed: {reason}", code="PERSISTENCE_ERROR")
