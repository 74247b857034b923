"""
Error taxonomy.

Every failure the client can see is classified once, in client.py, and then
propagated unchanged. Each APIError carries a human-readable message and the
HTTP status it came from (500 when no response was received at all).
"""


class BoardError(Exception):
    """Base class for errors raised by this package."""
    pass


class APIError(BoardError):
    """A call to the Projects Board service failed."""

    def __init__(self, message: str, status: int = 500):
        super().__init__(message)
        self.message = message
        self.status = status

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, status={self.status})"


class UnauthorizedError(APIError):
    """Bad credentials or an invalid session (401)."""

    def __init__(self, message: str = "Unauthorized", status: int = 401):
        super().__init__(message, status)


class NotAuthenticatedError(UnauthorizedError):
    """An operation needed a session but none is active. Nothing was sent."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, 401)


class ForbiddenError(APIError):
    """The task belongs to someone else (403)."""

    def __init__(self, message: str = "You can only access your own tasks", status: int = 403):
        super().__init__(message, status)


class NotFoundError(APIError):
    """Unknown task id (404)."""

    def __init__(self, message: str = "Task not found", status: int = 404):
        super().__init__(message, status)


class ValidationFailedError(APIError):
    """The service rejected the input (422)."""

    def __init__(self, message: str, status: int = 422):
        super().__init__(message, status)


class TransportError(APIError):
    """Network failure, timeout, or an HTTP status with no specific meaning."""
    pass


class StorageError(BoardError):
    """Persisted session state could not be read or written."""
    pass


class ConfigError(BoardError):
    """Raised when configuration is invalid or incomplete."""
    pass


class ValidationError(BoardError):
    """Raised when form input fails client-side checks."""
    pass
