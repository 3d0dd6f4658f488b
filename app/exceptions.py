"""Domain errors raised by the service layer.

Each error carries the HTTP status the API boundary should answer with.
Routes let them propagate; the handlers registered in ``app.main`` turn
them into the ``{success: false, message}`` envelope.
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFound(AppError):
    """Referenced doctor, slot, appointment or user does not exist."""

    status_code = 404


class InvalidState(AppError):
    """Operation violates a lifecycle rule or a slot flag."""

    status_code = 400


class Conflict(AppError):
    """Uniqueness violation (duplicate appointment, email already used)."""

    status_code = 400


class Unauthorized(AppError):
    """Caller's role or ownership does not allow the operation."""

    status_code = 403


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class ValidationError(AppError):
    """Malformed input caught before it reaches the booking core."""

    status_code = 400
