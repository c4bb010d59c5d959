"""
Error kinds raised by the service layer.

Services never know about HTTP. The handlers registered in main.py turn
these into responses.
"""


class ChirpyError(Exception):
    """Base class for all expected application errors."""

    def __init__(self, message: str = "Something went wrong"):
        super().__init__(message)
        self.message = message


class UnauthorizedError(ChirpyError):
    """
    Bad credentials or an unusable token.

    `reason` records which check failed. It is for logs and callers only,
    the response body never carries it.
    """

    def __init__(self, message: str = "Unauthorized", reason: str = "unauthorized"):
        super().__init__(message)
        self.reason = reason


class InvalidTokenError(UnauthorizedError):
    """An access token failed validation."""

    def __init__(self, reason: str):
        super().__init__("Invalid token", reason=reason)


class MalformedInputError(ChirpyError):
    pass


class ForbiddenError(ChirpyError):
    pass


class NotFoundError(ChirpyError):
    pass


class StorageError(ChirpyError):
    """The persistence layer failed. Never retried here."""
    pass
