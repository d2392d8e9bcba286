"""
Error taxonomy shared by services and endpoints.

Every error a caller can see is a ``CollageError`` carrying its HTTP
status code and a human‑readable message.  The application installs a
single exception handler (see ``main.py``) which renders these as
``{"error": <message>}``; no stack traces reach the client.
"""

from fastapi import status


class CollageError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Unknown error"

    def __init__(self, message: str = "") -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(CollageError):
    """A required field is missing or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Unauthorized(CollageError):
    """Missing, invalid or expired token, or wrong password."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFound(CollageError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "not found"


class UpstreamFailure(CollageError):
    """A storage call failed or stored data could not be used."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream failure"
