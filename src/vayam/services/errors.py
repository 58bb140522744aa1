"""Domain errors shared by the service layer, the API and the session client."""

from __future__ import annotations


class VayamError(RuntimeError):
    """Base class for every domain failure.

    `status_code` is the HTTP status the API layer answers with.
    """

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(VayamError):
    """Raised when a conversation, comment or user does not exist."""

    status_code = 404

    def __init__(self, entity: str, message: str | None = None) -> None:
        super().__init__(message or f"{entity.capitalize()} not found")
        self.entity = entity


class MismatchError(VayamError):
    """Raised when a comment does not belong to the stated conversation."""


class DuplicateVoteError(VayamError):
    """Raised when a vote repeats the user's current value for the comment."""

    def __init__(self, message: str = "Already voted this way") -> None:
        super().__init__(message)


class ValidationError(VayamError):
    """Raised for malformed payloads and text length or state violations."""


class AuthorizationError(VayamError):
    """Raised when the acting user may not perform the operation."""

    status_code = 403


class TransientNetworkError(VayamError):
    """Raised client-side when a request was not confirmed by the server."""

    status_code = 503
