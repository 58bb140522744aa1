# src/vayam/services/__init__.py
"""Business logic services for the Vayam application."""

from .errors import (
    AuthorizationError,
    DuplicateVoteError,
    MismatchError,
    NotFoundError,
    TransientNetworkError,
    ValidationError,
    VayamError,
)
from .moderation import ModerationService

__all__ = [
    "AuthorizationError",
    "DuplicateVoteError",
    "MismatchError",
    "ModerationService",
    "NotFoundError",
    "TransientNetworkError",
    "ValidationError",
    "VayamError",
]
