# src/vayam/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    comments_router,
    conversations_router,
    users_router,
    votes_router,
)

__all__ = [
    "comments_router",
    "conversations_router",
    "users_router",
    "votes_router",
]
