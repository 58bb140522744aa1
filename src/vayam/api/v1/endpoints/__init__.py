# src/vayam/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .comments import router as comments_router
from .conversations import router as conversations_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "comments_router",
    "conversations_router",
    "users_router",
    "votes_router",
]
