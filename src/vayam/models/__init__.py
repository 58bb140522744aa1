# src/vayam/models/__init__.py
"""SQLAlchemy models for the Vayam application."""

from .comment import Comment
from .conversation import Conversation
from .participant import Participant
from .subscription import Subscription
from .user import User
from .vote import Vote

__all__ = [
    "Comment",
    "Conversation",
    "Participant",
    "Subscription",
    "User",
    "Vote",
]
