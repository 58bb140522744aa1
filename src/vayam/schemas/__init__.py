# src/vayam/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentCreated, CommentResponse, CommentWithVotes
from .conversation import (
    ConversationCreate,
    ConversationDetail,
    ConversationInvite,
    ConversationListItem,
    ConversationOut,
    InviteResponse,
)
from .moderation import FlagRequest, FlagResponse
from .participation import SkippedCommentsResponse, SubscriptionRequest, SubscriptionResponse
from .vote import VoteCreate, VoteOut, VoteResponse

__all__ = [
    "CommentCreate", "CommentCreated", "CommentResponse", "CommentWithVotes",
    "ConversationCreate", "ConversationDetail", "ConversationInvite", "ConversationListItem",
    "ConversationOut", "InviteResponse",
    "FlagRequest", "FlagResponse",
    "SkippedCommentsResponse", "SubscriptionRequest", "SubscriptionResponse",
    "VoteCreate", "VoteOut", "VoteResponse",
]
