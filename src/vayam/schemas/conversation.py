"""Conversation-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from vayam.core.settings import settings
from vayam.schemas.comment import CommentWithVotes
from vayam.schemas.moderation import NotificationOut


class ConversationCreate(BaseModel):
    """Schema for creating a conversation."""

    topic: str = Field(..., min_length=2, max_length=1000)
    description: str = Field(..., min_length=10)
    is_active: bool = True
    is_public: bool = True
    allowed_emails: list[EmailStr] = Field(
        default_factory=list,
        description="Invitees of a private conversation",
    )
    seed_comment: str | None = Field(None, max_length=settings.seed_comment_max_chars)

    @field_validator("seed_comment")
    @classmethod
    def _blank_seed_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


class ConversationOut(BaseModel):
    """Conversation metadata and cached counters."""

    zid: int
    topic: str
    description: str | None
    owner: int
    is_active: bool
    is_public: bool
    allowed_emails: list[str] = Field(default_factory=list)
    like_count: int = 0
    dislike_count: int = 0
    neutral_count: int = 0
    comments_count: int = 0
    participant_count: int = 0
    created_at: datetime | None = None
    modified_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ConversationInvite(BaseModel):
    """Addresses to add to a private conversation."""

    emails: list[EmailStr]


class InviteResponse(BaseModel):
    """Updated conversation plus one delivery outcome per new invitee."""

    success: bool = True
    conversation: ConversationOut
    invited: list[str] = Field(default_factory=list)
    notifications_sent: list[NotificationOut] = Field(default_factory=list)


class ConversationDetail(ConversationOut):
    """Conversation with all comments, their votes and the requester's votes."""

    comments: list[CommentWithVotes] = Field(default_factory=list)


class UserVoteOut(BaseModel):
    """Compact vote used in listings."""

    tid: int
    vote: int


class ConversationListItem(BaseModel):
    """Row of the active conversation listing."""

    zid: int
    topic: str
    description: str | None
    participant_count: int
    comments_count: int
    user_votes: list[UserVoteOut] = Field(default_factory=list)
