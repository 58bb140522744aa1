"""Participation statistics schemas."""

from pydantic import BaseModel, Field

from vayam.schemas.comment import CommentResponse


class ParticipationStatsOut(BaseModel):
    """Counts behind a user's participation percentage."""

    skipped_comments_count: int
    total_comments_count: int
    participation_percentage: str = Field(..., description="Two-decimal percentage, e.g. '66.67'")


class SkippedCommentsResponse(BaseModel):
    """Active comments the user has not voted on, with stats."""

    zid: int
    uid: int
    stats: ParticipationStatsOut
    skipped_comments: list[CommentResponse]


class SubscriptionRequest(BaseModel):
    """Schema for toggling conversation notifications."""

    zid: int = Field(..., gt=0)
    subscribe: bool


class SubscriptionResponse(BaseModel):
    """Current subscription state."""

    zid: int
    is_subscribed: bool
