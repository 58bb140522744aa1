# src/vayam/schemas/moderation.py
"""Moderation-related Pydantic schemas."""

from pydantic import BaseModel, Field

from vayam.schemas.comment import CommentResponse


class FlagRequest(BaseModel):
    """Schema for an owner flagging a comment."""

    reason: str = Field(..., description="One of the listed reasons, 'Other', or free text")
    custom_reason: str | None = Field(None, description="Required when reason is 'Other'")


class NotificationOut(BaseModel):
    """Delivery outcome for one flag notification."""

    role: str
    to: str | None
    delivered: bool
    error: str | None = None


class FlagResponse(BaseModel):
    """Schema returned after a comment was flagged."""

    success: bool = True
    comment: CommentResponse
    notifications_sent: list[NotificationOut]
