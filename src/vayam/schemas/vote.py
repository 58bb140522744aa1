# src/vayam/schemas/vote.py
"""Vote-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class VoteCreate(BaseModel):
    """Schema for casting or changing a vote."""

    zid: int = Field(..., gt=0, description="Conversation ID")
    tid: int = Field(..., gt=0, description="Comment ID")
    vote: Literal[-1, 0, 1] = Field(..., description="1 agree, 0 neutral, -1 disagree")


class VoteResponse(BaseModel):
    """Schema returned after a vote write."""

    success: bool = True
    status: Literal["created", "updated"]
    message: str
    like_count: int
    dislike_count: int
    neutral_count: int


class VoteOut(BaseModel):
    """A single ledger row as exposed to clients."""

    zid: int
    tid: int
    uid: int
    pid: int
    vote: int
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
