"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from vayam.schemas.vote import VoteOut


class CommentCreate(BaseModel):
    """Schema for submitting a comment.

    Word-count rules are enforced by the comment service. Seed comments
    are only created together with their conversation.
    """

    zid: int = Field(..., gt=0, description="Conversation ID")
    txt: str = Field(..., min_length=1, description="Comment text")


class CommentResponse(BaseModel):
    """Schema for comment information returned by the API."""

    tid: int
    zid: int
    pid: int
    uid: int
    txt: str
    is_seed: bool
    active: bool
    flag_status: str
    flag_reason: str
    like_count: int
    dislike_count: int
    neutral_count: int
    created_at: datetime | None = None
    modified_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CommentWithVotes(CommentResponse):
    """Comment plus every current vote and the requester's own vote."""

    under_review: bool = False
    votes: list[VoteOut] = Field(default_factory=list)
    user_vote: VoteOut | None = None


class ParticipantOut(BaseModel):
    """Participant row as exposed to clients."""

    pid: int
    uid: int
    zid: int
    vote_count: int
    last_interaction: int

    model_config = ConfigDict(from_attributes=True)


class CommentCreated(BaseModel):
    """Response to a successful comment submission."""

    participant: ParticipantOut
    comment: CommentResponse
    total_comment_count: int
