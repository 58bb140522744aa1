# src/vayam/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Vayam API."""

from fastapi import APIRouter, Response, status

from vayam.api.v1.dependencies import CurrentUserDep, SessionDep, raise_http
from vayam.schemas.vote import VoteCreate, VoteResponse
from vayam.services.errors import VayamError
from vayam.services.votes import get_user_vote, submit_vote

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=VoteResponse)
async def cast_vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    response: Response,
) -> VoteResponse:
    """Cast a vote on a comment, or change an existing one.

    Answers 201 for a new vote, 200 for a changed vote and 400 when the vote
    repeats the current value.
    """
    try:
        result = submit_vote(db, current_user.uid, vote_data.zid, vote_data.tid, vote_data.vote)
    except VayamError as err:
        raise_http(err)

    if result.status == "updated":
        response.status_code = status.HTTP_200_OK
    return VoteResponse(
        status=result.status,
        message="Vote updated" if result.status == "updated" else "Vote recorded",
        like_count=result.comment_tallies.like_count,
        dislike_count=result.comment_tallies.dislike_count,
        neutral_count=result.comment_tallies.neutral_count,
    )


@router.get("/{tid}/my-vote")
async def get_my_vote(
    tid: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, int | None]:
    """Get current user's vote on a specific comment."""
    vote = get_user_vote(db, current_user.uid, tid)
    return {"tid": tid, "vote": vote.vote if vote else None}
