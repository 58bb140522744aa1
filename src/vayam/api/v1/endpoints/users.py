"""Per-user endpoints: owned conversations, skipped comments and subscriptions."""

from typing import Annotated

from fastapi import APIRouter, Query

from vayam.api.v1.dependencies import CurrentUserDep, SessionDep, raise_http
from vayam.schemas.comment import CommentResponse
from vayam.schemas.conversation import ConversationOut
from vayam.schemas.participation import (
    ParticipationStatsOut,
    SkippedCommentsResponse,
    SubscriptionRequest,
    SubscriptionResponse,
)
from vayam.services.conversations import get_conversation_or_404, list_owned_conversations
from vayam.services.errors import VayamError
from vayam.services.participation import compute_stats, format_percentage
from vayam.services.subscriptions import is_subscribed, set_subscription

router = APIRouter(prefix="/user", tags=["users"])

ZidQuery = Annotated[int, Query(gt=0, description="Conversation ID")]


@router.get("/conversations", response_model=list[ConversationOut])
async def my_conversations(
    current_user: CurrentUserDep,
    db: SessionDep,
) -> list[ConversationOut]:
    """List the conversations owned by the caller with live aggregate counts."""
    results = []
    for summary in list_owned_conversations(db, current_user.uid):
        out = ConversationOut.model_validate(summary.conversation)
        results.append(
            out.model_copy(
                update={
                    "participant_count": summary.participant_count,
                    "comments_count": summary.comments_count,
                    "like_count": summary.tallies.like_count,
                    "dislike_count": summary.tallies.dislike_count,
                    "neutral_count": summary.tallies.neutral_count,
                }
            )
        )
    return results


@router.get("/conversations/skipped-comments", response_model=SkippedCommentsResponse)
async def skipped_comments(
    zid: ZidQuery,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> SkippedCommentsResponse:
    """Return the active comments the caller has not voted on, with participation stats."""
    try:
        get_conversation_or_404(db, zid)
    except VayamError as err:
        raise_http(err)

    stats = compute_stats(db, current_user.uid, zid)
    return SkippedCommentsResponse(
        zid=zid,
        uid=current_user.uid,
        stats=ParticipationStatsOut(
            skipped_comments_count=stats.skipped_count,
            total_comments_count=stats.total_count,
            participation_percentage=format_percentage(stats.participation_percentage),
        ),
        skipped_comments=[CommentResponse.model_validate(c) for c in stats.skipped_comments],
    )


@router.get("/subscribe", response_model=SubscriptionResponse)
async def get_subscription(
    zid: ZidQuery,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> SubscriptionResponse:
    """Report whether the caller receives updates for a conversation."""
    return SubscriptionResponse(zid=zid, is_subscribed=is_subscribed(db, current_user.uid, zid))


@router.post("/subscribe", response_model=SubscriptionResponse)
async def update_subscription(
    request: SubscriptionRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> SubscriptionResponse:
    """Subscribe to or unsubscribe from a conversation."""
    try:
        get_conversation_or_404(db, request.zid)
    except VayamError as err:
        raise_http(err)

    subscribed = set_subscription(db, current_user.uid, request.zid, request.subscribe)
    return SubscriptionResponse(zid=request.zid, is_subscribed=subscribed)
