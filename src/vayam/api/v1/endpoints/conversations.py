# src/vayam/api/v1/endpoints/conversations.py
"""Conversation endpoints for the Vayam API."""

from fastapi import APIRouter, Depends, status

from vayam.api.v1.dependencies import CurrentUserDep, SessionDep, raise_http
from vayam.schemas.comment import CommentWithVotes
from vayam.schemas.conversation import (
    ConversationCreate,
    ConversationDetail,
    ConversationInvite,
    ConversationListItem,
    ConversationOut,
    InviteResponse,
    UserVoteOut,
)
from vayam.schemas.moderation import NotificationOut
from vayam.schemas.vote import VoteOut
from vayam.services.conversations import (
    CommentView,
    add_allowed_emails,
    create_conversation,
    get_conversation_view,
    list_active_conversations,
    send_invitations,
)
from vayam.services.errors import VayamError
from vayam.services.notifications import Notifier, get_notifier

router = APIRouter(prefix="/conversations", tags=["conversations"])


def get_invitation_notifier() -> Notifier:
    """Return the notifier used for private conversation invitations."""
    return get_notifier()


def _comment_out(view: CommentView) -> CommentWithVotes:
    base = CommentWithVotes.model_validate(view.comment)
    return base.model_copy(
        update={
            "under_review": view.comment.under_review,
            "votes": [VoteOut.model_validate(v) for v in view.votes],
            "user_vote": VoteOut.model_validate(view.user_vote) if view.user_vote else None,
        }
    )


@router.get("", response_model=list[ConversationListItem])
async def list_conversations(
    current_user: CurrentUserDep,
    db: SessionDep,
) -> list[ConversationListItem]:
    """List active conversations with the caller's own votes."""
    return [
        ConversationListItem(
            zid=summary.conversation.zid,
            topic=summary.conversation.topic,
            description=summary.conversation.description,
            participant_count=summary.participant_count,
            comments_count=summary.comments_count,
            user_votes=[UserVoteOut(tid=v.tid, vote=v.vote) for v in summary.user_votes],
        )
        for summary in list_active_conversations(db, current_user.uid)
    ]


@router.get("/{zid}", response_model=ConversationDetail)
async def get_conversation(
    zid: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ConversationDetail:
    """Get a conversation with every comment, its votes and the caller's vote."""
    try:
        view = get_conversation_view(db, zid, current_user.uid)
    except VayamError as err:
        raise_http(err)

    detail = ConversationDetail.model_validate(view.conversation)
    return detail.model_copy(
        update={
            "participant_count": view.participant_count,
            "comments": [_comment_out(c) for c in view.comments],
        }
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ConversationOut)
async def create_new_conversation(
    conversation_data: ConversationCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: Notifier = Depends(get_invitation_notifier),
) -> ConversationOut:
    """Create a conversation owned by the caller, with an optional seed comment.

    Invitees of a private conversation are notified after it is stored.
    """
    try:
        conversation = create_conversation(
            db,
            current_user.uid,
            topic=conversation_data.topic,
            description=conversation_data.description,
            is_active=conversation_data.is_active,
            is_public=conversation_data.is_public,
            allowed_emails=conversation_data.allowed_emails,
            seed_comment=conversation_data.seed_comment,
        )
    except VayamError as err:
        raise_http(err)

    await send_invitations(notifier, conversation, conversation.allowed_emails)
    return ConversationOut.model_validate(conversation)


@router.put("/{zid}", response_model=InviteResponse)
async def invite_to_conversation(
    zid: int,
    invite_data: ConversationInvite,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: Notifier = Depends(get_invitation_notifier),
) -> InviteResponse:
    """Add invitees to a private conversation and notify only the new ones."""
    try:
        conversation, added = add_allowed_emails(db, current_user.uid, zid, invite_data.emails)
    except VayamError as err:
        raise_http(err)

    outcomes = await send_invitations(notifier, conversation, added)
    return InviteResponse(
        conversation=ConversationOut.model_validate(conversation),
        invited=added,
        notifications_sent=[
            NotificationOut(role=o.role, to=o.to, delivered=o.delivered, error=o.error)
            for o in outcomes
        ],
    )
