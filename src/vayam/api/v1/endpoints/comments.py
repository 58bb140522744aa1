"""Comment authoring and moderation flag endpoints."""

from fastapi import APIRouter, Depends, status

from vayam.api.v1.dependencies import CurrentUserDep, SessionDep, raise_http
from vayam.schemas.comment import CommentCreate, CommentCreated, CommentResponse, ParticipantOut
from vayam.schemas.moderation import FlagRequest, FlagResponse, NotificationOut
from vayam.services.comments import submit_comment
from vayam.services.errors import VayamError
from vayam.services.moderation import ModerationService

router = APIRouter(prefix="/comments", tags=["comments"])


def get_moderation_service() -> ModerationService:
    """Return a moderation service wired to the configured notifier."""
    return ModerationService()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CommentCreated)
async def create_comment(
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentCreated:
    """Submit a comment into a conversation."""
    try:
        created = submit_comment(
            db,
            current_user.uid,
            comment_data.zid,
            comment_data.txt,
        )
    except VayamError as err:
        raise_http(err)

    return CommentCreated(
        participant=ParticipantOut.model_validate(created.participant),
        comment=CommentResponse.model_validate(created.comment),
        total_comment_count=created.total_comment_count,
    )


@router.put("/flag/{tid}", response_model=FlagResponse)
async def flag_comment(
    tid: int,
    flag_data: FlagRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    moderation_service: ModerationService = Depends(get_moderation_service),
) -> FlagResponse:
    """Flag a comment for admin review (conversation owner only)."""
    try:
        result = await moderation_service.flag_comment(
            db,
            current_user.uid,
            tid,
            flag_data.reason,
            flag_data.custom_reason,
        )
    except VayamError as err:
        raise_http(err)

    return FlagResponse(
        comment=CommentResponse.model_validate(result.comment),
        notifications_sent=[
            NotificationOut(role=o.role, to=o.to, delivered=o.delivered, error=o.error)
            for o in result.notifications
        ],
    )
