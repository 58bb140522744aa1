"""Comment store: authoring and text rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vayam.core.settings import settings
from vayam.models import Comment, Conversation, Participant, Vote
from vayam.models.comment import HIDDEN_FLAG_STATUSES
from vayam.services.errors import NotFoundError, ValidationError
from vayam.services.participants import ensure_participant, touch_participant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentSubmission:
    """Rows touched by a successful comment submission."""

    participant: Participant
    comment: Comment
    total_comment_count: int


def count_words(text: str) -> int:
    """Return the number of whitespace-separated words in `text`."""
    return len(text.split())


def validate_comment_text(text: str) -> str:
    """Return the trimmed comment text or raise ValidationError.

    Raw text may not exceed the character limit; the trimmed text must hold
    between 1 and the configured maximum number of words.
    """
    if len(text) > settings.comment_max_chars:
        raise ValidationError(
            f"Comment cannot exceed {settings.comment_max_chars} characters"
        )
    trimmed = text.strip()
    if not trimmed:
        raise ValidationError("Comment cannot be empty")
    words = count_words(trimmed)
    if words > settings.comment_max_words:
        raise ValidationError(
            f"Comment must be between 1 and {settings.comment_max_words} words"
        )
    return trimmed


def authoring_threshold(visible_count: int) -> int:
    """Return how many comments must be viewed before authoring is allowed."""
    return min(settings.min_viewed_before_authoring, visible_count)


def visible_comments_query(zid: int):
    """Select a conversation's comments that voting sessions may show, oldest first."""
    return (
        select(Comment)
        .where(
            Comment.zid == zid,
            Comment.active.is_(True),
            Comment.flag_status.not_in(HIDDEN_FLAG_STATUSES),
        )
        .order_by(Comment.created_at, Comment.tid)
    )


def _check_authoring_gate(db: Session, uid: int, zid: int) -> None:
    visible = db.scalar(
        select(func.count()).select_from(visible_comments_query(zid).subquery())
    ) or 0
    voted = db.scalar(
        select(func.count()).select_from(Vote).where(Vote.uid == uid, Vote.zid == zid)
    ) or 0
    required = authoring_threshold(visible)
    if voted < required:
        raise ValidationError(
            f"Vote on at least {required} comments before adding your own"
        )


def refresh_comment_count(db: Session, conversation: Conversation) -> int:
    """Rewrite the conversation's comment counter from the comment store."""
    db.flush()
    count = db.scalar(
        select(func.count()).select_from(Comment).where(Comment.zid == conversation.zid)
    ) or 0
    conversation.comments_count = count
    return count


def submit_comment(
    db: Session,
    uid: int,
    zid: int,
    txt: str,
    *,
    is_seed: bool = False,
    enforce_gate: bool | None = None,
) -> CommentSubmission:
    """Create a comment in a conversation on behalf of `uid`.

    The viewing gate is only checked here when `enforce_gate` (or the
    AUTHORING_GATE_SERVER_SIDE setting) asks for it; seed comments skip it.

    Raises:
        ValidationError: On empty, too long or too wordy text, or a failed gate.
        NotFoundError: If the conversation does not exist.
    """
    text = validate_comment_text(txt)

    conversation = db.get(Conversation, zid)
    if conversation is None:
        raise NotFoundError("conversation")

    gate = settings.authoring_gate_server_side if enforce_gate is None else enforce_gate
    if gate and not is_seed:
        _check_authoring_gate(db, uid, zid)

    participant = ensure_participant(db, uid, zid)
    comment = Comment(
        zid=zid,
        pid=participant.pid,
        uid=uid,
        txt=text,
        is_seed=is_seed,
    )
    db.add(comment)
    touch_participant(db, participant)
    total = refresh_comment_count(db, conversation)
    db.commit()
    db.refresh(comment)

    logger.info(
        "Comment created tid=%s zid=%s uid=%s seed=%s", comment.tid, zid, uid, is_seed
    )
    return CommentSubmission(participant=participant, comment=comment, total_comment_count=total)
