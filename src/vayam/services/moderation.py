# src/vayam/services/moderation.py
"""Moderation services for Vayam."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from vayam.core.settings import settings
from vayam.models import Comment, Conversation, User
from vayam.models.comment import (
    FLAG_STATUS_FLAGGED,
    FLAG_STATUS_NONE,
    FLAG_STATUS_PENDING,
    FLAGGABLE_STATUSES,
)
from vayam.services.errors import AuthorizationError, NotFoundError, ValidationError
from vayam.services.notifications import (
    DeliveryOutcome,
    Notification,
    Notifier,
    fan_out,
    get_notifier,
)

logger = logging.getLogger(__name__)

OTHER_REASON = "Other (please specify below)"
FLAG_REASONS = (
    "Inappropriate content",
    "Spam or advertising",
    "Harassment or bullying",
    "False information",
    "Offensive language",
)

ROLE_AUTHOR = "comment_author"
ROLE_OWNER = "conversation_owner"
ROLE_ADMIN = "admin"


@dataclass
class FlagResult:
    """Updated comment plus the outcome of each notification."""

    comment: Comment
    conversation: Conversation
    notifications: list[DeliveryOutcome] = field(default_factory=list)


def resolve_reason(reason: str | None, custom_reason: str | None = None) -> str:
    """Return the reason text to store for a flag.

    One of the listed reasons is stored as-is. Choosing "Other" requires
    custom text. Any other non-empty text is taken as a free-text reason.

    Raises:
        ValidationError: If no usable reason was given.
    """
    chosen = (reason or "").strip()
    if chosen == OTHER_REASON:
        custom = (custom_reason or "").strip()
        if not custom:
            raise ValidationError("Please describe the reason for flagging")
        return custom
    if not chosen:
        raise ValidationError("A flag reason is required")
    return chosen


def _user_label(user: User | None) -> str:
    return user.display_name if user is not None else "unknown user"


def build_flag_notifications(
    comment: Comment,
    conversation: Conversation,
    author: User | None,
    owner: User | None,
) -> list[Notification]:
    """Compose the author, owner and admin messages for a new flag."""
    author_name = _user_label(author)
    owner_name = _user_label(owner)
    summary = (
        f'Comment #{comment.tid}: "{comment.txt}"\n'
        f"Conversation #{conversation.zid}: {conversation.topic}\n"
        f"Reason: {comment.flag_reason}"
    )
    return [
        Notification(
            role=ROLE_AUTHOR,
            to=author.email if author else None,
            subject=f"Your Comment Has Been Flagged - {settings.app_name}",
            body=(
                f"Hello {author_name},\n\n"
                f"{owner_name} flagged your comment for review.\n\n{summary}\n\n"
                "It stays visible while an administrator reviews it."
            ),
        ),
        Notification(
            role=ROLE_OWNER,
            to=owner.email if owner else None,
            subject=f"Comment Flagged in Your Conversation - {settings.app_name}",
            body=(
                f"Hello {owner_name},\n\n"
                f"You flagged a comment by {author_name}.\n\n{summary}\n\n"
                "An administrator will review it."
            ),
        ),
        Notification(
            role=ROLE_ADMIN,
            to=settings.admin_email,
            subject=f"Comment Flagged - Admin Notification - {settings.app_name}",
            body=(
                f"{owner_name} flagged a comment by {author_name}.\n\n{summary}\n\n"
                "Resolve it as flagged or rejected."
            ),
        ),
    ]


class ModerationService:
    """Service handling the comment flag lifecycle."""

    def __init__(self, notifier: Notifier | None = None) -> None:
        self.notifier = notifier or get_notifier()

    @staticmethod
    def mark_pending(
        db: Session,
        acting_uid: int,
        tid: int,
        reason: str | None,
        custom_reason: str | None = None,
    ) -> tuple[Comment, Conversation]:
        """Move a comment into `pending` on behalf of the conversation owner.

        Raises:
            NotFoundError: If the comment or its conversation does not exist.
            AuthorizationError: If `acting_uid` does not own the conversation.
            ValidationError: If the reason is missing or the comment is already
                pending or flagged.
        """
        comment = db.get(Comment, tid)
        if comment is None:
            raise NotFoundError("comment")

        conversation = db.get(Conversation, comment.zid)
        if conversation is None:
            raise NotFoundError("conversation")

        if conversation.owner != acting_uid:
            raise AuthorizationError("Only conversation owner can flag comments")

        text = resolve_reason(reason, custom_reason)

        if (comment.flag_status or "") not in FLAGGABLE_STATUSES:
            raise ValidationError(f"Comment is already {comment.flag_status}")

        comment.flag_status = FLAG_STATUS_PENDING
        comment.flag_reason = text
        db.commit()
        db.refresh(comment)
        logger.info("Comment tid=%s flagged by owner uid=%s: %s", tid, acting_uid, text)
        return comment, conversation

    async def flag_comment(
        self,
        db: Session,
        acting_uid: int,
        tid: int,
        reason: str | None,
        custom_reason: str | None = None,
    ) -> FlagResult:
        """Flag a comment and notify its author, the owner and the admin.

        The state change is committed before any notification is sent;
        delivery failures are reported in the result and never undo it.
        """
        comment, conversation = self.mark_pending(db, acting_uid, tid, reason, custom_reason)
        author = db.get(User, comment.uid)
        owner = db.get(User, conversation.owner)

        notifications = build_flag_notifications(comment, conversation, author, owner)
        outcomes = await fan_out(self.notifier, notifications)
        return FlagResult(comment=comment, conversation=conversation, notifications=outcomes)

    @staticmethod
    def resolve_flag(db: Session, tid: int, flagged: bool) -> Comment:
        """Close a pending flag as confirmed (`flagged`) or dismissed (`rejected`).

        Admin-side transition; the admin process itself lives outside this service.

        Raises:
            NotFoundError: If the comment does not exist.
            ValidationError: If the comment is not pending.
        """
        comment = db.get(Comment, tid)
        if comment is None:
            raise NotFoundError("comment")
        if comment.flag_status != FLAG_STATUS_PENDING:
            raise ValidationError("Only pending flags can be resolved")

        comment.flag_status = FLAG_STATUS_FLAGGED if flagged else FLAG_STATUS_NONE
        db.commit()
        db.refresh(comment)
        logger.info("Flag on tid=%s resolved as %s", tid, comment.flag_status)
        return comment
