"""SQLAlchemy models for comments and their moderation flag state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from vayam.db.session import Base
from vayam.db.time import utcnow

# Flag lifecycle: rejected (no flag) -> pending -> flagged | rejected.
FLAG_STATUS_NONE = "rejected"
FLAG_STATUS_PENDING = "pending"
FLAG_STATUS_FLAGGED = "flagged"
FLAG_STATUS_ACCEPTED = "accepted"

# Statuses that remove a comment from every voting flow.
HIDDEN_FLAG_STATUSES = frozenset({FLAG_STATUS_FLAGGED, FLAG_STATUS_ACCEPTED})
# Statuses from which the owner may open a new flag.
FLAGGABLE_STATUSES = frozenset({FLAG_STATUS_NONE, ""})


class Comment(Base):
    """A statement submitted into a conversation.

    Comments are never deleted; moderation hides them through `flag_status`
    and authors' withdrawals clear `active`.
    """

    __tablename__ = "comments"

    tid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    zid: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("conversations.zid"),
        nullable=False,
        index=True,
    )
    pid: Mapped[int] = mapped_column(Integer, ForeignKey("participants.pid"), nullable=False)
    uid: Mapped[int] = mapped_column(Integer, ForeignKey("users.uid"), nullable=False)
    txt: Mapped[str] = mapped_column(Text, nullable=False)
    is_seed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    flag_status: Mapped[str] = mapped_column(Text, nullable=False, default=FLAG_STATUS_NONE)
    flag_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")

    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislike_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    neutral_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    @property
    def is_visible(self) -> bool:
        """Return True when the comment may appear in a voting session."""
        return self.flag_status not in HIDDEN_FLAG_STATUSES

    @property
    def under_review(self) -> bool:
        """Return True while an owner flag awaits admin resolution."""
        return self.flag_status == FLAG_STATUS_PENDING
