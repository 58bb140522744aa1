"""SQLAlchemy model for a user's membership in one conversation."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from vayam.db.session import Base
from vayam.db.time import utcnow


class Participant(Base):
    """Per-conversation participant row, created lazily on first vote or comment."""

    __tablename__ = "participants"
    __table_args__ = (
        # At most one participant per (uid, zid).
        UniqueConstraint("uid", "zid", name="uq_participants_uid_zid"),
    )

    pid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[int] = mapped_column(Integer, ForeignKey("users.uid"), nullable=False)
    zid: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("conversations.zid"),
        nullable=False,
        index=True,
    )
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Epoch milliseconds of the last vote or comment.
    last_interaction: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
