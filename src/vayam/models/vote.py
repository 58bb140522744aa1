# src/vayam/models/vote.py
"""Models capturing votes on comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
)
from sqlalchemy.orm import Mapped, mapped_column

from vayam.db.session import Base
from vayam.db.time import utcnow

VOTE_AGREE = 1
VOTE_NEUTRAL = 0
VOTE_DISAGREE = -1


class Vote(Base):
    """Current vote of one user on one comment.

    The composite primary key keeps exactly one row per (zid, tid, uid);
    changing a vote overwrites the row in place.
    """

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("vote IN (-1, 0, 1)", name="ck_votes_vote"),
        Index("ix_votes_tid", "tid"),
        Index("ix_votes_zid_pid", "zid", "pid"),
    )

    zid: Mapped[int] = mapped_column(Integer, ForeignKey("conversations.zid"), primary_key=True)
    tid: Mapped[int] = mapped_column(Integer, ForeignKey("comments.tid"), primary_key=True)
    uid: Mapped[int] = mapped_column(Integer, ForeignKey("users.uid"), primary_key=True)
    pid: Mapped[int] = mapped_column(Integer, ForeignKey("participants.pid"), nullable=False)

    # 1 = agree, 0 = neutral, -1 = disagree.
    vote: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
