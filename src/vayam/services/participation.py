"""Participation accounting: which comments a user skipped and how far they got."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from vayam.models import Comment, Vote


class StatsRoute(str, Enum):
    """Where a voting session goes after reading the user's stats on load."""

    FIRST_PASS = "first_pass"
    STATS_PROMPT = "stats_prompt"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ParticipationStats:
    """Snapshot of a user's progress through a conversation."""

    skipped_comments: list[Comment] = field(default_factory=list)
    skipped_count: int = 0
    total_count: int = 0
    participation_percentage: float = 0.0

    @property
    def voted_count(self) -> int:
        """Return the number of active comments the user has voted on."""
        return self.total_count - self.skipped_count


def participation_percentage(total_count: int, skipped_count: int) -> float:
    """Return the voted share of `total_count` as a percentage with two decimals.

    Defined as 0 for an empty conversation.
    """
    if total_count <= 0:
        return 0.0
    return round((total_count - skipped_count) / total_count * 100, 2)


def format_percentage(value: float) -> str:
    """Render a percentage the way the API reports it (e.g. ``"66.67"``)."""
    return f"{value:.2f}"


def compute_stats(db: Session, uid: int, zid: int) -> ParticipationStats:
    """Compute skipped comments and participation for (uid, zid).

    The denominator counts every active comment regardless of flag state.
    Skipped comments come back in creation order. Read-only.
    """
    has_vote = exists().where(
        Vote.tid == Comment.tid,
        Vote.uid == uid,
        Vote.zid == zid,
    )
    skipped = list(
        db.scalars(
            select(Comment)
            .where(Comment.zid == zid, Comment.active.is_(True), ~has_vote)
            .order_by(Comment.created_at, Comment.tid)
        )
    )
    total = db.scalar(
        select(func.count())
        .select_from(Comment)
        .where(Comment.zid == zid, Comment.active.is_(True))
    ) or 0

    return ParticipationStats(
        skipped_comments=skipped,
        skipped_count=len(skipped),
        total_count=total,
        participation_percentage=participation_percentage(total, len(skipped)),
    )


def stats_route(percentage: float) -> StatsRoute:
    """Decide the session's opening screen from a participation percentage."""
    if percentage >= 100:
        return StatsRoute.COMPLETED
    if percentage <= 0:
        return StatsRoute.FIRST_PASS
    return StatsRoute.STATS_PROMPT
