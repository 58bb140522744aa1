"""Vote ledger write path and tally aggregation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from vayam.db.time import utcnow
from vayam.models import Comment, Conversation, Participant, Vote
from vayam.models.vote import VOTE_AGREE, VOTE_DISAGREE, VOTE_NEUTRAL
from vayam.services.errors import (
    DuplicateVoteError,
    MismatchError,
    NotFoundError,
    ValidationError,
)
from vayam.services.participants import ensure_participant, touch_participant

logger = logging.getLogger(__name__)

VALID_VOTES = frozenset({VOTE_AGREE, VOTE_NEUTRAL, VOTE_DISAGREE})


@dataclass(frozen=True)
class Tallies:
    """Aggregated vote counts for a comment or a conversation."""

    like_count: int = 0
    dislike_count: int = 0
    neutral_count: int = 0


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a successful vote write."""

    status: Literal["created", "updated"]
    tid: int
    zid: int
    vote: int
    comment_tallies: Tallies


def _aggregate(db: Session, *criteria: object) -> Tallies:
    row = db.execute(
        select(
            func.coalesce(func.sum(case((Vote.vote == VOTE_AGREE, 1), else_=0)), 0),
            func.coalesce(func.sum(case((Vote.vote == VOTE_DISAGREE, 1), else_=0)), 0),
            func.coalesce(func.sum(case((Vote.vote == VOTE_NEUTRAL, 1), else_=0)), 0),
        ).where(*criteria)
    ).one()
    return Tallies(like_count=int(row[0]), dislike_count=int(row[1]), neutral_count=int(row[2]))


def comment_tallies(db: Session, tid: int) -> Tallies:
    """Count current votes per value for one comment."""
    return _aggregate(db, Vote.tid == tid)


def conversation_tallies(db: Session, zid: int) -> Tallies:
    """Count current votes per value across a conversation."""
    return _aggregate(db, Vote.zid == zid)


def _apply(target: Comment | Conversation, tallies: Tallies) -> None:
    target.like_count = tallies.like_count
    target.dislike_count = tallies.dislike_count
    target.neutral_count = tallies.neutral_count


def recompute_comment_tallies(db: Session, comment: Comment) -> Tallies:
    """Rewrite the comment's cached counters from the ledger."""
    db.flush()
    tallies = comment_tallies(db, comment.tid)
    _apply(comment, tallies)
    return tallies


def recompute_conversation_tallies(db: Session, conversation: Conversation) -> Tallies:
    """Rewrite the conversation's cached counters from the ledger."""
    db.flush()
    tallies = conversation_tallies(db, conversation.zid)
    _apply(conversation, tallies)
    return tallies


def get_user_vote(db: Session, uid: int, tid: int) -> Vote | None:
    """Return the user's current vote on a comment, if any."""
    return db.scalars(select(Vote).where(Vote.uid == uid, Vote.tid == tid)).first()


def _lock_conversation(db: Session, zid: int) -> Conversation | None:
    return db.scalars(
        select(Conversation).where(Conversation.zid == zid).with_for_update()
    ).first()


def _lock_comment(db: Session, tid: int) -> Comment | None:
    return db.scalars(select(Comment).where(Comment.tid == tid).with_for_update()).first()


def submit_vote(db: Session, uid: int, zid: int, tid: int, value: int) -> VoteResult:
    """Record or change a user's vote and refresh the cached tallies.

    Checks run in a fixed order and each maps to a distinct error. The
    conversation and comment rows stay locked from the first read until the
    commit, so concurrent voters on the same comment recount one at a time.

    Raises:
        ValidationError: If `value` is not -1, 0 or 1.
        NotFoundError: If the conversation or the comment does not exist.
        MismatchError: If the comment belongs to another conversation.
        DuplicateVoteError: If the user's current vote already has `value`.
    """
    if value not in VALID_VOTES:
        raise ValidationError("Vote must be between -1 and 1")

    conversation = _lock_conversation(db, zid)
    if conversation is None:
        raise NotFoundError("conversation", "Conversation does not exist")

    comment = _lock_comment(db, tid)
    if comment is None:
        raise NotFoundError("comment", "Comment does not exist")
    if comment.zid != zid:
        raise MismatchError("Comment does not belong to this conversation")

    participant = ensure_participant(db, uid, zid)

    existing = get_user_vote(db, uid, tid)
    if existing is not None and existing.vote == value:
        # The lazily created participant is kept; the ledger is untouched.
        db.commit()
        logger.info("Duplicate vote rejected uid=%s tid=%s value=%s", uid, tid, value)
        raise DuplicateVoteError()

    if existing is None:
        db.add(Vote(zid=zid, tid=tid, uid=uid, pid=participant.pid, vote=value))
        status: Literal["created", "updated"] = "created"
    else:
        existing.vote = value
        existing.created_at = utcnow()
        status = "updated"

    touch_participant(db, participant)
    _refresh_vote_count(db, participant)
    tallies = recompute_comment_tallies(db, comment)
    recompute_conversation_tallies(db, conversation)
    db.commit()

    logger.info("Vote %s uid=%s zid=%s tid=%s value=%s", status, uid, zid, tid, value)
    return VoteResult(status=status, tid=tid, zid=zid, vote=value, comment_tallies=tallies)


def _refresh_vote_count(db: Session, participant: Participant) -> None:
    db.flush()
    participant.vote_count = db.scalar(
        select(func.count()).select_from(Vote).where(
            Vote.zid == participant.zid,
            Vote.pid == participant.pid,
        )
    ) or 0
