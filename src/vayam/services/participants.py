"""Participant lookup and lazy creation."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from vayam.db.time import epoch_millis
from vayam.models import Conversation, Participant

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def get_participant(db: Session, uid: int, zid: int) -> Participant | None:
    """Return the participant row for (uid, zid) if one exists."""
    return db.scalars(
        select(Participant).where(Participant.uid == uid, Participant.zid == zid)
    ).first()


def ensure_participant(db: Session, uid: int, zid: int) -> Participant:
    """Return the participant for (uid, zid), inserting it when absent.

    The insert is a single conditional statement keyed on the (uid, zid)
    unique constraint, so concurrent first interactions create one row.
    Pending changes are flushed but not committed.
    """
    dialect = db.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    if insert is not None:
        stmt = (
            insert(Participant)
            .values(uid=uid, zid=zid, vote_count=0, last_interaction=epoch_millis())
            .on_conflict_do_nothing(index_elements=["uid", "zid"])
        )
        result = db.execute(stmt)
        created = bool(result.rowcount)
    else:  # pragma: no cover - other backends
        created = get_participant(db, uid, zid) is None
        if created:
            db.add(Participant(uid=uid, zid=zid, vote_count=0, last_interaction=epoch_millis()))
            db.flush()

    participant = get_participant(db, uid, zid)
    if participant is None:  # pragma: no cover - constraint guarantees a row
        raise RuntimeError(f"participant for uid={uid} zid={zid} missing after upsert")

    if created:
        logger.info("Created participant pid=%s uid=%s zid=%s", participant.pid, uid, zid)
        refresh_participant_count(db, zid)
    return participant


def touch_participant(db: Session, participant: Participant) -> None:
    """Record an interaction timestamp on the participant."""
    participant.last_interaction = epoch_millis()


def refresh_participant_count(db: Session, zid: int) -> int:
    """Recompute the conversation's participant counter from the participants table."""
    count = db.scalar(
        select(func.count()).select_from(Participant).where(Participant.zid == zid)
    ) or 0
    conversation = db.get(Conversation, zid)
    if conversation is not None:
        conversation.participant_count = count
    return count
