"""Conversation notification preferences."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from vayam.models import Subscription

logger = logging.getLogger(__name__)


def is_subscribed(db: Session, uid: int, zid: int) -> bool:
    """Return True when the user receives updates for the conversation."""
    return db.scalars(
        select(Subscription).where(Subscription.uid == uid, Subscription.zid == zid)
    ).first() is not None


def set_subscription(db: Session, uid: int, zid: int, subscribe: bool) -> bool:
    """Subscribe or unsubscribe; both directions are idempotent."""
    if subscribe:
        if not is_subscribed(db, uid, zid):
            db.add(Subscription(uid=uid, zid=zid))
    else:
        db.execute(delete(Subscription).where(Subscription.uid == uid, Subscription.zid == zid))
    db.commit()
    logger.info("Subscription uid=%s zid=%s set to %s", uid, zid, subscribe)
    return subscribe
