"""Notification preference rows."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from vayam.db.session import Base
from vayam.db.time import utcnow


class Subscription(Base):
    """Presence of a row means the user wants updates for the conversation."""

    __tablename__ = "subscriptions"

    uid: Mapped[int] = mapped_column(Integer, ForeignKey("users.uid"), primary_key=True)
    zid: Mapped[int] = mapped_column(Integer, ForeignKey("conversations.zid"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
