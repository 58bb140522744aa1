"""SQLAlchemy model mirroring identities issued by the external provider."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vayam.db.session import Base
from vayam.db.time import utcnow


class User(Base):
    """Authenticated identity; only the fields moderation notices need are kept."""

    __tablename__ = "users"

    uid: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    hname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @property
    def display_name(self) -> str:
        """Return the human name, falling back to the username."""
        return self.hname or self.username or f"user-{self.uid}"
