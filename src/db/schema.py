"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGameState(Base):
    __tablename__ = "game_states"
    name: Mapped[str] = mapped_column(primary_key=True)
    status: Mapped[str] = mapped_column(default="Unknown")
    variant: Mapped[str] = mapped_column(default="Standard")
    options: Mapped[list[str]] = mapped_column(JSON, default=list)
    current_phase: Mapped[str] = mapped_column(default="Unknown")
    next_deadline: Mapped[Optional[str]]
    masters: Mapped[list[str]] = mapped_column(JSON, default=list)
    players: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    observers: Mapped[list[str]] = mapped_column(JSON, default=list)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    units: Mapped[dict[str, list[dict[str, Any]]]] = mapped_column(JSON, default=dict)
    supply_centers: Mapped[dict[str, list[str]]] = mapped_column(JSON, default=dict)
    raw_transcript: Mapped[Optional[str]]
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
