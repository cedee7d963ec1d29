"""Database tables / schema"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import JSON, LargeBinary
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBSavedGame(Base):
    __tablename__ = "saved_games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    # storing under an existing name overwrites that game
    name: Mapped[str] = mapped_column(unique=True)
    state: Mapped[bytes] = mapped_column(LargeBinary)  # output of the save file codec
    moves_uci: Mapped[list[str]] = mapped_column(JSON, default=list)
    turn_count: Mapped[int]
    turn_color: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    saved_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
