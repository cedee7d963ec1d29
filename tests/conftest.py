"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Any, Collection, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.chess.coordinate import Coordinate
from src.chess.game import GameObserver
from src.core.config import Settings
from src.core.shared_types import Color
from src.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


class RecordingObserver(GameObserver):
    """Remembers every notification as (method name, arguments)"""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def last(self, name: str) -> Any:
        return next(args for call, args in reversed(self.calls) if call == name)

    def piece_updated(self, piece) -> None:
        self.calls.append(("piece_updated", piece))

    def piece_removed(self, coordinate: Coordinate) -> None:
        self.calls.append(("piece_removed", coordinate))

    def piece_moved(self, src: Coordinate, dest: Coordinate) -> None:
        self.calls.append(("piece_moved", (src, dest)))

    def destinations_highlighted(self, coordinates: Collection[Coordinate]) -> None:
        self.calls.append(("destinations_highlighted", set(coordinates)))

    def highlights_cleared(self) -> None:
        self.calls.append(("highlights_cleared", None))

    def cells_enabled(self, coordinates: Collection[Coordinate]) -> None:
        self.calls.append(("cells_enabled", set(coordinates)))

    def game_ended(self, winner: Color) -> None:
        self.calls.append(("game_ended", winner))

    def game_ended_unexpectedly(self, reason: str) -> None:
        self.calls.append(("game_ended_unexpectedly", reason))

    def opponent_connected(self, color: Color) -> None:
        self.calls.append(("opponent_connected", color))


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def settings() -> Settings:
    """Defaults, regardless of the environment the tests run in"""
    return Settings()
