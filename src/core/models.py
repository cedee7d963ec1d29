"""
Boundary layer data model(s).

The Service hands these to the repository (and gets them back), so the database layer never needs to know about
Board / Piece / Game. The position itself travels as the bytes produced by the save file codec. The save file
does not hold the move history, so a stored game carries it alongside.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from src.core.shared_types import Color


@dataclass
class SavedGameModel:
    """A game stored under a name: codec bytes + move history (UCI) + the turn, readable without decoding."""

    name: str
    state: bytes
    moves_uci: list[str] = field(default_factory=list)
    turn_count: int = 1
    turn_color: Color = Color.WHITE


@dataclass(frozen=True)
class SavedGameSummary:
    """One line in the list of stored games"""

    id: UUID
    name: str
    turn_count: int
    turn_color: Color
    saved_at: datetime

    def describe(self) -> str:
        return (
            f"{self.id}  {self.name}  (turn {self.turn_count}, {self.turn_color} to move, "
            f"saved {self.saved_at:%Y-%m-%d %H:%M})"
        )
