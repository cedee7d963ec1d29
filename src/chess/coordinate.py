"""
A cell on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8
BOARD_SIZE = 8


@dataclass(frozen=True)
class Coordinate:
    """Zero-based row and column. Row 0 is Black's back rank, column 0 is the a-file."""

    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Coordinate:
        """Algebraic notation: 'a8' gets converted to (0, 0), 'h1' to (7, 7)"""
        col = ord(sq[0].lower()) - ord("a")
        row = BOARD_SIZE - int(sq[1:])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{chr(ord('a') + self.col)}{BOARD_SIZE - self.row}"

    def add(self, d_row: int, d_col: int) -> Coordinate:
        return Coordinate(self.row + d_row, self.col + d_col)

    def is_within_range(self) -> bool:
        return (0 <= self.row < BOARD_SIZE) and (0 <= self.col < BOARD_SIZE)

    @property
    def code(self) -> int:
        """Compact integer identity of the cell. Pieces take it as their id from their starting square."""
        return self.row << 4 | self.col

    def __str__(self) -> str:
        return self.to_algebraic()


def all_coordinates() -> list[Coordinate]:
    return [Coordinate(row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)]
