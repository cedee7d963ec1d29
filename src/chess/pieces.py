"""Defines the chess pieces"""

from dataclasses import dataclass
from typing import Optional, Self

from src.chess.coordinate import Coordinate
from src.core.shared_types import Color, PieceKind

FEN_TO_PIECE: dict[str, PieceKind] = {
    "p": PieceKind.PAWN,
    "n": PieceKind.KNIGHT,
    "b": PieceKind.BISHOP,
    "r": PieceKind.ROOK,
    "q": PieceKind.QUEEN,
    "k": PieceKind.KING,
}

PIECE_TO_FEN: dict[PieceKind, str] = {value: key for key, value in FEN_TO_PIECE.items()}

PIECE_SYMBOLS: dict[tuple[Color, PieceKind], str] = {
    (Color.WHITE, PieceKind.KING): "♔",
    (Color.WHITE, PieceKind.QUEEN): "♕",
    (Color.WHITE, PieceKind.ROOK): "♖",
    (Color.WHITE, PieceKind.BISHOP): "♗",
    (Color.WHITE, PieceKind.KNIGHT): "♘",
    (Color.WHITE, PieceKind.PAWN): "♙",
    (Color.BLACK, PieceKind.KING): "♚",
    (Color.BLACK, PieceKind.QUEEN): "♛",
    (Color.BLACK, PieceKind.ROOK): "♜",
    (Color.BLACK, PieceKind.BISHOP): "♝",
    (Color.BLACK, PieceKind.KNIGHT): "♞",
    (Color.BLACK, PieceKind.PAWN): "♟",
}

# A pawn on the far rank may turn into any of these
PROMOTION_OPTIONS: tuple[PieceKind, ...] = (
    PieceKind.QUEEN,
    PieceKind.ROOK,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
)


@dataclass
class Piece:
    """
    A piece standing on the board.

    `position` and `has_moved` change in place as the piece moves. The kind never changes:
    promotion replaces the pawn by a new piece (see `promoted_to`), which keeps the pawn's id.
    """

    color: Color
    kind: PieceKind
    position: Coordinate
    has_moved: bool = False
    id: Optional[int] = None

    def __post_init__(self):
        # NOTE: the id is derived from the square the piece was created on
        if self.id is None:
            self.id = self.position.code

    @classmethod
    def from_fen(cls, character: str, position: Coordinate) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        kind = FEN_TO_PIECE[character.lower()]
        return cls(color, kind, position)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.kind].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.kind].lower()
        )

    @property
    def symbol(self) -> str:
        return PIECE_SYMBOLS[(self.color, self.kind)]

    def promoted_to(self, kind: PieceKind) -> "Piece":
        """A freshly constructed piece of the new kind, same color, square and id."""
        return Piece(self.color, kind, self.position, id=self.id)

    def __str__(self) -> str:
        return f"{self.color.capitalize()} {self.kind.capitalize()} at {self.position}"
