"""The Game board owns the `position` (in chess: the configuration of pieces on the board) and keeps track of both kings"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Self

from src.chess.coordinate import BOARD_SIZE, Coordinate
from src.chess.moves import possible_destinations
from src.chess.pieces import Piece
from src.core.exceptions import MissingPieceError
from src.core.shared_types import Color, PieceKind

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
PAWN_HOME_ROWS: dict[Color, int] = {Color.BLACK: 1, Color.WHITE: BOARD_SIZE - 2}


@dataclass
class Board:
    """
    Mapping of occupied cells to pieces.
    ----

    Invariant: a coordinate maps to a piece if and only if that piece's `position` is that coordinate.
    Only the methods below mutate `pieces`, and they always update both sides.
    """

    pieces: dict[Coordinate, Piece] = field(default_factory=dict)
    white_king: Optional[Coordinate] = None
    black_king: Optional[Coordinate] = None

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION_FEN)

    @classmethod
    def from_pieces(cls, pieces: Iterable[Piece]) -> Self:
        board = cls()
        for piece in pieces:
            board.place_piece(piece)
        return board

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement field of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on row 0 (the 8th rank), starting with the rook on a8
        * pawns cover row 1 entirely
        * rows 2 through 5 have 8 consecutive empty squares
        * row 6 are the white pawns (capital letters)
        * row 7 are the white pieces.

        NOTE: FEN does not know which pieces moved. Pawns away from their home row are marked as moved,
        everything else as not moved.
        """
        board = cls()
        for row, fen_one_row in enumerate(fen_str.split("/")):
            col = 0
            for character in fen_one_row:
                if character.isalpha():
                    piece = Piece.from_fen(character, Coordinate(row, col))
                    if piece.kind == PieceKind.PAWN:
                        piece.has_moved = row != PAWN_HOME_ROWS[piece.color]
                    board.place_piece(piece)
                    col += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    col += int(character)
        return board

    def to_fen(self) -> str:
        """Rows are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in range(BOARD_SIZE))

    def _row_to_fen(self, row: int) -> str:
        """FEN string of a single row"""
        fen_characters: list[str] = []
        empty_count = 0
        for col in range(BOARD_SIZE):
            piece = self.piece(Coordinate(row, col))
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire row is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- QUERIES ---
    def piece(self, coordinate: Coordinate) -> Optional[Piece]:
        return self.pieces.get(coordinate)

    def is_occupied(self, coordinate: Coordinate) -> bool:
        return coordinate in self.pieces

    def king_square(self, color: Color) -> Optional[Coordinate]:
        return self.white_king if color == Color.WHITE else self.black_king

    def is_king(self, coordinate: Coordinate) -> bool:
        """O(1) check used when capturing"""
        return coordinate in (self.white_king, self.black_king)

    def locate_color(self, color: Color) -> list[Coordinate]:
        return [
            coordinate
            for coordinate, piece in self.pieces.items()
            if piece.color == color
        ]

    def destinations(self, coordinate: Coordinate) -> set[Coordinate]:
        """Possible destinations of the piece on the given square (empty if there is none)"""
        piece = self.piece(coordinate)
        if piece is None:
            return set()
        return possible_destinations(piece, self)

    # --- MUTATIONS ---
    def place_piece(self, piece: Piece) -> None:
        """Put the piece on its own `position`, replacing whatever stood there."""
        self.remove_piece(piece.position)
        self.pieces[piece.position] = piece
        if piece.kind == PieceKind.KING:
            self._track_king(piece.color, piece.position)

    def remove_piece(self, coordinate: Coordinate) -> Optional[Piece]:
        """Take the piece off the board (if any) and return it"""
        removed = self.pieces.pop(coordinate, None)
        if removed is not None and removed.kind == PieceKind.KING:
            if self.king_square(removed.color) == coordinate:
                self._track_king(removed.color, None)
        return removed

    def move_piece(self, src: Coordinate, dest: Coordinate) -> Optional[Piece]:
        """Update the position on the board. Returns the captured piece, if any"""
        moving_piece = self.pieces.pop(src, None)
        if moving_piece is None:
            raise MissingPieceError(f"No piece at {src} to move to {dest}.")

        captured = self.remove_piece(dest)
        moving_piece.position = dest
        moving_piece.has_moved = True
        self.pieces[dest] = moving_piece
        if moving_piece.kind == PieceKind.KING:
            self._track_king(moving_piece.color, dest)
        return captured

    def _track_king(self, color: Color, coordinate: Optional[Coordinate]) -> None:
        if color == Color.WHITE:
            self.white_king = coordinate
        else:
            self.black_king = coordinate

    # --- DISPLAY ---
    def render(self) -> str:
        """Text diagram, row 0 (the 8th rank) on top"""
        files = "  " + " ".join(chr(ord("a") + col) for col in range(BOARD_SIZE))
        lines = [files]
        for row in range(BOARD_SIZE):
            cells = [
                piece.symbol if (piece := self.piece(Coordinate(row, col))) else "."
                for col in range(BOARD_SIZE)
            ]
            rank = BOARD_SIZE - row
            lines.append(f"{rank} {' '.join(cells)} {rank}")
        lines.append(files)
        return "\n".join(lines)
