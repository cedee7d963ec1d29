"""
Geometry/Base movement rules

Key idea: Use strategy pattern to define the destinations for each piece kind.
Movement rules get the piece and a read-only view of the board, pieces never hold a reference to the board themselves.

NOTE: there is no notion of check. A destination is possible if the piece can get there, even if that leaves
your own king under attack (or captures the opponent's king, which simply ends the game).
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.chess.coordinate import BOARD_SIZE, Coordinate
from src.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece
from src.core.shared_types import Color, PieceKind


class BoardView(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, coordinate: Coordinate) -> Optional[Piece]: ...


Vector = tuple[int, int]


@dataclass(frozen=True)
class Move:
    """basic definition of a move that was made"""

    from_square: Coordinate
    to_square: Coordinate
    promote_to: Optional[PieceKind] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        from_sq = Coordinate.from_algebraic(uci[:2])
        to_sq = Coordinate.from_algebraic(uci[2:4])
        promote_to = FEN_TO_PIECE[uci[4]] if len(uci) == 5 else None
        return cls(from_sq, to_sq, promote_to)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


ORTHOGONALS: list[Vector] = [(-1, 0), (0, -1), (1, 0), (0, 1)]
DIAGONALS: list[Vector] = [(-1, -1), (-1, 1), (1, -1), (1, 1)]
KNIGHT_DELTAS: list[Vector] = [
    (-2, -1),
    (-2, 1),
    (2, -1),
    (2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
]
KING_DELTAS: list[Vector] = ORTHOGONALS + DIAGONALS


def is_available(piece: Piece, target: Coordinate, board: BoardView) -> bool:
    """On the board, and either empty or occupied by the opponent (a capture)"""
    if not target.is_within_range():
        return False
    occupant = board.piece(target)
    return occupant is None or occupant.color != piece.color


# --- MOVEMENT RULES ---
def raycasting_moves(
    piece: Piece, board: BoardView, directions: list[Vector]
) -> set[Coordinate]:
    """
    Raycasting algorithm
    -----

    We move along each direction until we hit another piece or the edge of the board.
    The first occupied square is included only if it holds an opponent's piece.
    """
    destinations: set[Coordinate] = set()
    for d_row, d_col in directions:
        target = piece.position.add(d_row, d_col)
        while is_available(piece, target, board):
            destinations.add(target)
            if board.piece(target) is not None:
                # captured piece ends the ray
                break
            target = target.add(d_row, d_col)
    return destinations


def single_step_moves(
    piece: Piece, board: BoardView, deltas: list[Vector]
) -> set[Coordinate]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that jump by a fixed offset"""
    return {
        target
        for target in (piece.position.add(d_row, d_col) for d_row, d_col in deltas)
        if is_available(piece, target, board)
    }


def pawn_direction(color: Color) -> int:
    """Black moves down the board (increasing row), White moves up the board"""
    return 1 if color == Color.BLACK else -1


def candidate_pawn_moves(piece: Piece, board: BoardView) -> set[Coordinate]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two in its first move, if both squares in front of it are empty
    - takes diagonally (and only takes: no diagonal move onto an empty square, no en passant)
    """
    destinations: set[Coordinate] = set()
    d_row = pawn_direction(piece.color)

    one_step = piece.position.add(d_row, 0)
    if one_step.is_within_range() and board.piece(one_step) is None:
        destinations.add(one_step)

        two_steps = piece.position.add(2 * d_row, 0)
        if (
            not piece.has_moved
            and two_steps.is_within_range()
            and board.piece(two_steps) is None
        ):
            destinations.add(two_steps)

    for d_col in (-1, 1):
        target = piece.position.add(d_row, d_col)
        if not target.is_within_range():
            continue
        occupant = board.piece(target)
        if occupant is not None and occupant.color != piece.color:
            destinations.add(target)
    return destinations


def candidate_knight_moves(piece: Piece, board: BoardView) -> set[Coordinate]:
    """Knights always move such that |delta_row| + |delta_col| = 3"""
    return single_step_moves(piece, board, KNIGHT_DELTAS)


def candidate_bishop_moves(piece: Piece, board: BoardView) -> set[Coordinate]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_moves(piece, board, DIAGONALS)


def candidate_rook_moves(piece: Piece, board: BoardView) -> set[Coordinate]:
    """Rooks move either horizontally or vertically"""
    return raycasting_moves(piece, board, ORTHOGONALS)


def candidate_queen_moves(piece: Piece, board: BoardView) -> set[Coordinate]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_rook_moves(piece, board) | candidate_bishop_moves(piece, board)


def candidate_king_moves(piece: Piece, board: BoardView) -> set[Coordinate]:
    """
    The king can move by a single square at the time.

    No castling.
    """
    return single_step_moves(piece, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Piece, BoardView], set[Coordinate]]
MOVEMENT_RULES: dict[PieceKind, CandidateMovesFn] = {
    PieceKind.PAWN: candidate_pawn_moves,
    PieceKind.KNIGHT: candidate_knight_moves,
    PieceKind.BISHOP: candidate_bishop_moves,
    PieceKind.ROOK: candidate_rook_moves,
    PieceKind.QUEEN: candidate_queen_moves,
    PieceKind.KING: candidate_king_moves,
}


def possible_destinations(piece: Piece, board: BoardView) -> set[Coordinate]:
    """All squares the piece could move to. An empty set means the piece cannot be selected to move."""
    movement_rule = MOVEMENT_RULES[piece.kind]
    return movement_rule(piece, board)


# -- PAWN PROMOTION --
def promotion_row(color: Color) -> int:
    return BOARD_SIZE - 1 if color == Color.BLACK else 0


def is_promotion(piece: Piece, dest: Coordinate) -> bool:
    """A pawn moving onto the farthest row for its color"""
    return piece.kind == PieceKind.PAWN and dest.row == promotion_row(piece.color)
