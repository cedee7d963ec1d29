"""Unit tests for /src/chess/board.py"""

import pytest

from src.chess.board import STARTING_POSITION_FEN, Board
from src.chess.coordinate import BOARD_SIZE, Coordinate
from src.chess.pieces import Piece
from src.core.exceptions import MissingPieceError
from src.core.shared_types import Color, PieceKind

EMPTY_FEN = "/".join(["8"] * 8)


def at(name: str) -> Coordinate:
    return Coordinate.from_algebraic(name)


def assert_consistent(board: Board) -> None:
    """The map key and the piece's own position never disagree"""
    for coordinate, piece in board.pieces.items():
        assert piece.position == coordinate


# -- CREATION LOGIC ---
def test_creating_board_in_starting_position() -> None:
    board = Board.starting_position()
    back_row = [
        PieceKind.ROOK,
        PieceKind.KNIGHT,
        PieceKind.BISHOP,
        PieceKind.QUEEN,
        PieceKind.KING,
        PieceKind.BISHOP,
        PieceKind.KNIGHT,
        PieceKind.ROOK,
    ]

    for col, kind in enumerate(back_row):
        black_piece = board.piece(Coordinate(0, col))
        white_piece = board.piece(Coordinate(7, col))
        assert (black_piece.color, black_piece.kind) == (Color.BLACK, kind)
        assert (white_piece.color, white_piece.kind) == (Color.WHITE, kind)

    for col in range(BOARD_SIZE):
        assert board.piece(Coordinate(1, col)).kind == PieceKind.PAWN
        assert board.piece(Coordinate(1, col)).color == Color.BLACK
        assert board.piece(Coordinate(6, col)).kind == PieceKind.PAWN
        assert board.piece(Coordinate(6, col)).color == Color.WHITE

    # rows in the middle are empty
    for row in range(2, 6):
        for col in range(BOARD_SIZE):
            assert board.piece(Coordinate(row, col)) is None

    assert len(board.pieces) == 32
    assert not any(piece.has_moved for piece in board.pieces.values())
    assert_consistent(board)


def test_kings_are_tracked_from_the_start() -> None:
    board = Board.starting_position()
    assert board.white_king == at("e1")
    assert board.black_king == at("e8")
    assert board.is_king(at("e1"))
    assert board.is_king(at("e8"))
    assert not board.is_king(at("d1"))


def test_piece_ids_come_from_starting_squares() -> None:
    board = Board.starting_position()
    ids = [piece.id for piece in board.pieces.values()]
    assert len(set(ids)) == 32
    assert board.piece(at("g1")).id == at("g1").code


def test_fen_roundtrip() -> None:
    e4_fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR"
    assert Board.from_fen(e4_fen).to_fen() == e4_fen
    assert Board.from_fen(EMPTY_FEN).to_fen() == EMPTY_FEN
    assert Board.starting_position().to_fen() == STARTING_POSITION_FEN


def test_pawns_off_their_home_row_count_as_moved() -> None:
    board = Board.from_fen("8/p7/8/8/4P3/8/3P4/8")
    assert not board.piece(at("a7")).has_moved
    assert not board.piece(at("d2")).has_moved
    assert board.piece(at("e4")).has_moved


# -- QUERIES ---
def test_locate_color() -> None:
    board = Board.starting_position()
    white = board.locate_color(Color.WHITE)
    assert len(white) == 16
    assert all(coordinate.row in (6, 7) for coordinate in white)


def test_destinations_of_empty_square() -> None:
    assert Board.starting_position().destinations(at("e4")) == set()


def test_destinations_of_occupied_square() -> None:
    board = Board.starting_position()
    assert board.destinations(at("g1")) == {at("f3"), at("h3")}


# -- MUTATIONS ---
def test_move_piece_updates_key_and_position() -> None:
    board = Board.starting_position()
    pawn = board.piece(at("e2"))

    captured = board.move_piece(at("e2"), at("e4"))

    assert captured is None
    assert board.piece(at("e2")) is None
    assert board.piece(at("e4")) is pawn
    assert pawn.position == at("e4")
    assert pawn.has_moved
    assert_consistent(board)


def test_move_piece_captures() -> None:
    board = Board.from_fen("8/8/8/3p4/8/8/3R4/8")
    black_pawn = board.piece(at("d5"))

    captured = board.move_piece(at("d2"), at("d5"))

    assert captured is black_pawn
    assert board.piece(at("d5")).kind == PieceKind.ROOK
    assert len(board.pieces) == 1
    assert_consistent(board)


def test_move_from_empty_square_fails() -> None:
    board = Board.starting_position()
    with pytest.raises(MissingPieceError):
        board.move_piece(at("e4"), at("e5"))


def test_king_tracking_follows_the_king() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K3")
    board.move_piece(at("e1"), at("e2"))
    assert board.white_king == at("e2")
    assert board.is_king(at("e2"))
    assert not board.is_king(at("e1"))


def test_removing_the_king_stops_tracking_it() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K3")
    removed = board.remove_piece(at("e8"))
    assert removed.kind == PieceKind.KING
    assert board.black_king is None
    assert board.white_king == at("e1")


def test_remove_piece_from_empty_square() -> None:
    board = Board.starting_position()
    assert board.remove_piece(at("e4")) is None
    assert len(board.pieces) == 32


def test_place_piece_replaces_occupant() -> None:
    board = Board.starting_position()
    queen = Piece(Color.WHITE, PieceKind.QUEEN, at("e2"))
    board.place_piece(queen)
    assert board.piece(at("e2")) is queen
    assert len(board.pieces) == 32
    assert_consistent(board)


def test_from_pieces_tracks_kings() -> None:
    board = Board.from_pieces(
        [
            Piece(Color.WHITE, PieceKind.KING, at("a1")),
            Piece(Color.BLACK, PieceKind.KING, at("h8")),
            Piece(Color.BLACK, PieceKind.ROOK, at("h7")),
        ]
    )
    assert board.king_square(Color.WHITE) == at("a1")
    assert board.king_square(Color.BLACK) == at("h8")


# -- DISPLAY ---
def test_render() -> None:
    lines = Board.starting_position().render().splitlines()
    assert lines[0] == "  a b c d e f g h"
    assert lines[1] == "8 ♜ ♞ ♝ ♛ ♚ ♝ ♞ ♜ 8"
    assert lines[4] == "5 . . . . . . . . 5"
    assert lines[8] == "1 ♖ ♘ ♗ ♕ ♔ ♗ ♘ ♖ 1"
