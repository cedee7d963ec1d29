"""Unit tests for /src/db/codec.py"""

import struct

import pytest

from src.chess.board import Board
from src.chess.coordinate import Coordinate
from src.chess.game import Game
from src.core.exceptions import SaveFileError
from src.core.shared_types import Color, GameMode, PieceKind
from src.db.codec import HEADER, MAGIC, PIECE_RECORD, decode_game, encode_game

# offsets into a save holding a single piece
TURN_COLOR_OFFSET = 5
FIRST_PIECE_OFFSET = 10


def snapshot(game: Game) -> set[tuple]:
    return {
        (coordinate, piece.color, piece.kind, piece.has_moved, piece.id)
        for coordinate, piece in game.board.pieces.items()
    }


def single_piece_save() -> bytearray:
    game = Game(board=Board.from_fen("8/8/8/8/8/8/8/4K3"))
    return bytearray(encode_game(game))


def test_layout_of_an_empty_board() -> None:
    game = Game(board=Board(), turn_count=3, turn_color=Color.BLACK)
    assert encode_game(game) == bytes([MAGIC, 0, 0, 0, 3, 1, 0, 0, 0, 0])


def test_layout_of_a_piece_record() -> None:
    data = single_piece_save()
    king_square = Coordinate(7, 4)
    assert len(data) == HEADER.size + 4 + PIECE_RECORD.size
    assert PIECE_RECORD.unpack_from(data, FIRST_PIECE_OFFSET) == (
        7,  # row
        4,  # col
        0,  # White
        5,  # King
        0,  # not moved
        king_square.code,
    )


def test_starting_position_survives_saving() -> None:
    game = Game.new_local_game()
    restored = decode_game(encode_game(game))
    assert snapshot(restored) == snapshot(game)
    assert restored.turn_count == 1
    assert restored.turn_color == Color.WHITE


def test_game_in_progress_survives_saving() -> None:
    game = Game.new_local_game()
    for src, dest in [("e2", "e4"), ("d7", "d5"), ("e4", "d5"), ("g8", "f6")]:
        game.select(Coordinate.from_algebraic(src))
        game.select(Coordinate.from_algebraic(dest))

    restored = decode_game(encode_game(game))

    assert snapshot(restored) == snapshot(game)
    assert restored.turn_count == 3
    assert restored.turn_color == Color.WHITE
    assert restored.board.white_king == Coordinate.from_algebraic("e1")
    assert restored.board.black_king == Coordinate.from_algebraic("e8")


def test_loaded_game_is_a_running_local_game() -> None:
    game = Game.new_networked_game(Color.BLACK)
    game.end_unexpectedly("Connection lost")
    game.select(Coordinate.from_algebraic("e7"))

    restored = decode_game(encode_game(game))

    assert restored.running
    assert restored.mode == GameMode.LOCAL
    assert restored.local_color is None
    assert restored.winner is None
    assert not restored.selection.is_active


def test_promoted_piece_keeps_its_id() -> None:
    game = Game(board=Board.from_fen("8/4P3/8/8/8/8/8/k6K"))
    pawn_id = game.board.piece(Coordinate.from_algebraic("e7")).id
    game.select(Coordinate.from_algebraic("e7"))
    game.select(Coordinate.from_algebraic("e8"))

    restored = decode_game(encode_game(game))

    queen = restored.board.piece(Coordinate.from_algebraic("e8"))
    assert queen.kind == PieceKind.QUEEN
    assert queen.id == pawn_id


# --- INVALID SAVES ---
def test_bad_magic() -> None:
    data = single_piece_save()
    data[0] = 0x00
    with pytest.raises(SaveFileError):
        decode_game(bytes(data))


def test_empty_file() -> None:
    with pytest.raises(SaveFileError):
        decode_game(b"")


@pytest.mark.parametrize("length", [1, 5, 9, 12, FIRST_PIECE_OFFSET + PIECE_RECORD.size - 1])
def test_truncated(length: int) -> None:
    data = single_piece_save()
    with pytest.raises(SaveFileError):
        decode_game(bytes(data[:length]))


def test_trailing_bytes() -> None:
    data = single_piece_save() + b"\x00"
    with pytest.raises(SaveFileError):
        decode_game(bytes(data))


def test_piece_count_larger_than_the_records() -> None:
    data = single_piece_save()
    struct.pack_into(">i", data, HEADER.size, 2)
    with pytest.raises(SaveFileError):
        decode_game(bytes(data))


@pytest.mark.parametrize(
    "offset, value",
    [
        (TURN_COLOR_OFFSET, 2),  # turn color
        (FIRST_PIECE_OFFSET, 8),  # row
        (FIRST_PIECE_OFFSET + 1, 8),  # col
        (FIRST_PIECE_OFFSET + 2, 2),  # piece color
        (FIRST_PIECE_OFFSET + 3, 6),  # piece kind
        (FIRST_PIECE_OFFSET + 4, 2),  # has_moved flag
    ],
)
def test_invalid_codes(offset: int, value: int) -> None:
    data = single_piece_save()
    data[offset] = value
    with pytest.raises(SaveFileError):
        decode_game(bytes(data))


def test_invalid_turn_count() -> None:
    data = single_piece_save()
    struct.pack_into(">i", data, 1, 0)
    with pytest.raises(SaveFileError):
        decode_game(bytes(data))
