"""
Binary save format.
----

Sequential, big-endian, no length prefixes besides the piece count:

    [1 byte magic 0x77]
    [4-byte int turn_count]
    [1 byte turn_color]                       0 = White, 1 = Black
    [4-byte int piece_count]
    piece_count times:
        [1 byte row][1 byte col]              the square
        [1 byte color][1 byte kind]           kind: 0..5 = Pawn, Knight, Bishop, Rook, Queen, King
        [1 byte has_moved][4-byte int id]

Only the board and the turn are stored. A loaded game is always a running local game without a selection.
"""

import logging
import struct

from src.chess.board import Board
from src.chess.coordinate import Coordinate
from src.chess.game import Game
from src.chess.pieces import Piece
from src.core.exceptions import SaveFileError
from src.core.shared_types import Color, GameMode, PieceKind

logger = logging.getLogger(__name__)

MAGIC = 0x77

HEADER = struct.Struct(">BiB")  # magic, turn count, turn color
COUNT = struct.Struct(">i")
PIECE_RECORD = struct.Struct(">BBBBBi")  # row, col, color, kind, has_moved, id

COLOR_CODES: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: 1}
KIND_CODES: dict[PieceKind, int] = {
    PieceKind.PAWN: 0,
    PieceKind.KNIGHT: 1,
    PieceKind.BISHOP: 2,
    PieceKind.ROOK: 3,
    PieceKind.QUEEN: 4,
    PieceKind.KING: 5,
}
CODE_TO_COLOR: dict[int, Color] = {value: key for key, value in COLOR_CODES.items()}
CODE_TO_KIND: dict[int, PieceKind] = {value: key for key, value in KIND_CODES.items()}


def encode_game(game: Game) -> bytes:
    pieces = list(game.board.pieces.items())
    parts = [
        HEADER.pack(MAGIC, game.turn_count, COLOR_CODES[game.turn_color]),
        COUNT.pack(len(pieces)),
    ]
    for coordinate, piece in pieces:
        parts.append(
            PIECE_RECORD.pack(
                coordinate.row,
                coordinate.col,
                COLOR_CODES[piece.color],
                KIND_CODES[piece.kind],
                int(piece.has_moved),
                piece.id,
            )
        )
    return b"".join(parts)


def decode_game(data: bytes) -> Game:
    """
    Rebuild a Game from its saved bytes.

    Raises SaveFileError for anything that is not a complete, valid save. Nothing is returned half-built.
    """
    if not data or data[0] != MAGIC:
        raise SaveFileError("Not a save file: magic byte 0x77 is missing.")

    offset = 0
    _, turn_count, color_code = _unpack(HEADER, data, offset, "header")
    offset += HEADER.size
    (piece_count,) = _unpack(COUNT, data, offset, "piece count")
    offset += COUNT.size

    if turn_count < 1:
        raise SaveFileError(f"Invalid turn count: {turn_count}")
    turn_color = _decode_enum(CODE_TO_COLOR, color_code, "turn color")
    if piece_count < 0:
        raise SaveFileError(f"Invalid piece count: {piece_count}")

    board = Board()
    for index in range(piece_count):
        record = _unpack(PIECE_RECORD, data, offset, f"piece {index + 1}/{piece_count}")
        offset += PIECE_RECORD.size
        # NOTE: place_piece re-derives the king tracking
        board.place_piece(_decode_piece(*record))

    if offset != len(data):
        raise SaveFileError(f"Unexpected {len(data) - offset} trailing byte(s).")

    return Game(
        board=board,
        turn_count=turn_count,
        turn_color=turn_color,
        running=True,
        mode=GameMode.LOCAL,
    )


def _decode_piece(
    row: int, col: int, color_code: int, kind_code: int, has_moved: int, piece_id: int
) -> Piece:
    coordinate = Coordinate(row, col)
    if not coordinate.is_within_range():
        raise SaveFileError(f"Piece outside of the board: ({row}, {col})")
    if has_moved not in (0, 1):
        raise SaveFileError(f"Invalid has_moved flag: {has_moved}")
    return Piece(
        color=_decode_enum(CODE_TO_COLOR, color_code, "piece color"),
        kind=_decode_enum(CODE_TO_KIND, kind_code, "piece kind"),
        position=coordinate,
        has_moved=bool(has_moved),
        id=piece_id,
    )


def _unpack(layout: struct.Struct, data: bytes, offset: int, what: str) -> tuple:
    if len(data) < offset + layout.size:
        raise SaveFileError(f"Save file is truncated (while reading {what}).")
    return layout.unpack_from(data, offset)


def _decode_enum(codes: dict, code: int, what: str):
    if code not in codes:
        raise SaveFileError(f"Invalid {what} code: {code}")
    return codes[code]
