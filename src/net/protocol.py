"""
Wire format between two peers.
----

Two kinds of messages travel over the stream, both fixed size:

* the handshake (1 byte, host -> joiner): 0x01 = the joiner plays White, 0x00 = the joiner plays Black.
* a move (6 bytes, mover -> opponent), sent once per completed move, never acknowledged:

    byte 0: from row      byte 1: from col
    byte 2: to row        byte 3: to col
    byte 4: king captured (0|1)
    byte 5: promotion (0=none, 1=Queen, 2=Bishop, 3=Rook, 4=Knight)

Both ends must stay bit-compatible, so these numbers must not change.
"""

from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.chess.coordinate import Coordinate
from src.chess.game import AppliedMove
from src.core.exceptions import ProtocolError
from src.core.shared_types import Color, PieceKind

HANDSHAKE_SIZE = 1
MOVE_MESSAGE_SIZE = 6

JOINER_IS_WHITE = 0x01
JOINER_IS_BLACK = 0x00

PROMOTION_TO_CODE: dict[Optional[PieceKind], int] = {
    None: 0,
    PieceKind.QUEEN: 1,
    PieceKind.BISHOP: 2,
    PieceKind.ROOK: 3,
    PieceKind.KNIGHT: 4,
}
CODE_TO_PROMOTION: dict[int, Optional[PieceKind]] = {
    value: key for key, value in PROMOTION_TO_CODE.items()
}


# --- HANDSHAKE ---
def encode_color_assignment(joiner_color: Color) -> bytes:
    """The host tells the joiner which color it plays"""
    return bytes([JOINER_IS_WHITE if joiner_color == Color.WHITE else JOINER_IS_BLACK])


def decode_color_assignment(data: bytes) -> Color:
    if len(data) != HANDSHAKE_SIZE or data[0] not in (JOINER_IS_WHITE, JOINER_IS_BLACK):
        raise ProtocolError(f"Invalid color assignment from host: {data!r}")
    return Color.WHITE if data[0] == JOINER_IS_WHITE else Color.BLACK


# --- MOVES ---
class MoveMessage(BaseModel):
    """One completed move, as it is sent to the opponent."""

    model_config = ConfigDict(frozen=True)

    from_row: int = Field(ge=0, le=7)
    from_col: int = Field(ge=0, le=7)
    to_row: int = Field(ge=0, le=7)
    to_col: int = Field(ge=0, le=7)
    king_captured: bool = False
    promotion: Optional[PieceKind] = None

    @classmethod
    def from_applied_move(cls, move: AppliedMove) -> Self:
        return cls(
            from_row=move.from_square.row,
            from_col=move.from_square.col,
            to_row=move.to_square.row,
            to_col=move.to_square.col,
            king_captured=move.king_captured,
            promotion=move.promotion,
        )

    def to_applied_move(self) -> AppliedMove:
        return AppliedMove(
            from_square=Coordinate(self.from_row, self.from_col),
            to_square=Coordinate(self.to_row, self.to_col),
            king_captured=self.king_captured,
            promotion=self.promotion,
        )

    def to_bytes(self) -> bytes:
        return bytes(
            [
                self.from_row,
                self.from_col,
                self.to_row,
                self.to_col,
                int(self.king_captured),
                PROMOTION_TO_CODE[self.promotion],
            ]
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Decode (and validate) exactly one message"""
        if len(data) != MOVE_MESSAGE_SIZE:
            raise ProtocolError(
                f"A move message is {MOVE_MESSAGE_SIZE} bytes, got {len(data)}."
            )

        from_row, from_col, to_row, to_col, king_flag, promotion_code = data
        if king_flag not in (0, 1):
            raise ProtocolError(f"Invalid king captured flag: {king_flag}")
        if promotion_code not in CODE_TO_PROMOTION:
            raise ProtocolError(f"Invalid promotion code: {promotion_code}")

        try:
            return cls(
                from_row=from_row,
                from_col=from_col,
                to_row=to_row,
                to_col=to_col,
                king_captured=bool(king_flag),
                promotion=CODE_TO_PROMOTION[promotion_code],
            )
        except ValidationError as e:
            raise ProtocolError(f"Invalid move message {data!r}: {e}") from e
