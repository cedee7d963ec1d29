"""Request models: validated user input coming from a front-end"""

from uuid import UUID

from pydantic import BaseModel, field_validator

from src.chess.coordinate import Coordinate
from src.chess.pieces import FEN_TO_PIECE, PROMOTION_OPTIONS
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import PieceKind


def _validate_port(value: int) -> int:
    if not 1 <= value <= 65535:
        raise InvalidRequestError(f"Port must be between 1 and 65535, got {value}.")
    return value


# --- REQUEST MODELS ---
class HostRequest(BaseModel):
    port: int

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        return _validate_port(value)


class JoinRequest(BaseModel):
    address: str
    port: int

    @field_validator("address")
    @classmethod
    def validate_address(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Address of the host cannot be empty.")
        return value

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        return _validate_port(value)


class SelectRequest(BaseModel):
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        def _is_algebraic_notation(value: str) -> bool:
            if len(value) != 2:
                return False

            first_character = value[0]
            second_character = value[1]
            if not ("a" <= first_character <= "h" and "1" <= second_character <= "8"):
                return False
            return True

        value = value.strip().lower()
        if not _is_algebraic_notation(value):
            raise InvalidRequestError(
                f"Cannot interpret square: {value!r} as a valid square name."
            )
        return value

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate.from_algebraic(self.square)


class PromotionRequest(BaseModel):
    """Accepts the piece name ('queen') or its letter ('q')"""

    choice: PieceKind

    @field_validator("choice", mode="before")
    @classmethod
    def validate_choice(cls, value: object) -> PieceKind:
        if isinstance(value, str):
            text = value.strip().lower()
            if text in FEN_TO_PIECE:
                value = FEN_TO_PIECE[text]
            elif text in [kind.value for kind in PieceKind]:
                value = PieceKind(text)
        if value not in PROMOTION_OPTIONS:
            raise InvalidRequestError(
                f"Cannot promote into {value!r}. Pick one from {', '.join(PROMOTION_OPTIONS)}."
            )
        return PieceKind(value)


class SaveFileRequest(BaseModel):
    path: str

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("No file name given.")
        return value


class StoreRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("A saved game needs a name.")
        return value


class SavedGameRequest(BaseModel):
    """Refers to a stored game by its ID"""

    game_id: UUID
