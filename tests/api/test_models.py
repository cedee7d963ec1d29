from uuid import uuid4

import pytest
from pydantic import ValidationError

from src.api.models import (
    HostRequest,
    JoinRequest,
    PromotionRequest,
    SaveFileRequest,
    SavedGameRequest,
    SelectRequest,
    StoreRequest,
)
from src.chess.coordinate import Coordinate
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import PieceKind


# -- Validation - SelectRequest --
@pytest.mark.parametrize("square", ["e2", "a1", "h8", " E4 ", "D7"])
def test_valid_square(square: str) -> None:
    request = SelectRequest(square=square)
    assert request.square == square.strip().lower()
    assert request.coordinate == Coordinate.from_algebraic(square.strip().lower())


@pytest.mark.parametrize("square", ["", "e", "e9", "i1", "a0", "e2e4", "44"])
def test_invalid_square(square: str) -> None:
    """Cannot be turned into a coordinate"""
    with pytest.raises(InvalidRequestError):
        SelectRequest(square=square)


# -- Validation - PromotionRequest --
@pytest.mark.parametrize(
    "choice, expected",
    [
        ("q", PieceKind.QUEEN),
        ("R", PieceKind.ROOK),
        ("bishop", PieceKind.BISHOP),
        (" Knight ", PieceKind.KNIGHT),
        ("n", PieceKind.KNIGHT),
        (PieceKind.QUEEN, PieceKind.QUEEN),
    ],
)
def test_valid_promotion_choice(choice, expected: PieceKind) -> None:
    assert PromotionRequest(choice=choice).choice == expected


@pytest.mark.parametrize("choice", ["k", "king", "pawn", "p", "x", ""])
def test_invalid_promotion_choice(choice: str) -> None:
    """Kings and pawns are not an option"""
    with pytest.raises(InvalidRequestError):
        PromotionRequest(choice=choice)


# -- Validation - Host / Join --
@pytest.mark.parametrize("port", [1, 5000, 65535])
def test_valid_port(port: int) -> None:
    assert HostRequest(port=port).port == port
    assert JoinRequest(address="localhost", port=port).port == port


@pytest.mark.parametrize("port", [0, -1, 65536])
def test_invalid_port(port: int) -> None:
    with pytest.raises(InvalidRequestError):
        HostRequest(port=port)
    with pytest.raises(InvalidRequestError):
        JoinRequest(address="localhost", port=port)


def test_join_address_is_stripped() -> None:
    assert JoinRequest(address=" 192.168.0.12 ", port=5000).address == "192.168.0.12"


def test_join_address_cannot_be_empty() -> None:
    with pytest.raises(InvalidRequestError):
        JoinRequest(address="   ", port=5000)


# -- Validation - SaveFileRequest --
def test_save_file_path() -> None:
    assert SaveFileRequest(path=" games/friday ").path == "games/friday"


def test_save_file_path_cannot_be_empty() -> None:
    with pytest.raises(InvalidRequestError):
        SaveFileRequest(path="")


# -- Validation - StoreRequest / SavedGameRequest --
def test_store_name_is_stripped() -> None:
    assert StoreRequest(name="  friday evening ").name == "friday evening"


def test_store_name_cannot_be_empty() -> None:
    with pytest.raises(InvalidRequestError):
        StoreRequest(name="   ")


def test_saved_game_id() -> None:
    game_id = uuid4()
    assert SavedGameRequest(game_id=str(game_id)).game_id == game_id


def test_saved_game_id_must_be_a_uuid() -> None:
    with pytest.raises(ValidationError):
        SavedGameRequest(game_id="42")
