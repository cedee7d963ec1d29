"""Reading/writing save files on disk. The file picker is the UI's business, this only gets a path."""

import logging
from pathlib import Path

from src.chess.game import Game
from src.core.exceptions import SaveFileError
from src.db.codec import decode_game, encode_game

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".jcg"


def with_extension(path: Path | str, extension: str = DEFAULT_EXTENSION) -> Path:
    """Append the save file extension if the user left it out"""
    path = Path(path)
    return path if path.suffix == extension else path.with_name(path.name + extension)


def save_game(path: Path | str, game: Game, extension: str = DEFAULT_EXTENSION) -> Path:
    """Write the game, returns where it ended up"""
    destination = with_extension(path, extension)
    try:
        destination.write_bytes(encode_game(game))
    except OSError as e:
        raise SaveFileError(f"Could not save game to {destination}: {e}") from e
    logger.info("Saved game to %s", destination)
    return destination


def load_game(path: Path | str) -> Game:
    source = Path(path)
    try:
        data = source.read_bytes()
    except OSError as e:
        raise SaveFileError(f"Unable to read save file {source}: {e}") from e
    game = decode_game(data)
    logger.info("Loaded game from %s", source)
    return game
