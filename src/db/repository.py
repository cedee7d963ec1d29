"""Protocol repository (implemented with SQL Alchemy, could be anything that stores bytes by ID)"""

from typing import Protocol
from uuid import UUID

from src.core.models import SavedGameModel, SavedGameSummary


class SavedGameRepository(Protocol):
    """Stored games, addressed by ID. Names are unique."""

    def get_game(self, game_id: UUID) -> SavedGameModel | None:
        """Get saved game by ID, if record exists."""
        ...

    def find_by_name(self, name: str) -> UUID | None: ...

    def create_game(self, game: SavedGameModel) -> UUID:
        """Store a new game, returns its ID."""
        ...

    def update_game(self, game_id: UUID, game: SavedGameModel) -> bool:
        """Overwrite an existing record. False if there is none."""
        ...

    def delete_game(self, game_id: UUID) -> bool:
        """False if there was nothing to delete."""
        ...

    def list_games(self) -> list[SavedGameSummary]:
        """Most recently saved first."""
        ...
