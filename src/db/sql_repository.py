"""SavedGameRepository on top of a SQLAlchemy session"""

import logging
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import SavedGameModel, SavedGameSummary
from src.core.shared_types import Color
from src.db.schema import DBSavedGame

logger = logging.getLogger(__name__)


class SQLSavedGameRepository:
    """One row per stored game. The position stays opaque codec bytes, the turn is copied out for listing."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> SavedGameModel | None:
        record = self.db.get(DBSavedGame, game_id)
        return None if record is None else self._to_model(record)

    def find_by_name(self, name: str) -> UUID | None:
        return self.db.scalar(select(DBSavedGame.id).where(DBSavedGame.name == name))

    def create_game(self, game: SavedGameModel) -> UUID:
        record = DBSavedGame(id=uuid4())
        self._write(record, game)
        self.db.add(record)
        self.db.commit()
        logger.debug("Stored new game %r as %s", game.name, record.id)
        return record.id

    def update_game(self, game_id: UUID, game: SavedGameModel) -> bool:
        record = self.db.get(DBSavedGame, game_id)
        if record is None:
            return False
        self._write(record, game)
        self.db.commit()
        return True

    def delete_game(self, game_id: UUID) -> bool:
        record = self.db.get(DBSavedGame, game_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        return True

    def list_games(self) -> list[SavedGameSummary]:
        query = select(
            DBSavedGame.id,
            DBSavedGame.name,
            DBSavedGame.turn_count,
            DBSavedGame.turn_color,
            DBSavedGame.saved_at,
        ).order_by(DBSavedGame.saved_at.desc())
        return [
            SavedGameSummary(
                id=row.id,
                name=row.name,
                turn_count=row.turn_count,
                turn_color=Color(row.turn_color),
                saved_at=row.saved_at,
            )
            for row in self.db.execute(query)
        ]

    @staticmethod
    def _write(record: DBSavedGame, game: SavedGameModel) -> None:
        record.name = game.name
        record.state = game.state
        # a fresh list, so the JSON column registers the change
        record.moves_uci = list(game.moves_uci)
        record.turn_count = game.turn_count
        record.turn_color = str(game.turn_color)

    @staticmethod
    def _to_model(record: DBSavedGame) -> SavedGameModel:
        return SavedGameModel(
            name=record.name,
            state=record.state,
            moves_uci=list(record.moves_uci),
            turn_count=record.turn_count,
            turn_color=Color(record.turn_color),
        )
