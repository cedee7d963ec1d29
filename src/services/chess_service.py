"""
Orchestration of the game engine, the peer connection and persistence.

The ChessService is the single owner of the Game. Only the thread that calls its public methods mutates the game.
In a networked game, a background thread does the blocking read on the socket and hands whatever it got to
the owner through a queue. The owner picks it up in `process_events()`.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue
from threading import Thread
from typing import Optional, Union
from uuid import UUID

from src.chess.coordinate import Coordinate
from src.chess.game import (
    AppliedMove,
    Game,
    GameObserver,
    PromotionChooser,
    always_queen,
)
from src.chess.moves import Move
from src.core.config import Settings, get_settings
from src.core.exceptions import (
    GameError,
    GameStateError,
    PeerConnectionError,
    ProtocolError,
    RepositoryError,
)
from src.core.models import SavedGameModel, SavedGameSummary
from src.core.shared_types import Color, GameMode
from src.db.codec import decode_game, encode_game
from src.db.repository import SavedGameRepository
from src.db.save_files import load_game, save_game
from src.net.connection import ColorPicker, PeerConnection, PeerListener, random_color
from src.net.protocol import MoveMessage

logger = logging.getLogger(__name__)


# --- EVENTS HANDED FROM THE READER THREAD TO THE OWNER ---
@dataclass(frozen=True)
class MoveReceived:
    connection: PeerConnection
    message: MoveMessage


@dataclass(frozen=True)
class ConnectionFailed:
    connection: PeerConnection
    error: GameError


SessionEvent = Union[MoveReceived, ConnectionFailed]


class ChessService:
    """Orchestration of layers for one player's side of a chess game."""

    def __init__(
        self,
        observer: Optional[GameObserver] = None,
        choose_promotion: PromotionChooser = always_queen,
        repository: Optional[SavedGameRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.observer = observer or GameObserver()
        self.choose_promotion = choose_promotion
        self.repo = repository
        self.settings = settings or get_settings()
        self.game: Optional[Game] = None
        self.connection: Optional[PeerConnection] = None
        self.events: Queue[SessionEvent] = Queue()

    # -- Starting a game ---
    def new_local_game(self) -> Game:
        """Both players take turns in this process."""
        self.close_connection()
        game = Game.new_local_game(self.choose_promotion, self.observer)
        self._install(game)
        logger.info("Started a new local game")
        return game

    def listen(self, port: Optional[int] = None) -> PeerListener:
        """First half of hosting: bind the port. Lets the caller learn the actual port before blocking on accept."""
        return PeerListener(self.settings.port if port is None else port)

    def accept(
        self, listener: PeerListener, pick_joiner_color: ColorPicker = random_color
    ) -> Color:
        """Second half of hosting: block until the opponent connected. Returns the color this side plays."""
        connection = listener.accept(pick_joiner_color)
        self._start_networked_game(connection)
        return connection.local_color

    def host(
        self, port: Optional[int] = None, pick_joiner_color: ColorPicker = random_color
    ) -> Color:
        return self.accept(self.listen(port), pick_joiner_color)

    def join(self, address: str, port: Optional[int] = None) -> Color:
        """Connect to a hosting peer. Returns the color this side plays."""
        connection = PeerConnection.join(
            address, self.settings.port if port is None else port
        )
        self._start_networked_game(connection)
        return connection.local_color

    # -- Playing ---
    def select(self, coordinate: Coordinate) -> Optional[AppliedMove]:
        """
        User clicked/typed a square.
        ----

        Only enabled cells take input: the pieces of the side to move (none while the opponent is to move),
        and the destinations of the selected piece. Anything else is ignored.
        A completed move gets sent to the opponent, after which we wait for theirs in the background.
        """
        game = self._require_game()
        if not self._accepts_input(game, coordinate):
            logger.debug("Ignoring selection of %s: cell is not enabled", coordinate)
            return None

        applied = game.select(coordinate)
        if applied is not None and game.mode == GameMode.NETWORKED:
            self._send_to_opponent(applied)
        return applied

    def process_events(self, block: bool = False, timeout: Optional[float] = None) -> int:
        """
        Apply what the background reader received. Returns the number of events handled.

        With `block=True` waits (up to `timeout` seconds, or forever) for the first event.
        """
        handled = 0
        while True:
            try:
                if handled == 0 and block:
                    event = self.events.get(timeout=timeout)
                else:
                    event = self.events.get_nowait()
            except Empty:
                return handled
            self._handle_event(event)
            handled += 1

    # -- Persistence ---
    def save(self, path: Path | str) -> Path:
        return save_game(path, self._require_game(), self.settings.save_extension)

    def load(self, path: Path | str) -> Game:
        """Replaces the current game (a networked game gets disconnected) only if the file could be decoded."""
        game = load_game(path)
        self.close_connection()
        self._install(game)
        return game

    def save_to_repository(self, name: str) -> UUID:
        """Store the game under `name`. A game already stored under that name is overwritten."""
        repo = self._require_repository()
        game = self._require_game()
        model = SavedGameModel(
            name=name,
            state=encode_game(game),
            moves_uci=[move.to_uci() for move in game.moves],
            turn_count=game.turn_count,
            turn_color=game.turn_color,
        )
        game_id = repo.find_by_name(name)
        if game_id is None:
            game_id = repo.create_game(model)
            logger.info("Stored game %r as %s", name, game_id)
        else:
            repo.update_game(game_id, model)
            logger.info("Overwrote stored game %r (%s)", name, game_id)
        return game_id

    def load_from_repository(self, game_id: UUID) -> Game:
        """Like `load`, but the move history comes back as well"""
        repo = self._require_repository()
        model = repo.get_game(game_id)
        if model is None:
            raise RepositoryError(f"Saved game with {game_id=} not found.")
        game = decode_game(model.state)
        game.moves = [Move.from_uci(uci) for uci in model.moves_uci]
        self.close_connection()
        self._install(game)
        logger.info("Loaded stored game %r (%s)", model.name, game_id)
        return game

    def delete_saved_game(self, game_id: UUID) -> None:
        if not self._require_repository().delete_game(game_id):
            raise RepositoryError(f"Saved game with {game_id=} not found.")
        logger.info("Deleted stored game %s", game_id)

    def list_saved_games(self) -> list[SavedGameSummary]:
        return self._require_repository().list_games()

    def close_connection(self) -> None:
        """A read pending in the background fails, and that failure is ignored as we closed it ourselves."""
        if self.connection is not None:
            self.connection.close()
            self.connection = None

    # -- Internal helpers --
    @staticmethod
    def _accepts_input(game: Game, coordinate: Coordinate) -> bool:
        if not game.is_local_turn:
            return False
        if game.selection.is_active and coordinate in game.selection.destinations:
            return True
        return coordinate in game.enabled_cells()

    def _install(self, game: Game) -> None:
        game.observer = self.observer
        game.choose_promotion = self.choose_promotion
        self.game = game
        game.announce()

    def _start_networked_game(self, connection: PeerConnection) -> None:
        self.close_connection()
        self.connection = connection
        game = Game.new_networked_game(
            connection.local_color, self.choose_promotion, self.observer
        )
        self._install(game)
        self.observer.opponent_connected(connection.local_color)
        if not game.is_local_turn:
            self._await_opponent()

    def _send_to_opponent(self, applied: AppliedMove) -> None:
        game = self._require_game()
        connection = self._require_connection()
        try:
            connection.send_move(MoveMessage.from_applied_move(applied))
        except PeerConnectionError as e:
            game.end_unexpectedly(str(e))
            self.close_connection()
            raise

        if applied.king_captured:
            # game over: nothing else will come over this connection
            self.close_connection()
        else:
            self._await_opponent()

    def _await_opponent(self) -> None:
        """Start the (one and only) blocking read in the background"""
        connection = self._require_connection()
        Thread(
            target=self._read_one, args=(connection,), name="peer-reader", daemon=True
        ).start()

    def _read_one(self, connection: PeerConnection) -> None:
        """Runs in the background thread. Must not touch the game."""
        try:
            message = connection.receive_move()
        except GameError as e:
            self.events.put(ConnectionFailed(connection, e))
        else:
            self.events.put(MoveReceived(connection, message))

    def _handle_event(self, event: SessionEvent) -> None:
        if event.connection is not self.connection:
            # left over from a connection we closed ourselves
            return

        game = self._require_game()
        if isinstance(event, ConnectionFailed):
            game.end_unexpectedly(str(event.error))
            self.close_connection()
            return

        try:
            game.apply_remote_move(event.message.to_applied_move())
        except ProtocolError as e:
            game.end_unexpectedly(f"Out of sync with opponent: {e}")
            self.close_connection()
            return

        if not game.running:
            self.close_connection()
        elif not game.is_local_turn:
            self._await_opponent()

    def _require_game(self) -> Game:
        if self.game is None:
            raise GameStateError("No game in progress.")
        return self.game

    def _require_connection(self) -> PeerConnection:
        if self.connection is None:
            raise GameStateError("Not connected to an opponent.")
        return self.connection

    def _require_repository(self) -> SavedGameRepository:
        if self.repo is None:
            raise GameStateError("No repository configured for saved games.")
        return self.repo
