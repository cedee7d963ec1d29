"""
The Game class is the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn:
selecting a piece, moving it, promoting pawns, switching turns and detecting the end of the game.

The UI collaborator is told about every change through a `GameObserver`, and is asked for the piece
a pawn promotes into through a `PromotionChooser`.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Collection, Optional, Self

from src.chess.board import Board
from src.chess.coordinate import Coordinate
from src.chess.moves import Move, is_promotion, possible_destinations
from src.chess.pieces import PROMOTION_OPTIONS, Piece
from src.core.exceptions import (
    GameStateError,
    MissingPieceError,
    PromotionError,
    ProtocolError,
)
from src.core.shared_types import Color, GameMode, PieceKind

logger = logging.getLogger(__name__)

PromotionChooser = Callable[[Color, Coordinate], PieceKind]


def always_queen(color: Color, coordinate: Coordinate) -> PieceKind:
    """Default promotion choice when no UI is attached"""
    return PieceKind.QUEEN


class Phase(Enum):
    AWAITING_SELECTION = auto()
    PIECE_SELECTED = auto()
    GAME_OVER = auto()


class GameObserver:
    """
    Board change notifications (engine -> UI).
    ---

    Every method is a no-op here. A UI subclasses this and overrides what it wants to draw.
    """

    def piece_updated(self, piece: Piece) -> None: ...
    def piece_removed(self, coordinate: Coordinate) -> None: ...
    def piece_moved(self, src: Coordinate, dest: Coordinate) -> None: ...
    def destinations_highlighted(self, coordinates: Collection[Coordinate]) -> None: ...
    def highlights_cleared(self) -> None: ...
    def cells_enabled(self, coordinates: Collection[Coordinate]) -> None: ...
    def game_ended(self, winner: Color) -> None: ...
    def game_ended_unexpectedly(self, reason: str) -> None: ...
    def opponent_connected(self, color: Color) -> None: ...


@dataclass
class Selection:
    """Exists only between selecting a piece and moving it (or selecting another one)"""

    piece: Optional[Piece] = None
    destinations: set[Coordinate] = field(default_factory=set)

    @property
    def is_active(self) -> bool:
        return self.piece is not None

    def clear(self) -> None:
        self.piece = None
        self.destinations = set()


@dataclass(frozen=True)
class AppliedMove:
    """What happened on the board. Exactly the information the peer needs to replay the move."""

    from_square: Coordinate
    to_square: Coordinate
    king_captured: bool = False
    promotion: Optional[PieceKind] = None

    def to_move(self) -> Move:
        return Move(self.from_square, self.to_square, self.promotion)


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    turn_count: int = 1
    turn_color: Color = Color.WHITE
    running: bool = True
    mode: GameMode = GameMode.LOCAL
    local_color: Optional[Color] = None  # only set for networked games
    winner: Optional[Color] = None
    moves: list[Move] = field(default_factory=list)
    selection: Selection = field(default_factory=Selection)
    choose_promotion: PromotionChooser = field(
        default=always_queen, repr=False, compare=False
    )
    observer: GameObserver = field(
        default_factory=GameObserver, repr=False, compare=False
    )

    @classmethod
    def new_local_game(
        cls,
        choose_promotion: PromotionChooser = always_queen,
        observer: Optional[GameObserver] = None,
    ) -> Self:
        """Both players share this process"""
        return cls(
            board=Board.starting_position(),
            choose_promotion=choose_promotion,
            observer=observer or GameObserver(),
        )

    @classmethod
    def new_networked_game(
        cls,
        local_color: Color,
        choose_promotion: PromotionChooser = always_queen,
        observer: Optional[GameObserver] = None,
    ) -> Self:
        """
        Both peers build the same starting state independently. Nothing but the moves is ever exchanged,
        so this has to be deterministic.
        """
        return cls(
            board=Board.starting_position(),
            mode=GameMode.NETWORKED,
            local_color=local_color,
            choose_promotion=choose_promotion,
            observer=observer or GameObserver(),
        )

    @property
    def phase(self) -> Phase:
        if not self.running:
            return Phase.GAME_OVER
        if self.selection.is_active:
            return Phase.PIECE_SELECTED
        return Phase.AWAITING_SELECTION

    @property
    def is_local_turn(self) -> bool:
        """In a local game both sides play here. In a networked game only `local_color` does."""
        if self.mode == GameMode.LOCAL:
            return True
        return self.turn_color == self.local_color

    def enabled_cells(self) -> list[Coordinate]:
        """The cells the UI should accept input on: the pieces of the side to move, if that side plays here."""
        if not self.running or not self.is_local_turn:
            return []
        return self.board.locate_color(self.turn_color)

    def announce(self) -> None:
        """Push the complete state to the observer (new game, loaded game)"""
        for piece in self.board.pieces.values():
            self.observer.piece_updated(piece)
        self.observer.cells_enabled(self.enabled_cells())

    def select(self, coordinate: Coordinate) -> Optional[AppliedMove]:
        """
        The only gameplay entry point for the UI.
        -----

        1. Nothing selected yet? Select the piece on the square (if it has anywhere to go).
        2. Selected piece and the square is one of its destinations? Make the move and switch turns.
        3. Selected piece, but some other square? Drop the selection and try selecting that square instead.

        Returns the applied move in case 2, None otherwise.
        NOTE: it is not checked that the piece belongs to the side to move. The UI only enables those cells.
        """
        if not self.running:
            return None

        if self.selection.is_active:
            if coordinate in self.selection.destinations:
                # for the type checker
                assert self.selection.piece is not None
                src = self.selection.piece.position
                applied = self.apply_move(src, coordinate)
                self.switch_turn()
                return applied

            # reselection
            self._clear_selection()

        self._select_piece(coordinate)
        return None

    def apply_move(
        self, src: Coordinate, dest: Coordinate
    ) -> AppliedMove:
        """
        Update the board with the move
        -----

        * Capturing a king ends the game right away. The board is NOT updated in that case.
        * A pawn heading for the far row asks for its promotion first. An invalid choice raises PromotionError
          before anything on the board changed.
        * Otherwise move the piece, remove whatever was captured, and promote the pawn.
        """
        moving_piece = self.board.piece(src)
        if moving_piece is None:
            raise MissingPieceError(f"No piece at {src} to move to {dest}.")

        if self.board.is_king(dest):
            self._end_game(winner=moving_piece.color)
            self.moves.append(Move(src, dest))
            return AppliedMove(src, dest, king_captured=True)

        promotion = None
        if is_promotion(moving_piece, dest):
            promotion = self._request_promotion(moving_piece.color, dest)

        captured = self.board.move_piece(src, dest)
        self.observer.piece_moved(src, dest)
        if captured is not None:
            logger.debug("Turn %d: %s captured %s", self.turn_count, moving_piece, captured)
        else:
            logger.debug("Turn %d: %s moved from %s", self.turn_count, moving_piece, src)

        if promotion is not None:
            self._promote(moving_piece, promotion)

        applied = AppliedMove(src, dest, promotion=promotion)
        self.moves.append(applied.to_move())
        return applied

    def switch_turn(self) -> None:
        """
        Any completed move ends the turn. The turn count goes up once Black has moved.
        """
        self._clear_selection()
        if not self.running:
            return

        if self.turn_color == Color.WHITE:
            self.turn_color = Color.BLACK
        else:
            self.turn_color = Color.WHITE
            self.turn_count += 1

        self.observer.cells_enabled(self.enabled_cells())

    def apply_remote_move(self, move: AppliedMove) -> None:
        """
        Replay a move the opponent made on their own board.
        -----

        * A captured king ends the game with the opponent (the side to move) as the winner.
        * Otherwise take the piece off `from_square` and whatever stood on `to_square`, and put the piece
          (or the piece it promoted into) on `to_square`. Then switch turns.
        """
        if not self.running:
            raise GameStateError("Game is not running. Cannot apply the opponent's move.")

        if move.king_captured:
            self.moves.append(move.to_move())
            self._end_game(winner=self.turn_color)
            return

        moving_piece = self.board.piece(move.from_square)
        if moving_piece is None:
            raise ProtocolError(
                f"Opponent moved from {move.from_square}, but there is no piece there."
            )
        if move.promotion is not None and move.promotion not in PROMOTION_OPTIONS:
            raise ProtocolError(f"Cannot promote into a {move.promotion}.")

        self.board.remove_piece(move.from_square)
        self.board.remove_piece(move.to_square)
        moving_piece.position = move.to_square
        moving_piece.has_moved = True
        if move.promotion is not None:
            moving_piece = moving_piece.promoted_to(move.promotion)
        self.board.place_piece(moving_piece)

        self.observer.piece_moved(move.from_square, move.to_square)
        if move.promotion is not None:
            self.observer.piece_updated(moving_piece)
        logger.debug("Turn %d: opponent played %s", self.turn_count, move.to_move().to_uci())

        self.moves.append(move.to_move())
        self.switch_turn()

    def end_unexpectedly(self, reason: str) -> None:
        """Connection lost, desync, ... The game stops without a winner."""
        if not self.running:
            return
        self.running = False
        self._clear_selection()
        logger.warning("Game ended unexpectedly: %s", reason)
        self.observer.game_ended_unexpectedly(reason)

    # -- PRIVATE HELPERS ---
    def _select_piece(self, coordinate: Coordinate) -> None:
        """Silently ignore empty squares and pieces without any destination"""
        piece = self.board.piece(coordinate)
        if piece is None:
            return

        destinations = possible_destinations(piece, self.board)
        if not destinations:
            return

        self.selection.piece = piece
        self.selection.destinations = destinations
        self.observer.destinations_highlighted(destinations)

    def _clear_selection(self) -> None:
        if self.selection.is_active:
            self.observer.highlights_cleared()
        self.selection.clear()

    def _end_game(self, winner: Color) -> None:
        self.running = False
        self.winner = winner
        logger.info("Game over after %d turn(s): %s wins", self.turn_count, winner)
        self.observer.game_ended(winner)

    # -- PROMOTION RULE HELPERS ---
    def _request_promotion(self, color: Color, dest: Coordinate) -> PieceKind:
        """Blocks until the UI made its choice"""
        choice = self.choose_promotion(color, dest)
        if choice not in PROMOTION_OPTIONS:
            raise PromotionError(
                f"Cannot promote into a {choice}. Pick one from {', '.join(PROMOTION_OPTIONS)}."
            )
        return choice

    def _promote(self, pawn: Piece, kind: PieceKind) -> None:
        """Replace the pawn by a new piece of the chosen kind (same color and id)"""
        promoted = pawn.promoted_to(kind)
        self.board.place_piece(promoted)
        self.observer.piece_updated(promoted)
