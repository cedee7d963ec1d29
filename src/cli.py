"""Terminal front-end for playing chess, locally or against a peer.

Usage:
    peer-chess local                      # both players at this terminal
    peer-chess host [--port 5000]         # wait for an opponent
    peer-chess join HOST [--port 5000]    # connect to a waiting opponent

In-game commands:
    e2          select the piece on e2, or move the selected piece to e2
    save PATH   save the game (.jcg is appended if missing)
    load PATH   load a saved game (always continues as a local game)
    store NAME  store the game in the saved games database (overwrites a game of the same name)
    saved       list the games in the database
    restore ID  continue a game from the database (as a local game)
    delete ID   remove a game from the database
    board       print the board again
    quit
"""

import argparse
import sys
from contextlib import contextmanager
from typing import Collection, Optional

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
from src.chess.game import GameObserver
from src.core.config import get_settings
from src.core.exceptions import GameError
from src.core.logging_config import configure_logging
from src.core.shared_types import Color, GameMode, PieceKind
from src.db.database import create_db_engine, get_db
from src.db.sql_repository import SQLSavedGameRepository
from src.services.chess_service import ChessService


class TerminalObserver(GameObserver):
    """Prints the notifications the engine sends that matter at a terminal."""

    def destinations_highlighted(self, coordinates: Collection[Coordinate]) -> None:
        squares = ", ".join(sorted(c.to_algebraic() for c in coordinates))
        print(f"Possible destinations: {squares}")

    def game_ended(self, winner: Color) -> None:
        print(f"\nKing captured. {winner.capitalize()} wins!")

    def game_ended_unexpectedly(self, reason: str) -> None:
        print(f"\nGame ended unexpectedly: {reason}")

    def opponent_connected(self, color: Color) -> None:
        print(f"Opponent connected. You play {color.capitalize()}.")


def prompt_promotion(color: Color, coordinate: Coordinate) -> PieceKind:
    """Blocks until the player picked a valid piece"""
    while True:
        answer = input(
            f"Promote the {color} pawn at {coordinate} to (q)ueen, (r)ook, (b)ishop or k(n)ight: "
        )
        try:
            return PromotionRequest(choice=answer).choice
        except (GameError, ValidationError) as e:
            print(e)


def display(service: ChessService) -> None:
    game = service.game
    if game is None:
        return
    print()
    print(game.board.render())
    if game.running:
        print(f"Turn {game.turn_count}: {game.turn_color.capitalize()} to move")


def handle_command(service: ChessService, line: str) -> bool:
    """Returns False when the player wants to quit"""
    command, _, argument = line.strip().partition(" ")
    command = command.lower()
    if command in ("quit", "exit", "q"):
        return False
    if command == "board":
        display(service)
    elif command == "save":
        path = service.save(SaveFileRequest(path=argument).path)
        print(f"Successfully saved game to {path}.")
    elif command == "load":
        service.load(SaveFileRequest(path=argument).path)
        print("Successfully loaded game.")
        display(service)
    elif command == "store":
        game_id = service.save_to_repository(StoreRequest(name=argument).name)
        print(f"Stored game as {game_id}.")
    elif command == "saved":
        summaries = service.list_saved_games()
        if not summaries:
            print("No stored games.")
        for summary in summaries:
            print(summary.describe())
    elif command == "restore":
        service.load_from_repository(SavedGameRequest(game_id=argument.strip()).game_id)
        print("Successfully restored game.")
        display(service)
    elif command == "delete":
        service.delete_saved_game(SavedGameRequest(game_id=argument.strip()).game_id)
        print("Deleted stored game.")
    elif command:
        applied = service.select(SelectRequest(square=command).coordinate)
        if applied is not None:
            display(service)
    return True


def play(service: ChessService) -> None:
    """Main loop: read commands while it is our turn, wait for the opponent otherwise."""
    display(service)
    while service.game is not None and service.game.running:
        game = service.game
        if game.mode == GameMode.NETWORKED and not game.is_local_turn:
            print("Waiting for opponent...")
            service.process_events(block=True)
            display(service)
            continue

        try:
            line = input("> ")
        except EOFError:
            break
        try:
            if not handle_command(service, line):
                break
        except (GameError, ValidationError) as e:
            print(e)
    service.close_connection()


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Two player chess, locally or peer-to-peer")
    parser.add_argument("--log-level", default=settings.log_level)
    subparsers = parser.add_subparsers(dest="mode", required=True)

    subparsers.add_parser("local", help="Both players at this terminal")

    host_parser = subparsers.add_parser("host", help="Wait for an opponent to join")
    host_parser.add_argument("--port", type=int, default=settings.port)

    join_parser = subparsers.add_parser("join", help="Join a hosting opponent")
    join_parser.add_argument("address")
    join_parser.add_argument("--port", type=int, default=settings.port)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    with contextmanager(get_db)(engine) as db:
        service = ChessService(
            observer=TerminalObserver(),
            choose_promotion=prompt_promotion,
            repository=SQLSavedGameRepository(db),
            settings=settings,
        )
        return run(service, args)


def run(service: ChessService, args: argparse.Namespace) -> int:
    try:
        if args.mode == "local":
            service.new_local_game()
        elif args.mode == "host":
            request = HostRequest(port=args.port)
            print(f"Waiting for an opponent on port {request.port}...")
            service.host(request.port)
        else:
            request = JoinRequest(address=args.address, port=args.port)
            service.join(request.address, request.port)
    except GameError as e:
        print(f"Could not start the game: {e}", file=sys.stderr)
        return 1

    play(service)
    return 0


if __name__ == "__main__":
    sys.exit(main())
