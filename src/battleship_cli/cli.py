"""Command-line driver for playing Battleship against the CPU."""

from __future__ import annotations

import argparse
import time
from typing import Sequence

from battleship_cli.ai.targeting import Difficulty
from battleship_cli.config import GameSettings, load_game_settings
from battleship_cli.engine.board import Board, CellState
from battleship_cli.engine.coordinates import BOARD_SIZES, Coordinate
from battleship_cli.engine.errors import GameStateError
from battleship_cli.engine.game import BattleshipGame, GamePhase
from battleship_cli.engine.instrumented_game import InstrumentedBattleshipGame
from battleship_cli.engine.results import Side
from battleship_cli.telemetry import configure_console_logging, init_telemetry, shutdown_telemetry

INSTRUCTIONS = """
  How to play:
    1. Place your five ships: carrier (5), battleship (4), cruiser (3),
       submarine (3) and destroyer (2). Type the ship, a starting coordinate
       and a direction, e.g. "cruiser b3 right", or "auto" to place the rest
       randomly.
    2. A coin toss decides who fires first.
    3. Take turns firing at the enemy grid by typing a coordinate, e.g. "B7".
    4. Sink all five enemy ships before the CPU sinks yours.

  Commands available at any prompt:
    help        show these instructions
    show score  show how many ships each side has left
    q, quit     leave the game
"""

ASCII_SYMBOLS = {"water": ".", "ship": "S", "hit": "X", "miss": "o"}
EMOJI_SYMBOLS = {"water": "🌊", "ship": "🚢", "hit": "💥", "miss": "⚪"}

DIFFICULTY_CHOICES = [Difficulty.HARD, Difficulty.MEDIUM, Difficulty.EASY, Difficulty.SUPER_EASY]


def _command_center(raw: str, game: BattleshipGame) -> bool:
    """Handle global commands; return True when `raw` was one of them."""
    command = " ".join(raw.strip().lower().split())
    if command in {"q", "quit"}:
        raise SystemExit("\nGoodbye...\n")
    if command == "help":
        print(INSTRUCTIONS)
        return True
    if command == "show score":
        print(f"  {game.status}")
        return True
    return False


def _prompt(message: str, game: BattleshipGame) -> str:
    while True:
        raw = input(message)
        if not _command_center(raw, game):
            return raw.strip()


def _choose(message: str, options: Sequence[str], game: BattleshipGame, default: int = 0) -> int:
    print(message)
    for index, option in enumerate(options, start=1):
        marker = " (default)" if index - 1 == default else ""
        print(f"  {index}. {option}{marker}")
    while True:
        raw = _prompt("Select an option: ", game)
        if not raw:
            return default
        if raw.isdigit() and 1 <= int(raw) <= len(options):
            return int(raw) - 1
        print(f"Please enter a number between 1 and {len(options)}.")


def _symbol(board: Board, coord: Coordinate, show_ships: bool, symbols: dict[str, str]) -> str:
    state = board.get_cell_state(coord)
    if state is CellState.HIT:
        return symbols["hit"]
    if state is CellState.MISS:
        return symbols["miss"]
    if state is CellState.OCCUPIED and show_ships:
        return symbols["ship"]
    return symbols["water"]


def _format_board(board: Board, show_ships: bool, emoji: bool = False) -> str:
    symbols = EMOJI_SYMBOLS if emoji else ASCII_SYMBOLS
    width = 2 if emoji else 1
    header = "    " + " ".join(f"{chr(ord('A') + col):<{width}}" for col in range(board.size))
    rows = [header]
    for row in range(board.size):
        cells = " ".join(
            f"{_symbol(board, Coordinate(col, row), show_ships, symbols):<{width}}"
            for col in range(board.size)
        )
        rows.append(f"{row + 1:>2} |{cells}")
    return "\n".join(rows)


def _show_boards(game: BattleshipGame) -> None:
    emoji = game.settings.emoji_display
    print("\nEnemy Waters:")
    print(_format_board(game.cpu.board, show_ships=False, emoji=emoji))
    print("\nYour Fleet:")
    print(_format_board(game.human.board, show_ships=True, emoji=emoji))


def _place_ships(game: BattleshipGame) -> None:
    while game.human.pending_ships:
        print("\nYour board:")
        print(_format_board(game.human.board, show_ships=True, emoji=game.settings.emoji_display))
        remaining = ", ".join(f"{ship.label} ({ship.length})" for ship in game.human.pending_ships)
        print(f"Ships remaining: {remaining}")
        raw = _prompt(
            f"Place a ship using A1-{game.last_coordinate} and up/down/left/right "
            "(e.g. cruiser b3 right), or 'auto': ",
            game,
        )
        if raw.lower() == "auto":
            game.auto_place()
            print(game.message)
            continue
        parts = raw.split()
        if len(parts) != 3:
            print("Please provide a ship, a starting coordinate and a direction, e.g. battleship B5 right.")
            continue
        result = game.place_ship(*parts)
        print(result.message)


def _take_human_turn(game: BattleshipGame) -> None:
    _show_boards(game)
    while True:
        raw = _prompt(f"Take a guess! Enter coordinates A1-{game.last_coordinate} (e.g. B7): ", game)
        result = game.attack(raw)
        print(result.message)
        if result.ok:
            return


def _take_cpu_turn(game: BattleshipGame, delay: float) -> None:
    print("\nThe CPU is taking aim...")
    if delay > 0:
        time.sleep(delay)
    result = game.attack()
    print(result.message)


def play_game(game: BattleshipGame, delay: float = 0.0) -> bool:
    """Run one game from ship placement to the end; return True to play again."""
    _place_ships(game)
    game.start_combat()
    _show_boards(game)
    print(f"\n{game.message}")

    while game.phase is GamePhase.COMBAT:
        if game.current_turn is Side.HUMAN:
            _take_human_turn(game)
        else:
            _take_cpu_turn(game, delay)

    _show_boards(game)
    choice = _choose(f"\n{game.message}", ["Yes!", "Main Menu", "Exit"], game)
    if choice == 2:
        raise SystemExit("\nThanks for playing Battleship CLI! Goodbye!\n")
    game.reset()
    return choice == 0


def _settings_menu(game: BattleshipGame) -> None:
    while True:
        settings = game.settings
        options = [
            f"Emoji Board ({'On' if settings.emoji_display else 'Off'})",
            f"Board Size ({settings.board_size}x{settings.board_size})",
            f"Difficulty ({settings.difficulty_level.label})",
            "Main Menu",
        ]
        choice = _choose("\nSettings:", options, game, default=3)
        if choice == 0:
            emoji = _choose("Emoji Board:", ["On", "Off"], game)
            game.configure(emoji_display=emoji == 0)
        elif choice == 1:
            size = _choose("Board Size:", [f"{value}x{value}" for value in BOARD_SIZES], game)
            game.configure(board_size=BOARD_SIZES[size])
        elif choice == 2:
            labels = [level.label + (" (default)" if level is Difficulty.HARD else "") for level in DIFFICULTY_CHOICES]
            level = _choose("Difficulty:", labels, game)
            game.configure(difficulty=int(DIFFICULTY_CHOICES[level]))
        else:
            return


def main_menu(game: BattleshipGame, delay: float = 0.0) -> None:
    print("Welcome to Battleship CLI!")
    print("(If your terminal does not support emoji, turn the emoji board off in Settings.)")
    while True:
        choice = _choose(
            "\nBattleship CLI Menu:", ["Let's Play!", "See Instructions", "Settings", "Exit"], game
        )
        if choice == 0:
            try:
                while play_game(game, delay):
                    print("Ready? Here we go again...")
            except GameStateError as exc:
                print(exc.message)
        elif choice == 1:
            print(INSTRUCTIONS)
        elif choice == 2:
            _settings_menu(game)
        else:
            raise SystemExit("\nGoodbye...\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play Battleship against the CPU.")
    parser.add_argument("--seed", type=int, default=None, help="Optional RNG seed for reproducibility.")
    parser.add_argument("--board-size", type=int, choices=BOARD_SIZES, default=None)
    parser.add_argument(
        "--difficulty",
        type=int,
        choices=[int(level) for level in Difficulty],
        default=None,
        help="0 super easy, 1 easy, 2 medium, 3 hard (default).",
    )
    parser.add_argument("--no-emoji", action="store_true", help="Render boards with ASCII symbols.")
    parser.add_argument(
        "--delay", type=float, default=0.5, help="Seconds the CPU 'thinks' before firing."
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine events to stderr.")
    return parser


def settings_from_args(args: argparse.Namespace) -> GameSettings:
    base = load_game_settings()
    return base.model_copy(
        update={
            key: value
            for key, value in {
                "board_size": args.board_size,
                "difficulty": args.difficulty,
                "emoji_display": False if args.no_emoji else None,
                "rng_seed": args.seed,
            }.items()
            if value is not None
        }
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_console_logging(args.verbose)
    init_telemetry()
    game = InstrumentedBattleshipGame(settings_from_args(args))
    try:
        main_menu(game, delay=args.delay)
    except (KeyboardInterrupt, EOFError):
        print("\nGoodbye...")
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    main()
