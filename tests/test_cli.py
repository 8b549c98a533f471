"""Tests for the console client."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from battleship_cli import cli
from battleship_cli.config import GameSettings, load_game_settings
from battleship_cli.engine.board import Board
from battleship_cli.engine.coordinates import Coordinate, format_coordinate, iter_board
from battleship_cli.engine.game import BattleshipGame, GamePhase
from battleship_cli.engine.ship import Direction, ShipType


def _scripted_input(monkeypatch: pytest.MonkeyPatch, **answers) -> None:
    streams = {prefix: iter(values) for prefix, values in answers.items()}

    def fake_input(prompt: str) -> str:
        for prefix, stream in streams.items():
            if prompt.startswith(prefix):
                return next(stream)
        raise AssertionError(f"unexpected prompt: {prompt}")

    monkeypatch.setattr("builtins.input", fake_input)


def test_format_board_ascii() -> None:
    board = Board()
    board.place_ship(ShipType.DESTROYER, Coordinate(0, 0), Direction.RIGHT)
    board.attack(Coordinate(0, 0))
    board.attack(Coordinate(2, 2))

    own = cli._format_board(board, show_ships=True).splitlines()
    assert own[0] == "    A B C D E F G H I J"
    assert own[1] == " 1 |X S . . . . . . . ."
    assert own[3] == " 3 |. . o . . . . . . ."
    assert own[10].startswith("10 |")

    enemy = cli._format_board(board, show_ships=False).splitlines()
    assert enemy[1] == " 1 |X . . . . . . . . ."


def test_format_board_emoji() -> None:
    board = Board(size=12)
    board.place_ship(ShipType.DESTROYER, Coordinate(0, 0), Direction.DOWN)
    rendered = cli._format_board(board, show_ships=True, emoji=True)
    assert "🚢" in rendered
    assert "🌊" in rendered
    assert len(rendered.splitlines()) == 13


def test_global_commands(capsys: pytest.CaptureFixture[str]) -> None:
    game = BattleshipGame(GameSettings(rng_seed=1))
    assert cli._command_center("help", game)
    assert "How to play" in capsys.readouterr().out
    assert cli._command_center("  Show   Score ", game)
    assert "CPU ships remaining: 5" in capsys.readouterr().out
    assert not cli._command_center("B7", game)
    for command in ("q", "QUIT"):
        with pytest.raises(SystemExit):
            cli._command_center(command, game)


def test_scripted_game_runs_to_exit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    game = BattleshipGame(GameSettings(rng_seed=5, emoji_display=False))
    _scripted_input(
        monkeypatch,
        **{
            "Select an option": ["1", "3"],
            "Place a ship": ["show score", "destroyer a1 right", "destroyer b2 down", "auto"],
            "Take a guess": [format_coordinate(coord) for coord in iter_board(game.board_size)],
        },
    )

    with pytest.raises(SystemExit):
        cli.main_menu(game)

    out = capsys.readouterr().out
    assert "CPU ships remaining: 5" in out
    assert "Placed your Destroyer at A1 facing right." in out
    assert "already been placed" in out
    assert "coin toss" in out
    assert "Play again?" in out
    assert game.phase is GamePhase.GAME_OVER


def test_settings_menu_updates_session(monkeypatch: pytest.MonkeyPatch) -> None:
    game = BattleshipGame(GameSettings(rng_seed=2))
    _scripted_input(
        monkeypatch,
        **{"Select an option": ["3", "2", "2", "3", "4", "1", "2", "4", "4"]},
    )

    with pytest.raises(SystemExit):
        cli.main_menu(game)

    assert game.settings.board_size == 12
    assert game.settings.difficulty == 0
    assert game.settings.emoji_display is False
    assert game.human.board.size == 12
    assert game.ai.size == 12


def test_settings_from_args(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("BATTLESHIP_BOARD_SIZE", "BATTLESHIP_DIFFICULTY", "BATTLESHIP_EMOJI", "BATTLESHIP_SEED"):
        monkeypatch.delenv(name, raising=False)
    load_game_settings.cache_clear()

    args = cli.build_parser().parse_args(
        ["--board-size", "12", "--difficulty", "1", "--no-emoji", "--seed", "3"]
    )
    settings = cli.settings_from_args(args)
    assert settings.board_size == 12
    assert settings.difficulty == 1
    assert settings.emoji_display is False
    assert settings.rng_seed == 3

    defaults = cli.settings_from_args(cli.build_parser().parse_args([]))
    assert defaults.board_size == 10
    assert defaults.emoji_display is True
    load_game_settings.cache_clear()


def test_main_exits_cleanly_on_eof(monkeypatch: pytest.MonkeyPatch) -> None:
    shutdown = MagicMock()
    monkeypatch.setattr(cli, "configure_console_logging", MagicMock())
    monkeypatch.setattr(cli, "init_telemetry", MagicMock())
    monkeypatch.setattr(cli, "shutdown_telemetry", shutdown)

    def fake_menu(game, delay=0.0):
        assert game.settings.board_size == 15
        assert delay == 0.0
        raise EOFError

    monkeypatch.setattr(cli, "main_menu", fake_menu)
    cli.main(["--board-size", "15", "--delay", "0"])
    shutdown.assert_called_once()
