"""Battleship game with game-level telemetry hooks."""

from __future__ import annotations

import time
from typing import Any

from battleship_cli.engine.coordinates import Coordinate
from battleship_cli.engine.game import BattleshipGame, GamePhase
from battleship_cli.engine.results import AttackResult, Side
from battleship_cli.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedBattleshipGame(BattleshipGame):
    """Wraps BattleshipGame so each match is one span with per-shot metrics."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._logger = get_logger("battleship_cli.engine")
        self._tracer = get_tracer("battleship_cli.engine.instrumented_game")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None
        self._game_id_counter = 0
        super().__init__(*args, **kwargs)

    def start_combat(self) -> Side:
        self._start_game_span()
        with self._tracer.start_as_current_span("battleship_cli.engine.start_combat") as span:
            first = super().start_combat()
            span.set_attribute("first_turn", first.value)
            span.set_attribute("board_size", self.board_size)
            span.set_attribute("difficulty", int(self.settings.difficulty_level))
            record_game_metric(
                "battleship_game_started_total",
                1,
                {"first_turn": first.value, "board_size": self.board_size},
            )
            self._logger.info("Combat started; %s fires first", first.value)
            return first

    def attack(self, coordinate: Coordinate | str | None = None) -> AttackResult:
        with self._tracer.start_as_current_span("battleship_cli.engine.attack") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("shooter", self.current_turn.value)
            result = super().attack(coordinate)

            if not result.ok:
                record_game_metric(
                    "battleship_game_rejected_attacks_total",
                    1,
                    {"shooter": result.shooter.value, "reason": result.error.value if result.error else ""},
                )
                span.set_attribute("error", True)
                self._logger.warning("Rejected attack from %s: %s", result.shooter.value, result.message)
                return result

            outcome = result.outcome.value if result.outcome else "unknown"
            span.set_attribute("shot_outcome", outcome)
            span.set_attribute("sunk", result.sunk.name if result.sunk else "")
            record_game_metric("battleship_shots_total", 1, {"shooter": result.shooter.value})
            record_game_metric(
                "battleship_shots_by_result_total",
                1,
                {"shooter": result.shooter.value, "result": outcome},
            )
            self._logger.info(
                "attack shooter=%s coord=%s outcome=%s",
                result.shooter.value,
                result.coordinate,
                outcome,
            )

            if self.phase is GamePhase.GAME_OVER and self.winner:
                span.set_attribute("winner", self.winner.value)
                self._finish_game()
            return result

    def reset(self) -> None:
        self._close_game_span()
        super().reset()

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_id_counter += 1
        self._game_span_cm = self._tracer.start_as_current_span("battleship_cli.engine.game")
        self._game_span = self._game_span_cm.__enter__()
        self._game_span.set_attribute("game.id", self._game_id_counter)

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        total_turns = sum(len(player.shots_taken) for player in self.players.values())
        winner = self.winner.value if self.winner else "unknown"
        difficulty = int(self.settings.difficulty_level)

        record_game_metric("battleship_game_completed_total", 1, {"winner": winner, "difficulty": difficulty})
        record_game_metric("battleship_game_duration_seconds", duration, {"winner": winner})

        with self._tracer.start_as_current_span("battleship_cli.engine.game_complete") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("winner", winner)
            span.set_attribute("turns", total_turns)
            span.set_attribute("duration_ms", duration * 1000)

        if self._game_span is not None:
            self._game_span.set_attribute("winner", winner)
            self._game_span.set_attribute("turns", total_turns)

        self._logger.info("Game finished. Winner=%s turns=%d duration_s=%.3f", winner, total_turns, duration)
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
