"""Human-versus-CPU Battleship game controller."""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from battleship_cli.ai.targeting import TargetingAI
from battleship_cli.config import GameSettings
from battleship_cli.telemetry import get_meter, get_tracer

from .board import Board, CellState, ShotOutcome
from .coordinates import Coordinate, last_coordinate, parse_coordinate
from .errors import BattleshipError, ErrorKind, GameStateError
from .results import AttackResult, PlacementResult, ScoreBoard, Side
from .ship import FLEET, Direction, ShipType, parse_direction, parse_ship_type

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_cli.engine.game")
meter = get_meter("battleship_cli.engine.game")

ATTACK_COUNTER = meter.create_counter(
    "battleship_engine_attacks",
    unit="1",
    description="Attacks resolved by BattleshipGame",
)


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    COMBAT = "combat"
    GAME_OVER = "game_over"


@dataclass
class Player:
    """One side of the game: the board it defends and the shots it has fired."""

    side: Side
    board: Board
    shots_taken: set[Coordinate] = field(default_factory=set)
    pending_ships: deque[ShipType] = field(default_factory=lambda: deque(FLEET))


@dataclass(frozen=True)
class BoardSnapshot:
    """Read-only view of a board for rendering."""

    size: int
    ships: dict[ShipType, tuple[Coordinate, ...]]
    sunk: frozenset[ShipType]
    shots: dict[Coordinate, CellState]


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the current game."""

    phase: GamePhase
    current_turn: Side
    winner: Side | None
    message: str
    boards: dict[Side, BoardSnapshot]


class BattleshipGame:
    """Owns both boards and the CPU's targeting state for one session."""

    def __init__(self, settings: GameSettings | None = None) -> None:
        self.settings = settings or GameSettings()
        self._rng = random.Random(self.settings.rng_seed)
        self._new_game()

    def _new_game(self) -> None:
        size = self.settings.board_size
        self.players: dict[Side, Player] = {
            side: Player(side, Board(size=size, owner=side.value)) for side in Side
        }
        self.ai = TargetingAI(size, self.settings.difficulty_level, rng=self._rng)
        self.phase = GamePhase.SETUP
        self.current_turn = Side.HUMAN
        self.winner: Side | None = None
        self._message = f"Place your ships using coordinates A1-{self.last_coordinate}."

        cpu = self.players[Side.CPU]
        cpu.board.random_placement(self._rng)
        cpu.pending_ships.clear()
        logger.info(
            "game_created",
            extra={"board_size": size, "difficulty": int(self.settings.difficulty_level)},
        )

    @property
    def board_size(self) -> int:
        return self.settings.board_size

    @property
    def last_coordinate(self) -> str:
        return last_coordinate(self.board_size)

    @property
    def human(self) -> Player:
        return self.players[Side.HUMAN]

    @property
    def cpu(self) -> Player:
        return self.players[Side.CPU]

    @property
    def boards(self) -> dict[Side, Board]:
        return {side: player.board for side, player in self.players.items()}

    @property
    def game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    @property
    def message(self) -> str:
        return self._message

    @property
    def status(self) -> ScoreBoard:
        return ScoreBoard(
            human_remaining=self.human.board.remaining_ships(),
            cpu_remaining=self.cpu.board.remaining_ships(),
        )

    def configure(
        self,
        board_size: int | None = None,
        difficulty: int | None = None,
        emoji_display: bool | None = None,
    ) -> GameSettings:
        """Change session settings between games; a new size or difficulty starts a fresh setup."""
        if self.phase is GamePhase.COMBAT:
            raise GameStateError(ErrorKind.WRONG_PHASE, "Settings cannot change during combat.")
        updates = {
            "board_size": board_size,
            "difficulty": difficulty,
            "emoji_display": emoji_display,
        }
        merged = {**self.settings.model_dump(), **{k: v for k, v in updates.items() if v is not None}}
        new_settings = GameSettings(**merged)
        rebuild = (
            new_settings.board_size != self.settings.board_size
            or new_settings.difficulty != self.settings.difficulty
        )
        self.settings = new_settings
        logger.info("game_configured", extra={"settings": new_settings.model_dump(), "rebuild": rebuild})
        if rebuild:
            self._new_game()
        return new_settings

    def place_ship(
        self,
        ship_type: ShipType | str,
        coordinate: Coordinate | str,
        direction: Direction | str,
    ) -> PlacementResult:
        """Place one of the human's ships, returning a result instead of raising."""
        self._require_phase(GamePhase.SETUP)
        resolved_type: ShipType | None = None
        try:
            resolved_type = ship_type if isinstance(ship_type, ShipType) else parse_ship_type(ship_type)
            origin = (
                coordinate
                if isinstance(coordinate, Coordinate)
                else parse_coordinate(coordinate, self.board_size)
            )
            heading = direction if isinstance(direction, Direction) else parse_direction(direction)
            ship = self.human.board.place_ship(resolved_type, origin, heading)
        except BattleshipError as exc:
            return PlacementResult.failure(resolved_type, exc)

        self.human.pending_ships.remove(ship.ship_type)
        if self.human.pending_ships:
            self._message = f"Placed your {ship.ship_type.label} at {origin} facing {heading.value}."
        else:
            self._message = "All ships placed. Ready for battle!"
        return PlacementResult(ship_type=ship.ship_type, message=self._message)

    def auto_place(self) -> None:
        """Randomly place whichever human ships are still pending."""
        self._require_phase(GamePhase.SETUP)
        self.human.board.random_placement(self._rng)
        self.human.pending_ships.clear()
        self._message = "Your ships have been positioned automatically."

    def start_combat(self) -> Side:
        """Toss a coin for the first turn; requires the human fleet to be complete."""
        self._require_phase(GamePhase.SETUP)
        if not self.human.board.is_ready():
            missing = ", ".join(ship_type.label for ship_type in self.human.board.unplaced_ship_types())
            raise GameStateError(
                ErrorKind.FLEET_INCOMPLETE, f"Place all of your ships first. Still to place: {missing}."
            )
        self.current_turn = Side.HUMAN if self._rng.random() < 0.5 else Side.CPU
        self.phase = GamePhase.COMBAT
        if self.current_turn is Side.HUMAN:
            self._message = "You won the coin toss and fire first."
        else:
            self._message = "The CPU won the coin toss and fires first."
        logger.info("combat_started", extra={"first_turn": self.current_turn.value})
        return self.current_turn

    def attack(self, coordinate: Coordinate | str | None = None) -> AttackResult:
        """Resolve the current side's shot.

        On the human's turn `coordinate` is required and targets the CPU board;
        on the CPU's turn it is ignored and the targeting AI picks the cell.
        """
        self._require_phase(GamePhase.COMBAT)
        shooter = self.current_turn
        with tracer.start_as_current_span("game.attack") as span:
            span.set_attribute("shooter", shooter.value)
            if shooter is Side.HUMAN:
                target = self._human_target(coordinate)
                if isinstance(target, AttackResult):
                    span.set_attribute("error", target.error.value if target.error else "")
                    return target
            else:
                target = self.ai.choose()

            attacker = self.players[shooter]
            defender = self.players[shooter.opponent()]
            outcome, ship = defender.board.attack(target)
            if outcome is ShotOutcome.ALREADY_TRIED:
                return AttackResult(
                    shooter,
                    target,
                    outcome,
                    error=ErrorKind.ALREADY_TRIED,
                    message=f"{target} has already been fired at.",
                )

            attacker.shots_taken.add(target)
            if shooter is Side.CPU:
                self.ai.record(target, outcome)

            sunk = ship.ship_type if outcome is ShotOutcome.SUNK and ship else None
            self._message = self._describe(shooter, target, outcome, sunk)
            span.set_attribute("col", target.col)
            span.set_attribute("row", target.row)
            span.set_attribute("outcome", outcome.value)
            ATTACK_COUNTER.add(1, attributes={"outcome": outcome.value, "shooter": shooter.value})

            if defender.board.is_defeated():
                self.phase = GamePhase.GAME_OVER
                self.winner = shooter
                self._message += " " + self._victory_text(shooter)
                span.set_attribute("game.winner", shooter.value)
                logger.info(
                    "game_finished",
                    extra={"winner": shooter.value, "shots": len(attacker.shots_taken)},
                )
            else:
                self.current_turn = shooter.opponent()

            return AttackResult(shooter, target, outcome, sunk=sunk, message=self._message)

    def reset(self) -> None:
        """Discard both boards and the AI state, keeping the session settings."""
        logger.info("game_reset", extra={"previous_phase": self.phase.value})
        self._new_game()

    def get_state(self) -> GameState:
        """Return an immutable view of the current match."""
        boards = {
            side: BoardSnapshot(
                size=board.size,
                ships={ship.ship_type: tuple(ship.cells) for ship in board.ships},
                sunk=frozenset(ship.ship_type for ship in board.ships if ship.is_sunk()),
                shots=dict(board.shots),
            )
            for side, board in self.boards.items()
        }
        return GameState(
            phase=self.phase,
            current_turn=self.current_turn,
            winner=self.winner,
            message=self._message,
            boards=boards,
        )

    def _human_target(self, coordinate: Coordinate | str | None) -> Coordinate | AttackResult:
        if coordinate is None:
            return AttackResult(
                Side.HUMAN,
                error=ErrorKind.INVALID_FORMAT,
                message=f"Enter coordinates A1-{self.last_coordinate}.",
            )
        if isinstance(coordinate, Coordinate):
            target = coordinate
            if not self.cpu.board.is_valid_coordinate(target):
                return AttackResult(
                    Side.HUMAN,
                    error=ErrorKind.OUT_OF_BOUNDS,
                    message=f"{target} is off the board. Use coordinates A1-{self.last_coordinate}.",
                )
        else:
            try:
                target = parse_coordinate(coordinate, self.board_size)
            except BattleshipError as exc:
                return AttackResult(Side.HUMAN, error=exc.kind, message=exc.message)
        if target in self.human.shots_taken:
            return AttackResult(
                Side.HUMAN,
                coordinate=target,
                outcome=ShotOutcome.ALREADY_TRIED,
                error=ErrorKind.ALREADY_TRIED,
                message=f"You already fired at {target}. Choose another coordinate.",
            )
        return target

    def _describe(
        self, shooter: Side, target: Coordinate, outcome: ShotOutcome, sunk: ShipType | None
    ) -> str:
        if shooter is Side.HUMAN:
            if sunk is not None:
                return f"You fired at {target}. Direct hit! You sank the CPU's {sunk.label}!"
            if outcome is ShotOutcome.HIT:
                return f"You fired at {target}. Hit!"
            return f"You fired at {target}. Miss."
        if sunk is not None:
            return f"The CPU fired at {target}. It sank your {sunk.label}!"
        if outcome is ShotOutcome.HIT:
            return f"The CPU fired at {target}. Your ship was hit!"
        return f"The CPU fired at {target}. It missed."

    @staticmethod
    def _victory_text(winner: Side) -> str:
        if winner is Side.HUMAN:
            return "You sank the entire CPU fleet. You win! Play again?"
        return "The CPU sank your entire fleet. You lose! Play again?"

    def _require_phase(self, phase: GamePhase) -> None:
        if self.phase is not phase:
            logger.error(
                "operation_rejected_wrong_phase",
                extra={"expected": phase.value, "phase": self.phase.value},
            )
            raise GameStateError(
                ErrorKind.WRONG_PHASE,
                f"That is not possible during {self.phase.value.replace('_', ' ')}.",
            )
