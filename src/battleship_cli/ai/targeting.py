"""Hunt/target shot selection for the CPU opponent."""

from __future__ import annotations

import logging
import random
from collections import deque
from enum import Enum, IntEnum
from typing import Iterable

from battleship_cli.engine.board import ShotOutcome
from battleship_cli.engine.coordinates import Coordinate, in_bounds, iter_board, neighbors
from battleship_cli.engine.errors import NoCoordinatesRemaining
from battleship_cli.telemetry import get_meter, get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_cli.ai.targeting")
meter = get_meter("battleship_cli.ai.targeting")

AI_SHOT_COUNTER = meter.create_counter(
    "battleship_ai_shots",
    unit="1",
    description="Shots chosen by the targeting AI",
)


class Difficulty(IntEnum):
    """CPU strength tiers, weakest first."""

    SUPER_EASY = 0
    EASY = 1
    MEDIUM = 2
    HARD = 3

    @property
    def label(self) -> str:
        return _DIFFICULTY_LABELS[self]

    @property
    def follows_hits(self) -> bool:
        """Whether a hit switches the AI into target mode."""
        return self >= Difficulty.EASY

    @property
    def uses_parity(self) -> bool:
        """Whether hunting is restricted to cells where col + row is even."""
        return self >= Difficulty.MEDIUM

    @property
    def infers_lines(self) -> bool:
        """Whether an unbroken run of hits narrows the queue to the line's two ends."""
        return self >= Difficulty.HARD


_DIFFICULTY_LABELS: dict[Difficulty, str] = {
    Difficulty.SUPER_EASY: "Super Easy",
    Difficulty.EASY: "Easy",
    Difficulty.MEDIUM: "Medium",
    Difficulty.HARD: "Hard",
}

DEFAULT_DIFFICULTY = Difficulty.HARD


class TargetingMode(Enum):
    HUNT = "hunt"
    TARGET = "target"


class TargetingAI:
    """Chooses CPU shots against the human board without ever repeating one.

    Hunt mode picks at random from untried cells (restricted to the parity
    subset from MEDIUM up). After a hit, tiers from EASY up enqueue the
    orthogonal neighbours of the hit and drain that queue first-in first-out;
    HARD replaces the queue with the two cells extending the line once the
    unresolved hits form an unbroken run. Sinking a ship, or running out of
    candidates, drops back to hunt mode and forgets those hits.
    """

    def __init__(
        self,
        size: int,
        difficulty: Difficulty | int = DEFAULT_DIFFICULTY,
        rng: random.Random | None = None,
    ) -> None:
        self.size = size
        self.difficulty = Difficulty(difficulty)
        self._rng = rng or random.Random()
        self.mode = TargetingMode.HUNT
        self.candidate_queue: deque[Coordinate] = deque()
        self.history: set[Coordinate] = set()
        self.active_hits: list[Coordinate] = []

    def reset(self) -> None:
        self.mode = TargetingMode.HUNT
        self.candidate_queue.clear()
        self.history.clear()
        self.active_hits.clear()

    @property
    def exhausted(self) -> bool:
        return len(self.history) >= self.size * self.size

    def choose(self) -> Coordinate:
        """Return the next shot and add it to the history immediately."""
        with tracer.start_as_current_span("targeting.choose") as span:
            span.set_attribute("ai.difficulty", int(self.difficulty))
            if self.exhausted:
                logger.error("ai_no_coordinates_remaining", extra={"size": self.size})
                raise NoCoordinatesRemaining(self.size)

            coord = self._next_target() if self.mode is TargetingMode.TARGET else None
            if coord is None:
                coord = self._hunt()
            self.history.add(coord)

            span.set_attribute("ai.mode", self.mode.value)
            span.set_attribute("ai.col", coord.col)
            span.set_attribute("ai.row", coord.row)
            AI_SHOT_COUNTER.add(
                1, attributes={"mode": self.mode.value, "difficulty": int(self.difficulty)}
            )
            logger.debug(
                "ai_shot_chosen",
                extra={
                    "col": coord.col,
                    "row": coord.row,
                    "mode": self.mode.value,
                    "queued": len(self.candidate_queue),
                },
            )
            return coord

    def record(self, coord: Coordinate, outcome: ShotOutcome) -> None:
        """Feed back the outcome of a shot previously returned by `choose`."""
        self.history.add(coord)
        if not self.difficulty.follows_hits or not outcome.is_hit:
            return

        if outcome is ShotOutcome.SUNK:
            self.candidate_queue.clear()
            self.active_hits.clear()
            self._set_mode(TargetingMode.HUNT)
            return

        self.active_hits.append(coord)
        line = self._line_extension() if self.difficulty.infers_lines else None
        if line is not None:
            self.candidate_queue = deque(line)
        else:
            self._enqueue(neighbors(coord, self.size))
        self._set_mode(TargetingMode.TARGET)

    def _next_target(self) -> Coordinate | None:
        while self.candidate_queue:
            coord = self.candidate_queue.popleft()
            if coord not in self.history:
                return coord
        # Hits from a cold lead never seed the next line.
        self.active_hits.clear()
        self._set_mode(TargetingMode.HUNT)
        return None

    def _hunt(self) -> Coordinate:
        untried = [coord for coord in iter_board(self.size) if coord not in self.history]
        if self.difficulty.uses_parity:
            parity = [coord for coord in untried if (coord.col + coord.row) % 2 == 0]
            # Parity cells can run out while odd cells holding a damaged ship remain.
            if parity:
                untried = parity
        return self._rng.choice(untried)

    def _enqueue(self, coords: Iterable[Coordinate]) -> None:
        for coord in coords:
            if coord not in self.history and coord not in self.candidate_queue:
                self.candidate_queue.append(coord)

    def _line_extension(self) -> list[Coordinate] | None:
        """Return the untried cells just past both ends of the current line of hits.

        The end beyond the most recent hit comes first. Returns None unless the
        unresolved hits form one unbroken run along a row or column.
        """
        if len(self.active_hits) < 2:
            return None
        latest = self.active_hits[-1]
        rows = {coord.row for coord in self.active_hits}
        cols = {coord.col for coord in self.active_hits}
        if len(rows) == 1 and _is_run(cols):
            low, high = min(cols), max(cols)
            ends = [Coordinate(low - 1, latest.row), Coordinate(high + 1, latest.row)]
            if latest.col == high:
                ends.reverse()
        elif len(cols) == 1 and _is_run(rows):
            low, high = min(rows), max(rows)
            ends = [Coordinate(latest.col, low - 1), Coordinate(latest.col, high + 1)]
            if latest.row == high:
                ends.reverse()
        else:
            return None
        return [
            coord for coord in ends if in_bounds(coord, self.size) and coord not in self.history
        ]

    def _set_mode(self, mode: TargetingMode) -> None:
        if mode is self.mode:
            return
        logger.debug("ai_mode_changed", extra={"previous": self.mode.value, "mode": mode.value})
        self.mode = mode


def _is_run(positions: set[int]) -> bool:
    return max(positions) - min(positions) + 1 == len(positions)
