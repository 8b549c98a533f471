"""Result values returned across the engine's public boundary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .board import ShotOutcome
from .coordinates import Coordinate
from .errors import BattleshipError, ErrorKind
from .ship import ShipType


class Side(Enum):
    """The two participants of a game."""

    HUMAN = "human"
    CPU = "cpu"

    def opponent(self) -> Side:
        """Return the opposing side."""
        return Side.CPU if self is Side.HUMAN else Side.HUMAN


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of one ship placement request."""

    ship_type: ShipType | None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, ship_type: ShipType | None, exc: BattleshipError) -> PlacementResult:
        return cls(ship_type=ship_type, error=exc.kind, message=exc.message)


@dataclass(frozen=True)
class AttackResult:
    """Outcome of one attack request; `error` is set when nothing was fired."""

    shooter: Side
    coordinate: Coordinate | None = None
    outcome: ShotOutcome | None = None
    sunk: ShipType | None = None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def hit(self) -> bool:
        return self.outcome is not None and self.outcome.is_hit


@dataclass(frozen=True)
class ScoreBoard:
    """Ships still afloat on each side."""

    human_remaining: int
    cpu_remaining: int

    def remaining(self, side: Side) -> int:
        return self.human_remaining if side is Side.HUMAN else self.cpu_remaining

    def __str__(self) -> str:
        return (
            f"Your ships remaining: {self.human_remaining} | "
            f"CPU ships remaining: {self.cpu_remaining}"
        )
