"""Error taxonomy shared by the Battleship engine."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Structured reason attached to every engine error and failed result."""

    INVALID_FORMAT = "invalid_format"
    OUT_OF_BOUNDS = "out_of_bounds"
    UNKNOWN_SHIP = "unknown_ship"
    INVALID_DIRECTION = "invalid_direction"
    DUPLICATE_SHIP = "duplicate_ship"
    OVERLAP = "overlap"
    ALREADY_TRIED = "already_tried"
    FLEET_INCOMPLETE = "fleet_incomplete"
    WRONG_PHASE = "wrong_phase"
    NO_COORDINATES_REMAINING = "no_coordinates_remaining"


class BattleshipError(Exception):
    """Base class for engine errors carrying an ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class CoordinateError(BattleshipError, ValueError):
    """Raised when coordinate text cannot be admitted onto the board."""


class PlacementError(BattleshipError, ValueError):
    """Raised when a ship cannot be placed."""


class GameStateError(BattleshipError, RuntimeError):
    """Raised when an operation is invalid for the current game phase."""


class NoCoordinatesRemaining(BattleshipError, RuntimeError):
    """Raised when the targeting AI has already fired at every cell."""

    def __init__(self, size: int) -> None:
        super().__init__(
            ErrorKind.NO_COORDINATES_REMAINING,
            f"Every cell of the {size}x{size} board has already been targeted.",
        )
        self.size = size
