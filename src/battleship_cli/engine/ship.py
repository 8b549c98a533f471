"""Ship domain model for the Battleship engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .coordinates import Coordinate
from .errors import ErrorKind, PlacementError


class Direction(Enum):
    """Direction a ship extends from its origin cell."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> tuple[int, int]:
        """Return the (col, row) unit step for this direction."""
        return _DELTAS[self]


_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_DIRECTION_ALIASES: dict[str, Direction] = {
    **{direction.value: direction for direction in Direction},
    "u": Direction.UP,
    "d": Direction.DOWN,
    "l": Direction.LEFT,
    "r": Direction.RIGHT,
}


class ShipType(Enum):
    """All supported ship classes and their lengths."""

    CARRIER = 5
    BATTLESHIP = 4
    CRUISER = 3
    SUBMARINE = 3
    DESTROYER = 2

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return self.value

    @property
    def label(self) -> str:
        return self.name.title()


FLEET: tuple[ShipType, ...] = tuple(ShipType)


def parse_ship_type(text: str) -> ShipType:
    try:
        return ShipType[text.strip().upper()]
    except KeyError:
        names = ", ".join(ship_type.name.lower() for ship_type in FLEET)
        raise PlacementError(
            ErrorKind.UNKNOWN_SHIP, f"Unknown ship '{text.strip()}'. Choose one of: {names}."
        ) from None


def parse_direction(text: str) -> Direction:
    direction = _DIRECTION_ALIASES.get(text.strip().lower())
    if direction is None:
        raise PlacementError(
            ErrorKind.INVALID_DIRECTION,
            f"Unknown direction '{text.strip()}'. Use up, down, left or right.",
        )
    return direction


def ship_cells(ship_type: ShipType, origin: Coordinate, direction: Direction) -> tuple[Coordinate, ...]:
    """Return the run of cells a ship would cover, starting at `origin`."""
    d_col, d_row = direction.delta
    return tuple(
        Coordinate(origin.col + d_col * offset, origin.row + d_row * offset)
        for offset in range(ship_type.length)
    )


@dataclass
class Ship:
    """A single vessel; unplaced until `place` assigns its cells."""

    ship_type: ShipType
    cells: tuple[Coordinate, ...] = ()
    direction: Direction | None = None
    hits: int = 0
    placed: bool = False
    _cell_set: frozenset[Coordinate] = field(default=frozenset(), init=False, repr=False)

    @property
    def size(self) -> int:
        return self.ship_type.length

    @property
    def sunk(self) -> bool:
        return self.placed and self.hits >= self.size

    def is_sunk(self) -> bool:
        """Determine whether every cell belonging to the ship has been hit."""
        return self.sunk

    def place(self, origin: Coordinate, direction: Direction) -> None:
        """Fix the ship's cells; a placed ship cannot be moved."""
        if self.placed:
            raise PlacementError(
                ErrorKind.DUPLICATE_SHIP, f"The {self.ship_type.label} has already been placed."
            )
        self.cells = ship_cells(self.ship_type, origin, direction)
        self.direction = direction
        self._cell_set = frozenset(self.cells)
        self.placed = True

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered list of coordinates occupied by this ship."""
        return list(self.cells)

    def occupies(self, coord: Coordinate) -> bool:
        return coord in self._cell_set

    def register_hit(self) -> None:
        """Count one newly struck cell; the board guarantees each cell counts once."""
        if self.hits < self.size:
            self.hits += 1
