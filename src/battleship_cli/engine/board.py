"""Single-player board management for the Battleship engine."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum

from battleship_cli.telemetry import get_meter, get_tracer

from .coordinates import DEFAULT_BOARD_SIZE, Coordinate, in_bounds, iter_board
from .errors import CoordinateError, ErrorKind, PlacementError
from .ship import FLEET, Direction, Ship, ShipType, ship_cells

logger = logging.getLogger(__name__)
tracer = get_tracer("battleship_cli.engine.board")
meter = get_meter("battleship_cli.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "battleship_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "battleship_engine_shots",
    unit="1",
    description="Shots received by a board",
)


class CellState(Enum):
    """State of a single board cell."""

    EMPTY = "empty"
    OCCUPIED = "occupied"
    HIT = "hit"
    MISS = "miss"


class ShotOutcome(Enum):
    """Result of resolving one attack against a board."""

    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"
    ALREADY_TRIED = "already_tried"

    @property
    def is_hit(self) -> bool:
        return self in (ShotOutcome.HIT, ShotOutcome.SUNK)


@dataclass
class Board:
    """Represents one player's grid and the fleet placed on it."""

    size: int = DEFAULT_BOARD_SIZE
    owner: str = "unknown"
    ships: list[Ship] = field(default_factory=list)
    shots: dict[Coordinate, CellState] = field(default_factory=dict)
    _occupancy: dict[Coordinate, Ship] = field(default_factory=dict, init=False, repr=False)

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        """Check whether a coordinate lies inside the board boundaries."""
        return in_bounds(coord, self.size)

    def ship_of_type(self, ship_type: ShipType) -> Ship | None:
        for ship in self.ships:
            if ship.ship_type is ship_type:
                return ship
        return None

    def check_placement(
        self, ship_type: ShipType, origin: Coordinate, direction: Direction
    ) -> tuple[Coordinate, ...]:
        """Validate a placement and return the cells it would cover.

        Raises PlacementError for a duplicate type, a run leaving the board or
        a run crossing an occupied cell, checked in that order.
        """
        if self.ship_of_type(ship_type) is not None:
            raise PlacementError(
                ErrorKind.DUPLICATE_SHIP, f"Your {ship_type.label} has already been placed."
            )
        cells = ship_cells(ship_type, origin, direction)
        if not all(self.is_valid_coordinate(cell) for cell in cells):
            raise PlacementError(
                ErrorKind.OUT_OF_BOUNDS,
                f"The {ship_type.label} (size {ship_type.length}) does not fit there. "
                "Try another coordinate or direction.",
            )
        clashing = next((cell for cell in cells if cell in self._occupancy), None)
        if clashing is not None:
            other = self._occupancy[clashing]
            raise PlacementError(
                ErrorKind.OVERLAP,
                f"The {ship_type.label} would overlap your {other.ship_type.label} at {clashing}.",
            )
        return cells

    def can_place_ship(self, ship_type: ShipType, origin: Coordinate, direction: Direction) -> bool:
        """Determine whether a ship can be placed without violating rules."""
        try:
            self.check_placement(ship_type, origin, direction)
        except PlacementError:
            return False
        return True

    def place_ship(self, ship_type: ShipType, origin: Coordinate, direction: Direction) -> Ship:
        """Place a ship of `ship_type`; all-or-nothing, raising PlacementError on failure."""
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.type", ship_type.name)
            span.set_attribute("ship.length", ship_type.length)
            span.set_attribute("ship.origin.col", origin.col)
            span.set_attribute("ship.origin.row", origin.row)
            span.set_attribute("board.owner", self.owner)
            try:
                self.check_placement(ship_type, origin, direction)
            except PlacementError as exc:
                PLACEMENT_COUNTER.add(1, attributes={"result": exc.kind.value, "owner": self.owner})
                logger.debug(
                    "ship_placement_rejected",
                    extra={
                        "owner": self.owner,
                        "ship_type": ship_type.name,
                        "direction": direction.value,
                        "col": origin.col,
                        "row": origin.row,
                        "reason": exc.kind.value,
                    },
                )
                raise

            ship = Ship(ship_type)
            ship.place(origin, direction)
            for cell in ship.cells:
                self._occupancy[cell] = ship
            self.ships.append(ship)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info(
                "ship_placed",
                extra={
                    "owner": self.owner,
                    "ship_type": ship_type.name,
                    "direction": direction.value,
                    "col": origin.col,
                    "row": origin.row,
                },
            )
            return ship

    def attack(self, coord: Coordinate) -> tuple[ShotOutcome, Ship | None]:
        """Resolve a shot at this board and return its outcome and the ship struck."""
        with tracer.start_as_current_span("board.attack") as span:
            span.set_attribute("shot.col", coord.col)
            span.set_attribute("shot.row", coord.row)
            span.set_attribute("board.owner", self.owner)
            if not self.is_valid_coordinate(coord):
                logger.error(
                    "shot_out_of_bounds",
                    extra={"col": coord.col, "row": coord.row, "owner": self.owner},
                )
                raise CoordinateError(ErrorKind.OUT_OF_BOUNDS, f"{coord} is off the board.")
            if coord in self.shots:
                span.set_attribute("shot.outcome", ShotOutcome.ALREADY_TRIED.value)
                logger.warning(
                    "shot_repeat",
                    extra={"col": coord.col, "row": coord.row, "owner": self.owner},
                )
                return ShotOutcome.ALREADY_TRIED, None

            ship = self._occupancy.get(coord)
            if ship is None:
                self.shots[coord] = CellState.MISS
                outcome = ShotOutcome.MISS
            else:
                self.shots[coord] = CellState.HIT
                ship.register_hit()
                outcome = ShotOutcome.SUNK if ship.sunk else ShotOutcome.HIT

            span.set_attribute("shot.outcome", outcome.value)
            SHOT_COUNTER.add(1, attributes={"outcome": outcome.value, "owner": self.owner})
            logger.info(
                "shot_hit" if ship else "shot_miss",
                extra={
                    "col": coord.col,
                    "row": coord.row,
                    "owner": self.owner,
                    "ship_type": ship.ship_type.name if ship else None,
                    "sunk": outcome is ShotOutcome.SUNK,
                },
            )
            return outcome, ship

    def get_cell_state(self, coord: Coordinate) -> CellState:
        """Return the state of a cell, combining shots and occupancy."""
        shot = self.shots.get(coord)
        if shot is not None:
            return shot
        return CellState.OCCUPIED if coord in self._occupancy else CellState.EMPTY

    def untried_coordinates(self) -> list[Coordinate]:
        return [coord for coord in iter_board(self.size) if coord not in self.shots]

    def is_ready(self) -> bool:
        """A board is ready for combat once every ship type of the fleet is placed."""
        return {ship.ship_type for ship in self.ships} == set(FLEET)

    def is_defeated(self) -> bool:
        """Check whether every placed ship is sunk."""
        return bool(self.ships) and all(ship.is_sunk() for ship in self.ships)

    def remaining_ships(self) -> int:
        return sum(1 for ship in self.ships if not ship.is_sunk())

    def unplaced_ship_types(self) -> list[ShipType]:
        placed = {ship.ship_type for ship in self.ships}
        return [ship_type for ship_type in FLEET if ship_type not in placed]

    def random_placement(self, rng: random.Random) -> None:
        """Randomly place every ship type not yet on the board."""
        with tracer.start_as_current_span("board.random_placement") as span:
            span.set_attribute("board.owner", self.owner)
            directions = list(Direction)
            for ship_type in self.unplaced_ship_types():
                attempts = 0
                while True:
                    attempts += 1
                    origin = Coordinate(rng.randrange(self.size), rng.randrange(self.size))
                    direction = rng.choice(directions)
                    if self.can_place_ship(ship_type, origin, direction):
                        self.place_ship(ship_type, origin, direction)
                        break
                logger.debug(
                    "random_ship_placed",
                    extra={"ship_type": ship_type.name, "attempts": attempts, "owner": self.owner},
                )
