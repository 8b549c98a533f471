"""Grid references: parsing, formatting and neighbourhoods."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from .errors import CoordinateError, ErrorKind

BOARD_SIZES: tuple[int, ...] = (10, 12, 15, 20)
DEFAULT_BOARD_SIZE = 10

_COORDINATE_RE = re.compile(r"^([A-Za-z])(\d+)$")


@dataclass(frozen=True, order=True)
class Coordinate:
    """Immutable board coordinate; `col` maps to the letter, `row` to the number."""

    col: int
    row: int

    def __str__(self) -> str:
        return format_coordinate(self)


def validate_board_size(size: int) -> int:
    if size not in BOARD_SIZES:
        allowed = ", ".join(str(value) for value in BOARD_SIZES)
        raise ValueError(f"Board size must be one of {allowed}; got {size}.")
    return size


def in_bounds(coord: Coordinate, size: int) -> bool:
    """Check whether a coordinate lies inside a size x size board."""
    return 0 <= coord.col < size and 0 <= coord.row < size


def parse_coordinate(text: str, size: int) -> Coordinate:
    """Parse text such as ``b7`` into a Coordinate for a board of `size`.

    Raises CoordinateError with kind INVALID_FORMAT when the text is not a
    letter followed by digits, and OUT_OF_BOUNDS when the letter or number
    falls outside the board.
    """
    cleaned = text.strip() if text else ""
    match = _COORDINATE_RE.match(cleaned)
    if match is None:
        raise CoordinateError(
            ErrorKind.INVALID_FORMAT,
            f"'{cleaned}' is not a coordinate. Use a letter followed by a number, e.g. B7.",
        )
    letter, digits = match.groups()
    col = ord(letter.upper()) - ord("A")
    row = int(digits) - 1
    coord = Coordinate(col, row)
    if not in_bounds(coord, size):
        raise CoordinateError(
            ErrorKind.OUT_OF_BOUNDS,
            f"{cleaned.upper()} is off the board. Use coordinates A1-{last_coordinate(size)}.",
        )
    return coord


def format_coordinate(coord: Coordinate) -> str:
    return f"{chr(ord('A') + coord.col)}{coord.row + 1}"


def last_coordinate(size: int) -> str:
    """Return the text of the bottom-right cell, e.g. ``J10`` on a 10x10 board."""
    return format_coordinate(Coordinate(size - 1, size - 1))


def neighbors(coord: Coordinate, size: int) -> list[Coordinate]:
    """Return in-bounds orthogonal neighbours in up, down, left, right order."""
    candidates = (
        Coordinate(coord.col, coord.row - 1),
        Coordinate(coord.col, coord.row + 1),
        Coordinate(coord.col - 1, coord.row),
        Coordinate(coord.col + 1, coord.row),
    )
    return [candidate for candidate in candidates if in_bounds(candidate, size)]


def iter_board(size: int) -> Iterator[Coordinate]:
    """Yield every coordinate of the board in row-major order."""
    for row in range(size):
        for col in range(size):
            yield Coordinate(col, row)
