"""Tests for the CPU targeting AI."""

from __future__ import annotations

import random
from collections import deque

import pytest
from battleship_cli.ai.targeting import Difficulty, TargetingAI, TargetingMode
from battleship_cli.engine.board import Board, ShotOutcome
from battleship_cli.engine.coordinates import Coordinate
from battleship_cli.engine.errors import ErrorKind, NoCoordinatesRemaining
from battleship_cli.engine.ship import Direction, ShipType


def _ai(difficulty: Difficulty, size: int = 10, seed: int = 0) -> TargetingAI:
    return TargetingAI(size, difficulty, rng=random.Random(seed))


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_every_tier_visits_each_cell_exactly_once(difficulty: Difficulty) -> None:
    board = Board()
    board.random_placement(random.Random(int(difficulty)))
    ai = _ai(difficulty, seed=11)

    seen: list[Coordinate] = []
    for _ in range(board.size * board.size):
        coord = ai.choose()
        assert coord not in seen
        assert coord in ai.history
        seen.append(coord)
        outcome, _ = board.attack(coord)
        ai.record(coord, outcome)

    assert len(set(seen)) == 100
    assert ai.exhausted
    with pytest.raises(NoCoordinatesRemaining) as excinfo:
        ai.choose()
    assert excinfo.value.kind is ErrorKind.NO_COORDINATES_REMAINING


def test_super_easy_never_enters_target_mode() -> None:
    ai = _ai(Difficulty.SUPER_EASY)
    coord = ai.choose()
    ai.record(coord, ShotOutcome.HIT)
    assert ai.mode is TargetingMode.HUNT
    assert not ai.candidate_queue


def test_easy_enqueues_neighbours_after_hit_and_drains_fifo() -> None:
    ai = _ai(Difficulty.EASY)
    hit = Coordinate(4, 4)
    ai.record(hit, ShotOutcome.HIT)

    assert ai.mode is TargetingMode.TARGET
    assert list(ai.candidate_queue) == [
        Coordinate(4, 3),
        Coordinate(4, 5),
        Coordinate(3, 4),
        Coordinate(5, 4),
    ]
    assert ai.choose() == Coordinate(4, 3)
    assert ai.choose() == Coordinate(4, 5)


def test_queue_skips_cells_already_tried() -> None:
    ai = _ai(Difficulty.EASY)
    ai.history.add(Coordinate(4, 3))
    ai.record(Coordinate(4, 4), ShotOutcome.HIT)
    assert Coordinate(4, 3) not in ai.candidate_queue

    ai.candidate_queue.appendleft(Coordinate(4, 3))
    assert ai.choose() == Coordinate(4, 5)


def test_target_mode_falls_back_to_hunt_when_queue_runs_dry() -> None:
    ai = _ai(Difficulty.EASY)
    ai.record(Coordinate(0, 0), ShotOutcome.HIT)
    assert list(ai.candidate_queue) == [Coordinate(0, 1), Coordinate(1, 0)]

    for expected in (Coordinate(0, 1), Coordinate(1, 0)):
        coord = ai.choose()
        assert coord == expected
        ai.record(coord, ShotOutcome.MISS)

    coord = ai.choose()
    assert ai.mode is TargetingMode.HUNT
    assert not ai.active_hits
    assert coord not in {Coordinate(0, 0), Coordinate(0, 1), Coordinate(1, 0)}


def test_hard_targets_neighbours_of_fresh_hit_after_cold_lead(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # C3 and C4 belong to two stacked horizontal ships, so both line ends miss.
    ai = _ai(Difficulty.HARD)
    ai.record(Coordinate(2, 2), ShotOutcome.HIT)
    ai.record(Coordinate(2, 3), ShotOutcome.HIT)
    assert list(ai.candidate_queue) == [Coordinate(2, 4), Coordinate(2, 1)]

    for expected in (Coordinate(2, 4), Coordinate(2, 1)):
        coord = ai.choose()
        assert coord == expected
        ai.record(coord, ShotOutcome.MISS)

    c8 = Coordinate(2, 7)
    monkeypatch.setattr(ai._rng, "choice", lambda cells: c8 if c8 in cells else cells[0])
    assert ai.choose() == c8
    assert ai.mode is TargetingMode.HUNT
    assert not ai.active_hits

    ai.record(c8, ShotOutcome.HIT)
    assert ai.active_hits == [c8]
    assert ai.mode is TargetingMode.TARGET
    assert list(ai.candidate_queue) == [
        Coordinate(2, 6),
        Coordinate(2, 8),
        Coordinate(1, 7),
        Coordinate(3, 7),
    ]


def test_hard_ignores_collinear_hits_with_a_gap() -> None:
    ai = _ai(Difficulty.HARD)
    ai.record(Coordinate(4, 4), ShotOutcome.HIT)
    ai.record(Coordinate(6, 4), ShotOutcome.HIT)

    queued = list(ai.candidate_queue)
    assert queued[:4] == [
        Coordinate(4, 3),
        Coordinate(4, 5),
        Coordinate(3, 4),
        Coordinate(5, 4),
    ]
    assert {Coordinate(6, 3), Coordinate(6, 5), Coordinate(7, 4)} <= set(queued)
    assert Coordinate(2, 4) not in queued
    assert ai.mode is TargetingMode.TARGET


def test_sinking_clears_queue_and_returns_to_hunt() -> None:
    ai = _ai(Difficulty.MEDIUM)
    ai.record(Coordinate(4, 4), ShotOutcome.HIT)
    ai.record(Coordinate(5, 4), ShotOutcome.SUNK)
    assert ai.mode is TargetingMode.HUNT
    assert not ai.candidate_queue
    assert not ai.active_hits


def test_parity_tiers_hunt_on_even_cells_first() -> None:
    for difficulty in (Difficulty.MEDIUM, Difficulty.HARD):
        ai = _ai(difficulty, seed=3)
        for _ in range(50):
            coord = ai.choose()
            assert (coord.col + coord.row) % 2 == 0
            ai.record(coord, ShotOutcome.MISS)
        coord = ai.choose()
        assert (coord.col + coord.row) % 2 == 1


def test_hard_infers_horizontal_line_from_two_hits() -> None:
    ai = _ai(Difficulty.HARD)
    ai.record(Coordinate(4, 4), ShotOutcome.HIT)
    ai.record(Coordinate(5, 4), ShotOutcome.HIT)
    assert ai.candidate_queue == deque([Coordinate(6, 4), Coordinate(3, 4)])


def test_hard_infers_vertical_line_from_two_hits() -> None:
    ai = _ai(Difficulty.HARD)
    ai.record(Coordinate(2, 3), ShotOutcome.HIT)
    ai.record(Coordinate(2, 2), ShotOutcome.HIT)
    assert ai.candidate_queue == deque([Coordinate(2, 1), Coordinate(2, 4)])


def test_hard_line_extension_respects_edges_and_history() -> None:
    ai = _ai(Difficulty.HARD)
    ai.record(Coordinate(0, 0), ShotOutcome.HIT)
    ai.record(Coordinate(1, 0), ShotOutcome.HIT)
    assert list(ai.candidate_queue) == [Coordinate(2, 0)]

    ai.record(Coordinate(2, 0), ShotOutcome.MISS)
    assert ai.choose() != Coordinate(2, 0)


def test_hard_keeps_extending_after_a_miss_on_one_end() -> None:
    ai = _ai(Difficulty.HARD)
    ai.record(Coordinate(4, 4), ShotOutcome.HIT)
    ai.record(Coordinate(5, 4), ShotOutcome.HIT)

    first = ai.choose()
    assert first == Coordinate(6, 4)
    ai.record(first, ShotOutcome.MISS)

    second = ai.choose()
    assert second == Coordinate(3, 4)
    ai.record(second, ShotOutcome.HIT)
    assert list(ai.candidate_queue) == [Coordinate(2, 4)]


def test_medium_keeps_all_neighbours_after_second_hit() -> None:
    ai = _ai(Difficulty.MEDIUM)
    ai.record(Coordinate(4, 4), ShotOutcome.HIT)
    ai.record(Coordinate(5, 4), ShotOutcome.HIT)
    assert Coordinate(4, 3) in ai.candidate_queue
    assert Coordinate(5, 5) in ai.candidate_queue


def test_hard_sinks_a_lone_ship_quickly() -> None:
    board = Board()
    board.place_ship(ShipType.CARRIER, Coordinate(3, 5), Direction.RIGHT)
    ai = _ai(Difficulty.HARD, seed=5)
    ai.record(Coordinate(4, 5), ShotOutcome.HIT)
    board.attack(Coordinate(4, 5))

    shots = 0
    while not board.is_defeated():
        coord = ai.choose()
        outcome, _ = board.attack(coord)
        ai.record(coord, outcome)
        shots += 1
    assert shots <= 8


def test_reset_restores_hunt_state() -> None:
    ai = _ai(Difficulty.HARD)
    ai.choose()
    ai.record(Coordinate(4, 4), ShotOutcome.HIT)
    ai.reset()
    assert ai.mode is TargetingMode.HUNT
    assert not ai.history
    assert not ai.candidate_queue
