#!/usr/bin/env python3
"""
Measure how quickly each targeting tier sinks a randomly placed fleet.

Run from repo root:

    PYTHONPATH=src python3 scripts/benchmark_ai.py --games 200 --board-size 10
"""

from __future__ import annotations

import argparse
import random
import statistics
import sys
from pathlib import Path


def add_src_to_syspath() -> None:
    """Ensure `src/` is on sys.path so `import battleship_cli` works."""
    repo_root = Path(__file__).resolve().parents[1]
    src = repo_root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


add_src_to_syspath()

from battleship_cli.ai.targeting import Difficulty, TargetingAI  # noqa: E402
from battleship_cli.engine.board import Board  # noqa: E402
from battleship_cli.engine.coordinates import BOARD_SIZES  # noqa: E402


def shots_to_win(difficulty: Difficulty, size: int, rng: random.Random) -> int:
    board = Board(size=size, owner="benchmark")
    board.random_placement(rng)
    ai = TargetingAI(size, difficulty, rng=rng)
    shots = 0
    while not board.is_defeated():
        coord = ai.choose()
        outcome, _ = board.attack(coord)
        ai.record(coord, outcome)
        shots += 1
    return shots


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--games", type=int, default=200)
    parser.add_argument("--board-size", type=int, choices=BOARD_SIZES, default=10)
    parser.add_argument("--seed", type=int, default=2024)
    args = parser.parse_args()

    print(f"{'tier':<12} {'mean':>7} {'median':>7} {'best':>5} {'worst':>6}")
    for difficulty in Difficulty:
        rng = random.Random(args.seed)
        results = [shots_to_win(difficulty, args.board_size, rng) for _ in range(args.games)]
        print(
            f"{difficulty.label:<12} {statistics.mean(results):>7.1f} "
            f"{statistics.median(results):>7.1f} {min(results):>5} {max(results):>6}"
        )


if __name__ == "__main__":
    main()
