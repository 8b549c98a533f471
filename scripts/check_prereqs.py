#!/usr/bin/env python3
"""
Prerequisite checker for battleship-cli.

Run from repo root (after activating your venv):

    python3 scripts/check_prereqs.py
"""

import sys
import traceback
from pathlib import Path


def add_src_to_syspath() -> None:
    """Ensure `src/` is on sys.path so `import battleship_cli` works."""
    repo_root = Path(__file__).resolve().parents[1]
    src = repo_root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


def header(title: str) -> None:
    print("\n" + "=" * 72)
    print(title)
    print("=" * 72)


def check_python_version() -> bool:
    header("1) Python version")
    v = sys.version_info
    print(f"Detected Python: {v.major}.{v.minor}.{v.micro}")
    ok = (v.major == 3 and v.minor >= 10) or (v.major > 3)
    if ok:
        print("OK: Python 3.10 or newer is available.")
    else:
        print("FAIL: Python 3.10+ required for this project.")
    return ok


def check_core_imports() -> bool:
    header("2) Library imports (pydantic, opentelemetry)")
    libs = [
        "pydantic",
        "opentelemetry.sdk.trace",
        "opentelemetry.exporter.otlp.proto.grpc.trace_exporter",
        "opentelemetry.instrumentation.logging",
    ]
    all_ok = True
    for name in libs:
        try:
            __import__(name)
            print(f"OK: imported {name}")
        except Exception as exc:  # noqa: BLE001
            all_ok = False
            print(f"FAIL: could not import {name}: {exc}")
            traceback.print_exc(limit=1)
    return all_ok


def check_game_smoke_test() -> bool:
    header("3) Engine smoke test (auto placement, one round of shots)")
    add_src_to_syspath()
    try:
        from battleship_cli.config import GameSettings
        from battleship_cli.engine.game import BattleshipGame

        game = BattleshipGame(GameSettings(rng_seed=1))
        game.auto_place()
        first = game.start_combat()
        print(f"OK: combat started, {first.value} fires first.")
        for _ in range(2):
            target = None if game.current_turn.value == "cpu" else game.cpu.board.untried_coordinates()[0]
            result = game.attack(target)
            print(f"    {result.message}")
        print(f"    {game.status}")
        return True
    except Exception as exc:  # noqa: BLE001
        print(f"FAIL: engine smoke test failed: {exc}")
        traceback.print_exc(limit=1)
        return False


def main() -> None:
    checks = [
        ("Python version", check_python_version),
        ("Library imports", check_core_imports),
        ("Engine smoke test", check_game_smoke_test),
    ]

    overall_ok = True
    results: list[tuple[str, bool]] = []

    for name, fn in checks:
        ok = fn()
        results.append((name, ok))
        overall_ok = overall_ok and ok

    header("Summary")
    for name, ok in results:
        status = "OK  " if ok else "FAIL"
        print(f"{status} - {name}")

    print("\n" + "=" * 72)
    if overall_ok:
        print("ALL CHECKS PASSED: you are ready to play.")
        print("    PYTHONPATH=src python3 -m battleship_cli.cli --board-size 10")
    else:
        print("Some checks FAILED. Review the messages above and fix them before playing.")
    print("=" * 72)


if __name__ == "__main__":
    main()
