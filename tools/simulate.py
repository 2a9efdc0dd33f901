#!/usr/bin/env python3
"""Drive the engine headlessly for a number of ticks against a save directory."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SAVE_DIR = REPO_ROOT / "saves"

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from idlegame.events import Notification
from idlegame.persistence import JsonFileStorage
from idlegame.rng import make_rng
from idlegame.settings import load_settings
from idlegame.store import SAVE_KEY, StateStore
from idlegame.timekeeping import ticks_elapsed


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run Idle Coding Legend ticks without a UI.")
    parser.add_argument("--ticks", type=int, default=60, help="Number of ticks to run.")
    parser.add_argument(
        "--offline-seconds",
        type=float,
        default=None,
        help="Run as many ticks as fit in this much wall time instead of --ticks.",
    )
    parser.add_argument("--save-dir", default=str(DEFAULT_SAVE_DIR), help="Directory for save files.")
    parser.add_argument("--key", default=SAVE_KEY, help="Save key inside the save directory.")
    parser.add_argument("--seed", default=None, help="Seed for a reproducible run.")
    parser.add_argument("--buy", action="append", default=[], help="Stat to buy after the run.")
    parser.add_argument("--settings", default=None, help="Settings JSON to apply before running.")
    parser.add_argument("--reset", action="store_true", help="Start from a fresh save.")
    return parser.parse_args(argv)


def print_notification(notification: Notification) -> None:
    print(f"[{notification.kind.title()}] {notification.message}")


def main(argv: Sequence[str]) -> None:
    args = parse_args(argv[1:])
    store = StateStore(
        JsonFileStorage(args.save_dir),
        rng=make_rng(args.seed),
        notifier=print_notification,
        save_key=args.key,
    )
    if args.reset:
        store.reset()
    if args.settings:
        store.apply_settings(load_settings(args.settings))

    ticks = args.ticks
    if args.offline_seconds is not None:
        ticks = ticks_elapsed(args.offline_seconds)
    store.advance(ticks)

    for stat in args.buy:
        try:
            bought = store.buy_upgrade(stat)
        except ValueError as exc:
            print(f"[!] {exc}")
            sys.exit(1)
        print(f"[Upgrade] {stat}: {'bought' if bought else 'not enough lines of code'}")

    if not store.save():
        sys.exit(1)

    snapshot = store.snapshot()
    character = snapshot["character"]
    resources = snapshot["resources"]
    print(
        f"Level {character['level']} ({character['experience']}/{character['experience_to_next']} XP) | "
        f"LoC: {int(resources['lines_of_code'])} | Fragments: {resources['bug_fragments']} | "
        f"Bugs defeated: {snapshot['statistics']['total_bugs_defeated']}"
    )


if __name__ == "__main__":
    main(sys.argv)
