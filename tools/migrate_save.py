#!/usr/bin/env python3
"""Upgrade a stored save file to the current layout."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from idlegame.save_migrations import deprecated_keys, migrate_save_payload


def load_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Migrate an Idle Coding Legend save file.")
    parser.add_argument("save_path", help="Path to the save JSON file.")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report deprecated keys; exit 1 if any are present.",
    )
    parser.add_argument(
        "--in-place",
        action="store_true",
        help="Overwrite the file instead of printing the migrated save.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str]) -> None:
    args = parse_args(argv[1:])
    save_path = Path(args.save_path).resolve()
    try:
        payload = load_json(save_path)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Failed to read {save_path}: {exc}")
        sys.exit(1)

    if args.check:
        stale = deprecated_keys(payload)
        if stale:
            print("Deprecated keys found:")
            for key in stale:
                print(f" - {key}")
            sys.exit(1)
        print(f"{save_path} uses the current layout.")
        return

    migrated = migrate_save_payload(payload)
    text = json.dumps(migrated, indent=2) + "\n"
    if args.in_place:
        save_path.write_text(text, encoding="utf-8")
        print(f"Migrated {save_path}.")
    else:
        sys.stdout.write(text)


if __name__ == "__main__":
    main(sys.argv)
