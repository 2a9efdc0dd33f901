"""Save migration steps for Idle Coding Legend.

Saves carry no version number. Every step detects the shapes it handles
by key presence, so the whole chain runs on every load and a save that
is already current passes through untouched.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .state import GameState, default_state_dict, overlay_known

Migration = Callable[[Dict], Dict]
KeyPath = Tuple[str, ...]

LEGACY_STAT_RENAMES: Dict[KeyPath, Dict[str, str]] = {
    ("stats",): {
        "computingPower": "handSpeed",
        "computing_power": "hand_speed",
        "attack": "algorithm",
        "defense": "iteration",
    },
    ("upgradeCosts",): {
        "computingPower": "handSpeed",
        "attack": "algorithm",
        "defense": "iteration",
    },
    ("upgrade_costs",): {
        "computingPower": "handSpeed",
        "computing_power": "hand_speed",
        "attack": "algorithm",
        "defense": "iteration",
    },
    ("battle", "currentBug"): {"attack": "algorithm", "defense": "iteration"},
    ("battle", "current_bug"): {"attack": "algorithm", "defense": "iteration"},
}

# Parents come before children so renamed containers are found by later paths.
CAMEL_CASE_RENAMES: Dict[KeyPath, Dict[str, str]] = {
    (): {"upgradeCosts": "upgrade_costs"},
    ("character",): {"experienceToNext": "experience_to_next"},
    ("resources",): {"linesOfCode": "lines_of_code", "bugFragments": "bug_fragments"},
    ("stats",): {"handSpeed": "hand_speed"},
    ("upgrade_costs",): {"handSpeed": "hand_speed"},
    ("equipment",): {"ideExtension": "ide_extension", "coffeeMachine": "coffee_machine"},
    ("statistics",): {
        "totalLinesGenerated": "total_lines_generated",
        "totalBugsDefeated": "total_bugs_defeated",
        "totalPlayTime": "total_play_time",
        "filesOpened": "files_opened",
        "filesSaved": "files_saved",
    },
    ("battle",): {"currentBug": "current_bug", "isInBattle": "is_in_battle"},
    ("battle", "current_bug"): {"maxHealth": "max_health"},
    ("battle", "current_bug", "reward"): {
        "linesOfCode": "lines_of_code",
        "bugFragments": "bug_fragments",
    },
    ("settings",): {"autoSave": "auto_save", "showNotifications": "show_notifications"},
}


def _lookup(payload: Mapping[str, Any], path: Sequence[str]) -> Optional[Dict[str, Any]]:
    node: Any = payload
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node if isinstance(node, dict) else None


def _rename_keys(section: Dict[str, Any], renames: Mapping[str, str]) -> None:
    # A deprecated value replaces the current one, matching how older
    # builds overwrote the new field while upgrading.
    for old, new in renames.items():
        if old in section:
            section[new] = section.pop(old)


def _apply_renames(payload: Dict, table: Mapping[KeyPath, Mapping[str, str]]) -> Dict:
    upgraded = copy.deepcopy(payload)
    for path, renames in table.items():
        section = _lookup(upgraded, path)
        if section is not None:
            _rename_keys(section, renames)
    return upgraded


def rename_legacy_stat_keys(payload: Dict) -> Dict:
    """computingPower/attack/defense became handSpeed/algorithm/iteration."""
    return _apply_renames(payload, LEGACY_STAT_RENAMES)


def snake_case_keys(payload: Dict) -> Dict:
    """Move the camelCase layout written by the editor extension to snake_case."""
    return _apply_renames(payload, CAMEL_CASE_RENAMES)


def fill_defaults(payload: Dict) -> Dict:
    """Coerce known fields onto the current model, keeping unknown keys at any depth."""
    return overlay_known(payload, GameState.from_dict(payload).to_dict())


MIGRATIONS: Tuple[Migration, ...] = (
    rename_legacy_stat_keys,
    snake_case_keys,
    fill_defaults,
)


def migrate_save_payload(payload: Any) -> Dict:
    """Bring any stored blob to the current layout. Never raises."""
    if not isinstance(payload, dict):
        return default_state_dict()
    current = copy.deepcopy(payload)
    for migration in MIGRATIONS:
        current = migration(current)
    return current


def deprecated_keys(payload: Any) -> List[str]:
    """Dotted paths of keys that a migration step would still rename."""
    if not isinstance(payload, dict):
        return []
    found: List[str] = []
    for table in (LEGACY_STAT_RENAMES, CAMEL_CASE_RENAMES):
        for path, renames in table.items():
            section = _lookup(payload, path)
            if section is None:
                continue
            for old in renames:
                if old in section:
                    found.append(".".join((*path, old)))
    return found
