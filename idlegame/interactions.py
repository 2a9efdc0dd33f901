"""Editor stimulus hooks.

Each hook is a small, immediate state delta. None of them checks for a
level-up; experience granted here is settled on the next tick.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Pattern, Tuple

from .events import HAZARD_DETECTED, WARNING, GameEvent
from .rng import RandomSource
from .state import BUG_NAMES, BugType, GameState

KEYSTROKE = "keystroke"
FILE_OPEN = "file_open"
FILE_SAVE = "file_save"
DOCUMENT_CHANGE = "document_change"

KEYSTROKE_BONUS_CHANCE = 0.1
KEYSTROKE_BONUS = 1.0
KEYBOARD_BONUS_PER_LEVEL = 0.2
FILE_SAVE_BASE_BONUS = 5
FILE_SAVE_BONUS_SPREAD = 10
FILE_SAVE_EXPERIENCE = 2
HAZARD_WARNING_CHANCE = 0.05

HAZARD_PATTERNS: Tuple[Tuple[Pattern[str], BugType], ...] = (
    (re.compile(r"null\."), BugType.NULL_POINTER),
    (re.compile(r"while\s*\(\s*true\s*\)"), BugType.INFINITE_LOOP),
    (re.compile(r"malloc\s*\("), BugType.MEMORY_LEAK),
    (re.compile(r"console\.error"), BugType.RUNTIME_ERROR),
)

Hook = Callable[[GameState, Mapping[str, Any], RandomSource], List[GameEvent]]


class UnknownInteractionError(ValueError):
    """Raised for an interaction kind with no registered hook."""


def on_keystroke(state: GameState, payload: Mapping[str, Any], rng: RandomSource) -> List[GameEvent]:
    state.statistics.keystrokes += 1
    if rng.random() < KEYSTROKE_BONUS_CHANCE:
        bonus = KEYSTROKE_BONUS * (1 + state.equipment["keyboard"].bonus(KEYBOARD_BONUS_PER_LEVEL))
        state.resources.lines_of_code += bonus
    return []


def on_file_open(state: GameState, payload: Mapping[str, Any], rng: RandomSource) -> List[GameEvent]:
    state.statistics.files_opened += 1
    return []


def on_file_save(state: GameState, payload: Mapping[str, Any], rng: RandomSource) -> List[GameEvent]:
    state.statistics.files_saved += 1
    state.resources.lines_of_code += FILE_SAVE_BASE_BONUS + rng.randrange(FILE_SAVE_BONUS_SPREAD)
    state.character.experience += FILE_SAVE_EXPERIENCE
    return []


def characters_added(changes: Iterable[Any]) -> int:
    """Net characters typed across an edit's content changes; deletions count as zero."""
    total = 0
    for change in changes or []:
        if not isinstance(change, Mapping):
            continue
        text = change.get("text") or ""
        try:
            removed = int(change.get("range_length", 0) or 0)
        except (TypeError, ValueError):
            removed = 0
        net = len(text) - removed
        if net > 0:
            total += net
    return total


def scan_for_hazards(content: str) -> List[BugType]:
    if not isinstance(content, str) or not content:
        return []
    return [bug_type for pattern, bug_type in HAZARD_PATTERNS if pattern.search(content)]


def on_document_change(
    state: GameState, payload: Mapping[str, Any], rng: RandomSource
) -> List[GameEvent]:
    for _ in range(characters_added(payload.get("changes", []))):
        on_keystroke(state, payload, rng)

    events: List[GameEvent] = []
    for bug_type in scan_for_hazards(payload.get("content", "")):
        if rng.random() < HAZARD_WARNING_CHANCE:
            events.append(
                GameEvent(
                    kind=HAZARD_DETECTED,
                    message=f"Dangerous code detected! {BUG_NAMES[bug_type]} is lurking!",
                    severity=WARNING,
                    data={"type": bug_type.value},
                )
            )
    return events


HOOKS: Dict[str, Hook] = {
    KEYSTROKE: on_keystroke,
    FILE_OPEN: on_file_open,
    FILE_SAVE: on_file_save,
    DOCUMENT_CHANGE: on_document_change,
}

KIND_ALIASES = {"fileOpen": FILE_OPEN, "fileSave": FILE_SAVE}


def record_interaction(
    state: GameState,
    kind: str,
    payload: Optional[Mapping[str, Any]],
    rng: RandomSource,
) -> List[GameEvent]:
    hook = HOOKS.get(KIND_ALIASES.get(kind, kind))
    if hook is None:
        raise UnknownInteractionError(f"Unknown interaction kind '{kind}'.")
    return hook(state, payload if isinstance(payload, Mapping) else {}, rng)
