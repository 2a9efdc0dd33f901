"""Game state model for Idle Coding Legend."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .settings import GameSettings
from .timekeeping import normalize_amount, normalize_tick_counter

DEFAULT_CHARACTER_NAME = "Code Hero"
BASE_EXPERIENCE_TO_NEXT = 100
EXPERIENCE_PER_LEVEL = 50

STAT_KEYS = ("hand_speed", "algorithm", "iteration")
DEFAULT_STATS: Mapping[str, int] = {"hand_speed": 1, "algorithm": 5, "iteration": 3}
DEFAULT_UPGRADE_COSTS: Mapping[str, int] = {"hand_speed": 50, "algorithm": 30, "iteration": 40}
EQUIPMENT_SLOTS = ("keyboard", "ide_extension", "debugger", "coffee_machine")


class BugType(str, Enum):
    NULL_POINTER = "NullPointerException"
    MEMORY_LEAK = "MemoryLeak"
    INFINITE_LOOP = "InfiniteLoop"
    SYNTAX_ERROR = "SyntaxError"
    RUNTIME_ERROR = "RuntimeError"


BUG_NAMES: Mapping[BugType, str] = {
    BugType.NULL_POINTER: "Null Pointer Fiend",
    BugType.MEMORY_LEAK: "Memory Leak Worm",
    BugType.INFINITE_LOOP: "Infinite Loop Demon",
    BugType.SYNTAX_ERROR: "Syntax Error Sprite",
    BugType.RUNTIME_ERROR: "Runtime Exception Beast",
}


def experience_for_level(level: int) -> int:
    return BASE_EXPERIENCE_TO_NEXT + (max(int(level), 1) - 1) * EXPERIENCE_PER_LEVEL


def upgrade_cost_after(initial_cost: int, purchases: int) -> int:
    """floor(initial_cost * 1.5 ** purchases), computed exactly in integers.

    The editor extension floored after every purchase instead, so from the
    third purchase on the two disagree (30 gives 101 here, 100 there). A
    stored cost of 100 is read back as three purchases and next costs 151.
    """
    purchases = max(int(purchases), 0)
    return initial_cost * 3**purchases // 2**purchases


def infer_purchases(cost: int, initial_cost: int, *, limit: int = 200) -> int:
    """Purchase count for a stored cost from saves that predate the counter."""
    purchases = 0
    while purchases < limit and upgrade_cost_after(initial_cost, purchases) < cost:
        purchases += 1
    return purchases


def overlay_known(base: Any, known: Mapping[str, Any]) -> Dict[str, Any]:
    """Lay normalized fields over a stored dict, keeping keys we do not model."""
    merged = copy.deepcopy(dict(base)) if isinstance(base, Mapping) else {}
    for key, value in known.items():
        existing = merged.get(key)
        if isinstance(value, Mapping) and isinstance(existing, Mapping):
            merged[key] = overlay_known(existing, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _section(data: Any, key: str) -> Dict[str, Any]:
    if not isinstance(data, Mapping):
        return {}
    value = data.get(key)
    return dict(value) if isinstance(value, Mapping) else {}


def _int_at_least(value: Any, default: int, minimum: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(number, minimum)


@dataclass
class Character:
    name: str = DEFAULT_CHARACTER_NAME
    level: int = 1
    experience: int = 0
    experience_to_next: int = BASE_EXPERIENCE_TO_NEXT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "level": self.level,
            "experience": self.experience,
            "experience_to_next": self.experience_to_next,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Character":
        name = data.get("name")
        level = _int_at_least(data.get("level"), 1, 1)
        return cls(
            name=name if isinstance(name, str) and name.strip() else DEFAULT_CHARACTER_NAME,
            level=level,
            experience=normalize_tick_counter(data.get("experience", 0)),
            experience_to_next=experience_for_level(level),
        )


@dataclass
class Resources:
    lines_of_code: float = 0.0
    bug_fragments: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"lines_of_code": self.lines_of_code, "bug_fragments": self.bug_fragments}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Resources":
        return cls(
            lines_of_code=normalize_amount(data.get("lines_of_code", 0.0)),
            bug_fragments=normalize_tick_counter(data.get("bug_fragments", 0)),
        )


@dataclass
class StatBlock:
    """Per-stat integers: stat levels, upgrade costs and purchase counts."""

    hand_speed: int
    algorithm: int
    iteration: int

    def get(self, key: str) -> int:
        return getattr(self, key)

    def set(self, key: str, value: int) -> None:
        setattr(self, key, value)

    def to_dict(self) -> Dict[str, int]:
        return {key: self.get(key) for key in STAT_KEYS}

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], defaults: Mapping[str, int], *, minimum: int = 1
    ) -> "StatBlock":
        return cls(**{key: _int_at_least(data.get(key), defaults[key], minimum) for key in STAT_KEYS})


@dataclass
class EquipmentSlot:
    level: int = 1
    owned: bool = False

    def bonus(self, per_level: float) -> float:
        if not self.owned:
            return 0.0
        return self.level * per_level

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "owned": self.owned}

    @classmethod
    def from_dict(cls, data: Any) -> "EquipmentSlot":
        if not isinstance(data, Mapping):
            return cls()
        owned = data.get("owned", False)
        return cls(
            level=_int_at_least(data.get("level"), 1, 1),
            owned=owned if isinstance(owned, bool) else False,
        )


@dataclass
class Statistics:
    total_lines_generated: float = 0.0
    total_bugs_defeated: int = 0
    total_play_time: int = 0
    keystrokes: int = 0
    files_opened: int = 0
    files_saved: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_lines_generated": self.total_lines_generated,
            "total_bugs_defeated": self.total_bugs_defeated,
            "total_play_time": self.total_play_time,
            "keystrokes": self.keystrokes,
            "files_opened": self.files_opened,
            "files_saved": self.files_saved,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Statistics":
        return cls(
            total_lines_generated=normalize_amount(data.get("total_lines_generated", 0.0)),
            total_bugs_defeated=normalize_tick_counter(data.get("total_bugs_defeated", 0)),
            total_play_time=normalize_tick_counter(data.get("total_play_time", 0)),
            keystrokes=normalize_tick_counter(data.get("keystrokes", 0)),
            files_opened=normalize_tick_counter(data.get("files_opened", 0)),
            files_saved=normalize_tick_counter(data.get("files_saved", 0)),
        )


@dataclass
class Reward:
    lines_of_code: int = 0
    bug_fragments: int = 0
    experience: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "lines_of_code": self.lines_of_code,
            "bug_fragments": self.bug_fragments,
            "experience": self.experience,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Reward":
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            lines_of_code=normalize_tick_counter(data.get("lines_of_code", 0)),
            bug_fragments=normalize_tick_counter(data.get("bug_fragments", 0)),
            experience=normalize_tick_counter(data.get("experience", 0)),
        )


@dataclass
class Bug:
    name: str
    bug_type: BugType
    health: int
    max_health: int
    algorithm: int
    iteration: int
    reward: Reward = field(default_factory=Reward)
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        known = {
            "name": self.name,
            "type": self.bug_type.value,
            "health": self.health,
            "max_health": self.max_health,
            "algorithm": self.algorithm,
            "iteration": self.iteration,
            "reward": self.reward.to_dict(),
        }
        return overlay_known(self.extras, known)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Bug"]:
        """Rebuild a saved bug; unrecognised types or dead bugs yield ``None``."""
        if not isinstance(data, Mapping):
            return None
        try:
            bug_type = BugType(data.get("type"))
        except ValueError:
            return None
        saved_health = _int_at_least(data.get("health"), 0, 0)
        max_health = _int_at_least(data.get("max_health"), max(saved_health, 1), 1)
        health = _int_at_least(data.get("health"), max_health, 0)
        if health <= 0:
            return None
        name = data.get("name")
        return cls(
            name=name if isinstance(name, str) and name else BUG_NAMES[bug_type],
            bug_type=bug_type,
            health=min(health, max_health),
            max_health=max_health,
            algorithm=_int_at_least(data.get("algorithm"), 0, 0),
            iteration=_int_at_least(data.get("iteration"), 0, 0),
            reward=Reward.from_dict(data.get("reward")),
            extras=copy.deepcopy(dict(data)),
        )


@dataclass
class Battle:
    current_bug: Optional[Bug] = None

    @property
    def is_in_battle(self) -> bool:
        return self.current_bug is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_bug": self.current_bug.to_dict() if self.current_bug else None,
            "is_in_battle": self.is_in_battle,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Battle":
        return cls(current_bug=Bug.from_dict(data.get("current_bug")))


def _default_stats() -> StatBlock:
    return StatBlock(**DEFAULT_STATS)


def _default_costs() -> StatBlock:
    return StatBlock(**DEFAULT_UPGRADE_COSTS)


def _no_purchases() -> StatBlock:
    return StatBlock(hand_speed=0, algorithm=0, iteration=0)


def _purchases_from(data: Mapping[str, Any], costs: StatBlock) -> StatBlock:
    saved = _section(data, "upgrade_purchases")
    inferred = {
        key: infer_purchases(costs.get(key), DEFAULT_UPGRADE_COSTS[key]) for key in STAT_KEYS
    }
    return StatBlock.from_dict(saved, inferred, minimum=0)


def _default_equipment() -> Dict[str, EquipmentSlot]:
    return {slot: EquipmentSlot() for slot in EQUIPMENT_SLOTS}



def _stored_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    stored = copy.deepcopy(dict(data))
    battle = stored.get("battle")
    if isinstance(battle, dict):
        # The live bug keeps its own stored fields; a new bug starts clean.
        battle.pop("current_bug", None)
    return stored


@dataclass
class GameState:
    character: Character = field(default_factory=Character)
    resources: Resources = field(default_factory=Resources)
    stats: StatBlock = field(default_factory=_default_stats)
    upgrade_costs: StatBlock = field(default_factory=_default_costs)
    upgrade_purchases: StatBlock = field(default_factory=_no_purchases)
    equipment: Dict[str, EquipmentSlot] = field(default_factory=_default_equipment)
    statistics: Statistics = field(default_factory=Statistics)
    battle: Battle = field(default_factory=Battle)
    settings: GameSettings = field(default_factory=GameSettings)
    # The stored payload this state was read from. to_dict lays the known
    # fields over it so keys this version does not model survive at any depth.
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        known = {
            "character": self.character.to_dict(),
            "resources": self.resources.to_dict(),
            "stats": self.stats.to_dict(),
            "upgrade_costs": self.upgrade_costs.to_dict(),
            "upgrade_purchases": self.upgrade_purchases.to_dict(),
            "equipment": {slot: item.to_dict() for slot, item in self.equipment.items()},
            "statistics": self.statistics.to_dict(),
            "battle": self.battle.to_dict(),
            "settings": self.settings.to_dict(),
        }
        return overlay_known(self.extras, known)

    @classmethod
    def from_dict(cls, data: Any) -> "GameState":
        if not isinstance(data, Mapping):
            return cls()
        equipment_data = _section(data, "equipment")
        equipment = {slot: EquipmentSlot.from_dict(equipment_data.get(slot)) for slot in EQUIPMENT_SLOTS}
        costs = StatBlock.from_dict(_section(data, "upgrade_costs"), DEFAULT_UPGRADE_COSTS)
        return cls(
            character=Character.from_dict(_section(data, "character")),
            resources=Resources.from_dict(_section(data, "resources")),
            stats=StatBlock.from_dict(_section(data, "stats"), DEFAULT_STATS),
            upgrade_costs=costs,
            upgrade_purchases=_purchases_from(data, costs),
            equipment=equipment,
            statistics=Statistics.from_dict(_section(data, "statistics")),
            battle=Battle.from_dict(_section(data, "battle")),
            settings=GameSettings.from_dict(_section(data, "settings")),
            extras=_stored_payload(data),
        )


def default_state() -> GameState:
    return GameState()


def default_state_dict() -> Dict[str, Any]:
    return default_state().to_dict()
