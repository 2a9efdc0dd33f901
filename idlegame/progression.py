"""Resource accrual, leveling and stat upgrades."""

from __future__ import annotations

from typing import List, Mapping

from .events import LEVEL_UP, GameEvent
from .state import (
    DEFAULT_UPGRADE_COSTS,
    STAT_KEYS,
    GameState,
    experience_for_level,
    upgrade_cost_after,
)

IDE_EXTENSION_BONUS_PER_LEVEL = 0.1

UPGRADE_GAINS: Mapping[str, int] = {"hand_speed": 1, "algorithm": 2, "iteration": 2}
LEVEL_UP_GAINS: Mapping[str, int] = {"hand_speed": 1, "algorithm": 2, "iteration": 1}

STAT_ALIASES: Mapping[str, str] = {
    "handSpeed": "hand_speed",
    "computingPower": "hand_speed",
    "computing_power": "hand_speed",
    "attack": "algorithm",
    "defense": "iteration",
}


class UnknownStatError(ValueError):
    """Raised when an upgrade names a stat the engine does not have."""


def resolve_stat_key(stat: str) -> str:
    key = STAT_ALIASES.get(stat, stat)
    if key not in STAT_KEYS:
        raise UnknownStatError(f"Unknown stat '{stat}'.")
    return key


def production_per_tick(state: GameState) -> float:
    bonus = state.equipment["ide_extension"].bonus(IDE_EXTENSION_BONUS_PER_LEVEL)
    return state.stats.hand_speed * (1 + bonus)


def accrue(state: GameState) -> float:
    produced = production_per_tick(state)
    state.resources.lines_of_code += produced
    state.statistics.total_lines_generated += produced
    state.statistics.total_play_time += 1
    return produced


def check_level_up(state: GameState) -> List[GameEvent]:
    character = state.character
    events: List[GameEvent] = []
    # Loop: a single large grant can cross several thresholds.
    while character.experience >= character.experience_to_next:
        character.experience -= character.experience_to_next
        character.level += 1
        character.experience_to_next = experience_for_level(character.level)
        for key, gain in LEVEL_UP_GAINS.items():
            state.stats.set(key, state.stats.get(key) + gain)
        events.append(
            GameEvent(
                kind=LEVEL_UP,
                message=f"Congratulations! Reached level {character.level}!",
                data={"level": character.level},
            )
        )
    return events


def buy_upgrade(state: GameState, stat: str) -> bool:
    """Spend lines of code on ``stat``. Returns False, changing nothing, if unaffordable."""
    key = resolve_stat_key(stat)
    cost = state.upgrade_costs.get(key)
    if state.resources.lines_of_code < cost:
        return False
    state.resources.lines_of_code -= cost
    state.stats.set(key, state.stats.get(key) + UPGRADE_GAINS[key])
    purchases = state.upgrade_purchases.get(key) + 1
    state.upgrade_purchases.set(key, purchases)
    state.upgrade_costs.set(key, upgrade_cost_after(DEFAULT_UPGRADE_COSTS[key], purchases))
    return True
