"""Bug encounters: spawning, per-tick damage and victory rewards."""

from __future__ import annotations

from typing import Optional

from .events import BUG_DEFEATED, BUG_SPAWNED, GameEvent
from .rng import RandomSource
from .state import BUG_NAMES, Bug, BugType, GameState, Reward

# Chance per idle tick that a bug appears.
SPAWN_CHANCE = 0.1

BUG_TYPES = tuple(BugType)


def create_bug(bug_type: BugType, level: int) -> Bug:
    health = 10 + level * 5
    algorithm = 5 + level * 2
    base_reward = max(1, level // 2)
    return Bug(
        name=BUG_NAMES[bug_type],
        bug_type=bug_type,
        health=health,
        max_health=health,
        algorithm=algorithm,
        iteration=algorithm // 5,
        reward=Reward(
            lines_of_code=base_reward * 10,
            bug_fragments=base_reward,
            experience=base_reward * 5,
        ),
    )


def try_spawn(state: GameState, rng: RandomSource) -> Optional[GameEvent]:
    if state.battle.is_in_battle:
        return None
    if rng.random() >= SPAWN_CHANCE:
        return None
    bug = create_bug(rng.choice(BUG_TYPES), state.character.level)
    state.battle.current_bug = bug
    return GameEvent(
        kind=BUG_SPAWNED,
        message=f"A wild {bug.name} appeared!",
        data={"type": bug.bug_type.value, "health": bug.health},
    )


def compute_damage(algorithm: int, bug_iteration: int) -> int:
    return max(1, algorithm - bug_iteration)


def fragments_with_bonus(base_fragments: int, iteration: int) -> int:
    # floor(base * iteration * 0.1)
    return base_fragments + base_fragments * iteration // 10


def resolve_battle(state: GameState) -> Optional[GameEvent]:
    """Deal one tick of damage; returns the victory event when the bug falls."""
    bug = state.battle.current_bug
    if bug is None:
        return None
    bug.health -= compute_damage(state.stats.algorithm, bug.iteration)
    if bug.health > 0:
        # Bugs do not strike back: the player has no health pool.
        return None
    return defeat_bug(state, bug)


def defeat_bug(state: GameState, bug: Bug) -> GameEvent:
    reward = bug.reward
    fragments = fragments_with_bonus(reward.bug_fragments, state.stats.iteration)
    state.resources.lines_of_code += reward.lines_of_code
    state.resources.bug_fragments += fragments
    state.character.experience += reward.experience
    state.statistics.total_bugs_defeated += 1
    state.battle.current_bug = None
    return GameEvent(
        kind=BUG_DEFEATED,
        message=(
            f"Defeated {bug.name}! Gained {reward.lines_of_code} LoC "
            f"and {fragments} bug fragments."
        ),
        data={
            "type": bug.bug_type.value,
            "lines_of_code": reward.lines_of_code,
            "bug_fragments": fragments,
            "experience": reward.experience,
        },
    )
