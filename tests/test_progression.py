import math

import pytest

from idlegame.events import LEVEL_UP
from idlegame.progression import (
    UnknownStatError,
    accrue,
    buy_upgrade,
    check_level_up,
    production_per_tick,
    resolve_stat_key,
)
from idlegame.state import (
    DEFAULT_UPGRADE_COSTS,
    GameState,
    experience_for_level,
    infer_purchases,
    upgrade_cost_after,
)


def test_accrue_adds_production_and_play_time() -> None:
    state = GameState()
    accrue(state)
    assert state.resources.lines_of_code == 1
    assert state.statistics.total_lines_generated == 1
    assert state.statistics.total_play_time == 1


def test_ide_extension_boosts_production_only_when_owned() -> None:
    state = GameState()
    state.stats.hand_speed = 3
    state.equipment["ide_extension"].level = 2
    assert production_per_tick(state) == 3

    state.equipment["ide_extension"].owned = True
    assert production_per_tick(state) == pytest.approx(3.6)


def test_level_up_carries_over_remaining_experience() -> None:
    state = GameState()
    state.character.experience = 95 + 50

    events = check_level_up(state)

    assert state.character.level == 2
    assert state.character.experience == 45
    assert state.character.experience_to_next == 150
    assert [event.kind for event in events] == [LEVEL_UP]


def test_large_grant_below_second_threshold_gains_one_level() -> None:
    state = GameState()
    state.character.experience = 95 + 150

    events = check_level_up(state)

    assert len(events) == 1
    assert state.character.level == 2
    assert state.character.experience == 145
    assert state.character.experience < state.character.experience_to_next


def test_level_up_loops_over_several_thresholds() -> None:
    state = GameState()
    state.character.experience = 1000

    events = check_level_up(state)

    assert state.character.level == 6
    assert state.character.experience == 0
    assert state.character.experience_to_next == experience_for_level(6) == 350
    assert [event.data["level"] for event in events] == [2, 3, 4, 5, 6]
    assert state.stats.to_dict() == {"hand_speed": 6, "algorithm": 15, "iteration": 8}


@pytest.mark.parametrize("experience", [0, 1, 99, 100, 101, 249, 250, 5000, 123456])
def test_experience_always_ends_below_threshold(experience: int) -> None:
    state = GameState()
    state.character.experience = experience
    check_level_up(state)
    assert 0 <= state.character.experience < state.character.experience_to_next


def test_buy_upgrade_spends_and_raises_cost() -> None:
    state = GameState()
    state.resources.lines_of_code = 50

    assert buy_upgrade(state, "hand_speed") is True

    assert state.resources.lines_of_code == 0
    assert state.stats.hand_speed == 2
    assert state.upgrade_costs.hand_speed == 75
    assert state.upgrade_purchases.hand_speed == 1


def test_rejected_upgrade_changes_nothing() -> None:
    state = GameState()
    state.resources.lines_of_code = 29.5
    before = state.to_dict()

    assert buy_upgrade(state, "algorithm") is False
    assert state.to_dict() == before


@pytest.mark.parametrize("stat", ["hand_speed", "algorithm", "iteration"])
@pytest.mark.parametrize("purchases", [1, 2, 3, 4, 7])
def test_cost_follows_closed_form(stat: str, purchases: int) -> None:
    state = GameState()
    state.resources.lines_of_code = 1_000_000
    for _ in range(purchases):
        assert buy_upgrade(state, stat)

    initial = DEFAULT_UPGRADE_COSTS[stat]
    assert state.upgrade_costs.get(stat) == math.floor(initial * 1.5**purchases)
    assert state.resources.lines_of_code >= 0


def test_offense_and_iteration_upgrades_grant_two_points() -> None:
    state = GameState()
    state.resources.lines_of_code = 100
    assert buy_upgrade(state, "algorithm")
    assert buy_upgrade(state, "iteration")
    assert state.stats.algorithm == 7
    assert state.stats.iteration == 5
    assert state.resources.lines_of_code == 30


@pytest.mark.parametrize(
    ("alias", "stat"),
    [("computingPower", "hand_speed"), ("attack", "algorithm"), ("defense", "iteration")],
)
def test_legacy_upgrade_names_are_accepted(alias: str, stat: str) -> None:
    state = GameState()
    state.resources.lines_of_code = 100
    before = state.stats.get(stat)
    assert buy_upgrade(state, alias)
    assert state.stats.get(stat) > before


def test_unknown_stat_raises() -> None:
    with pytest.raises(UnknownStatError, match="luck"):
        buy_upgrade(GameState(), "luck")


@pytest.mark.parametrize(
    "alias, expected",
    [
        ("hand_speed", "hand_speed"),
        ("handSpeed", "hand_speed"),
        ("computingPower", "hand_speed"),
        ("attack", "algorithm"),
        ("defense", "iteration"),
    ],
)
def test_resolve_stat_key_accepts_legacy_names(alias: str, expected: str) -> None:
    assert resolve_stat_key(alias) == expected


def test_resolve_stat_key_rejects_unknown() -> None:
    with pytest.raises(UnknownStatError):
        resolve_stat_key("luck")


def test_closed_form_cost_and_inference() -> None:
    assert upgrade_cost_after(50, 0) == 50
    assert upgrade_cost_after(50, 1) == 75
    assert upgrade_cost_after(30, 3) == 101

    assert infer_purchases(30, 30) == 0
    assert infer_purchases(101, 30) == 3

    # A stored cost of 100 from per-purchase flooring reads as three purchases.
    assert infer_purchases(100, 30) == 3
    assert upgrade_cost_after(30, 4) == 151
