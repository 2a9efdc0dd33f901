from typing import Any, Dict, Iterable, List, Optional, Sequence

import pytest


class ScriptedRandom:
    """Replays fixed rolls; once a script runs out it returns values that trigger nothing."""

    def __init__(
        self,
        rolls: Iterable[float] = (),
        *,
        choices: Iterable[int] = (),
        ranges: Iterable[int] = (),
    ) -> None:
        self.rolls: List[float] = list(rolls)
        self.choices: List[int] = list(choices)
        self.ranges: List[int] = list(ranges)

    def random(self) -> float:
        return self.rolls.pop(0) if self.rolls else 0.999

    def choice(self, seq: Sequence[Any]) -> Any:
        index = self.choices.pop(0) if self.choices else 0
        return seq[index]

    def randrange(self, start: int, stop: Optional[int] = None) -> int:
        if stop is None:
            start, stop = 0, start
        value = self.ranges.pop(0) if self.ranges else 0
        assert start <= start + value < stop
        return start + value


@pytest.fixture
def quiet_rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def legacy_blob() -> Dict[str, Any]:
    """A save as written by the first editor-extension release, before the stat rename."""
    return {
        "character": {"name": "Ada", "level": 3, "experience": 40, "experienceToNext": 200},
        "resources": {"linesOfCode": 120.5, "bugFragments": 7},
        "stats": {"computingPower": 4, "attack": 9, "defense": 5},
        "upgradeCosts": {"computingPower": 75, "attack": 45, "defense": 60},
        "equipment": {
            "keyboard": {"level": 2, "owned": True},
            "ideExtension": {"level": 1, "owned": False},
            "debugger": {"level": 1, "owned": False},
            "coffeeMachine": {"level": 1, "owned": False},
        },
        "statistics": {
            "totalLinesGenerated": 300,
            "totalBugsDefeated": 4,
            "totalPlayTime": 250,
            "keystrokes": 80,
            "filesOpened": 3,
            "filesSaved": 2,
        },
        "battle": {
            "currentBug": {
                "name": "Memory Leak Worm",
                "type": "MemoryLeak",
                "health": 12,
                "maxHealth": 25,
                "attack": 11,
                "defense": 2,
                "reward": {"linesOfCode": 10, "bugFragments": 1, "experience": 5},
            },
            "isInBattle": True,
        },
        "settings": {"autoSave": True, "showNotifications": False},
    }
