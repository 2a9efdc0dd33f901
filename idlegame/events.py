"""Notable occurrences produced by the engine and the notification hook."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List

INFO = "info"
WARNING = "warning"

LEVEL_UP = "level_up"
BUG_SPAWNED = "bug_spawned"
BUG_DEFEATED = "bug_defeated"
HAZARD_DETECTED = "hazard_detected"

# Events surfaced to the player; spawns are visible in snapshots instead.
NOTIFIED_KINDS = {LEVEL_UP, BUG_DEFEATED, HAZARD_DETECTED}


@dataclass(frozen=True)
class GameEvent:
    kind: str
    message: str
    severity: str = INFO
    data: Dict[str, Any] = field(default_factory=dict)

    def to_notification(self) -> "Notification":
        return Notification(kind=self.severity, message=self.message)


@dataclass(frozen=True)
class Notification:
    kind: str
    message: str


Notifier = Callable[[Notification], None]


def notifications_for(events: Iterable[GameEvent]) -> List[Notification]:
    return [event.to_notification() for event in events if event.kind in NOTIFIED_KINDS]
