"""Owner of the canonical game state."""

from __future__ import annotations

import sys
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional

from .combat import resolve_battle, try_spawn
from .events import GameEvent, Notifier, notifications_for
from .interactions import record_interaction
from .persistence import SaveError, Storage
from .progression import accrue, buy_upgrade, check_level_up
from .rng import RandomSource, make_rng
from .save_migrations import migrate_save_payload
from .settings import GameSettings
from .state import GameState, default_state

SAVE_KEY = "idle-coding-legend"


def _print_stderr(message: str) -> None:
    print(message, file=sys.stderr)


class StateStore:
    """Single writer for one ``GameState``.

    Every public method takes the same re-entrant lock, so a tick and an
    editor hook never interleave while both touch lines of code or
    experience. Persistence problems are reported through ``print_func``
    and never reach the caller.
    """

    def __init__(
        self,
        storage: Storage,
        *,
        rng: Optional[RandomSource] = None,
        notifier: Optional[Notifier] = None,
        save_key: str = SAVE_KEY,
        print_func: Callable[[str], None] = _print_stderr,
    ) -> None:
        self.storage = storage
        self.rng = rng if rng is not None else make_rng()
        self.notifier = notifier
        self.save_key = save_key
        self.print = print_func
        self._lock = threading.RLock()
        self._state = default_state()
        self.load()

    # ---------- Persistence ----------
    def load(self) -> GameState:
        with self._lock:
            try:
                blob = self.storage.load(self.save_key)
            except (SaveError, OSError) as err:
                self.print(f"[Load] Failed to read save '{self.save_key}': {err}. Starting fresh.")
                blob = None
            if blob is not None and not isinstance(blob, dict):
                self.print(f"[Load] Save '{self.save_key}' was not an object. Starting fresh.")
            self._state = GameState.from_dict(migrate_save_payload(blob))
            return self._state

    def save(self) -> bool:
        with self._lock:
            try:
                self.storage.save(self.save_key, self._state.to_dict())
            except (SaveError, OSError) as err:
                self.print(f"[Save] Failed to write save '{self.save_key}': {err}")
                return False
            return True

    def reset(self) -> None:
        with self._lock:
            self._state = default_state()
            self.save()

    # ---------- Reads ----------
    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._state.to_dict()

    # ---------- Mutations ----------
    def tick(self) -> List[GameEvent]:
        with self._lock:
            state = self._state
            events: List[GameEvent] = []
            accrue(state)
            defeated = resolve_battle(state)
            if defeated is not None:
                events.append(defeated)
            spawned = try_spawn(state, self.rng)
            if spawned is not None:
                events.append(spawned)
            events.extend(check_level_up(state))
            if state.settings.auto_save:
                self.save()
            self._notify(events)
            return events

    def advance(self, ticks: int) -> List[GameEvent]:
        with self._lock:
            events: List[GameEvent] = []
            for _ in range(max(int(ticks), 0)):
                events.extend(self.tick())
            return events

    def buy_upgrade(self, stat: str) -> bool:
        with self._lock:
            return buy_upgrade(self._state, stat)

    def record_interaction(
        self, kind: str, payload: Optional[Mapping[str, Any]] = None
    ) -> List[GameEvent]:
        with self._lock:
            events = record_interaction(self._state, kind, payload, self.rng)
            self._notify(events)
            return events

    def apply_settings(self, settings: GameSettings) -> None:
        with self._lock:
            self._state.settings = settings.copy()

    # ---------- Internal helpers ----------
    def _notify(self, events: List[GameEvent]) -> None:
        if self.notifier is None or not self._state.settings.show_notifications:
            return
        for notification in notifications_for(events):
            try:
                self.notifier(notification)
            except Exception as exc:  # host callback failures must not abort a tick
                self.print(f"[Notify] Notification hook failed: {exc}")
