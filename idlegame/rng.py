"""
idlegame.rng
Injectable randomness for the engine.

Every roll in the engine goes through a ``RandomSource`` so callers can
swap in a seeded ``random.Random`` or a scripted sequence.
"""

from __future__ import annotations

import hashlib
import json
import random
from typing import Any, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...

    def randrange(self, start: int, stop: int = ...) -> int: ...


def stable_int_seed(*parts: Any, salt: str = "idle-coding-legend") -> int:
    """Return a 32-bit seed from arbitrary inputs, stable across processes.

    Python's ``hash()`` is randomized per process, so the parts are
    serialized to canonical JSON and hashed with SHA-256 instead.
    """
    payload = json.dumps(parts, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
    digest = hashlib.sha256((salt + "|" + payload).encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big", signed=False)


def make_rng(seed: Optional[Any] = None) -> random.Random:
    """Seeded generator when ``seed`` is given, OS-seeded otherwise."""
    if seed is None:
        return random.Random()
    return random.Random(stable_int_seed(seed))
