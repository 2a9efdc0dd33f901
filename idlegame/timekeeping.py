"""Tick cadence and counter helpers for Idle Coding Legend."""

from __future__ import annotations

TICK_INTERVAL_SECONDS = 1.0
MAX_CATCH_UP_TICKS = 8 * 60 * 60


def normalize_tick_counter(value: object) -> int:
    try:
        tick = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(tick, 0)


def normalize_amount(value: object, default: float = 0.0) -> float:
    try:
        amount = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if amount != amount or amount in (float("inf"), float("-inf")):
        return default
    return max(amount, 0.0)


def ticks_elapsed(
    seconds: float,
    *,
    interval: float = TICK_INTERVAL_SECONDS,
    limit: int = MAX_CATCH_UP_TICKS,
) -> int:
    """Whole ticks covered by ``seconds`` of wall time, capped at ``limit``."""
    interval = max(float(interval), 1e-6)
    try:
        ticks = int(float(seconds) // interval)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, min(ticks, int(limit)))
