"""
Market window timing.

Windows are aligned to the Unix epoch in window_minutes steps, so a
15-minute window always starts at :00, :15, :30 or :45 UTC.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

MS_PER_MINUTE = 60_000


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


@dataclass(frozen=True)
class WindowTiming:
    start: datetime
    end: datetime
    elapsed_ms: int
    remaining_ms: int
    elapsed_minutes: float
    remaining_minutes: float


def get_candle_window_timing(window_minutes: float = 15, now: Optional[datetime] = None) -> WindowTiming:
    """Locate `now` inside its window; elapsed_ms + remaining_ms is always the window length."""
    if window_minutes <= 0:
        raise ValueError("window_minutes must be positive")
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    window_ms = int(window_minutes * MS_PER_MINUTE)
    now_ms = int(now.timestamp() * 1000)
    start_ms = (now_ms // window_ms) * window_ms
    end_ms = start_ms + window_ms

    elapsed_ms = now_ms - start_ms
    remaining_ms = end_ms - now_ms

    return WindowTiming(
        start=datetime.fromtimestamp(start_ms / 1000, tz=timezone.utc),
        end=datetime.fromtimestamp(end_ms / 1000, tz=timezone.utc),
        elapsed_ms=elapsed_ms,
        remaining_ms=remaining_ms,
        elapsed_minutes=elapsed_ms / MS_PER_MINUTE,
        remaining_minutes=remaining_ms / MS_PER_MINUTE,
    )
