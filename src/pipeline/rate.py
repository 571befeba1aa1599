"""
Frame rate tracking.

RateTracker turns successive frame timestamps into an instantaneous FPS
value. The first tick has no interval and emits nothing. A zero or negative
interval (coarse clock, clock step) also emits nothing and just moves the
baseline forward.
"""

from __future__ import annotations

import math
import threading
from typing import Optional


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RateTracker:
    """
    Instantaneous FPS from consecutive tick timestamps (milliseconds).

    Owned by the frame-processing loop. The lock keeps ticks consistent
    if more than one thread ever drives the same tracker.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_ms: Optional[float] = None
        self._last_fps: Optional[int] = None

    @property
    def last_timestamp(self) -> Optional[float]:
        return self._last_ms

    @property
    def last_fps(self) -> Optional[int]:
        """Most recently emitted rate, None before the second tick."""
        return self._last_fps

    def tick(self, now_ms: float) -> Optional[int]:
        """
        Record a frame at now_ms.

        Returns:
            round(1000 / delta_ms), or None on the first tick and on
            degenerate (<= 0) intervals.
        """
        with self._lock:
            last = self._last_ms
            self._last_ms = now_ms
            if last is None:
                return None

            delta = now_ms - last
            if delta <= 0:
                return None

            fps = round_half_up(1000.0 / delta)
            self._last_fps = fps
            return fps

    def reset(self) -> None:
        """Forget the last sample (new capture session)."""
        with self._lock:
            self._last_ms = None
            self._last_fps = None
