"""
Single-slot result cell shared between the frame loop and readers.

Publishing overwrites the stored value; there is no queue. Each value is
tagged with the frame sequence that produced it and a publish carrying an
older sequence than the stored one is dropped, so readers never step
backwards to a stale frame.
"""

from __future__ import annotations

import threading
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class LatestValue(Generic[T]):
    def __init__(self, initial: Optional[T] = None):
        self._lock = threading.Lock()
        self._value: Optional[T] = initial
        self._seq = -1
        self._dropped = 0

    def publish(self, seq: int, value: T) -> bool:
        """
        Store value if seq is not older than the current one.

        Returns:
            True if stored, False if dropped as stale.
        """
        with self._lock:
            if seq < self._seq:
                self._dropped += 1
                return False
            self._seq = seq
            self._value = value
            return True

    def get(self) -> Optional[T]:
        with self._lock:
            return self._value

    def snapshot(self) -> Tuple[int, Optional[T]]:
        """Return (seq, value); seq is -1 before the first publish."""
        with self._lock:
            return self._seq, self._value

    @property
    def dropped(self) -> int:
        return self._dropped
