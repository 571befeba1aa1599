"""
State shared between the frame-processing thread and the web server.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from models.detection import Detection, FrameResult
from pipeline.channel import LatestValue

DEFAULT_THRESHOLD = 0.5
MIN_THRESHOLD = 0.1
MAX_THRESHOLD = 0.9


class OverlayState:
    """
    Latest overlay results plus the user-adjustable confidence threshold.

    Results go through a LatestValue cell: newer frames overwrite older
    ones and a late result for an older frame is dropped.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        min_threshold: float = MIN_THRESHOLD,
        max_threshold: float = MAX_THRESHOLD,
    ):
        self.min_threshold = min_threshold
        self.max_threshold = max_threshold
        self._threshold_lock = threading.Lock()
        self._threshold = self._clamp(threshold)
        self._results: LatestValue[FrameResult] = LatestValue()
        self._stats_lock = threading.Lock()
        self.system_stats: Dict[str, Any] = {
            "fps": 0,
            "frames_processed": 0,
            "start_time": time.time(),
            "last_frame_ts": None,
            "model_loaded": False,
        }

    def _clamp(self, value: float) -> float:
        return max(self.min_threshold, min(self.max_threshold, float(value)))

    @property
    def threshold(self) -> float:
        with self._threshold_lock:
            return self._threshold

    def set_threshold(self, value: float) -> float:
        """Set the threshold, clamped into [min_threshold, max_threshold]."""
        clamped = self._clamp(value)
        with self._threshold_lock:
            self._threshold = clamped
        return clamped

    def in_range(self, value: float) -> bool:
        return self.min_threshold <= value <= self.max_threshold

    def publish(self, result: FrameResult) -> bool:
        """Store a frame result; returns False if it was stale."""
        stored = self._results.publish(result.frame_index, result)
        if not stored:
            return False
        with self._stats_lock:
            self.system_stats["frames_processed"] += 1
            self.system_stats["last_frame_ts"] = time.time()
            if result.fps is not None:
                self.system_stats["fps"] = result.fps
        return True

    def latest(self) -> Optional[FrameResult]:
        return self._results.get()

    def latest_detections(self) -> Tuple[int, List[Detection]]:
        """Return (frame_index, detections); (-1, []) before any frame."""
        seq, result = self._results.snapshot()
        if result is None:
            return seq, []
        return seq, list(result.detections)

    def set_model_loaded(self, loaded: bool) -> None:
        with self._stats_lock:
            self.system_stats["model_loaded"] = bool(loaded)

    def get_system_stats_copy(self) -> Dict[str, Any]:
        with self._stats_lock:
            return dict(self.system_stats)


# Global instance
state = OverlayState()
