"""
Raw detector output model.

SSD-style detectors emit four tensors per frame: boxes, classes, scores and
a detection count. Shapes are fixed by the model, not discovered at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

# Fixed output capacity of the detector.
MAX_DETECTIONS = 10


@dataclass(frozen=True)
class RawModelOutput:
    """
    Flattened output tensors for one frame.

    Attributes:
        boxes: Normalized [ymin, xmin, ymax, xmax] groups, flat.
        classes: Class index per slot (may be non-integer).
        scores: Confidence per slot.
        count: Number of valid slots reported by the model.
    """
    boxes: np.ndarray
    classes: np.ndarray
    scores: np.ndarray
    count: float

    @classmethod
    def from_tensors(cls, tensors: Optional[Sequence[Any]]) -> Optional["RawModelOutput"]:
        """
        Adapter: Build from the interpreter's output list.

        Returns None when fewer than four tensors are present or they are
        not numeric.
        """
        if tensors is None or len(tensors) < 4:
            return None

        try:
            boxes, classes, scores, count = (
                np.asarray(t, dtype=np.float64).reshape(-1) for t in tensors[:4]
            )
        except (TypeError, ValueError):
            return None

        return cls(
            boxes=boxes,
            classes=classes,
            scores=scores,
            count=float(count[0]) if count.size else 0.0,
        )

    @property
    def capacity(self) -> int:
        """Number of slots that can be read from every tensor."""
        return min(len(self.boxes) // 4, len(self.classes), len(self.scores))
