"""
Inference backend interface.

A backend is an opaque function from a fixed-size RGB pixel buffer to the
detector's raw output tensors: [boxes, classes, scores, count].
"""

from __future__ import annotations

from typing import List, Protocol

import numpy as np


class InferenceBackend(Protocol):
    input_size: tuple[int, int]

    def run(self, pixels: np.ndarray) -> List[np.ndarray]:
        ...
