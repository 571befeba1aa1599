"""
Frame preprocessing for the detector input.
"""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np


def to_model_input(frame: np.ndarray, size: Tuple[int, int] = (300, 300)) -> np.ndarray:
    """
    Resize a BGR frame to the model input and convert to RGB uint8.

    Args:
        frame: BGR frame (H, W, 3).
        size: Model input as (width, height).

    Returns:
        Array of shape (1, height, width, 3), dtype uint8.
    """
    w, h = size
    resized = cv2.resize(frame, (int(w), int(h)), interpolation=cv2.INTER_LINEAR)
    rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
    return np.expand_dims(rgb.astype(np.uint8, copy=False), axis=0)
