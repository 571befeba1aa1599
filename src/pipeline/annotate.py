"""
Overlay drawing for the local preview window.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import cv2
import numpy as np

from models.detection import Detection

COLOR_BOX = (0, 255, 0)  # Green (BGR)
COLOR_TEXT = (0, 0, 0)
COLOR_STATS = (255, 255, 255)


def draw_detections(
    frame: np.ndarray,
    detections: Iterable[Detection],
    scale: Tuple[float, float] = (1.0, 1.0),
) -> np.ndarray:
    """
    Draw boxes with "label (NN%)" captions in place.

    scale maps target-resolution coordinates onto the frame when the two
    differ, as (sx, sy).
    """
    sx, sy = scale
    font = cv2.FONT_HERSHEY_SIMPLEX
    for det in detections:
        x1, y1, x2, y2 = det.box.as_xyxy()
        p1 = (int(x1 * sx), int(y1 * sy))
        p2 = (int(x2 * sx), int(y2 * sy))
        cv2.rectangle(frame, p1, p2, COLOR_BOX, 2)

        # Label sits above the box, on a filled background
        (tw, th), _ = cv2.getTextSize(det.caption, font, 0.5, 1)
        top = max(0, p1[1] - th - 6)
        cv2.rectangle(frame, (p1[0], top), (p1[0] + tw + 4, top + th + 6), COLOR_BOX, -1)
        cv2.putText(frame, det.caption, (p1[0] + 2, top + th + 2), font, 0.5, COLOR_TEXT, 1)
    return frame


def draw_stats(frame: np.ndarray, detection_count: int, fps: Optional[int], threshold: float) -> np.ndarray:
    """Draw the detections/FPS/confidence readout in the top-left corner."""
    lines = [
        f"Detections: {detection_count}",
        f"FPS: {fps if fps is not None else 0}",
        f"Confidence: {int(threshold * 100 + 0.5)}%",
    ]
    for i, text in enumerate(lines):
        cv2.putText(frame, text, (10, 24 + i * 22), cv2.FONT_HERSHEY_SIMPLEX, 0.6, COLOR_STATS, 2)
    return frame
