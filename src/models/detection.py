"""
Detection models for decoded overlay results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A screen-space box in target-resolution pixels.

    Attributes:
        x: Left edge.
        y: Top edge.
        width: Box width.
        height: Box height.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x, self.y, self.x2, self.y2)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Detection:
    """
    One decoded detection.

    Attributes:
        id: Rendering key, unique within a frame.
        label: Resolved class label.
        confidence: Score reported by the model, unmodified.
        box: Screen-space bounding box.
        class_id: Floored class index from the model.
    """
    id: str
    label: str
    confidence: float
    box: BoundingBox
    class_id: int = -1

    @property
    def percent(self) -> int:
        """Confidence as a whole percentage, rounded half up."""
        return int(self.confidence * 100 + 0.5)

    @property
    def caption(self) -> str:
        return f"{self.label} ({self.percent}%)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "confidence": self.confidence,
            "class_id": self.class_id,
            "box": self.box.to_dict(),
        }


def detections_to_dicts(detections: List[Detection]) -> List[Dict[str, Any]]:
    """Adapter: Convert detections to JSON-friendly dicts."""
    return [d.to_dict() for d in detections]


@dataclass(frozen=True)
class FrameResult:
    """
    Decoded output of one processed frame.

    Attributes:
        frame_index: Sequence number of the processed frame.
        detections: Detections in source-slot order.
        timestamp: Capture time of the frame in milliseconds.
        fps: Rate emitted for this frame, None if none was emitted.
    """
    frame_index: int
    detections: Tuple[Detection, ...]
    timestamp: float
    fps: Optional[int] = None
