"""
SSD output decoder.

Turns the detector's raw tensors into screen-space Detection records:
- count is clamped to MAX_DETECTIONS
- scores below the threshold are skipped (a score equal to it is kept)
- class indices are floored and resolved through the label table
- boxes arrive as normalized [ymin, xmin, ymax, xmax]

The box clamp is one-sided: x/y are floored at 0 and width/height are capped
at the target size independently, so x + width may exceed the target width.
Renderers tolerate the overflow.

Pure function; safe to call concurrently for independent frames.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence, Union

from inference.labels import LabelTable, fallback_label
from models.detection import BoundingBox, Detection
from models.raw_output import MAX_DETECTIONS, RawModelOutput


def _valid_count(raw: RawModelOutput) -> int:
    count = raw.count
    if count != count or count <= 0:  # NaN or empty
        return 0
    limit = min(MAX_DETECTIONS, raw.capacity)
    # Fractional counts cover every slot index below them.
    return limit if count >= limit else int(math.ceil(count))


def decode(
    raw: Union[RawModelOutput, Sequence[Any], None],
    target_width: float,
    target_height: float,
    threshold: float,
    labels: Optional[LabelTable] = None,
    frame_index: int = 0,
) -> List[Detection]:
    """
    Decode raw model output into detections.

    Args:
        raw: RawModelOutput, or the interpreter's list of four tensors.
        target_width: Width of the render surface in pixels.
        target_height: Height of the render surface in pixels.
        threshold: Minimum confidence to keep a detection.
        labels: Class label table; None resolves every class to "Class N".
        frame_index: Used to build per-frame detection ids.

    Returns:
        Detections in ascending source-slot order. Empty for malformed input.
    """
    if not isinstance(raw, RawModelOutput):
        raw = RawModelOutput.from_tensors(raw)
        if raw is None:
            return []

    boxes, classes, scores = raw.boxes, raw.classes, raw.scores
    out: List[Detection] = []

    for i in range(_valid_count(raw)):
        score = float(scores[i])
        if score != score or score < threshold:
            continue

        raw_class = float(classes[i])
        if math.isfinite(raw_class):
            class_index = int(math.floor(raw_class))
            label = labels.lookup(class_index) if labels is not None else fallback_label(class_index)
        else:
            # Unusable class value: keep the box, label it from the raw value
            class_index = -1
            label = fallback_label(raw_class)

        ymin, xmin, ymax, xmax = (float(v) for v in boxes[i * 4:i * 4 + 4])

        out.append(
            Detection(
                id=f"{frame_index}-{i}",
                label=label,
                confidence=score,
                box=BoundingBox(
                    x=max(0.0, xmin * target_width),
                    y=max(0.0, ymin * target_height),
                    width=min(target_width, (xmax - xmin) * target_width),
                    height=min(target_height, (ymax - ymin) * target_height),
                ),
                class_id=class_index,
            )
        )

    return out
