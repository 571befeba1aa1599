"""
Typed models for the detection overlay.

Use the adapter functions to convert from raw tensors and config dicts.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox, FrameResult, detections_to_dicts
from .raw_output import RawModelOutput, MAX_DETECTIONS
from .config import (
    Config,
    CameraConfig,
    ModelConfig,
    OverlayConfig,
    PipelineSettings,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    "FrameResult",
    "detections_to_dicts",
    # Inference output
    "RawModelOutput",
    "MAX_DETECTIONS",
    # Config
    "Config",
    "CameraConfig",
    "ModelConfig",
    "OverlayConfig",
    "PipelineSettings",
    "WebConfig",
]
