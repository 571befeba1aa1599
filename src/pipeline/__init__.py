"""
Pipeline module for the detection overlay.

The pipeline orchestrates the per-frame flow:
- Frame acquisition from a FrameSource
- Rate tracking
- Preprocessing and inference
- Output decoding and publishing to the shared overlay state
"""

from .engine import OverlayEngine, PipelineConfig, create_engine_from_config
from .rate import RateTracker
from .channel import LatestValue

__all__ = [
    "OverlayEngine",
    "PipelineConfig",
    "create_engine_from_config",
    "RateTracker",
    "LatestValue",
]
