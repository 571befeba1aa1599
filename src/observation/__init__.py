"""
Frame input layer.

Sources hide where frames come from (camera, stream, file) and hand the
pipeline FrameData objects.
"""

from .base import FrameSource, SourceConfig
from .opencv_source import OpenCVFrameSource, OpenCVSourceConfig, now_ms

__all__ = [
    "FrameSource",
    "SourceConfig",
    "OpenCVFrameSource",
    "OpenCVSourceConfig",
    "now_ms",
]
