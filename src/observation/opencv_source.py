"""
OpenCV-based frame source.

Supports USB/CSI camera indices, stream URLs and video files. A back and a
front device can be configured; switch_facing() toggles between them and
mirrors the front camera.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np

from models.frame import FrameData
from .base import FrameSource, SourceConfig

DeviceId = Union[int, str]


def now_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass
class OpenCVSourceConfig(SourceConfig):
    """
    Configuration for OpenCV capture.

    Attributes:
        device_id: Default device (index, URL or file path).
        facing: "back" or "front".
        back_device_id: Device for the back camera (defaults to device_id).
        front_device_id: Device for the front camera. None = no front camera.
        flip_horizontal: Mirror every frame.
        buffer_size: Capture buffer size (1 keeps live feeds fresh).
        max_retries: Attempts to open the device before giving up.
    """
    device_id: DeviceId = 0
    facing: str = "back"
    back_device_id: Optional[DeviceId] = None
    front_device_id: Optional[DeviceId] = None
    flip_horizontal: bool = False
    buffer_size: int = 1
    max_retries: int = 3

    @classmethod
    def from_camera_config(cls, camera_cfg: Dict[str, Any], source_id: str = "camera") -> "OpenCVSourceConfig":
        """Adapter: Create from the camera section of the config dict."""
        resolution = camera_cfg.get("resolution")
        if resolution:
            resolution = tuple(resolution)

        return cls(
            source_id=source_id,
            resolution=resolution,
            fps=camera_cfg.get("fps"),
            device_id=camera_cfg.get("device_id", 0),
            facing=camera_cfg.get("facing", "back"),
            back_device_id=camera_cfg.get("back_device_id"),
            front_device_id=camera_cfg.get("front_device_id"),
            flip_horizontal=camera_cfg.get("flip_horizontal", False),
            buffer_size=camera_cfg.get("buffer_size", 1),
            max_retries=camera_cfg.get("max_retries", 3),
        )


class OpenCVFrameSource(FrameSource):
    """
    Wraps cv2.VideoCapture and yields FrameData with millisecond timestamps.

    Example:
        with OpenCVFrameSource(OpenCVSourceConfig(device_id=0)) as source:
            for frame_data in source:
                process(frame_data.frame)
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._cv_config = config
        self._facing = config.facing
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def facing(self) -> str:
        return self._facing

    @property
    def device_id(self) -> DeviceId:
        cfg = self._cv_config
        if self._facing == "front" and cfg.front_device_id is not None:
            return cfg.front_device_id
        if cfg.back_device_id is not None:
            return cfg.back_device_id
        return cfg.device_id

    @property
    def can_switch_facing(self) -> bool:
        return True

    @property
    def is_file(self) -> bool:
        return isinstance(self.device_id, str) and os.path.exists(self.device_id)

    def open(self) -> None:
        if self._is_open:
            return

        self._initialize()
        self._is_open = True
        self._frame_index = 0
        logging.info(
            f"OpenCVFrameSource opened: source_id={self.source_id}, facing={self._facing}, "
            f"resolution={self._cv_config.resolution}"
        )

    def _initialize(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

        attempts = max(1, self._cv_config.max_retries)
        for attempt in range(attempts):
            if attempt > 0:
                wait_time = min(2 ** attempt, 10)
                logging.info(f"Retrying camera open (attempt {attempt + 1}/{attempts}) after {wait_time}s")
                time.sleep(wait_time)

            self._cap = cv2.VideoCapture(self.device_id)
            if self._cap.isOpened():
                break
            self._cap.release()
            logging.warning(f"Failed to open {self._facing} camera")
        else:
            raise RuntimeError(f"Failed to open {self._facing} camera after {attempts} attempts")

        if isinstance(self.device_id, int) and self._cv_config.resolution:
            w, h = self._cv_config.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if self._cv_config.fps:
                self._cap.set(cv2.CAP_PROP_FPS, self._cv_config.fps)
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._cv_config.buffer_size)

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            if self.is_file:
                logging.info("End of video file reached")
            return None

        frame = self._apply_transforms(frame)
        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=now_ms(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def _apply_transforms(self, frame: np.ndarray) -> np.ndarray:
        mirror = self._cv_config.flip_horizontal != (self._facing == "front")
        if mirror:
            frame = cv2.flip(frame, 1)
        return frame

    def switch_facing(self) -> str:
        """Toggle back/front camera, reopening the device if open."""
        self._facing = "front" if self._facing == "back" else "back"
        logging.info(f"Switching to {self._facing} camera")
        if self._is_open:
            self._initialize()
        return self._facing

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVFrameSource closed: source_id={self.source_id}")
        self._is_open = False
