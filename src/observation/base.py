"""
Frame sources feeding the detection overlay.

A source hands the engine BGR frames stamped with a millisecond capture
time; the rate tracker and the engine's throttle both work off that stamp,
so sources must stamp frames from a monotonic clock. Sources backed by a
phone-style camera pair can also flip between the back and front device.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from models.frame import FrameData


@dataclass
class SourceConfig:
    """
    Capture settings shared by every source.

    Attributes:
        source_id: Name used in logs and stamped on FrameData.source.
        resolution: Requested (width, height); None keeps the device default.
        fps: Requested capture rate; None keeps the device default.
    """
    source_id: str = "default"
    resolution: Optional[Tuple[int, int]] = None
    fps: Optional[int] = None


class FrameSource(ABC):
    """
    Pull-based source of timestamped frames.

    open() -> read() until it returns None -> close(). Works as a context
    manager and iterates frames while open.
    """

    def __init__(self, config: SourceConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Frames read since the last open()."""
        return self._frame_index

    @property
    def can_switch_facing(self) -> bool:
        """Whether switch_facing() selects another camera."""
        return False

    @abstractmethod
    def open(self) -> None:
        """
        Start capturing.

        Raises:
            RuntimeError: If the device cannot be opened.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """Next frame, or None when nothing could be read."""

    @abstractmethod
    def close(self) -> None:
        """Stop capturing. Safe to call more than once."""

    def switch_facing(self) -> Optional[str]:
        """Toggle back/front camera; returns the new facing, None if unsupported."""
        logging.info(f"Source {self.source_id} has a single camera; ignoring facing switch")
        return None

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        if not self._is_open:
            raise RuntimeError(f"Source {self.source_id} must be open before iterating")
        while True:
            frame_data = self.read()
            if frame_data is None:
                return
            yield frame_data
