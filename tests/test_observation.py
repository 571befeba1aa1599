"""
Tests for the frame source layer.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from models.frame import FrameData
from observation.base import FrameSource, SourceConfig
from observation.opencv_source import OpenCVFrameSource, OpenCVSourceConfig


class MockSource(FrameSource):
    def __init__(self, config: SourceConfig, frames: list = None):
        super().__init__(config)
        self._frames = frames or []
        self._pos = 0

    def open(self) -> None:
        self._is_open = True
        self._pos = 0
        self._frame_index = 0

    def read(self):
        if not self._is_open or self._pos >= len(self._frames):
            return None
        frame = self._frames[self._pos]
        self._pos += 1
        self._frame_index += 1
        return FrameData.from_numpy(frame, timestamp=float(self._pos), frame_index=self._frame_index)

    def close(self) -> None:
        self._is_open = False


class TestFrameSource:
    def test_context_manager_and_iteration(self):
        frames = [np.zeros((4, 4, 3), dtype=np.uint8) for _ in range(3)]
        with MockSource(SourceConfig(source_id="cam"), frames) as source:
            assert source.is_open
            indices = [fd.frame_index for fd in source]
        assert indices == [1, 2, 3]
        assert not source.is_open

    def test_iterating_closed_source_raises(self):
        with pytest.raises(RuntimeError):
            list(iter(MockSource(SourceConfig())))

    def test_single_camera_source_ignores_facing_switch(self):
        source = MockSource(SourceConfig(source_id="cam"))
        assert source.can_switch_facing is False
        assert source.switch_facing() is None


class TestOpenCVSourceConfig:
    def test_from_camera_config(self):
        cfg = OpenCVSourceConfig.from_camera_config(
            {"device_id": 2, "resolution": [640, 480], "fps": 15, "facing": "front", "front_device_id": 1},
            source_id="main-camera",
        )
        assert cfg.source_id == "main-camera"
        assert cfg.resolution == (640, 480)
        assert cfg.device_id == 2
        assert cfg.facing == "front"
        assert cfg.front_device_id == 1


class TestOpenCVFrameSource:
    def test_device_follows_facing(self):
        source = OpenCVFrameSource(OpenCVSourceConfig(device_id=0, front_device_id=1))
        assert source.can_switch_facing is True
        assert source.device_id == 0
        source.switch_facing()
        assert source.facing == "front"
        assert source.device_id == 1
        source.switch_facing()
        assert source.device_id == 0

    def test_front_camera_is_mirrored(self):
        frame = np.zeros((2, 2, 3), dtype=np.uint8)
        frame[0, 0] = 255
        source = OpenCVFrameSource(OpenCVSourceConfig(facing="front", front_device_id=1))
        out = source._apply_transforms(frame)
        assert out[0, 1, 0] == 255
        assert out[0, 0, 0] == 0

    @patch("observation.opencv_source.cv2.VideoCapture")
    def test_read_stamps_milliseconds(self, video_capture):
        cap = MagicMock()
        cap.isOpened.return_value = True
        cap.read.return_value = (True, np.zeros((480, 640, 3), dtype=np.uint8))
        video_capture.return_value = cap

        source = OpenCVFrameSource(OpenCVSourceConfig(device_id="clip.mp4"))
        source.open()
        first = source.read()
        second = source.read()
        source.close()

        assert first.frame_index == 1
        assert second.frame_index == 2
        assert second.timestamp >= first.timestamp
        assert first.size == (640, 480)
        cap.release.assert_called_once()

    @patch("observation.opencv_source.time.sleep")
    @patch("observation.opencv_source.cv2.VideoCapture")
    def test_open_failure_raises_after_retries(self, video_capture, _sleep):
        cap = MagicMock()
        cap.isOpened.return_value = False
        video_capture.return_value = cap

        source = OpenCVFrameSource(OpenCVSourceConfig(device_id=0, max_retries=2))
        with pytest.raises(RuntimeError):
            source.open()
        assert video_capture.call_count == 2
