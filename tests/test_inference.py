"""
Tests for preprocessing and the TFLite backend wrapper.
"""

import sys
import types
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from conftest import make_tensors
from detection.decoder import decode
from inference.preprocess import to_model_input
from inference.tflite_backend import TFLiteBackend, TFLiteConfig


class TestToModelInput:
    def test_shape_and_dtype(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        out = to_model_input(frame, (300, 200))
        assert out.shape == (1, 200, 300, 3)
        assert out.dtype == np.uint8

    def test_converts_bgr_to_rgb(self):
        frame = np.zeros((10, 10, 3), dtype=np.uint8)
        frame[..., 0] = 255  # blue
        out = to_model_input(frame, (10, 10))
        assert out[0, 0, 0, 2] == 255
        assert out[0, 0, 0, 0] == 0


def _fake_runtime(tensors):
    interpreter = MagicMock()
    interpreter.get_input_details.return_value = [
        {"index": 0, "shape": np.array([1, 300, 300, 3]), "dtype": np.uint8}
    ]
    interpreter.get_output_details.return_value = [{"index": i} for i in (10, 11, 12, 13)]
    interpreter.get_tensor.side_effect = lambda idx: tensors[idx - 10]

    module = types.ModuleType("tflite_runtime.interpreter")
    module.Interpreter = MagicMock(return_value=interpreter)
    package = types.ModuleType("tflite_runtime")
    package.interpreter = module
    return {"tflite_runtime": package, "tflite_runtime.interpreter": module}, interpreter


class TestTFLiteBackend:
    def test_runs_model_and_returns_outputs_in_order(self):
        tensors = make_tensors([([0.25, 0.1, 0.75, 0.9], 0, 0.9)])
        modules, interpreter = _fake_runtime(tensors)

        with patch.dict(sys.modules, modules):
            backend = TFLiteBackend(TFLiteConfig(model_path="model.tflite", num_threads=2))
            pixels = to_model_input(np.zeros((480, 640, 3), dtype=np.uint8), backend.input_size)
            outputs = backend.run(pixels)

        assert backend.input_size == (300, 300)
        interpreter.allocate_tensors.assert_called_once()
        interpreter.invoke.assert_called_once()
        assert len(outputs) == 4
        dets = decode(outputs, 1000, 2000, 0.5)
        assert dets[0].box.x == pytest.approx(100.0)

    def test_model_input_size_wins_over_config(self):
        modules, _ = _fake_runtime(make_tensors([]))
        with patch.dict(sys.modules, modules):
            backend = TFLiteBackend(TFLiteConfig(model_path="model.tflite", input_size=(320, 320)))
        assert backend.input_size == (300, 300)
