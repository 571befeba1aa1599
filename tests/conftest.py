"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from inference.labels import LabelTable  # noqa: E402


def make_tensors(entries, count=None, slots=10):
    """
    Build the four SSD output tensors.

    entries: list of (box, class, score), box as [ymin, xmin, ymax, xmax].
    count: reported count; defaults to len(entries).
    """
    boxes = np.zeros((1, slots, 4), dtype=np.float32)
    classes = np.zeros((1, slots), dtype=np.float32)
    scores = np.zeros((1, slots), dtype=np.float32)
    for i, (box, cls, score) in enumerate(entries):
        boxes[0, i] = box
        classes[0, i] = cls
        scores[0, i] = score
    n = len(entries) if count is None else count
    return [boxes, classes, scores, np.array([n], dtype=np.float32)]


@pytest.fixture
def labels():
    return LabelTable({"0": "person", "1": "bicycle", "2": "car", "17": "dog"})


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  facing: "back"
  resolution: [640, 480]
  fps: 30

model:
  path: "models/test.tflite"
  labels_path: "config/labels.json"
  input_size: [300, 300]

overlay:
  confidence_threshold: 0.5
  min_threshold: 0.1
  max_threshold: 0.9

pipeline:
  max_fps: 3

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "facing": "back",
            "resolution": [1280, 720],
            "fps": 30,
        },
        "model": {
            "path": "models/ssd_mobilenet_v1.tflite",
            "labels_path": "config/labels.json",
            "input_size": [300, 300],
        },
        "overlay": {
            "confidence_threshold": 0.5,
            "min_threshold": 0.1,
            "max_threshold": 0.9,
        },
        "pipeline": {
            "max_fps": 3,
            "max_consecutive_failures": 10,
        },
        "web": {"enabled": True, "host": "127.0.0.1", "port": 8000},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
