"""
Live detection overlay.

Captures frames from a camera, runs an SSD detector on each (throttled)
frame, decodes the output into labeled boxes and serves the latest results,
FPS and the adjustable confidence threshold over HTTP.

Usage:
    python src/main.py --config config/config.yaml --display

Arguments:
    --config: Path to configuration file
    --display: Show an OpenCV preview window with the overlay ('c' switches camera, 'q' quits)
    --no-web: Do not start the HTTP API
"""

import argparse
import logging
import os
import sys
import threading
from typing import Any, Dict, Optional, Tuple

import uvicorn
import yaml

from inference.labels import LabelTable
from inference.tflite_backend import TFLiteBackend, TFLiteConfig
from models.config import Config
from observation.opencv_source import OpenCVFrameSource, OpenCVSourceConfig
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from runtime.context import RuntimeContext
from web.app import create_app
from web.state import OverlayState


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        config_dir = os.path.dirname(config_path)
        base_path = os.path.join(config_dir, "default.yaml")
        merged: Dict[str, Any] = _read_yaml(base_path) if os.path.exists(base_path) else {}

        local_overrides_path = os.path.join(config_dir, "config.yaml")
        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        if os.path.exists(config_path) and os.path.abspath(config_path) not in (
            os.path.abspath(local_overrides_path),
            os.path.abspath(base_path),
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_resolution(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == 2
        and all(isinstance(x, int) and not isinstance(x, bool) and x > 0 for x in value)
    )


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ["camera", "model", "overlay", "log_path", "log_level"]
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    camera = config.get("camera") or {}
    if "device_id" not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera["device_id"], (int, str)) or isinstance(camera["device_id"], bool):
        return False, "camera.device_id must be an integer (index) or string (URL/path)"
    if isinstance(camera["device_id"], int) and camera["device_id"] < 0:
        return False, "camera.device_id integer must be non-negative"
    if camera.get("facing", "back") not in ("back", "front"):
        return False, "camera.facing must be one of: back, front"
    if "resolution" not in camera:
        return False, "Missing camera.resolution"
    if not _is_resolution(camera["resolution"]):
        return False, "camera.resolution must be a list of two positive integers [width, height]"

    model = config.get("model") or {}
    if not isinstance(model.get("path", ""), str):
        return False, "model.path must be a string"
    if "input_size" in model and not _is_resolution(model["input_size"]):
        return False, "model.input_size must be a list of two positive integers [width, height]"

    overlay = config.get("overlay") or {}
    lo = overlay.get("min_threshold", 0.1)
    hi = overlay.get("max_threshold", 0.9)
    thr = overlay.get("confidence_threshold", 0.5)
    for name, value in (("min_threshold", lo), ("max_threshold", hi), ("confidence_threshold", thr)):
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not (0 <= value <= 1):
            return False, f"overlay.{name} must be a number between 0 and 1"
    if lo > hi:
        return False, "overlay.min_threshold must not exceed overlay.max_threshold"
    if not (lo <= thr <= hi):
        return False, "overlay.confidence_threshold must be within [min_threshold, max_threshold]"
    target = overlay.get("target_resolution")
    if target is not None and not _is_resolution(target):
        return False, "overlay.target_resolution must be a list of two positive integers [width, height]"

    pipeline = config.get("pipeline") or {}
    if "max_fps" in pipeline:
        mf = pipeline["max_fps"]
        if not isinstance(mf, (int, float)) or isinstance(mf, bool) or mf < 0:
            return False, "pipeline.max_fps must be a non-negative number"
    if "max_consecutive_failures" in pipeline:
        mcf = pipeline["max_consecutive_failures"]
        if not isinstance(mcf, int) or mcf <= 0:
            return False, "pipeline.max_consecutive_failures must be a positive integer"

    web = config.get("web") or {}
    if "port" in web and (not isinstance(web["port"], int) or not (0 < web["port"] < 65536)):
        return False, "web.port must be an integer between 1 and 65535"

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config["log_level"] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def load_labels(labels_path: Optional[str]) -> LabelTable:
    """Load the label table; a missing file falls back to an empty table."""
    if not labels_path:
        logging.warning("No model.labels_path configured; labels will be 'Class N'")
        return LabelTable()
    try:
        return LabelTable.load(labels_path)
    except (OSError, ValueError) as e:
        logging.error(f"Failed to load labels from {labels_path}: {e}")
        return LabelTable()


def create_backend(cfg: Config) -> Optional[TFLiteBackend]:
    """Load the detector; returns None (overlay stays empty) if unavailable."""
    if not cfg.model.path or not os.path.exists(cfg.model.path):
        logging.error(f"Model file not found: {cfg.model.path!r}")
        return None
    try:
        return TFLiteBackend(
            TFLiteConfig(
                model_path=cfg.model.path,
                num_threads=cfg.model.num_threads,
                input_size=tuple(cfg.model.input_size),
            )
        )
    except Exception as e:
        logging.error(f"Failed to load model: {e}")
        return None


def start_web_server(cfg: Config, overlay_state: OverlayState) -> threading.Thread:
    app = create_app(overlay_state)
    server = uvicorn.Server(uvicorn.Config(app, host=cfg.web.host, port=cfg.web.port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="web-server", daemon=True)
    thread.start()
    logging.info(f"Web API listening on http://{cfg.web.host}:{cfg.web.port}/api")
    return thread


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description="Live Detection Overlay")
    parser.add_argument("--config", type=str, default="config/config.yaml",
                        help="Path to configuration file")
    parser.add_argument("--display", action="store_true",
                        help="Enable preview window")
    parser.add_argument("--no-web", action="store_true",
                        help="Disable the HTTP API")
    args = parser.parse_args()

    raw_config = load_config(args.config)

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    cfg = Config.from_dict(raw_config)
    setup_logging(cfg.log_path, cfg.log_level)
    logging.info("Starting Detection Overlay")

    overlay_state = OverlayState(
        threshold=cfg.overlay.confidence_threshold,
        min_threshold=cfg.overlay.min_threshold,
        max_threshold=cfg.overlay.max_threshold,
    )
    source = OpenCVFrameSource(OpenCVSourceConfig.from_camera_config(raw_config["camera"], source_id="main-camera"))
    ctx = RuntimeContext(
        config=cfg,
        labels=load_labels(cfg.model.labels_path),
        state=overlay_state,
        backend=create_backend(cfg),
        source=source,
    )
    overlay_state.set_model_loaded(ctx.model_loaded)

    if cfg.web.enabled and not args.no_web:
        start_web_server(cfg, overlay_state)

    engine = create_engine_from_config(ctx, source, display=args.display)
    try:
        # OpenCV windows must be driven from the main thread
        engine.run()
    except KeyboardInterrupt:
        engine.stop()
    logging.info("Detection Overlay stopped")


if __name__ == "__main__":
    main()
