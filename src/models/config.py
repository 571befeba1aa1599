"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    facing: str = "back"
    back_device_id: Optional[Union[int, str]] = None
    front_device_id: Optional[Union[int, str]] = None
    resolution: List[int] = field(default_factory=lambda: [1280, 720])
    fps: int = 30
    flip_horizontal: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            facing=d.get("facing", "back"),
            back_device_id=d.get("back_device_id"),
            front_device_id=d.get("front_device_id"),
            resolution=d.get("resolution", [1280, 720]),
            fps=d.get("fps", 30),
            flip_horizontal=d.get("flip_horizontal", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "device_id": self.device_id,
            "facing": self.facing,
            "resolution": self.resolution,
            "fps": self.fps,
            "flip_horizontal": self.flip_horizontal,
        }
        if self.back_device_id is not None:
            d["back_device_id"] = self.back_device_id
        if self.front_device_id is not None:
            d["front_device_id"] = self.front_device_id
        return d


@dataclass
class ModelConfig:
    """Detector model configuration."""
    path: str = ""
    labels_path: Optional[str] = None
    input_size: List[int] = field(default_factory=lambda: [300, 300])
    num_threads: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        return cls(
            path=d.get("path", ""),
            labels_path=d.get("labels_path"),
            input_size=d.get("input_size", [300, 300]),
            num_threads=d.get("num_threads"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "path": self.path,
            "input_size": self.input_size,
        }
        if self.labels_path is not None:
            d["labels_path"] = self.labels_path
        if self.num_threads is not None:
            d["num_threads"] = self.num_threads
        return d


@dataclass
class OverlayConfig:
    """
    Overlay configuration.

    target_resolution is the [width, height] detections are scaled to.
    None means "use the camera resolution".
    """
    confidence_threshold: float = 0.5
    min_threshold: float = 0.1
    max_threshold: float = 0.9
    target_resolution: Optional[List[int]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OverlayConfig":
        return cls(
            confidence_threshold=d.get("confidence_threshold", 0.5),
            min_threshold=d.get("min_threshold", 0.1),
            max_threshold=d.get("max_threshold", 0.9),
            target_resolution=d.get("target_resolution"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "confidence_threshold": self.confidence_threshold,
            "min_threshold": self.min_threshold,
            "max_threshold": self.max_threshold,
        }
        if self.target_resolution is not None:
            d["target_resolution"] = self.target_resolution
        return d


@dataclass
class PipelineSettings:
    """Frame-processing loop settings."""
    max_fps: float = 3.0
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineSettings":
        return cls(
            max_fps=d.get("max_fps", 3.0),
            max_consecutive_failures=d.get("max_consecutive_failures", 10),
            stats_log_interval=d.get("stats_log_interval", 60.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_fps": self.max_fps,
            "max_consecutive_failures": self.max_consecutive_failures,
            "stats_log_interval": self.stats_log_interval,
        }


@dataclass
class WebConfig:
    """HTTP status/control server settings."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 8000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/overlay.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            model=ModelConfig.from_dict(d.get("model", {}) or {}),
            overlay=OverlayConfig.from_dict(d.get("overlay", {}) or {}),
            pipeline=PipelineSettings.from_dict(d.get("pipeline", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/overlay.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        return {
            "camera": self.camera.to_dict(),
            "model": self.model.to_dict(),
            "overlay": self.overlay.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }

    @property
    def target_size(self) -> tuple[int, int]:
        """(width, height) detections are mapped to."""
        res = self.overlay.target_resolution or self.camera.resolution
        return (int(res[0]), int(res[1]))
