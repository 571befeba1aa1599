from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class BoxModel(BaseModel):
    x: float
    y: float
    width: float
    height: float


class DetectionModel(BaseModel):
    id: str
    label: str
    confidence: float
    class_id: int
    box: BoxModel


class DetectionsResponse(BaseModel):
    frame_index: int = Field(..., description="Frame the detections came from (-1 before the first frame)")
    count: int
    detections: List[DetectionModel]


class StatsResponse(BaseModel):
    fps: float
    detections: int
    frames_processed: int
    threshold: float
    model_loaded: bool
    uptime_seconds: int


class ThresholdRequest(BaseModel):
    value: float = Field(..., description="Confidence threshold")


class ThresholdResponse(BaseModel):
    value: float
    min: float
    max: float


class HealthResponse(BaseModel):
    status: str = Field(..., description="running|degraded|offline")
    alerts: List[str]
    last_frame_age_s: Optional[float]
    model_loaded: bool
