from __future__ import annotations

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from models.detection import detections_to_dicts

from ..api_models import (
    DetectionsResponse,
    HealthResponse,
    StatsResponse,
    ThresholdRequest,
    ThresholdResponse,
)
from ..state import OverlayState, state

router = APIRouter()


def get_state() -> OverlayState:
    return state


def _derive_status(last_frame_age: Optional[float], model_loaded: bool):
    """
    Thresholds: no frame or >10s since last frame => offline; >2s => degraded.
    Missing model => degraded (camera may still be live).
    """
    level = "running"
    alerts: List[str] = []
    if last_frame_age is None or last_frame_age > 10:
        level = "offline"
        alerts.append("pipeline_offline")
    elif last_frame_age > 2:
        level = "degraded"
        alerts.append("pipeline_stale")

    if not model_loaded:
        alerts.append("model_unavailable")
        if level == "running":
            level = "degraded"

    return level, alerts


@router.get("/detections", response_model=DetectionsResponse)
def detections(st: OverlayState = Depends(get_state)):
    frame_index, dets = st.latest_detections()
    return {
        "frame_index": frame_index,
        "count": len(dets),
        "detections": detections_to_dicts(dets),
    }


@router.get("/stats", response_model=StatsResponse)
def stats(st: OverlayState = Depends(get_state)):
    sys_stats = st.get_system_stats_copy()
    _, dets = st.latest_detections()
    start_time = sys_stats.get("start_time") or time.time()
    return {
        "fps": sys_stats.get("fps", 0) or 0,
        "detections": len(dets),
        "frames_processed": sys_stats.get("frames_processed", 0),
        "threshold": st.threshold,
        "model_loaded": bool(sys_stats.get("model_loaded")),
        "uptime_seconds": int(time.time() - start_time),
    }


@router.get("/threshold", response_model=ThresholdResponse)
def get_threshold(st: OverlayState = Depends(get_state)):
    return {"value": st.threshold, "min": st.min_threshold, "max": st.max_threshold}


@router.post("/threshold", response_model=ThresholdResponse)
def set_threshold(body: ThresholdRequest, st: OverlayState = Depends(get_state)):
    if not st.in_range(body.value):
        raise HTTPException(
            status_code=422,
            detail=f"threshold must be between {st.min_threshold} and {st.max_threshold}",
        )
    value = st.set_threshold(body.value)
    logging.info(f"Confidence threshold set to {value:.2f}")
    return {"value": value, "min": st.min_threshold, "max": st.max_threshold}


@router.get("/health", response_model=HealthResponse)
def health(st: OverlayState = Depends(get_state)):
    sys_stats = st.get_system_stats_copy()
    last_ts = sys_stats.get("last_frame_ts")
    last_frame_age = (time.time() - last_ts) if last_ts else None
    model_loaded = bool(sys_stats.get("model_loaded"))
    level, alerts = _derive_status(last_frame_age, model_loaded)
    return {
        "status": level,
        "alerts": alerts,
        "last_frame_age_s": last_frame_age,
        "model_loaded": model_loaded,
    }
