"""
Tests for the overlay HTTP API handlers.
"""

import time

import pytest
from fastapi import HTTPException

from models.detection import BoundingBox, Detection, FrameResult
from web.api_models import ThresholdRequest
from web.app import create_app
from web.routes.api import (
    _derive_status,
    detections,
    get_state,
    get_threshold,
    health,
    set_threshold,
    stats,
)
from web.state import OverlayState


def _publish(st, frame_index, n, fps=None):
    dets = tuple(
        Detection(
            id=f"{frame_index}-{i}",
            label="person",
            confidence=0.8,
            box=BoundingBox(10, 20, 30, 40),
            class_id=0,
        )
        for i in range(n)
    )
    st.publish(FrameResult(frame_index=frame_index, detections=dets, timestamp=0.0, fps=fps))


class TestDeriveStatus:
    def test_running(self):
        assert _derive_status(0.5, True) == ("running", [])

    def test_stale(self):
        level, alerts = _derive_status(5.0, True)
        assert level == "degraded"
        assert alerts == ["pipeline_stale"]

    def test_offline_without_frames(self):
        level, alerts = _derive_status(None, True)
        assert level == "offline"
        assert "pipeline_offline" in alerts

    def test_model_missing_degrades(self):
        level, alerts = _derive_status(0.5, False)
        assert level == "degraded"
        assert "model_unavailable" in alerts


class TestDetectionsEndpoint:
    def test_empty_before_first_frame(self):
        body = detections(OverlayState())
        assert body == {"frame_index": -1, "count": 0, "detections": []}

    def test_latest_frame(self):
        st = OverlayState()
        _publish(st, 7, 2)
        body = detections(st)
        assert body["frame_index"] == 7
        assert body["count"] == 2
        assert body["detections"][0]["box"] == {"x": 10, "y": 20, "width": 30, "height": 40}


class TestStatsEndpoint:
    def test_reports_fps_and_count(self):
        st = OverlayState()
        st.set_model_loaded(True)
        _publish(st, 1, 1)
        _publish(st, 2, 3, fps=3)
        body = stats(st)
        assert body["fps"] == 3
        assert body["detections"] == 3
        assert body["frames_processed"] == 2
        assert body["threshold"] == 0.5
        assert body["model_loaded"] is True


class TestThresholdEndpoint:
    def test_get(self):
        assert get_threshold(OverlayState()) == {"value": 0.5, "min": 0.1, "max": 0.9}

    def test_set_in_range(self):
        st = OverlayState()
        body = set_threshold(ThresholdRequest(value=0.75), st)
        assert body["value"] == 0.75
        assert st.threshold == 0.75

    @pytest.mark.parametrize("value", [0.05, 0.95, 1.5])
    def test_set_out_of_range_rejected(self, value):
        st = OverlayState()
        with pytest.raises(HTTPException) as exc:
            set_threshold(ThresholdRequest(value=value), st)
        assert exc.value.status_code == 422
        assert st.threshold == 0.5


class TestHealthEndpoint:
    def test_fresh_frame_running(self):
        st = OverlayState()
        st.set_model_loaded(True)
        _publish(st, 1, 0)
        body = health(st)
        assert body["status"] == "running"
        assert body["last_frame_age_s"] < 2

    def test_stale_frame(self):
        st = OverlayState()
        st.set_model_loaded(True)
        _publish(st, 1, 0)
        st.system_stats["last_frame_ts"] = time.time() - 5
        assert health(st)["status"] == "degraded"


class TestCreateApp:
    def test_registers_api_routes(self):
        app = create_app()
        paths = app.openapi()["paths"]
        for path in ("/api/detections", "/api/stats", "/api/threshold", "/api/health"):
            assert path in paths
        assert {"get", "post"} <= set(paths["/api/threshold"])

    def test_state_override(self):
        st = OverlayState()
        app = create_app(st)
        assert app.dependency_overrides[get_state]() is st
