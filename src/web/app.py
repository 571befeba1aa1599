"""
FastAPI application factory for the detection overlay.

Routes:
- /api/detections -> latest decoded detections
- /api/stats      -> fps, detection count, threshold
- /api/threshold  -> read/adjust the confidence threshold
- /api/health     -> pipeline freshness and model availability
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import api
from .state import OverlayState


def create_app(overlay_state: Optional[OverlayState] = None) -> FastAPI:
    """Create the FastAPI app; overlay_state replaces the global state if given."""
    app = FastAPI(
        title="Detection Overlay",
        version="0.1.0",
        description="Live object-detection overlay status and control API",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")

    if overlay_state is not None:
        app.dependency_overrides[api.get_state] = lambda: overlay_state

    return app
