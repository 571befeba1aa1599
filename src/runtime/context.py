from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from inference.backend import InferenceBackend
from inference.labels import LabelTable
from models.config import Config

if TYPE_CHECKING:
    from web.state import OverlayState


@dataclass
class RuntimeContext:
    """Holds runtime collaborators for the overlay; avoids global singletons."""

    config: Config
    labels: LabelTable
    state: "OverlayState"
    backend: Optional[InferenceBackend] = None
    source: Any = None

    @property
    def model_loaded(self) -> bool:
        return self.backend is not None

    @property
    def target_size(self) -> tuple[int, int]:
        return self.config.target_size
