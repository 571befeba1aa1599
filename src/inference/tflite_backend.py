"""
TFLite inference backend.

Runs an SSD MobileNet style .tflite model through tflite_runtime. The
runtime is imported lazily so the rest of the project (decoder, web API,
tests) works on machines without it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .backend import InferenceBackend


@dataclass(frozen=True)
class TFLiteConfig:
    model_path: str
    num_threads: Optional[int] = None
    input_size: Optional[Tuple[int, int]] = None


class TFLiteBackend(InferenceBackend):
    def __init__(self, cfg: TFLiteConfig):
        self.cfg = cfg
        try:
            from tflite_runtime.interpreter import Interpreter  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "tflite_runtime is not installed. Install with `pip install tflite-runtime` "
                "or run without a model (overlay stays empty)."
            ) from e

        self._interpreter = Interpreter(model_path=cfg.model_path, num_threads=cfg.num_threads)
        self._interpreter.allocate_tensors()
        self._input = self._interpreter.get_input_details()[0]
        # SSD postprocess order: boxes, classes, scores, count
        self._outputs = [d["index"] for d in self._interpreter.get_output_details()]

        _, h, w, _ = self._input["shape"]
        self.input_size = (int(w), int(h))
        if cfg.input_size is not None and tuple(cfg.input_size) != self.input_size:
            logging.warning(
                f"Configured input_size {tuple(cfg.input_size)} differs from model input "
                f"{self.input_size}; using the model's"
            )
        logging.info(
            f"TFLite model loaded: {cfg.model_path}, input={self.input_size}, outputs={len(self._outputs)}"
        )

    def run(self, pixels: np.ndarray) -> List[np.ndarray]:
        if pixels.dtype != self._input["dtype"]:
            pixels = pixels.astype(self._input["dtype"])
        self._interpreter.set_tensor(self._input["index"], pixels)
        self._interpreter.invoke()
        return [self._interpreter.get_tensor(i) for i in self._outputs]
