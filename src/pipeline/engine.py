"""
Pipeline engine for the detection overlay.

Per processed frame:
    RateTracker.tick -> preprocess -> backend.run -> decode -> publish

The engine runs on its own thread. Processing is throttled to max_fps;
frames that arrive sooner are read (to keep the capture buffer fresh) and
dropped without ticking the rate tracker.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import cv2

from detection.decoder import decode
from inference.preprocess import to_model_input
from models.detection import FrameResult
from models.frame import FrameData
from observation.base import FrameSource
from pipeline.annotate import draw_detections, draw_stats
from pipeline.rate import RateTracker
from runtime.context import RuntimeContext


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        max_fps: Upper bound on processed frames per second (<= 0 disables).
        max_consecutive_failures: Frame read failures before stopping.
        stats_log_interval: Seconds between status log messages.
        failure_backoff: Seconds to wait after a failed read.
        display: Show an OpenCV preview window with the overlay.
    """
    max_fps: float = 3.0
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0
    failure_backoff: float = 0.5
    display: bool = False


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frames_read: int = 0
    frames_processed: int = 0
    frames_skipped: int = 0
    inference_errors: int = 0
    consecutive_failures: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)


class OverlayEngine:
    """
    Drives frames from a FrameSource through inference and decoding.

    Example:
        engine = OverlayEngine(source, ctx, PipelineConfig(max_fps=3))
        engine.start()
        ...
        engine.stop()
    """

    def __init__(
        self,
        source: FrameSource,
        ctx: RuntimeContext,
        config: PipelineConfig,
        rate_tracker: Optional[RateTracker] = None,
    ):
        self.source = source
        self.ctx = ctx
        self.config = config
        self.rate = rate_tracker or RateTracker()
        self.stats = PipelineStats()
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._last_processed_ms: Optional[float] = None
        # Result sequence; survives restarts so the shared state never sees it go backwards
        self._sequence = 0
        self._callbacks: List[Callable[[FrameData, FrameResult], None]] = []

    @property
    def is_running(self) -> bool:
        return self._running

    def add_callback(self, callback: Callable[[FrameData, FrameResult], None]) -> None:
        """Register a callback run after each processed frame."""
        self._callbacks.append(callback)

    def start(self) -> threading.Thread:
        """Run the loop on a background thread."""
        # Set before spawning so a stop() issued right after start() is not lost
        self._running = True
        self._thread = threading.Thread(target=self._run, name="overlay-engine", daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def stop(self) -> None:
        """Signal the loop to stop after the current frame."""
        self._running = False

    def run(self) -> None:
        """Open the source, process frames until stopped or exhausted, then clean up."""
        self._running = True
        self._run()

    def _run(self) -> None:
        self.stats = PipelineStats()
        self.rate.reset()
        self._last_processed_ms = None
        self.ctx.state.set_model_loaded(self.ctx.model_loaded)

        try:
            self.source.open()
            logging.info(f"Pipeline started: source={self.source.source_id}, max_fps={self.config.max_fps}")

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    time.sleep(self.config.failure_backoff)
                    continue

                self.stats.consecutive_failures = 0
                self.stats.frames_read += 1

                if self._should_process(frame_data):
                    result = self.process_frame(frame_data)
                    if result is not None:
                        for callback in self._callbacks:
                            try:
                                callback(frame_data, result)
                            except Exception as e:
                                logging.warning(f"Callback error: {e}")
                else:
                    self.stats.frames_skipped += 1

                # Preview shows every frame with the latest overlay
                if self.config.display and not self._handle_display(frame_data):
                    break

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        except Exception as e:
            logging.exception(f"Pipeline error: {e}")
        finally:
            self._cleanup()

    def _should_process(self, frame_data: FrameData) -> bool:
        """Throttle: only process if 1/max_fps has passed since the last processed frame."""
        if self.ctx.backend is None:
            return False
        if self.config.max_fps <= 0 or self._last_processed_ms is None:
            return True
        min_interval_ms = 1000.0 / self.config.max_fps
        return frame_data.timestamp - self._last_processed_ms >= min_interval_ms

    def process_frame(self, frame_data: FrameData) -> Optional[FrameResult]:
        """
        Run one frame through rate tracking, inference and decoding.

        Returns the published FrameResult, or None when inference failed.
        """
        backend = self.ctx.backend
        if backend is None:
            return None

        self._last_processed_ms = frame_data.timestamp
        self._sequence += 1
        seq = self._sequence
        fps = self.rate.tick(frame_data.timestamp)

        try:
            pixels = to_model_input(frame_data.frame, backend.input_size)
            tensors = backend.run(pixels)
        except Exception as e:
            self.stats.inference_errors += 1
            logging.warning(f"Inference failed on frame {frame_data.frame_index}: {e}")
            return None

        target_w, target_h = self.ctx.target_size
        detections = decode(
            tensors,
            target_w,
            target_h,
            self.ctx.state.threshold,
            labels=self.ctx.labels,
            frame_index=seq,
        )

        self.stats.frames_processed += 1
        result = FrameResult(
            frame_index=seq,
            detections=tuple(detections),
            timestamp=frame_data.timestamp,
            fps=fps,
        )
        self.ctx.state.publish(result)

        if self.stats.frames_processed % 30 == 0:
            logging.debug(
                f"[OVERLAY] frame={frame_data.frame_index} detections={len(detections)} fps={fps}"
            )
        return result

    def _handle_display(self, frame_data: FrameData) -> bool:
        """Show the annotated preview. Returns False if the user pressed 'q'."""
        frame = frame_data.frame.copy()
        latest = self.ctx.state.latest()
        detections = latest.detections if latest is not None else ()
        target_w, target_h = self.ctx.target_size
        scale = (frame_data.width / target_w, frame_data.height / target_h)
        draw_detections(frame, detections, scale=scale)
        draw_stats(frame, len(detections), self.rate.last_fps, self.ctx.state.threshold)

        cv2.imshow("Detection Overlay", frame)
        key = cv2.waitKey(1) & 0xFF
        if key == ord("c") and self.source.can_switch_facing:
            self.source.switch_facing()
            self.rate.reset()
        return key != ord("q")

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Pipeline stats: read={self.stats.frames_read}, "
                f"processed={self.stats.frames_processed}, skipped={self.stats.frames_skipped}, "
                f"errors={self.stats.inference_errors}, fps={self.rate.last_fps}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        if self.config.display:
            cv2.destroyAllWindows()

        logging.info("Pipeline stopped")


def create_engine_from_config(
    ctx: RuntimeContext,
    source: FrameSource,
    display: bool = False,
) -> OverlayEngine:
    """Factory: build an OverlayEngine from the typed config in ctx."""
    settings = ctx.config.pipeline
    pipeline_config = PipelineConfig(
        max_fps=settings.max_fps,
        max_consecutive_failures=settings.max_consecutive_failures,
        stats_log_interval=settings.stats_log_interval,
        display=display,
    )
    return OverlayEngine(source, ctx, pipeline_config)
