"""
Single-worker frame admission.

Capture runs much faster than analysis needs, so frames are admitted
through one background thread with a single pending slot:

- Frames closer together than `min_interval` (by capture timestamp) are
  rejected outright (throttling, ~10fps by default); a timestamp that does
  not move forward is taken as a capture clock restart and admitted
- An admitted frame replaces any frame still waiting in the slot
  (drop-oldest; stale frames are not clinically useful)
- Exactly one thread calls MotionAnalyzer.process_frame
"""

import logging
import threading
from typing import Optional

from proprio.motion.analyzer import MotionAnalyzer
from proprio.motion.keypoints import PoseFrame

logger = logging.getLogger(__name__)


class FrameWorker:
    """Background thread that feeds the latest admitted frame to an analyzer."""

    def __init__(self, analyzer: MotionAnalyzer, min_interval: float = 0.1):
        if min_interval < 0:
            raise ValueError(f"min_interval must be non-negative, got {min_interval}")

        self.analyzer = analyzer
        self.min_interval = min_interval

        self._cond = threading.Condition()
        self._pending: Optional[PoseFrame] = None
        self._busy = False
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._last_admitted: Optional[float] = None

        # Counters
        self.processed = 0
        self.dropped = 0  # Replaced in the slot before being processed
        self.throttled = 0  # Rejected by the admission interval
        self.failed = 0

    @classmethod
    def from_settings(cls, analyzer: MotionAnalyzer, settings=None) -> "FrameWorker":
        if settings is None:
            from proprio.config import get_settings
            settings = get_settings()
        return cls(analyzer, min_interval=settings.analysis_interval_seconds)

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        with self._cond:
            if self._running:
                return
            self._running = True
            self._last_admitted = None
            self._thread = threading.Thread(
                target=self._run, name="proprio-frame-worker", daemon=True
            )
            self._thread.start()

        logger.info(f"FrameWorker started: min interval {self.min_interval:.3f}s")

    def stop(self, timeout: Optional[float] = 1.0):
        """Stop the worker. A frame still waiting in the slot is discarded."""
        with self._cond:
            if not self._running:
                return
            self._running = False
            self._last_admitted = None
            if self._pending is not None:
                self._pending = None
                self.dropped += 1
            self._cond.notify_all()
            thread = self._thread

        if thread is not None:
            thread.join(timeout)
        self._thread = None

        logger.info(f"FrameWorker stopped: {self.processed} processed, "
                    f"{self.dropped} dropped, {self.throttled} throttled")

    def submit(self, frame: PoseFrame) -> bool:
        """
        Offer a frame for analysis.

        Returns:
            True if the frame was placed in the slot
        """
        with self._cond:
            if not self._running:
                return False

            # A timestamp at or before the last admitted one means the capture
            # clock restarted; admit it and throttle from there
            if (
                self.min_interval > 0
                and self._last_admitted is not None
                and 0.0 < frame.timestamp - self._last_admitted <= self.min_interval
            ):
                self.throttled += 1
                return False

            if self._pending is not None:
                self.dropped += 1
                logger.debug(f"Dropped stale frame at t={self._pending.timestamp:.3f}s")

            self._pending = frame
            self._last_admitted = frame.timestamp
            self._cond.notify_all()

        return True

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no frame is pending or being processed."""
        with self._cond:
            return self._cond.wait_for(
                lambda: self._pending is None and not self._busy, timeout
            )

    def _run(self):
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._pending is not None or not self._running)
                if not self._running:
                    break
                frame, self._pending = self._pending, None
                self._busy = True

            try:
                self.analyzer.process_frame(frame)
                self.processed += 1
            except Exception as e:
                self.failed += 1
                logger.exception(f"Frame processing failed at t={frame.timestamp:.3f}s: {e}")
            finally:
                with self._cond:
                    self._busy = False
                    self._cond.notify_all()

    def __enter__(self) -> "FrameWorker":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
