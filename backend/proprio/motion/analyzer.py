"""
Motion analyzer: mode routing and session state.

The analyzer owns every keypoint channel and all derived metrics. Each
accepted frame is routed to the pipeline of the active mode:

TREMOR MODE (bilateral wrist tracking):
- Right and left wrist channels are updated
- Their spreads are averaged and fed to the amplitude estimator
- Gait stability is inferred from the smoothed amplitude

GAIT MODE (bilateral ankle symmetry + secondary wrist tracking):
- Left and right ankle channels feed the symmetry estimator
- The right wrist alone drives the same amplitude/stability/trend pipeline

PUBLICATION:
Metrics are held in an immutable MetricsSnapshot which is replaced
wholesale under a lock, so readers never see one field from the current
frame and another from the previous one. Frame processing and lifecycle
calls are serialized on the same lock.
"""

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from proprio.motion.amplitude import (
    EMA_ALPHA,
    STABILITY_COUPLING,
    VARIANCE_SCALE,
    smooth_amplitude,
    stability_from_amplitude,
)
from proprio.motion.channel import DEFAULT_HISTORY_SIZE, WindowedChannel
from proprio.motion.errors import MotionAnalysisError
from proprio.motion.keypoints import JointRole, KeypointSample, PoseFrame
from proprio.motion.symmetry import SYMMETRY_FLOOR, smooth_symmetry
from proprio.motion.trend import (
    MIN_TREND_SAMPLES,
    TREND_THRESHOLD,
    TREND_WINDOW_SIZE,
    TremorTrend,
    TrendClassifier,
)

logger = logging.getLogger(__name__)

# Samples at or below this confidence are dropped for the frame
CONFIDENCE_THRESHOLD = 0.3


class AnalysisMode(Enum):
    """Operating mode for the analyzer."""
    GAIT = "gait"
    TREMOR = "tremor"


@dataclass(frozen=True)
class MetricsSnapshot:
    """The published metric state. Replaced, never mutated."""
    tremor_amplitude: float = 0.0
    gait_stability_index: float = 1.0  # 1.0 = stable, < 0.8 = unstable
    gait_symmetry_index: float = 1.0  # 1.0 = perfect symmetry
    tremor_trend: TremorTrend = TremorTrend.STABLE
    session_step_count: int = 0
    is_active: bool = False
    last_error: Optional[MotionAnalysisError] = None
    mode: AnalysisMode = AnalysisMode.GAIT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tremor_amplitude": self.tremor_amplitude,
            "gait_stability_index": self.gait_stability_index,
            "gait_symmetry_index": self.gait_symmetry_index,
            "tremor_trend": self.tremor_trend.value,
            "session_step_count": self.session_step_count,
            "is_active": self.is_active,
            "last_error": self.last_error.kind.value if self.last_error else None,
            "last_error_description": self.last_error.description if self.last_error else None,
            "mode": self.mode.value,
        }


FrameInput = Union[PoseFrame, Mapping[JointRole, KeypointSample]]


class MotionAnalyzer:
    """
    Turns per-frame keypoints into smoothed motion metrics.

    Lifecycle:
        analyzer = MotionAnalyzer()
        analyzer.start()
        analyzer.process_frame(frame)   # any number of times
        metrics = analyzer.snapshot
        analyzer.stop()

    process_frame must only be driven by a single writer (see
    proprio.worker.FrameWorker); the snapshot may be read from anywhere.
    """

    def __init__(
        self,
        mode: AnalysisMode = AnalysisMode.GAIT,
        history_size: int = DEFAULT_HISTORY_SIZE,
        confidence_threshold: float = CONFIDENCE_THRESHOLD,
        variance_scale: float = VARIANCE_SCALE,
        ema_alpha: float = EMA_ALPHA,
        stability_coupling: float = STABILITY_COUPLING,
        symmetry_floor: float = SYMMETRY_FLOOR,
        trend_window_size: int = TREND_WINDOW_SIZE,
        min_trend_samples: int = MIN_TREND_SAMPLES,
        trend_threshold: float = TREND_THRESHOLD
    ):
        """
        Initialize analyzer.

        Args:
            mode: Initial analysis mode
            history_size: Capacity of each keypoint channel
            confidence_threshold: Samples must be strictly above this to be used
            variance_scale: Spread-to-amplitude scale factor
            ema_alpha: EMA weight of the newest sample (0 < alpha <= 1)
            stability_coupling: Stability drop per unit of tremor amplitude
            symmetry_floor: Lower bound on spreads in the symmetry ratio
            trend_window_size: Number of amplitudes kept for trend detection
            min_trend_samples: Amplitudes needed before a trend is reported
            trend_threshold: Mean difference needed to call a direction
        """
        if not 0.0 < ema_alpha <= 1.0:
            raise ValueError(f"ema_alpha must be in (0, 1], got {ema_alpha}")
        if not 0.0 <= confidence_threshold < 1.0:
            raise ValueError(f"confidence_threshold must be in [0, 1), got {confidence_threshold}")
        if symmetry_floor <= 0.0:
            raise ValueError(f"symmetry_floor must be positive, got {symmetry_floor}")

        self.confidence_threshold = confidence_threshold
        self.variance_scale = variance_scale
        self.ema_alpha = ema_alpha
        self.stability_coupling = stability_coupling
        self.symmetry_floor = symmetry_floor

        self.channels: Dict[JointRole, WindowedChannel] = {
            role: WindowedChannel(role.value, history_size) for role in JointRole
        }
        self._trend = TrendClassifier(trend_window_size, min_trend_samples, trend_threshold)

        self._lock = threading.Lock()
        self._snapshot = MetricsSnapshot(mode=AnalysisMode(mode))

        logger.info(f"MotionAnalyzer initialized: mode={self._snapshot.mode.value}, "
                    f"history={history_size}, trend window={trend_window_size}")

    @classmethod
    def from_settings(cls, settings=None, mode: AnalysisMode = AnalysisMode.GAIT) -> "MotionAnalyzer":
        """Build an analyzer from application settings."""
        if settings is None:
            from proprio.config import get_settings
            settings = get_settings()

        return cls(
            mode=mode,
            history_size=settings.history_size,
            confidence_threshold=settings.confidence_threshold,
            variance_scale=settings.variance_scale,
            ema_alpha=settings.ema_alpha,
            stability_coupling=settings.stability_coupling,
            symmetry_floor=settings.symmetry_floor,
            trend_window_size=settings.trend_window_size,
            min_trend_samples=settings.min_trend_samples,
            trend_threshold=settings.trend_threshold,
        )

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> MetricsSnapshot:
        return self._snapshot

    @property
    def is_active(self) -> bool:
        return self._snapshot.is_active

    @property
    def mode(self) -> AnalysisMode:
        return self._snapshot.mode

    @property
    def trend_window(self) -> List[float]:
        return self._trend.amplitudes

    def channel(self, role: JointRole) -> WindowedChannel:
        return self.channels[role]

    def _publish(self, **changes):
        """Swap in a new snapshot. Caller holds the lock."""
        previous = self._snapshot
        self._snapshot = replace(previous, **changes)

        if self._snapshot.tremor_trend is not previous.tremor_trend:
            logger.debug(f"Tremor trend: {previous.tremor_trend.value} → "
                         f"{self._snapshot.tremor_trend.value}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Activate the session and clear any recorded error."""
        with self._lock:
            if not self._snapshot.is_active:
                logger.info("Motion analysis started")
            self._publish(is_active=True, last_error=None)

    def stop(self):
        """Deactivate the session. History and metrics are kept."""
        with self._lock:
            if self._snapshot.is_active:
                logger.info("Motion analysis stopped")
            self._publish(is_active=False)

    def reset(self):
        """Clear all history and restore default metrics."""
        with self._lock:
            for channel in self.channels.values():
                channel.clear()
            self._trend.clear()

            current = self._snapshot
            self._snapshot = MetricsSnapshot(is_active=current.is_active, mode=current.mode)

        logger.info("Motion metrics reset")

    def set_mode(self, mode: Union[AnalysisMode, str]):
        """Switch the active pipeline. Channel history is not cleared."""
        mode = AnalysisMode(mode)
        with self._lock:
            if mode is not self._snapshot.mode:
                logger.info(f"Analysis mode: {self._snapshot.mode.value} → {mode.value}")
            self._publish(mode=mode)

    def report_error(self, error: MotionAnalysisError):
        """Record an error raised outside frame processing (e.g. capture)."""
        with self._lock:
            logger.warning(f"Motion analysis error recorded: {error.description}")
            self._publish(last_error=error)

    # ------------------------------------------------------------------
    # Frame processing
    # ------------------------------------------------------------------

    def process_frame(self, frame: FrameInput) -> bool:
        """
        Process one frame of keypoints.

        Frames received while inactive are discarded. A frame carrying a
        detector failure is recorded as last_error and skips metric updates.

        Returns:
            True if metrics were updated from this frame
        """
        if not isinstance(frame, PoseFrame):
            frame = PoseFrame(keypoints=dict(frame))

        with self._lock:
            if not self._snapshot.is_active:
                return False

            if frame.failed:
                logger.warning(f"Pose estimation failed at t={frame.timestamp:.3f}s: "
                               f"{frame.error.description}")
                self._publish(last_error=frame.error)
                return False

            if self._snapshot.mode is AnalysisMode.TREMOR:
                updates = self._process_tremor(frame)
            else:
                updates = self._process_gait(frame)

            self._publish(**updates)

        return True

    def _process_tremor(self, frame: PoseFrame) -> Dict[str, Any]:
        """Bilateral wrist tracking."""
        self._accept(frame, JointRole.RIGHT_WRIST)
        self._accept(frame, JointRole.LEFT_WRIST)

        right_var = self.channels[JointRole.RIGHT_WRIST].variance()
        left_var = self.channels[JointRole.LEFT_WRIST].variance()

        # Average bilateral tremor for a more robust measurement
        return self._tremor_updates((right_var + left_var) / 2.0)

    def _process_gait(self, frame: PoseFrame) -> Dict[str, Any]:
        """Ankle symmetry plus right wrist as a secondary tremor signal."""
        self._accept(frame, JointRole.LEFT_ANKLE)
        self._accept(frame, JointRole.RIGHT_ANKLE)

        symmetry = smooth_symmetry(
            self.channels[JointRole.LEFT_ANKLE].variance(),
            self.channels[JointRole.RIGHT_ANKLE].variance(),
            self._snapshot.gait_symmetry_index,
            floor=self.symmetry_floor,
            alpha=self.ema_alpha
        )

        self._accept(frame, JointRole.RIGHT_WRIST)
        updates = self._tremor_updates(self.channels[JointRole.RIGHT_WRIST].variance())
        updates["gait_symmetry_index"] = symmetry

        return updates

    def _accept(self, frame: PoseFrame, role: JointRole) -> bool:
        """Push a sample into its channel if confident enough."""
        sample = frame.get(role)
        if sample is None:
            return False

        if not sample.is_reliable(self.confidence_threshold):
            logger.debug(f"Dropped {role.value}: confidence {sample.confidence:.2f} "
                         f"<= {self.confidence_threshold:.2f}")
            return False

        self.channels[role].push(sample.position)
        return True

    def _tremor_updates(self, variance: float) -> Dict[str, Any]:
        """Shared amplitude, stability and trend step."""
        amplitude = smooth_amplitude(
            variance,
            self._snapshot.tremor_amplitude,
            scale=self.variance_scale,
            alpha=self.ema_alpha
        )
        stability = stability_from_amplitude(amplitude, self.stability_coupling)

        self._trend.observe(amplitude)

        return {
            "tremor_amplitude": amplitude,
            "gait_stability_index": stability,
            "tremor_trend": self._trend.classify(),
        }
