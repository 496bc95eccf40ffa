"""
Motion signal-processing core.

PIPELINE COMPONENTS:
1. WindowedChannel: Bounded per-keypoint position history with spread
2. Amplitude estimation: Scaled, EMA-smoothed tremor amplitude
3. TrendClassifier: Half-window comparison of recent amplitudes
4. Symmetry estimation: Bounded left/right ankle spread ratio
5. MotionAnalyzer: Mode routing, session lifecycle, snapshot publication

Usage:
    from proprio.motion import MotionAnalyzer, PoseFrame, JointRole, KeypointSample

    analyzer = MotionAnalyzer(mode=AnalysisMode.TREMOR)
    analyzer.start()
    analyzer.process_frame(PoseFrame(keypoints={
        JointRole.RIGHT_WRIST: KeypointSample(0.51, 0.48, 0.9),
    }))
    print(analyzer.snapshot.tremor_amplitude)
"""

from proprio.motion.errors import (
    ErrorKind, MotionAnalysisError, CaptureUnavailableError,
    PoseEstimationFailedError, LowConfidenceError
)
from proprio.motion.keypoints import JointRole, KeypointSample, PoseFrame
from proprio.motion.channel import WindowedChannel
from proprio.motion.amplitude import (
    ema, normalize_variance, smooth_amplitude, stability_from_amplitude
)
from proprio.motion.trend import TremorTrend, TrendClassifier
from proprio.motion.symmetry import symmetry_ratio, smooth_symmetry
from proprio.motion.analyzer import AnalysisMode, MetricsSnapshot, MotionAnalyzer

__all__ = [
    # Errors
    "ErrorKind",
    "MotionAnalysisError",
    "CaptureUnavailableError",
    "PoseEstimationFailedError",
    "LowConfidenceError",

    # Input
    "JointRole",
    "KeypointSample",
    "PoseFrame",

    # Channels
    "WindowedChannel",

    # Amplitude estimation
    "ema",
    "normalize_variance",
    "smooth_amplitude",
    "stability_from_amplitude",

    # Trend
    "TremorTrend",
    "TrendClassifier",

    # Symmetry
    "symmetry_ratio",
    "smooth_symmetry",

    # Analyzer
    "AnalysisMode",
    "MetricsSnapshot",
    "MotionAnalyzer",
]
