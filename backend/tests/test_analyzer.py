"""Tests for the motion analyzer session and mode routing."""

import threading

import pytest

from proprio.config import Settings
from proprio.motion import (
    AnalysisMode,
    CaptureUnavailableError,
    ErrorKind,
    JointRole,
    KeypointSample,
    MotionAnalyzer,
    PoseEstimationFailedError,
    PoseFrame,
    TremorTrend,
)
from tests.helpers import make_frame


def alternating(i: int, low=(0.5, 0.5), high=(0.5, 0.6)):
    return low if i % 2 == 0 else high


class TestLifecycle:

    def test_initial_state(self):
        analyzer = MotionAnalyzer()
        snapshot = analyzer.snapshot

        assert snapshot.tremor_amplitude == 0.0
        assert snapshot.gait_stability_index == 1.0
        assert snapshot.gait_symmetry_index == 1.0
        assert snapshot.tremor_trend is TremorTrend.STABLE
        assert snapshot.session_step_count == 0
        assert snapshot.is_active is False
        assert snapshot.last_error is None
        assert snapshot.mode is AnalysisMode.GAIT

    def test_start_stop_are_idempotent(self):
        analyzer = MotionAnalyzer()
        analyzer.start()
        analyzer.start()
        assert analyzer.is_active

        analyzer.stop()
        analyzer.stop()
        assert not analyzer.is_active

    def test_start_clears_error(self):
        analyzer = MotionAnalyzer()
        analyzer.report_error(CaptureUnavailableError())
        assert analyzer.snapshot.last_error.kind is ErrorKind.CAPTURE_UNAVAILABLE

        analyzer.start()
        assert analyzer.snapshot.last_error is None

    def test_stop_keeps_history_and_metrics(self, tremor_analyzer):
        for i in range(20):
            tremor_analyzer.process_frame(make_frame(right_wrist=alternating(i)))
        before = tremor_analyzer.snapshot

        tremor_analyzer.stop()

        assert len(tremor_analyzer.channel(JointRole.RIGHT_WRIST)) == 20
        assert tremor_analyzer.snapshot.tremor_amplitude == before.tremor_amplitude
        assert len(tremor_analyzer.trend_window) == 20

    def test_reset_restores_defaults(self, gait_analyzer):
        for i in range(40):
            gait_analyzer.process_frame(make_frame(
                left_ankle=alternating(i),
                right_ankle=(0.4, 0.9),
                right_wrist=alternating(i),
            ))
        gait_analyzer.report_error(CaptureUnavailableError())
        assert gait_analyzer.snapshot.tremor_amplitude > 0.0
        assert gait_analyzer.snapshot.gait_symmetry_index < 1.0

        gait_analyzer.reset()
        snapshot = gait_analyzer.snapshot

        assert snapshot.tremor_amplitude == 0.0
        assert snapshot.gait_stability_index == 1.0
        assert snapshot.gait_symmetry_index == 1.0
        assert snapshot.session_step_count == 0
        assert snapshot.tremor_trend is TremorTrend.STABLE
        assert snapshot.last_error is None
        assert all(len(channel) == 0 for channel in gait_analyzer.channels.values())
        assert gait_analyzer.trend_window == []

    def test_reset_keeps_active_state_and_mode(self, tremor_analyzer):
        tremor_analyzer.reset()
        assert tremor_analyzer.is_active
        assert tremor_analyzer.mode is AnalysisMode.TREMOR

        tremor_analyzer.stop()
        tremor_analyzer.reset()
        assert not tremor_analyzer.is_active

    def test_set_mode_accepts_string_and_keeps_history(self, tremor_analyzer):
        for i in range(10):
            tremor_analyzer.process_frame(make_frame(left_wrist=alternating(i)))

        tremor_analyzer.set_mode("gait")

        assert tremor_analyzer.mode is AnalysisMode.GAIT
        assert len(tremor_analyzer.channel(JointRole.LEFT_WRIST)) == 10

    def test_set_mode_rejects_unknown(self):
        with pytest.raises(ValueError):
            MotionAnalyzer().set_mode("balance")

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            MotionAnalyzer(ema_alpha=0.0)
        with pytest.raises(ValueError):
            MotionAnalyzer(symmetry_floor=0.0)
        with pytest.raises(ValueError):
            MotionAnalyzer(history_size=0)

    def test_from_settings(self):
        settings = Settings(history_size=10, trend_window_size=12)
        analyzer = MotionAnalyzer.from_settings(settings, mode=AnalysisMode.TREMOR)

        assert analyzer.channel(JointRole.LEFT_ANKLE).capacity == 10
        assert analyzer.mode is AnalysisMode.TREMOR


class TestFrameAdmission:

    def test_inactive_frames_are_discarded(self):
        analyzer = MotionAnalyzer(mode=AnalysisMode.TREMOR)
        before = analyzer.snapshot

        processed = analyzer.process_frame(make_frame(right_wrist=(0.5, 0.5), left_wrist=(0.1, 0.1)))

        assert processed is False
        assert all(len(channel) == 0 for channel in analyzer.channels.values())
        assert analyzer.snapshot == before

    def test_frames_after_stop_are_discarded(self, tremor_analyzer):
        tremor_analyzer.process_frame(make_frame(right_wrist=(0.5, 0.5)))
        tremor_analyzer.stop()
        tremor_analyzer.process_frame(make_frame(right_wrist=(0.5, 0.6)))

        assert len(tremor_analyzer.channel(JointRole.RIGHT_WRIST)) == 1

    def test_low_confidence_sample_dropped_without_error(self, tremor_analyzer):
        tremor_analyzer.process_frame(make_frame(confidence=0.29, right_wrist=(0.5, 0.5)))

        assert len(tremor_analyzer.channel(JointRole.RIGHT_WRIST)) == 0
        assert tremor_analyzer.snapshot.last_error is None

    def test_confidence_threshold_is_exclusive(self, tremor_analyzer):
        tremor_analyzer.process_frame(make_frame(confidence=0.3, right_wrist=(0.5, 0.5)))
        assert len(tremor_analyzer.channel(JointRole.RIGHT_WRIST)) == 0

        tremor_analyzer.process_frame(make_frame(confidence=0.31, right_wrist=(0.5, 0.5)))
        assert len(tremor_analyzer.channel(JointRole.RIGHT_WRIST)) == 1

    def test_accepts_plain_mapping(self, tremor_analyzer):
        processed = tremor_analyzer.process_frame({
            JointRole.RIGHT_WRIST: KeypointSample(0.5, 0.5, 0.8),
        })
        assert processed
        assert len(tremor_analyzer.channel(JointRole.RIGHT_WRIST)) == 1

    def test_detector_failure_recorded_and_metrics_skipped(self, tremor_analyzer):
        for i in range(10):
            tremor_analyzer.process_frame(make_frame(right_wrist=alternating(i)))
        before = tremor_analyzer.snapshot

        failed = PoseFrame.from_failure(PoseEstimationFailedError("detector timeout"))
        assert tremor_analyzer.process_frame(failed) is False

        after = tremor_analyzer.snapshot
        assert after.last_error.kind is ErrorKind.POSE_ESTIMATION_FAILED
        assert "detector timeout" in after.last_error.description
        assert after.tremor_amplitude == before.tremor_amplitude
        assert len(tremor_analyzer.trend_window) == 10
        assert after.is_active

    def test_processing_continues_after_failure(self, tremor_analyzer):
        tremor_analyzer.process_frame(PoseFrame.from_failure(PoseEstimationFailedError("boom")))
        assert tremor_analyzer.process_frame(make_frame(right_wrist=(0.5, 0.5)))
        assert len(tremor_analyzer.channel(JointRole.RIGHT_WRIST)) == 1


class TestTremorMode:

    def test_identical_points_drive_amplitude_to_zero(self, tremor_analyzer):
        for i in range(20):
            tremor_analyzer.process_frame(make_frame(right_wrist=alternating(i), left_wrist=alternating(i)))
        assert tremor_analyzer.snapshot.tremor_amplitude > 0.5

        # Flush the alternating history out of the 60-point window, then decay
        for _ in range(120):
            tremor_analyzer.process_frame(make_frame(right_wrist=(0.5, 0.5), left_wrist=(0.5, 0.5)))

        assert tremor_analyzer.channel(JointRole.RIGHT_WRIST).variance() == 0.0
        assert tremor_analyzer.snapshot.tremor_amplitude < 1e-5
        assert tremor_analyzer.snapshot.gait_stability_index == pytest.approx(1.0, abs=1e-5)

    def test_bilateral_variances_are_averaged(self, tremor_analyzer):
        # Right wrist spread 0.001, left wrist still
        for i in range(60):
            tremor_analyzer.process_frame(make_frame(
                right_wrist=alternating(i, (0.5, 0.5), (0.5, 0.502)),
                left_wrist=(0.2, 0.2),
            ))

        # Average spread 0.0005 -> raw amplitude 0.25
        assert tremor_analyzer.snapshot.tremor_amplitude == pytest.approx(0.25, abs=1e-3)

    def test_amplitude_settles_with_alternating_points(self, tremor_analyzer):
        amplitudes = []
        for i in range(60):
            tremor_analyzer.process_frame(make_frame(right_wrist=alternating(i), left_wrist=alternating(i)))
            amplitudes.append(tremor_analyzer.snapshot.tremor_amplitude)

        assert tremor_analyzer.channel(JointRole.RIGHT_WRIST).variance() == pytest.approx(0.05)
        assert all(b >= a for a, b in zip(amplitudes, amplitudes[1:]))
        assert 0.0 < amplitudes[-1] <= 1.0
        assert tremor_analyzer.snapshot.gait_stability_index == pytest.approx(
            1.0 - amplitudes[-1] * 0.5
        )

    def test_trend_rises_with_onset(self, tremor_analyzer):
        for _ in range(10):
            tremor_analyzer.process_frame(make_frame(right_wrist=(0.5, 0.5), left_wrist=(0.5, 0.5)))
        assert tremor_analyzer.snapshot.tremor_trend is TremorTrend.STABLE

        for i in range(10):
            tremor_analyzer.process_frame(make_frame(right_wrist=alternating(i), left_wrist=alternating(i)))

        assert tremor_analyzer.snapshot.tremor_trend is TremorTrend.INCREASING

    def test_ankles_ignored(self, tremor_analyzer):
        tremor_analyzer.process_frame(make_frame(left_ankle=(0.5, 0.9), right_ankle=(0.6, 0.9)))
        assert len(tremor_analyzer.channel(JointRole.LEFT_ANKLE)) == 0
        assert len(tremor_analyzer.channel(JointRole.RIGHT_ANKLE)) == 0


class TestGaitMode:

    def test_symmetry_from_ankle_spreads(self, gait_analyzer):
        left = gait_analyzer.channel(JointRole.LEFT_ANKLE)
        right = gait_analyzer.channel(JointRole.RIGHT_ANKLE)
        for i in range(60):
            left.push((0.5 + (0.004 if i % 2 else -0.004), 0.9))
            right.push((0.5 + (0.001 if i % 2 else -0.001), 0.9))

        assert left.variance() == pytest.approx(0.004)
        assert right.variance() == pytest.approx(0.001)

        # No ankle samples this frame; ratio 0.25 smoothed against 1.0
        gait_analyzer.process_frame(make_frame())
        assert gait_analyzer.snapshot.gait_symmetry_index == pytest.approx(0.85)

    def test_only_right_wrist_drives_tremor(self, gait_analyzer):
        for i in range(30):
            gait_analyzer.process_frame(make_frame(left_wrist=alternating(i), right_wrist=(0.5, 0.5)))

        assert len(gait_analyzer.channel(JointRole.LEFT_WRIST)) == 0
        assert len(gait_analyzer.channel(JointRole.RIGHT_WRIST)) == 30
        assert gait_analyzer.snapshot.tremor_amplitude == 0.0
        assert gait_analyzer.snapshot.gait_stability_index == 1.0

    def test_still_ankles_are_symmetric(self, gait_analyzer):
        for _ in range(30):
            gait_analyzer.process_frame(make_frame(left_ankle=(0.4, 0.9), right_ankle=(0.6, 0.9)))
        assert gait_analyzer.snapshot.gait_symmetry_index == pytest.approx(1.0)

    def test_mode_switch_stops_appending_unrelated_channels(self, gait_analyzer):
        for _ in range(5):
            gait_analyzer.process_frame(make_frame(left_ankle=(0.4, 0.9), right_ankle=(0.6, 0.9)))

        gait_analyzer.set_mode(AnalysisMode.TREMOR)
        gait_analyzer.process_frame(make_frame(left_ankle=(0.4, 0.9), right_ankle=(0.6, 0.9)))

        assert len(gait_analyzer.channel(JointRole.LEFT_ANKLE)) == 5


class TestPublication:

    def test_readers_see_consistent_snapshots(self, tremor_analyzer):
        """Stability always matches amplitude within one snapshot."""
        errors = []
        done = threading.Event()

        def reader():
            while not done.is_set():
                snapshot = tremor_analyzer.snapshot
                expected = max(1.0 - snapshot.tremor_amplitude * 0.5, 0.0)
                if abs(snapshot.gait_stability_index - expected) > 1e-12:
                    errors.append(snapshot)

        thread = threading.Thread(target=reader)
        thread.start()
        try:
            for i in range(500):
                tremor_analyzer.process_frame(make_frame(right_wrist=alternating(i), left_wrist=(0.5, 0.5)))
        finally:
            done.set()
            thread.join()

        assert errors == []

    def test_to_dict(self, tremor_analyzer):
        tremor_analyzer.report_error(CaptureUnavailableError())
        data = tremor_analyzer.snapshot.to_dict()

        assert data["mode"] == "tremor"
        assert data["tremor_trend"] == "stable"
        assert data["last_error"] == "capture_unavailable"
        assert "Camera" in data["last_error_description"]
