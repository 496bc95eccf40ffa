"""Error kinds recorded by the motion analyzer."""

from enum import Enum
from typing import Optional, Union


class ErrorKind(Enum):
    """Session-level error categories."""
    CAPTURE_UNAVAILABLE = "capture_unavailable"
    POSE_ESTIMATION_FAILED = "pose_estimation_failed"
    LOW_CONFIDENCE = "low_confidence"
    UNKNOWN = "unknown"


class MotionAnalysisError(Exception):
    """Base class for errors surfaced through the metrics snapshot."""

    kind = ErrorKind.UNKNOWN

    @property
    def description(self) -> str:
        message = Exception.__str__(self)
        return message or "Motion analysis failed."

    def __str__(self) -> str:
        return self.description


class CaptureUnavailableError(MotionAnalysisError):
    """The capture source could not deliver frames."""

    kind = ErrorKind.CAPTURE_UNAVAILABLE

    @property
    def description(self) -> str:
        return "Camera access is required for motion analysis."


class PoseEstimationFailedError(MotionAnalysisError):
    """The pose detector failed on a frame. Transient."""

    kind = ErrorKind.POSE_ESTIMATION_FAILED

    def __init__(self, cause: Optional[Union[BaseException, str]] = None):
        super().__init__(cause)
        self.cause = cause

    @property
    def description(self) -> str:
        return f"Vision request failed: {self.cause or 'unknown error'}"


class LowConfidenceError(MotionAnalysisError):
    """Tracking confidence too low to use a keypoint."""

    kind = ErrorKind.LOW_CONFIDENCE

    @property
    def description(self) -> str:
        return "Tracking confidence too low. Please ensure good lighting and visibility."
