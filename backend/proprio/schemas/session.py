"""Session schemas."""

from typing import Dict, Optional
from pydantic import BaseModel, Field, field_validator

from proprio.motion.analyzer import AnalysisMode, MetricsSnapshot
from proprio.motion.errors import PoseEstimationFailedError
from proprio.motion.keypoints import JointRole, KeypointSample, PoseFrame
from proprio.feedback import FeedbackDecision


class KeypointIn(BaseModel):
    """A single detected keypoint."""
    x: float
    y: float
    confidence: float = Field(..., ge=0.0, le=1.0)


class FrameIn(BaseModel):
    """Schema for one frame of keypoints from the pose estimator."""
    keypoints: Dict[str, KeypointIn] = Field(default_factory=dict)
    timestamp: float = 0.0
    error: Optional[str] = Field(None, description="Detector failure message for this frame")

    @field_validator("keypoints")
    @classmethod
    def validate_roles(cls, v: Dict[str, KeypointIn]) -> Dict[str, KeypointIn]:
        valid_roles = JointRole.all()
        unknown = [role for role in v if role not in valid_roles]
        if unknown:
            raise ValueError(f"Unknown joint roles {unknown}; must be one of: {valid_roles}")
        return v

    def to_pose_frame(self) -> PoseFrame:
        if self.error is not None:
            return PoseFrame.from_failure(PoseEstimationFailedError(self.error), self.timestamp)

        return PoseFrame(
            keypoints={
                JointRole(role): KeypointSample(kp.x, kp.y, kp.confidence)
                for role, kp in self.keypoints.items()
            },
            timestamp=self.timestamp,
        )


class ModeUpdate(BaseModel):
    """Schema for switching the analysis mode."""
    mode: AnalysisMode


class ErrorResponse(BaseModel):
    kind: str
    description: str


class MetricsResponse(BaseModel):
    """Schema for the published metrics snapshot."""
    tremor_amplitude: float
    gait_stability_index: float
    gait_symmetry_index: float
    tremor_trend: str
    session_step_count: int
    is_active: bool
    mode: str
    last_error: Optional[ErrorResponse] = None

    @classmethod
    def from_snapshot(cls, snapshot: MetricsSnapshot) -> "MetricsResponse":
        error = snapshot.last_error
        return cls(
            tremor_amplitude=snapshot.tremor_amplitude,
            gait_stability_index=snapshot.gait_stability_index,
            gait_symmetry_index=snapshot.gait_symmetry_index,
            tremor_trend=snapshot.tremor_trend.value,
            session_step_count=snapshot.session_step_count,
            is_active=snapshot.is_active,
            mode=snapshot.mode.value,
            last_error=ErrorResponse(kind=error.kind.value, description=error.description) if error else None,
        )


class FrameResult(BaseModel):
    processed: bool
    metrics: MetricsResponse


class FrameAdmission(BaseModel):
    """Whether a streamed frame was queued for the background worker."""
    admitted: bool


class FeedbackResponse(BaseModel):
    """Schema for feedback decisions."""
    tremor_correction: bool
    haptic_intensity: float
    show_guide_path: bool
    tremor_state: str
    gait_state: str

    @classmethod
    def from_decision(cls, decision: FeedbackDecision) -> "FeedbackResponse":
        return cls(**decision.to_dict())
