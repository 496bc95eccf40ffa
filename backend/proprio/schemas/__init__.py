"""Pydantic schemas for API request/response models."""

from proprio.schemas.session import (
    KeypointIn,
    FrameIn,
    ModeUpdate,
    ErrorResponse,
    MetricsResponse,
    FrameResult,
    FrameAdmission,
    FeedbackResponse,
)

__all__ = [
    "KeypointIn",
    "FrameIn",
    "ModeUpdate",
    "ErrorResponse",
    "MetricsResponse",
    "FrameResult",
    "FrameAdmission",
    "FeedbackResponse",
]
