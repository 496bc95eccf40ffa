"""
Keypoint input types.

The pose-estimation subsystem hands the engine one PoseFrame per processed
camera frame. Each frame maps a joint role to a KeypointSample holding a
normalized 2D position and the detector's confidence for it. Joints the
detector did not report are simply absent from the mapping.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from proprio.motion.errors import MotionAnalysisError


class JointRole(Enum):
    """Tracked anatomical landmarks."""
    RIGHT_WRIST = "right_wrist"
    LEFT_WRIST = "left_wrist"
    RIGHT_ANKLE = "right_ankle"
    LEFT_ANKLE = "left_ankle"

    @classmethod
    def all(cls) -> list:
        return [role.value for role in cls]


@dataclass(frozen=True)
class KeypointSample:
    """A single detected keypoint."""
    x: float
    y: float
    confidence: float

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def is_reliable(self, threshold: float) -> bool:
        """True when confidence is strictly above the threshold."""
        return self.confidence > threshold


@dataclass
class PoseFrame:
    """All keypoints reported for a single frame."""
    keypoints: Dict[JointRole, KeypointSample] = field(default_factory=dict)
    timestamp: float = 0.0

    # Set when the detector failed on this frame
    error: Optional[MotionAnalysisError] = None

    def get(self, role: JointRole) -> Optional[KeypointSample]:
        return self.keypoints.get(role)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def from_failure(cls, error: MotionAnalysisError, timestamp: float = 0.0) -> "PoseFrame":
        """Build a frame that carries only a detector failure."""
        return cls(timestamp=timestamp, error=error)
