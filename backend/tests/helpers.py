"""Frame builders for tests."""

from proprio.motion import JointRole, KeypointSample, PoseFrame


def make_frame(timestamp: float = 0.0, confidence: float = 0.9, **positions) -> PoseFrame:
    """Build a frame from role=(x, y) keyword arguments."""
    return PoseFrame(
        keypoints={
            JointRole(role): KeypointSample(x, y, confidence)
            for role, (x, y) in positions.items()
        },
        timestamp=timestamp,
    )
