"""
Feedback decisions derived from published metrics.

The rendering/haptics layer polls the analyzer snapshot and reacts to
threshold crossings. This module only decides WHAT should happen; playing
the haptic pulse or drawing the guide path is left to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from proprio.motion.analyzer import MetricsSnapshot

TREMOR_FEEDBACK_THRESHOLD = 0.3
TREMOR_CRITICAL_THRESHOLD = 0.5
GAIT_INSTABILITY_THRESHOLD = 0.8


class MetricState(Enum):
    """Display state of a metric card."""
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class FeedbackDecision:
    """What the feedback layer should do for one snapshot."""
    tremor_correction: bool = False
    haptic_intensity: float = 0.0  # 0-1, only set when correcting
    show_guide_path: bool = False
    tremor_state: MetricState = MetricState.NORMAL
    gait_state: MetricState = MetricState.NORMAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tremor_correction": self.tremor_correction,
            "haptic_intensity": self.haptic_intensity,
            "show_guide_path": self.show_guide_path,
            "tremor_state": self.tremor_state.value,
            "gait_state": self.gait_state.value,
        }


def evaluate_feedback(snapshot: MetricsSnapshot, settings=None) -> FeedbackDecision:
    """
    Map a metrics snapshot to feedback actions.

    - Tremor above 0.3 triggers corrective haptics scaled by amplitude
    - Tremor above 0.5 is shown as critical
    - Gait stability below 0.8 shows the visual guide path
    """
    tremor_threshold = TREMOR_FEEDBACK_THRESHOLD
    critical_threshold = TREMOR_CRITICAL_THRESHOLD
    gait_threshold = GAIT_INSTABILITY_THRESHOLD

    if settings is not None:
        tremor_threshold = settings.tremor_feedback_threshold
        critical_threshold = settings.tremor_critical_threshold
        gait_threshold = settings.gait_instability_threshold

    amplitude = snapshot.tremor_amplitude
    correcting = amplitude > tremor_threshold
    unstable = snapshot.gait_stability_index < gait_threshold

    return FeedbackDecision(
        tremor_correction=correcting,
        haptic_intensity=amplitude if correcting else 0.0,
        show_guide_path=unstable,
        tremor_state=MetricState.CRITICAL if amplitude > critical_threshold else MetricState.NORMAL,
        gait_state=MetricState.WARNING if unstable else MetricState.NORMAL,
    )
