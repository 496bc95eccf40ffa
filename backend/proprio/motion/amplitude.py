"""
Amplitude estimation from channel spread.

The raw spread of a wrist channel is mapped into [0, 1] with a fixed
heuristic scale and then smoothed with an exponential moving average. All
constants here are calibration parameters, hand-tuned rather than derived.
"""

# Maps typical normalized-keypoint spread into the visible [0, 1] range
VARIANCE_SCALE = 500.0

# EMA weight given to the newest sample
EMA_ALPHA = 0.2

# Stability drop per unit of tremor amplitude
STABILITY_COUPLING = 0.5


def ema(value: float, previous: float, alpha: float = EMA_ALPHA) -> float:
    """Exponential moving average step."""
    return value * alpha + previous * (1.0 - alpha)


def normalize_variance(variance: float, scale: float = VARIANCE_SCALE) -> float:
    """Scale a spread value into [0, 1], saturating at 1.0."""
    return min(variance * scale, 1.0)


def smooth_amplitude(
    variance: float,
    previous: float,
    scale: float = VARIANCE_SCALE,
    alpha: float = EMA_ALPHA
) -> float:
    """
    Compute the next smoothed tremor amplitude.

    Args:
        variance: Raw channel spread from WindowedChannel.variance()
        previous: Previously published smoothed amplitude
        scale: Heuristic variance-to-amplitude scale factor
        alpha: EMA weight of the new sample

    Returns:
        New smoothed amplitude, to be passed back as `previous` next call
    """
    raw = normalize_variance(variance, scale)
    return ema(raw, previous, alpha)


def stability_from_amplitude(amplitude: float, coupling: float = STABILITY_COUPLING) -> float:
    """Gait stability inferred from tremor amplitude (inverse heuristic)."""
    return max(1.0 - amplitude * coupling, 0.0)
