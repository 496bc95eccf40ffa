"""Bilateral symmetry from left/right channel spread."""

from proprio.motion.amplitude import EMA_ALPHA, ema

# Keeps a stationary limb from producing NaN or a spurious perfect ratio
SYMMETRY_FLOOR = 0.001


def symmetry_ratio(left_variance: float, right_variance: float, floor: float = SYMMETRY_FLOOR) -> float:
    """Ratio of the smaller to the larger spread, in (0, 1]."""
    max_var = max(left_variance, right_variance, floor)
    min_var = max(min(left_variance, right_variance), floor)
    return min_var / max_var


def smooth_symmetry(
    left_variance: float,
    right_variance: float,
    previous: float,
    floor: float = SYMMETRY_FLOOR,
    alpha: float = EMA_ALPHA
) -> float:
    """EMA-smoothed symmetry index using the last published value as history."""
    return ema(symmetry_ratio(left_variance, right_variance, floor), previous, alpha)
