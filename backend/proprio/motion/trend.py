"""
Short-term tremor trend classification.

Keeps a rolling window of smoothed amplitudes and compares the mean of the
newer half against the older half. This is a two-window slope heuristic,
not a statistical test; differences inside the threshold band read as
stable.
"""

from collections import deque
from enum import Enum
from typing import Deque, List

import numpy as np

TREND_WINDOW_SIZE = 30
MIN_TREND_SAMPLES = 10
TREND_THRESHOLD = 0.02


class TremorTrend(Enum):
    """Direction of tremor change over time."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class TrendClassifier:
    """Rolling window of amplitudes with a half-vs-half direction test."""

    def __init__(
        self,
        window_size: int = TREND_WINDOW_SIZE,
        min_samples: int = MIN_TREND_SAMPLES,
        threshold: float = TREND_THRESHOLD
    ):
        if window_size < 2:
            raise ValueError(f"Trend window must hold at least 2 samples, got {window_size}")
        if min_samples < 2:
            raise ValueError(f"min_samples must be at least 2, got {min_samples}")

        self.window_size = window_size
        self.min_samples = min_samples
        self.threshold = threshold
        self._amplitudes: Deque[float] = deque(maxlen=window_size)

    def observe(self, amplitude: float):
        self._amplitudes.append(float(amplitude))

    def classify(self) -> TremorTrend:
        count = len(self._amplitudes)
        if count < self.min_samples:
            return TremorTrend.STABLE

        values = np.asarray(self._amplitudes, dtype=np.float64)

        # Odd counts give the extra sample to the newer half
        split = count // 2
        diff = float(values[split:].mean() - values[:split].mean())

        if diff > self.threshold:
            return TremorTrend.INCREASING
        if diff < -self.threshold:
            return TremorTrend.DECREASING
        return TremorTrend.STABLE

    def clear(self):
        self._amplitudes.clear()

    @property
    def amplitudes(self) -> List[float]:
        return list(self._amplitudes)

    def __len__(self) -> int:
        return len(self._amplitudes)
