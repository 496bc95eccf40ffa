"""
Bounded per-keypoint position history.

Each tracked joint owns one WindowedChannel. The channel keeps the most
recent accepted positions (FIFO, oldest evicted first) and reports an
isotropic spread magnitude over them:

    spread = sqrt(var(x) + var(y))

using population variance on each axis. This is not a 2D covariance
measure; the amplitude scale factor downstream is calibrated against this
exact formula, so it must not be changed.
"""

from collections import deque
from typing import Deque, Iterator, Optional, Tuple

import numpy as np

# ~1 second of history at 60fps
DEFAULT_HISTORY_SIZE = 60


class WindowedChannel:
    """Fixed-capacity, insertion-ordered buffer of 2D positions."""

    def __init__(self, name: str = "", capacity: int = DEFAULT_HISTORY_SIZE):
        if capacity < 1:
            raise ValueError(f"Channel capacity must be positive, got {capacity}")
        self.name = name
        self.capacity = capacity
        self._positions: Deque[Tuple[float, float]] = deque(maxlen=capacity)

    def push(self, point: Tuple[float, float]):
        """Append a position, evicting the oldest one when full."""
        x, y = point
        self._positions.append((float(x), float(y)))

    def variance(self) -> float:
        """Isotropic spread of the buffered positions (0.0 below 2 points)."""
        if len(self._positions) < 2:
            return 0.0

        positions = np.asarray(self._positions, dtype=np.float64)
        var_x, var_y = np.var(positions, axis=0)

        return float(np.sqrt(var_x + var_y))

    def clear(self):
        self._positions.clear()

    @property
    def latest(self) -> Optional[Tuple[float, float]]:
        return self._positions[-1] if self._positions else None

    @property
    def is_full(self) -> bool:
        return len(self._positions) == self.capacity

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(self._positions)

    def __repr__(self) -> str:
        return f"WindowedChannel(name={self.name!r}, size={len(self)}/{self.capacity})"
