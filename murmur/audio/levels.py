"""Rolling loudness buffer shared between the capture worker and the UI."""

import logging
import threading
from collections import deque
from typing import Iterable, List

import numpy as np

logger = logging.getLogger(__name__)


def compute_rms(values: Iterable[float]) -> float:
    """Root-mean-square of a window, clamped to 1.0."""
    window = np.asarray(values, dtype=np.float64)
    if window.size == 0:
        return 0.0
    rms = float(np.sqrt(np.mean(np.square(window))))
    return min(rms, 1.0)


class LevelMeter:
    """Fixed-capacity sliding window of recent RMS levels, oldest evicted first."""

    def __init__(self, capacity: int = 32):
        """Initialize the meter filled with silence.

        Args:
            capacity: Number of level slots kept for visualization
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.levels = deque([0.0] * capacity, maxlen=capacity)
        self.lock = threading.Lock()

        logger.debug(f"LevelMeter initialized with {capacity} slots")

    def push(self, level: float) -> None:
        """Drop the oldest level and append a new one."""
        level = min(max(float(level), 0.0), 1.0)
        with self.lock:
            self.levels.append(level)

    def snapshot(self) -> List[float]:
        """Ordered copy of the levels, oldest first."""
        with self.lock:
            return list(self.levels)

    def clear(self) -> None:
        """Reset every slot to silence."""
        with self.lock:
            self.levels.extend([0.0] * self.capacity)
        logger.debug("Level meter cleared")

    def __len__(self) -> int:
        with self.lock:
            return len(self.levels)
