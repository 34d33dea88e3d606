# -*- coding: utf-8 -*-
"""
wheel_phase.sample_buffer

Sample3 + VectorSampleBuffer: schuivend venster van gecorrigeerde 3D samples.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Deque

import numpy as np


@dataclass(frozen=True)
class Sample3:
    """Eén 3-assige meting (veld, gyro of accel) met timestamp in seconden."""
    x: float
    y: float
    z: float
    t: float

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z, self.t))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


class VectorSampleBuffer:
    """
    Bounded FIFO van de laatste N vectoren (oudste valt eruit bij overflow).
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1 (got {capacity})")
        self.capacity = capacity
        self._samples: Deque[np.ndarray] = deque(maxlen=capacity)

    def append(self, vec: np.ndarray) -> None:
        self._samples.append(np.asarray(vec, dtype=float))

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def is_full(self) -> bool:
        return len(self._samples) == self.capacity

    def as_array(self) -> np.ndarray:
        """(n, 3) array, oudste sample eerst."""
        if not self._samples:
            return np.empty((0, 3), dtype=float)
        return np.vstack(self._samples)

    def latest(self) -> np.ndarray:
        return self._samples[-1]
