# -*- coding: utf-8 -*-
"""
wheel_phase.motion_gate

MotionValidityGate: mag deze fase-delta meetellen?

Alle voorwaarden moeten gelden:
1. planarity >= min_planarity, OF het laatste geldige sample is < grace geleden
   (korte signaal-dropout wordt getolereerd)
2. gyro: max |ω| over het recente venster <= gyro_max_threshold
   (toestel wordt niet actief gedraaid)
3. accel: pstdev |a| over het recente venster <= accel_stddev_threshold
   (toestel wordt niet geschud / verplaatst)
4. liveness: binnen liveness_window_s is er een fase-delta > motion_threshold
   gezien, anders staat het wiel stil en tellen we niet

Bij succes wordt last_valid_time = now gezet (voor de grace-check).
"""

from __future__ import annotations

import statistics
from collections import deque
from typing import Deque, Optional, Tuple

from .plane_estimator_v1_0 import RotationBasis
from .sample_buffer import Sample3

REASON_OK = "OK"
REASON_LOW_PLANARITY = "LOW_PLANARITY"
REASON_GYRO = "DEVICE_ROTATING"
REASON_ACCEL = "DEVICE_SHAKING"
REASON_STATIONARY = "WHEEL_STATIONARY"


class MotionHistory:
    """Tijd-begrensde buffer van |vector| samples."""

    def __init__(self, history_s: float = 1.0):
        self.history_s = history_s
        self._items: Deque[Tuple[float, float]] = deque()

    def push(self, sample: Sample3) -> None:
        self._items.append((sample.t, sample.magnitude))
        self.prune(sample.t)

    def prune(self, now: float) -> None:
        cutoff = now - self.history_s
        while self._items and self._items[0][0] < cutoff:
            self._items.popleft()

    def magnitudes(self):
        return [m for _, m in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()


class MotionValidityGate:

    def __init__(
        self,
        min_planarity: float = 0.7,
        planar_grace_ms: float = 500.0,
        history_s: float = 1.0,
        gyro_max_threshold: float = 1.0,
        accel_stddev_threshold: float = 0.5,
        accel_min_samples: int = 5,
        motion_threshold_rad: float = 0.1,
        liveness_window_s: float = 1.0,
    ) -> None:
        self.min_planarity = min_planarity
        self.planar_grace_s = planar_grace_ms / 1000.0
        self.gyro_max_threshold = gyro_max_threshold
        self.accel_stddev_threshold = accel_stddev_threshold
        self.accel_min_samples = accel_min_samples
        self.motion_threshold_rad = motion_threshold_rad
        self.liveness_window_s = liveness_window_s

        self.gyro_history = MotionHistory(history_s)
        self.accel_history = MotionHistory(history_s)

        self.last_valid_time: Optional[float] = None
        self.last_motion_time: Optional[float] = None
        self.last_reason: str = REASON_STATIONARY

    @classmethod
    def from_config(cls, cfg) -> "MotionValidityGate":
        return cls(
            min_planarity=cfg.min_planarity,
            planar_grace_ms=cfg.planar_grace_ms,
            history_s=cfg.motion_history_s,
            gyro_max_threshold=cfg.gyro_max_threshold,
            accel_stddev_threshold=cfg.accel_stddev_threshold,
            accel_min_samples=cfg.accel_min_samples,
            motion_threshold_rad=cfg.motion_threshold_rad,
            liveness_window_s=cfg.liveness_window_s,
        )

    # --- ingest ---------------------------------------------------------------

    def push_gyro(self, sample: Sample3) -> None:
        self.gyro_history.push(sample)

    def push_accel(self, sample: Sample3) -> None:
        self.accel_history.push(sample)

    def observe_phase_delta(self, delta: float, now: float) -> None:
        if abs(delta) > self.motion_threshold_rad:
            self.last_motion_time = now

    # --- checks ---------------------------------------------------------------

    def is_rotating(self, now: float) -> bool:
        if self.last_motion_time is None:
            return False
        return (now - self.last_motion_time) <= self.liveness_window_s

    def device_motion_reason(self, now: float) -> Optional[str]:
        """REASON_GYRO / REASON_ACCEL als het toestel zelf beweegt, anders None."""
        self.gyro_history.prune(now)
        self.accel_history.prune(now)

        gyro = self.gyro_history.magnitudes()
        if gyro and max(gyro) > self.gyro_max_threshold:
            return REASON_GYRO

        accel = self.accel_history.magnitudes()
        if len(accel) > self.accel_min_samples:
            if statistics.pstdev(accel) > self.accel_stddev_threshold:
                return REASON_ACCEL

        return None

    def _planarity_ok(self, basis: RotationBasis, now: float) -> bool:
        if basis.planarity >= self.min_planarity:
            return True
        if self.last_valid_time is None:
            return False
        return (now - self.last_valid_time) <= self.planar_grace_s

    def is_valid(self, basis: RotationBasis, now: float) -> bool:
        if not self._planarity_ok(basis, now):
            self.last_reason = REASON_LOW_PLANARITY
            return False

        reason = self.device_motion_reason(now)
        if reason is not None:
            self.last_reason = reason
            return False

        if not self.is_rotating(now):
            self.last_reason = REASON_STATIONARY
            return False

        self.last_valid_time = now
        self.last_reason = REASON_OK
        return True

    def reset(self) -> None:
        self.gyro_history.clear()
        self.accel_history.clear()
        self.last_valid_time = None
        self.last_motion_time = None
        self.last_reason = REASON_STATIONARY
