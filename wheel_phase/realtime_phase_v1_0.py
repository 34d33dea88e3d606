# -*- coding: utf-8 -*-
"""
wheel_phase.realtime_phase_v1_0

PhaseTrackingDetector v1.0: de volledige realtime PCA phase-tracking pipeline.

Per magnetometer-sample (synchroon, tot het eind doorlopen):
```
raw ─► BaselineTracker ─► VectorSampleBuffer ─► PlaneEstimator (cadence)
                                                    │
                         BasisStabilizer ◄──────────┘
                               │
                           BasisLock ─► projectie (locked of latest)
                                              │
                                        PhaseTracker ─► liveness
                                              │
                                   MotionValidityGate ─► RevolutionCounter
```

Gyro/accel samples gaan alleen naar de MotionValidityGate.

Alle mutatie loopt via één RLock, zodat feed_* vanuit verschillende
sensor-callbacks veilig door elkaar mag lopen. Voor een strikt
tijd-geordende verwerking: zie sensor_feed.SensorFeed.

Lifecycle:
- start() op een gestopte detector: pipeline leeg, telling blijft staan.
- start() tijdens draaien / stop() als gestopt: no-op.
- reset(): pipeline leeg én telling naar 0.
- samples terwijl gestopt: genegeerd.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import numpy as np

from .baseline_tracker import BaselineTracker
from .basis_stabilizer import BasisLock, BasisStabilizer
from .motion_gate import MotionValidityGate
from .phase_tracker import PhaseState, PhaseTracker
from .plane_estimator_v1_0 import EigenSolver, PlaneEstimator, RotationBasis, default_basis
from .profiles import PROFILE_DEFAULT, DetectorConfig
from .revolution_counter import RevolutionCounter
from .sample_buffer import Sample3, VectorSampleBuffer

logger = logging.getLogger(__name__)


# === Snapshot ================================================================

@dataclass
class PhaseSnapshot:
    """Momentopname van de detector (voor UI / replay / debug)."""
    t: Optional[float]
    revolution_count: int
    signal_quality: float
    phase_angle: float
    total_unwrapped_phase: float
    forward_phase: float
    forward_sign: int
    lock_state: str
    counter_state: str
    gate_reason: str
    window_len: int
    is_running: bool
    profile_name: str = ""


# === PhaseTrackingDetector ===================================================

class PhaseTrackingDetector:
    """
    Magnetische omwentelingsteller op basis van PCA + fase-unwrap.

    Detector-contract: start/stop/reset, feed_field_sample, feed_gyro_sample,
    feed_accel_sample, revolution_count, signal_quality, current_phase_angle,
    restore_count.
    """

    def __init__(self, config: Optional[DetectorConfig] = None,
                 solver: Optional[EigenSolver] = None):
        if config is None:
            config = PROFILE_DEFAULT
        # eigen kopie: presets en andere detectors delen geen state
        self.config = replace(config).validate()

        self._lock = threading.RLock()
        self._running = False

        self.baseline = BaselineTracker(config.baseline_alpha, config.baseline_slowdown)
        self.window = VectorSampleBuffer(config.window_capacity)
        self.estimator = PlaneEstimator(config.min_window_size, solver=solver)
        self.stabilizer = BasisStabilizer(anchor_in_plane=config.anchor_in_plane)
        self.basis_lock = BasisLock(config.min_planarity, config.unlock_ratio)
        self.gate = MotionValidityGate.from_config(config)
        self.phase = PhaseState()
        self.counter = RevolutionCounter(config.learn_threshold_rad)

        self._latest: Optional[RotationBasis] = None
        self._previous: Optional[RotationBasis] = None
        self._samples_since_estimate = 0
        self._quality = 0.0
        self._last_t: Optional[float] = None

    # --- lifecycle ------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._reset_pipeline()
            self._running = True
            logger.info("Phase tracking started (profile=%s, count=%d)",
                        self.config.name, self.counter.count)

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            logger.info("Phase tracking stopped (count=%d)", self.counter.count)

    def reset(self) -> None:
        with self._lock:
            self._reset_pipeline()
            self.counter.reset()
            logger.info("Phase tracking reset")

    def restore_count(self, n: int) -> None:
        with self._lock:
            self.counter.restore_count(n)

    def _reset_pipeline(self) -> None:
        self.baseline.reset()
        self.window.clear()
        self.basis_lock.reset()
        self.gate.reset()
        self.phase.reset()
        self._latest = None
        self._previous = None
        self._samples_since_estimate = 0
        self._quality = 0.0
        self._last_t = None

    # --- ingest ---------------------------------------------------------------

    def feed_gyro_sample(self, x: float, y: float, z: float, t: float) -> None:
        s = Sample3(x, y, z, t)
        if not s.is_finite():
            return
        with self._lock:
            if self._running:
                self.gate.push_gyro(s)

    def feed_accel_sample(self, x: float, y: float, z: float, t: float) -> None:
        s = Sample3(x, y, z, t)
        if not s.is_finite():
            return
        with self._lock:
            if self._running:
                self.gate.push_accel(s)

    def feed_field_sample(self, x: float, y: float, z: float, t: float) -> int:
        """Verwerk één veld-sample; return het aantal nieuwe omwentelingen."""
        s = Sample3(x, y, z, t)
        if not s.is_finite():
            logger.debug("Dropping non-finite field sample at t=%s", t)
            return 0

        with self._lock:
            if not self._running:
                return 0
            self._last_t = t

            corrected = self.baseline.update(s.as_array(), self.gate.is_rotating(t))
            if corrected is None:
                return 0

            self.window.append(corrected)
            self._samples_since_estimate += 1
            if len(self.window) < self.config.min_window_size:
                return 0

            if self._latest is None or self._samples_since_estimate >= self.config.plane_update_every:
                self._samples_since_estimate = 0
                self._update_basis()

            basis = self.basis_lock.locked or self._latest or default_basis()

            delta = PhaseTracker.step(corrected, basis, self.phase)
            self.gate.observe_phase_delta(delta, t)

            if not self.gate.is_valid(basis, t):
                return 0
            return self.counter.step(delta, self.phase)

    def _update_basis(self) -> None:
        estimate = self.estimator.estimate(self.window)
        if estimate is None:
            logger.debug("No plane estimate, keeping %s basis",
                         "previous" if self._latest is not None else "default")
            return

        stabilized = self.stabilizer.stabilize(estimate, self._previous)
        self._latest = stabilized
        self._quality = stabilized.planarity
        self.basis_lock.update(stabilized)
        self._previous = stabilized

    # --- outputs --------------------------------------------------------------

    def revolution_count(self) -> int:
        with self._lock:
            return self.counter.count

    def signal_quality(self) -> float:
        with self._lock:
            return self._quality

    def current_phase_angle(self) -> float:
        with self._lock:
            return self.phase.last_angle

    def current_basis(self) -> Optional[RotationBasis]:
        with self._lock:
            basis = self.basis_lock.locked or self._latest
            return None if basis is None else basis.copy()

    def snapshot(self) -> PhaseSnapshot:
        with self._lock:
            return PhaseSnapshot(
                t=self._last_t,
                revolution_count=self.counter.count,
                signal_quality=self._quality,
                phase_angle=self.phase.last_angle,
                total_unwrapped_phase=self.phase.total_unwrapped_phase,
                forward_phase=self.phase.forward_phase_accum,
                forward_sign=self.phase.forward_sign,
                lock_state=self.basis_lock.state,
                counter_state=RevolutionCounter.state_of(self.phase),
                gate_reason=self.gate.last_reason,
                window_len=len(self.window),
                is_running=self._running,
                profile_name=self.config.name,
            )

    def debug_summary(self) -> Dict[str, Any]:
        with self._lock:
            baseline = self.baseline.snapshot()
            basis = self.basis_lock.locked or self._latest
            return {
                "profile": self.config.name,
                "running": self._running,
                "count": self.counter.count,
                "window_len": len(self.window),
                "window_capacity": self.window.capacity,
                "baseline": None if baseline is None else baseline.tolist(),
                "lock_state": self.basis_lock.state,
                "planarity": self._quality,
                "normal": None if basis is None else np.round(basis.normal, 4).tolist(),
                "forward_sign": self.phase.forward_sign,
                "forward_phase": self.phase.forward_phase_accum,
                "total_unwrapped_phase": self.phase.total_unwrapped_phase,
                "gate_reason": self.gate.last_reason,
                "gyro_history_len": len(self.gate.gyro_history),
                "accel_history_len": len(self.gate.accel_history),
            }
