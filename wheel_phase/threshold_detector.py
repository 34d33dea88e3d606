# -*- coding: utf-8 -*-
"""
wheel_phase.threshold_detector

ThresholdDetector: eenvoudige magnitude-piekdetector achter hetzelfde
Detector-contract als PhaseTrackingDetector.

- Houdt de laatste 50 |B| waarden bij.
- Auto-kalibratie: zolang niet gekalibreerd en ≥ 20 samples:
    low  → μ + max(30, σ)
    high → μ + max(60, 2σ)
  met smoothing 0.1; na 20 updates liggen de drempels vast (en worden opgeslagen).
- Tellen: omhoog door high (armed) = 1 omwenteling, opnieuw armed onder low.
"""

from __future__ import annotations

import logging
import statistics
import threading
from collections import deque
from typing import Deque

from .sample_buffer import Sample3

logger = logging.getLogger(__name__)

KEY_LOW_THRESHOLD = "lowThreshold"
KEY_HIGH_THRESHOLD = "highThreshold"

DEFAULT_HIGH_THRESHOLD = 1200.0
DEFAULT_LOW_THRESHOLD = 1130.0

HISTORY_LEN = 50
AUTO_MIN_SAMPLES = 20
AUTO_UPDATES_NEEDED = 20
MANUAL_MIN_SAMPLES = 10
SMOOTHING = 0.1


def _target_thresholds(history) -> tuple:
    mean = statistics.fmean(history)
    sigma = statistics.pstdev(history)
    return mean + max(30.0, sigma), mean + max(60.0, 2.0 * sigma)


class ThresholdDetector:

    def __init__(self, settings_store=None):
        self._lock = threading.RLock()
        self._store = settings_store
        self._running = False

        self.high_threshold = DEFAULT_HIGH_THRESHOLD
        self.low_threshold = DEFAULT_LOW_THRESHOLD
        self.did_calibrate = False
        self._calibration_updates = 0

        self.history: Deque[float] = deque(maxlen=HISTORY_LEN)
        self._armed = True
        self._count = 0
        self.current_magnitude = 0.0

        if self._store is not None:
            low = self._store.load(KEY_LOW_THRESHOLD)
            high = self._store.load(KEY_HIGH_THRESHOLD)
            if low is not None and high is not None:
                self.low_threshold = float(low)
                self.high_threshold = float(high)
                self.did_calibrate = True

    # --- lifecycle ------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def is_calibrating(self) -> bool:
        return not self.did_calibrate

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._armed = True
            self._running = True
            logger.info("Threshold detector started (low=%.1f, high=%.1f)",
                        self.low_threshold, self.high_threshold)

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            logger.info("Threshold detector stopped (count=%d)", self._count)

    def reset(self) -> None:
        with self._lock:
            self._count = 0
            self._armed = True
            self.history.clear()
            self.current_magnitude = 0.0

    def restore_count(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"revolution count must be >= 0 (got {n})")
        with self._lock:
            self._count = int(n)

    # --- ingest ---------------------------------------------------------------

    def feed_field_sample(self, x: float, y: float, z: float, t: float) -> int:
        s = Sample3(x, y, z, t)
        if not s.is_finite():
            return 0
        with self._lock:
            if not self._running:
                return 0
            m = s.magnitude
            self.current_magnitude = m
            self.history.append(m)
            self._auto_calibrate()
            return self._detect_peak(m)

    def feed_gyro_sample(self, x: float, y: float, z: float, t: float) -> None:
        pass  # geen inertiële gating in deze variant

    def feed_accel_sample(self, x: float, y: float, z: float, t: float) -> None:
        pass

    def _detect_peak(self, m: float) -> int:
        if self._armed and m > self.high_threshold:
            self._armed = False
            self._count += 1
            logger.debug("Peak above %.1f → count=%d", self.high_threshold, self._count)
            return 1
        if not self._armed and m < self.low_threshold:
            self._armed = True
        return 0

    # --- calibration ----------------------------------------------------------

    def _auto_calibrate(self) -> None:
        if self.did_calibrate or len(self.history) < AUTO_MIN_SAMPLES:
            return

        low, high = _target_thresholds(self.history)
        self.low_threshold = self.low_threshold * (1.0 - SMOOTHING) + low * SMOOTHING
        self.high_threshold = self.high_threshold * (1.0 - SMOOTHING) + high * SMOOTHING

        self._calibration_updates += 1
        if self._calibration_updates >= AUTO_UPDATES_NEEDED:
            self._finish_calibration("auto")

    def run_manual_calibration(self) -> bool:
        """Zet de drempels direct uit de huidige history. False bij < 10 samples."""
        with self._lock:
            if len(self.history) < MANUAL_MIN_SAMPLES:
                logger.info("Not enough samples for calibration (%d)", len(self.history))
                return False
            self.low_threshold, self.high_threshold = _target_thresholds(self.history)
            self._finish_calibration("manual")
            return True

    def _finish_calibration(self, how: str) -> None:
        self.did_calibrate = True
        if self._store is not None:
            self._store.save(KEY_LOW_THRESHOLD, self.low_threshold)
            self._store.save(KEY_HIGH_THRESHOLD, self.high_threshold)
        logger.info("Calibration complete (%s): low=%.1f high=%.1f",
                    how, self.low_threshold, self.high_threshold)

    def reset_threshold_calibration(self) -> None:
        with self._lock:
            self.did_calibrate = False
            self._calibration_updates = 0
            self.history.clear()
            if self._store is not None:
                self._store.remove(KEY_LOW_THRESHOLD)
                self._store.remove(KEY_HIGH_THRESHOLD)

    # --- outputs --------------------------------------------------------------

    def revolution_count(self) -> int:
        with self._lock:
            return self._count

    def signal_quality(self) -> float:
        with self._lock:
            if self.did_calibrate:
                return 1.0
            return min(1.0, self._calibration_updates / float(AUTO_UPDATES_NEEDED))

    def current_phase_angle(self) -> float:
        return 0.0
