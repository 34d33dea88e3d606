# -*- coding: utf-8 -*-
"""
wheel_phase.detector_selector

Detector-contract + DetectorSelector.

De selector houdt één detector per methode vast en stuurt lifecycle- en
feed-calls alleen door naar de actieve. Bij wisselen van methode wordt de
telling overgedragen (restore_count), zodat de afstand doorloopt.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Optional, Protocol

from .profiles import DetectorConfig
from .realtime_phase_v1_0 import PhaseTrackingDetector
from .threshold_detector import ThresholdDetector

logger = logging.getLogger(__name__)

KEY_DETECTION_METHOD = "wheelDetectionMethod"
KEY_POINT_NUMBER = "pointNumber"
KEY_WHEEL_CIRCUMFERENCE = "wheelCircumference"

DEFAULT_WHEEL_CIRCUMFERENCE_CM = 11.78


class Detector(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def reset(self) -> None: ...

    @property
    def is_running(self) -> bool: ...

    def feed_field_sample(self, x: float, y: float, z: float, t: float) -> int: ...

    def feed_gyro_sample(self, x: float, y: float, z: float, t: float) -> None: ...

    def feed_accel_sample(self, x: float, y: float, z: float, t: float) -> None: ...

    def revolution_count(self) -> int: ...

    def signal_quality(self) -> float: ...

    def current_phase_angle(self) -> float: ...

    def restore_count(self, n: int) -> None: ...


class DetectionMethod(Enum):
    MAGNETIC = "Magnetic"
    MAGNETIC_PCA = "Magnetic (PCA Phase)"

    @property
    def description(self) -> str:
        if self is DetectionMethod.MAGNETIC:
            return "Uses magnetometer to detect wheel rotations with threshold-based peak detection"
        return ("Uses PCA phase tracking to measure 2π advances in magnetometer signal. "
                "Most robust to phone orientation.")

    @classmethod
    def parse(cls, value) -> "DetectionMethod":
        """Accepteert enum, raw value ("Magnetic (PCA Phase)") of naam ("magnetic_pca")."""
        if isinstance(value, cls):
            return value
        for m in cls:
            if value == m.value or str(value).upper() == m.name:
                return m
        raise ValueError(f"Unknown detection method {value!r}. "
                         f"Available: {[m.value for m in cls]}")


class DetectorSelector:

    def __init__(self, settings_store=None,
                 config: Optional[DetectorConfig] = None,
                 detectors: Optional[Dict[DetectionMethod, Detector]] = None):
        self._store = settings_store

        if detectors is None:
            detectors = {
                DetectionMethod.MAGNETIC: ThresholdDetector(settings_store),
                DetectionMethod.MAGNETIC_PCA: PhaseTrackingDetector(config),
            }
        self.detectors = detectors

        method = DetectionMethod.MAGNETIC
        if self._store is not None:
            saved = self._store.load(KEY_DETECTION_METHOD)
            if saved is not None:
                try:
                    method = DetectionMethod.parse(saved)
                except ValueError:
                    logger.warning("Ignoring unknown stored detection method %r", saved)
        self.method = method

        default_circ = config.wheel_circumference_cm if config is not None else DEFAULT_WHEEL_CIRCUMFERENCE_CM
        self.wheel_circumference_cm = float(
            self._load(KEY_WHEEL_CIRCUMFERENCE, default_circ)
        )

    def _load(self, key: str, default):
        if self._store is None:
            return default
        return self._store.load(key, default)

    @property
    def active(self) -> Detector:
        return self.detectors[self.method]

    @property
    def is_running(self) -> bool:
        return self.active.is_running

    # --- lifecycle ------------------------------------------------------------

    def start(self) -> None:
        for m, det in self.detectors.items():
            if m is not self.method:
                det.stop()
        self.active.start()

    def stop(self) -> None:
        for det in self.detectors.values():
            det.stop()

    def reset(self) -> None:
        for det in self.detectors.values():
            det.reset()

    def switch_method(self, method) -> None:
        method = DetectionMethod.parse(method)
        if method is self.method:
            return

        was_running = self.active.is_running
        count = self.active.revolution_count()
        logger.info("Switching detection method %s → %s (count=%d)",
                    self.method.value, method.value, count)

        self.active.stop()
        self.detectors[method].restore_count(count)
        self.method = method
        if self._store is not None:
            self._store.save(KEY_DETECTION_METHOD, method.value)

        if was_running:
            self.active.start()

    # --- feed (alleen naar de actieve detector) --------------------------------

    def feed_field_sample(self, x: float, y: float, z: float, t: float) -> int:
        return self.active.feed_field_sample(x, y, z, t)

    def feed_gyro_sample(self, x: float, y: float, z: float, t: float) -> None:
        self.active.feed_gyro_sample(x, y, z, t)

    def feed_accel_sample(self, x: float, y: float, z: float, t: float) -> None:
        self.active.feed_accel_sample(x, y, z, t)

    # --- outputs --------------------------------------------------------------

    def revolution_count(self) -> int:
        return self.active.revolution_count()

    def signal_quality(self) -> float:
        return self.active.signal_quality()

    def current_phase_angle(self) -> float:
        return self.active.current_phase_angle()

    def distance_m(self) -> float:
        return self.revolution_count() * self.wheel_circumference_cm / 100.0

    def rounded_distance_m(self) -> float:
        return round(self.distance_m() * 100.0) / 100.0

    # --- sessie-grenzen ---------------------------------------------------------

    def save_session(self) -> None:
        if self._store is None:
            return
        self._store.save(KEY_POINT_NUMBER, self.revolution_count())
        self._store.save(KEY_DETECTION_METHOD, self.method.value)
        self._store.save(KEY_WHEEL_CIRCUMFERENCE, self.wheel_circumference_cm)

    def load_session(self) -> int:
        """Herstel de opgeslagen telling in alle detectors; return de telling."""
        count = int(self._load(KEY_POINT_NUMBER, 0))
        for det in self.detectors.values():
            det.restore_count(count)
        return count
