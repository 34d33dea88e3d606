# -*- coding: utf-8 -*-
"""
wheel_phase.baseline_tracker

EMA-schatter van het ambient veld (aardveld + statische storing).

- Eerste sample initialiseert de baseline, er komt dan nog geen correctie uit.
- Tijdens een pauze (geen rotatie) loopt de EMA trager, zodat de baseline
  de magneet niet "opslokt" als het wiel stilstaat.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


class BaselineTracker:

    def __init__(self, alpha: float = 0.01, slowdown_factor: float = 0.1):
        self.alpha = alpha
        self.slowdown_factor = slowdown_factor
        self._baseline: Optional[np.ndarray] = None

    @property
    def is_initialized(self) -> bool:
        return self._baseline is not None

    def update(self, raw: np.ndarray, is_in_motion: bool) -> Optional[np.ndarray]:
        """Return raw − baseline, of None bij het allereerste sample."""
        raw = np.asarray(raw, dtype=float)

        if self._baseline is None:
            self._baseline = raw.copy()
            return None

        alpha = self.alpha if is_in_motion else self.alpha * self.slowdown_factor
        self._baseline = alpha * raw + (1.0 - alpha) * self._baseline
        return raw - self._baseline

    def reset(self) -> None:
        self._baseline = None

    def snapshot(self) -> Optional[np.ndarray]:
        # kopie: de baseline zelf blijft binnen de pipeline
        return None if self._baseline is None else self._baseline.copy()
