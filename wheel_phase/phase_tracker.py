# -*- coding: utf-8 -*-
"""
wheel_phase.phase_tracker

Projectie in het rotatievlak → hoek → unwrap → fase-accumulatie.

atan2 is discontinu op ±π; zonder unwrap zou een magneet die die grens
passeert gelezen worden als een bijna volledige omgekeerde rotatie.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .plane_estimator_v1_0 import RotationBasis

TWO_PI = 2.0 * math.pi


def wrap_to_pi(delta: float) -> float:
    """Breng delta naar [-π, π] door herhaald ±2π."""
    if not math.isfinite(delta):
        raise ValueError(f"cannot wrap non-finite phase delta {delta}")
    while delta > math.pi:
        delta -= TWO_PI
    while delta < -math.pi:
        delta += TWO_PI
    return delta


@dataclass
class PhaseState:
    last_angle: float = 0.0            # [-π, π]
    total_unwrapped_phase: float = 0.0
    forward_phase_accum: float = 0.0   # [0, 2π) na elke emissie
    forward_sign: int = 0              # +1 / -1, 0 = nog niet geleerd
    has_angle: bool = False

    def reset(self) -> None:
        self.last_angle = 0.0
        self.total_unwrapped_phase = 0.0
        self.forward_phase_accum = 0.0
        self.forward_sign = 0
        self.has_angle = False


class PhaseTracker:

    @staticmethod
    def step(sample: np.ndarray, basis: RotationBasis, state: PhaseState) -> float:
        """Return de fase-delta van dit sample t.o.v. het vorige."""
        u, v = basis.project(sample)
        angle = math.atan2(v, u)

        if not state.has_angle:
            # eerste hoek: alleen referentie zetten
            state.last_angle = angle
            state.has_angle = True
            return 0.0

        delta = wrap_to_pi(angle - state.last_angle)
        state.total_unwrapped_phase += delta
        state.last_angle = angle
        return delta
