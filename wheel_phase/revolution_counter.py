# -*- coding: utf-8 -*-
"""
wheel_phase.revolution_counter

RevolutionCounter: richting-bewuste omwentelingsteller.

State machine:
```
AWAITING_DIRECTION  (forward_sign nog onbekend)
    └── eerste geldige |Δφ| > learn_threshold  →  forward_sign = sign(Δφ)
COUNTING
    └── signed = Δφ · forward_sign
        signed > 0 → accumulator += signed, hele omwentelingen eruit
        signed ≤ 0 → genegeerd (geen decrement)
```

Alleen geldige (door de gate goedgekeurde) delta's komen hier binnen;
overgeslagen samples raken de accumulator niet, zodat een half afgemaakte
omwenteling bewaard blijft over een dropout heen.
"""

from __future__ import annotations

import logging
import math

from .phase_tracker import TWO_PI, PhaseState

logger = logging.getLogger(__name__)

COUNTER_STATE_AWAITING_DIRECTION = "AWAITING_DIRECTION"
COUNTER_STATE_COUNTING = "COUNTING"

# float-tolerantie bij delen door 2π: K exacte cirkels → exact K
_REV_EPS = 1e-9


class RevolutionCounter:

    def __init__(self, learn_threshold_rad: float = 0.01):
        self.learn_threshold_rad = learn_threshold_rad
        self.count: int = 0

    @staticmethod
    def state_of(phase: PhaseState) -> str:
        if phase.forward_sign == 0:
            return COUNTER_STATE_AWAITING_DIRECTION
        return COUNTER_STATE_COUNTING

    def step(self, delta: float, phase: PhaseState) -> int:
        """Verwerk een geldige fase-delta; return het aantal nieuwe omwentelingen."""
        if phase.forward_sign == 0:
            if abs(delta) <= self.learn_threshold_rad:
                return 0
            phase.forward_sign = 1 if delta > 0 else -1
            logger.info("Forward direction learned (sign=%+d)", phase.forward_sign)

        signed = delta * phase.forward_sign
        if signed <= 0.0:
            return 0

        phase.forward_phase_accum += signed
        whole = int(math.floor((phase.forward_phase_accum + _REV_EPS) / TWO_PI))
        if whole < 1:
            return 0

        phase.forward_phase_accum -= whole * TWO_PI
        if phase.forward_phase_accum < 0.0:
            phase.forward_phase_accum = 0.0
        elif phase.forward_phase_accum >= TWO_PI:
            phase.forward_phase_accum = 0.0

        self.count += whole
        logger.debug("Revolution +%d → count=%d", whole, self.count)
        return whole

    def restore_count(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"revolution count must be >= 0 (got {n})")
        self.count = int(n)

    def reset(self) -> None:
        self.count = 0
