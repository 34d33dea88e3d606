# -*- coding: utf-8 -*-
"""
wheel_phase.basis_stabilizer

BasisStabilizer + BasisLock.

De eigensolver kiest teken en volgorde van de eigenvectoren willekeurig.
Zonder stabilisatie springt de fase dan met π of π/2 tussen twee updates,
en dat corrumpeert direct de fase-accumulator.

Stabilisatie t.o.v. de vorige basis:
1. kies de teken/swap-combinatie van axis1/axis2 met maximale alignment
   dot(axis1, prev.axis1) + dot(axis2, prev.axis2)
2. normal omdraaien als hij tegen prev.normal in wijst
3. (anchor_in_plane) axis1/axis2 vervangen door de vorige assen, geprojecteerd
   in het nieuwe vlak. Bij cirkelvormige beweging is λ1≈λ2 en liggen de
   eigenvectoren willekeurig gedraaid binnen het vlak; dit houdt de
   fase-referentie continu.

Lock met hysterese:
- planarity > min_planarity                   → LOCKED (basis volgt de nieuwe schatting)
- min_planarity*unlock_ratio ≤ p ≤ min        → lock blijft staan (oude basis)
- planarity < min_planarity*unlock_ratio      → UNLOCKED
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .plane_estimator_v1_0 import RotationBasis

logger = logging.getLogger(__name__)

LOCK_STATE_UNLOCKED = "UNLOCKED"
LOCK_STATE_LOCKED = "LOCKED"

# onder deze lengte is de geprojecteerde vorige as onbruikbaar (vlak ~90° gekanteld)
_MIN_ANCHOR_NORM = 1e-3


def _alignment(a1: np.ndarray, a2: np.ndarray, prev: RotationBasis) -> float:
    return float(np.dot(a1, prev.axis1) + np.dot(a2, prev.axis2))


class BasisStabilizer:

    def __init__(self, anchor_in_plane: bool = True):
        self.anchor_in_plane = anchor_in_plane

    def stabilize(self, candidate: RotationBasis,
                  previous: Optional[RotationBasis]) -> RotationBasis:
        if previous is None:
            return candidate.copy()

        out = candidate.copy()

        # unchanged eerst: bij gelijke score wint de schatting zoals hij is
        hypotheses = []
        for swapped in (False, True):
            b1, b2 = (out.axis2, out.axis1) if swapped else (out.axis1, out.axis2)
            for s1 in (1.0, -1.0):
                for s2 in (1.0, -1.0):
                    hypotheses.append((s1 * b1, s2 * b2))

        best = hypotheses[0]
        best_score = _alignment(best[0], best[1], previous)
        for a1, a2 in hypotheses[1:]:
            score = _alignment(a1, a2, previous)
            if score > best_score:
                best, best_score = (a1, a2), score

        out.axis1, out.axis2 = best[0].copy(), best[1].copy()

        if float(np.dot(out.normal, previous.normal)) < 0.0:
            out.normal = -out.normal

        if self.anchor_in_plane:
            self._anchor(out, previous)

        return out

    @staticmethod
    def _anchor(out: RotationBasis, previous: RotationBasis) -> None:
        n = out.normal
        a1 = previous.axis1 - np.dot(previous.axis1, n) * n
        n1 = float(np.linalg.norm(a1))
        if n1 < _MIN_ANCHOR_NORM:
            return
        a1 = a1 / n1

        a2 = previous.axis2 - np.dot(previous.axis2, n) * n
        a2 = a2 - np.dot(a2, a1) * a1
        n2 = float(np.linalg.norm(a2))
        if n2 < _MIN_ANCHOR_NORM:
            return

        out.axis1 = a1
        out.axis2 = a2 / n2


class BasisLock:
    """Vertrouwde basis met lock/unlock hysterese."""

    def __init__(self, min_planarity: float = 0.7, unlock_ratio: float = 0.8):
        self.min_planarity = min_planarity
        self.unlock_ratio = unlock_ratio
        self.locked: Optional[RotationBasis] = None

    @property
    def state(self) -> str:
        return LOCK_STATE_LOCKED if self.locked is not None else LOCK_STATE_UNLOCKED

    @property
    def unlock_threshold(self) -> float:
        return self.min_planarity * self.unlock_ratio

    def update(self, basis: RotationBasis) -> str:
        """Verwerk een nieuwe (gestabiliseerde) basis, return de lock state."""
        p = basis.planarity
        if p > self.min_planarity:
            if self.locked is None:
                logger.info("Basis locked (planarity=%.3f)", p)
            self.locked = basis
        elif p < self.unlock_threshold:
            if self.locked is not None:
                logger.info("Basis unlocked (planarity=%.3f)", p)
            self.locked = None
        return self.state

    def reset(self) -> None:
        self.locked = None
