# -*- coding: utf-8 -*-
"""
wheel_phase.plane_estimator_v1_0

PlaneEstimator v1.0: online PCA op het schuivende venster.

Rol:
- 3x3 covariantie van de venster-samples (intern mean-centered, los van de baseline).
- Symmetrische eigendecompositie (numpy.linalg.eigh → eigenwaarden oplopend,
  wij rapporteren aflopend).
- axis1/axis2 = eigenvectoren van de twee grootste eigenwaarden,
  normal = axis1 × axis2, alles genormaliseerd.
- planarity = (λ1+λ2)/(λ1+λ2+λ3) als kwaliteitsmaat.

Faalt de solver (LinAlgError / niet-eindige covariantie) dan komt er None uit;
de pipeline valt dan terug op de vorige basis of op default_basis().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# solver(cov) -> (eigenvalues oplopend, eigenvectoren als kolommen)
EigenSolver = Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]]


def _unit(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    if n <= 0.0:
        return v
    return v / n


@dataclass
class RotationBasis:
    """Orthonormale basis van het geschatte rotatievlak."""
    axis1: np.ndarray
    axis2: np.ndarray
    normal: np.ndarray
    eigenvalues: Tuple[float, float, float]   # aflopend
    center: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def planarity(self) -> float:
        lam = [max(0.0, float(v)) for v in self.eigenvalues]
        total = sum(lam)
        if total <= 0.0:
            return 0.0
        return min(1.0, (lam[0] + lam[1]) / total)

    def project(self, sample: np.ndarray) -> Tuple[float, float]:
        """(u, v) coördinaten van sample in het vlak, relatief t.o.v. center."""
        d = np.asarray(sample, dtype=float) - self.center
        return float(np.dot(d, self.axis1)), float(np.dot(d, self.axis2))

    def copy(self) -> "RotationBasis":
        return replace(
            self,
            axis1=self.axis1.copy(),
            axis2=self.axis2.copy(),
            normal=self.normal.copy(),
            center=self.center.copy(),
        )


def default_basis() -> RotationBasis:
    """Synthetisch XY-vlak, gebruikt als er nog nooit een schatting gelukt is."""
    return RotationBasis(
        axis1=np.array([1.0, 0.0, 0.0]),
        axis2=np.array([0.0, 1.0, 0.0]),
        normal=np.array([0.0, 0.0, 1.0]),
        eigenvalues=(0.0, 0.0, 0.0),
    )


class PlaneEstimator:

    def __init__(self, min_window_size: int, solver: Optional[EigenSolver] = None):
        self.min_window_size = min_window_size
        self._solver: EigenSolver = solver or np.linalg.eigh

    def estimate(self, window) -> Optional[RotationBasis]:
        """
        window: VectorSampleBuffer of (n, 3) array.
        Return None bij te weinig samples of als de solver faalt.
        """
        samples = window.as_array() if hasattr(window, "as_array") else np.asarray(window, dtype=float)
        n = samples.shape[0]
        if n < self.min_window_size or n == 0:
            return None

        center = samples.mean(axis=0)
        d = samples - center
        cov = (d.T @ d) / float(n)

        if not np.all(np.isfinite(cov)):
            logger.warning("Non-finite covariance (n=%d), skipping plane estimate", n)
            return None

        try:
            eigvals, eigvecs = self._solver(cov)
        except np.linalg.LinAlgError as exc:
            logger.warning("Eigen solver failed: %s", exc)
            return None

        eigvals = np.asarray(eigvals, dtype=float)
        eigvecs = np.asarray(eigvecs, dtype=float)
        if not (np.all(np.isfinite(eigvals)) and np.all(np.isfinite(eigvecs))):
            logger.warning("Eigen solver returned non-finite values, skipping plane estimate")
            return None

        # oplopend → aflopend
        order = np.argsort(eigvals)[::-1]
        eigvals = eigvals[order]
        eigvecs = eigvecs[:, order]

        axis1 = _unit(eigvecs[:, 0])
        axis2 = _unit(eigvecs[:, 1])
        normal = _unit(np.cross(axis1, axis2))

        return RotationBasis(
            axis1=axis1,
            axis2=axis2,
            normal=normal,
            eigenvalues=(float(eigvals[0]), float(eigvals[1]), float(eigvals[2])),
            center=center,
        )
