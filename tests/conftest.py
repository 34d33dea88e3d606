"""
Shared fixtures for the wheel_phase tests.
"""

import numpy as np
import pytest

from wheel_phase.plane_estimator_v1_0 import RotationBasis
from wheel_phase.realtime_phase_v1_0 import PhaseTrackingDetector
from wheel_phase.settings_store import InMemorySettingsStore
from wheel_phase.synthetic import generate_session


def make_basis(axis1=(1.0, 0.0, 0.0), axis2=(0.0, 1.0, 0.0), normal=None,
               eigenvalues=(2.0, 1.0, 0.0)):
    a1 = np.asarray(axis1, dtype=float)
    a2 = np.asarray(axis2, dtype=float)
    n = np.cross(a1, a2) if normal is None else np.asarray(normal, dtype=float)
    return RotationBasis(axis1=a1, axis2=a2, normal=n, eigenvalues=tuple(eigenvalues))


def basis_with_planarity(p):
    """Basis in het XY vlak met een gegeven planarity."""
    return make_basis(eigenvalues=(p / 2.0, p / 2.0, 1.0 - p))


def feed_mag(detector, session, start=0, stop=None):
    """Voer mag samples [start, stop) door de detector."""
    stop = len(session.t_mag) if stop is None else stop
    for i in range(start, stop):
        x, y, z = session.mag[i]
        detector.feed_field_sample(float(x), float(y), float(z), float(session.t_mag[i]))


@pytest.fixture
def detector():
    det = PhaseTrackingDetector()
    det.start()
    return det


@pytest.fixture
def example_session():
    """50 Hz, 1 Hz magneet in het XY vlak, amplitude 100 µT, ambient 45 µT, 10 s."""
    return generate_session(duration_s=10.0, sample_rate_hz=50.0, freq_hz=1.0,
                            amplitude=100.0, ambient=(0.0, 0.0, 45.0))


@pytest.fixture
def store():
    return InMemorySettingsStore()
