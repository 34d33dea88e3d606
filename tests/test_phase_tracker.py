"""
Tests for wrap_to_pi, PhaseState and PhaseTracker.
"""

import math

import numpy as np
import pytest

from conftest import make_basis
from wheel_phase.phase_tracker import TWO_PI, PhaseState, PhaseTracker, wrap_to_pi
from wheel_phase.plane_estimator_v1_0 import default_basis

ANGLES = np.linspace(-math.pi, math.pi, 25)


class TestWrapToPi:

    @pytest.mark.parametrize("a", ANGLES)
    def test_range_and_congruence(self, a):
        for b in ANGLES:
            d = wrap_to_pi(b - a)
            assert -math.pi <= d <= math.pi
            k = (d - (b - a)) / TWO_PI
            assert k == pytest.approx(round(k), abs=1e-12)

    def test_examples(self):
        assert wrap_to_pi(1.5 * math.pi) == pytest.approx(-0.5 * math.pi)
        assert wrap_to_pi(-1.5 * math.pi) == pytest.approx(0.5 * math.pi)
        assert wrap_to_pi(7.0 * math.pi + 0.1) == pytest.approx(-math.pi + 0.1)
        assert wrap_to_pi(0.3) == 0.3

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite(self, bad):
        with pytest.raises(ValueError):
            wrap_to_pi(bad)


def at(deg, r=1.0):
    a = math.radians(deg)
    return np.array([r * math.cos(a), r * math.sin(a), 0.0])


class TestPhaseTracker:

    def test_first_step_only_sets_reference(self):
        state = PhaseState()
        delta = PhaseTracker.step(at(135.0), default_basis(), state)
        assert delta == 0.0
        assert state.has_angle
        assert state.last_angle == pytest.approx(math.radians(135.0))
        assert state.total_unwrapped_phase == 0.0

    def test_quarter_turn(self):
        state = PhaseState()
        PhaseTracker.step(at(0.0), default_basis(), state)
        assert PhaseTracker.step(at(90.0), default_basis(), state) == pytest.approx(math.pi / 2)

    def test_crossing_pi_boundary(self):
        state = PhaseState()
        PhaseTracker.step(at(170.0), default_basis(), state)
        delta = PhaseTracker.step(at(-170.0), default_basis(), state)
        assert delta == pytest.approx(math.radians(20.0))
        assert state.total_unwrapped_phase == pytest.approx(math.radians(20.0))
        assert state.last_angle == pytest.approx(math.radians(-170.0))

    def test_unwrapped_phase_over_many_turns(self):
        state = PhaseState()
        for i in range(3 * 36 + 1):
            PhaseTracker.step(at(-10.0 * i, r=5.0), default_basis(), state)
        assert state.total_unwrapped_phase == pytest.approx(-3 * TWO_PI)

    def test_projection_uses_basis(self):
        # vlak = XZ, axis2 = z
        basis = make_basis((1.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        state = PhaseState()
        PhaseTracker.step(np.array([1.0, 7.0, 0.0]), basis, state)
        delta = PhaseTracker.step(np.array([0.0, -3.0, 1.0]), basis, state)
        assert delta == pytest.approx(math.pi / 2)

    def test_reset(self):
        state = PhaseState(last_angle=1.0, total_unwrapped_phase=5.0,
                           forward_phase_accum=2.0, forward_sign=-1, has_angle=True)
        state.reset()
        assert state == PhaseState()
