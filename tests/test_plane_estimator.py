"""
Tests for RotationBasis and PlaneEstimator (PCA on the sliding window).
"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from wheel_phase.plane_estimator_v1_0 import PlaneEstimator, RotationBasis, default_basis
from wheel_phase.sample_buffer import VectorSampleBuffer
from wheel_phase.synthetic import plane_axes


def circle(n=50, radius=100.0, normal=(0.0, 0.0, 1.0), offset=(0.0, 0.0, 0.0)):
    a1, a2, _ = plane_axes(normal)
    theta = np.linspace(0.0, 2.0 * np.pi, n, endpoint=False)
    return (np.asarray(offset)[None, :]
            + radius * (np.cos(theta)[:, None] * a1 + np.sin(theta)[:, None] * a2))


class TestRotationBasis:

    def test_planarity(self):
        b = RotationBasis(np.eye(3)[0], np.eye(3)[1], np.eye(3)[2], (4.0, 3.0, 1.0))
        assert b.planarity == pytest.approx(7.0 / 8.0)

    def test_planarity_zero_when_degenerate(self):
        assert default_basis().planarity == 0.0

    def test_planarity_ignores_negative_round_off(self):
        b = RotationBasis(np.eye(3)[0], np.eye(3)[1], np.eye(3)[2], (1.0, 1.0, -1e-12))
        assert b.planarity == pytest.approx(1.0)

    def test_project_relative_to_center(self):
        b = default_basis()
        b.center = np.array([10.0, 10.0, 0.0])
        assert b.project(np.array([11.0, 12.0, 5.0])) == pytest.approx((1.0, 2.0))

    def test_copy_is_deep(self):
        b = default_basis()
        c = b.copy()
        c.axis1[0] = -1.0
        assert b.axis1[0] == 1.0


class TestPlaneEstimator:

    def test_not_enough_samples(self):
        est = PlaneEstimator(min_window_size=10)
        assert est.estimate(np.zeros((9, 3))) is None

    def test_circle_in_xy_plane(self):
        est = PlaneEstimator(min_window_size=25)
        buf = VectorSampleBuffer(50)
        for v in circle(offset=(3.0, -2.0, 7.0)):
            buf.append(v)

        basis = est.estimate(buf)
        assert basis is not None
        assert basis.planarity == pytest.approx(1.0, abs=1e-9)
        assert abs(basis.normal[2]) == pytest.approx(1.0, abs=1e-9)
        assert abs(basis.axis1[2]) < 1e-9
        assert abs(basis.axis2[2]) < 1e-9
        assert_allclose(basis.center, [3.0, -2.0, 7.0], atol=1e-9)

        lam = basis.eigenvalues
        assert lam[0] >= lam[1] >= lam[2]

    def test_orthonormal_axes(self):
        est = PlaneEstimator(min_window_size=25)
        basis = est.estimate(circle(normal=(1.0, 2.0, 3.0)))
        m = np.vstack([basis.axis1, basis.axis2, basis.normal])
        assert_allclose(m @ m.T, np.eye(3), atol=1e-9)
        assert_allclose(np.cross(basis.axis1, basis.axis2), basis.normal, atol=1e-9)

    def test_tilted_plane_normal(self):
        n = np.array([1.0, 1.0, 1.0]) / np.sqrt(3.0)
        basis = PlaneEstimator(min_window_size=25).estimate(circle(normal=n))
        assert abs(float(np.dot(basis.normal, n))) == pytest.approx(1.0, abs=1e-9)

    def test_isotropic_cloud_is_not_planar(self):
        rng = np.random.default_rng(1)
        basis = PlaneEstimator(min_window_size=25).estimate(rng.normal(size=(2000, 3)))
        assert basis.planarity < 0.75

    def test_descending_order_from_ascending_solver(self):
        data = np.column_stack([
            3.0 * np.cos(np.linspace(0, 2 * np.pi, 60, endpoint=False)),
            np.zeros(60),
            np.sin(np.linspace(0, 2 * np.pi, 60, endpoint=False)),
        ])
        basis = PlaneEstimator(min_window_size=25).estimate(data)
        assert abs(basis.axis1[0]) == pytest.approx(1.0, abs=1e-9)
        assert abs(basis.axis2[2]) == pytest.approx(1.0, abs=1e-9)
        assert abs(basis.normal[1]) == pytest.approx(1.0, abs=1e-9)

    def test_solver_failure_returns_none(self, caplog):
        def failing(cov):
            raise np.linalg.LinAlgError("did not converge")

        est = PlaneEstimator(min_window_size=25, solver=failing)
        with caplog.at_level(logging.WARNING):
            assert est.estimate(circle()) is None
        assert "Eigen solver failed" in caplog.text

    def test_non_finite_solver_output_returns_none(self, caplog):
        def nan_solver(cov):
            vals, vecs = np.linalg.eigh(cov)
            vecs = vecs.copy()
            vecs[0, 0] = np.nan
            return vals, vecs

        est = PlaneEstimator(min_window_size=25, solver=nan_solver)
        with caplog.at_level(logging.WARNING):
            assert est.estimate(circle()) is None
        assert "non-finite" in caplog.text

    def test_non_finite_window_returns_none(self):
        data = circle()
        data[3, 0] = np.inf
        assert PlaneEstimator(min_window_size=25).estimate(data) is None
