import numpy as np
import pytest

from trstep.blocks.tr import boundary_tau


def test_boundary_tau_hits_radius():
    p = np.array([0.3, 0.1])
    d = np.array([1.0, 2.0])
    tau = boundary_tau(p, d, 1.0)
    assert 0.0 < tau <= 1.0
    assert np.linalg.norm(p + tau * d) == pytest.approx(1.0, rel=1e-12)


def test_boundary_tau_near_boundary_is_accurate():
    # ||p|| just inside Delta with p.d > 0: the naive root cancels here
    p = np.array([1.0 - 1e-12, 0.0])
    d = np.array([1.0, 1.0])
    tau = boundary_tau(p, d, 1.0)
    assert tau == pytest.approx(1e-12, rel=1e-3)


def test_boundary_tau_from_origin():
    tau = boundary_tau(np.zeros(3), np.array([0.0, 3.0, 4.0]), 2.5)
    assert tau == pytest.approx(0.5)


def test_boundary_tau_clamped_to_segment():
    # segment ends inside the ball
    assert boundary_tau(np.zeros(2), np.array([0.1, 0.0]), 1.0) == 1.0
    assert boundary_tau(np.ones(2), np.zeros(2), 1.0) == 0.0
