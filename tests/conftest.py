import numpy as np
import pytest


def model_cost(residuals, J, h, *delta):
    """1/2 r^T r + r^T J h + 1/2 h^T J^T J h, with h optionally perturbed."""
    h = np.array(h, dtype=float)
    if delta:
        h = h + np.asarray(delta, dtype=float)
    B = J.T @ J
    return 0.5 * residuals @ residuals + residuals @ (J @ h) + 0.5 * h @ B @ h


@pytest.fixture
def problem():
    J = np.array([[1.0, 0.5], [2.0, np.sqrt(2.0)], [-2.0, 4.0]])
    x = np.array([0.5, 1.5])
    r = np.array([-1.0, -2.0, -3.0])
    g = J.T @ r
    return x, r, J, g


@pytest.fixture
def rank_deficient():
    # identical columns: J^T J is singular
    J = np.array([[1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])
    x = np.zeros(2)
    r = np.array([1.0, 2.0, 3.0])
    return x, r, J, J.T @ r


@pytest.fixture
def rng():
    return np.random.default_rng(123)
