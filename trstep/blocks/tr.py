from __future__ import annotations

from typing import Optional

import numpy as np
from numba import njit

from .aux import DimensionError

Vec = np.ndarray


# ---------------------------- Utilities ---------------------------- #
def safe_norm(x: Vec) -> float:
    return float(np.linalg.norm(x)) if x.size > 0 else 0.0


def _asarray1d(a: Optional[np.ndarray], n: int, name: str = "vector") -> Optional[np.ndarray]:
    if a is None:
        return None
    x = np.asarray(a, float).reshape(-1)
    if x.size != n:
        raise DimensionError(f"{name}: expected shape ({n},) got {np.shape(a)}")
    return x


def _asarray2d(A: np.ndarray, m: int, n: int, name: str = "matrix") -> np.ndarray:
    X = np.asarray(A, float)
    if X.shape != (m, n):
        raise DimensionError(f"{name}: expected shape ({m}, {n}) got {X.shape}")
    return X


# ---------------------------- Numba kernels ---------------------------- #
@njit(cache=True)
def _boundary_tau_numba(p: np.ndarray, d: np.ndarray, Delta: float) -> float:
    pTp = 0.0
    pTd = 0.0
    dTd = 0.0
    for i in range(p.size):
        pTp += p[i] * p[i]
        pTd += p[i] * d[i]
        dTd += d[i] * d[i]
    if dTd <= 1e-300:
        return 0.0
    c = pTp - Delta * Delta
    disc = pTd * pTd - dTd * c
    if disc < 0.0:
        disc = 0.0
    sq = np.sqrt(disc)
    # larger root of dTd t^2 + 2 pTd t + c; pick the form without cancellation
    if pTd > 0.0:
        tau = -c / (pTd + sq)
    else:
        tau = (-pTd + sq) / dTd
    if tau < 0.0:
        return 0.0
    if tau > 1.0:
        return 1.0
    return tau


def boundary_tau(p: Vec, d: Vec, Delta: float) -> float:
    """
    Largest tau in [0, 1] with ||p + tau d|| = Delta, for ||p|| <= Delta.

    The root is taken from ``||d||^2 tau^2 + 2 p.d tau + ||p||^2 - Delta^2 = 0``;
    ``c = ||p||^2 - Delta^2`` tends to zero as p approaches the boundary, which
    is where the textbook formula loses digits when p.d > 0.
    """
    p = np.ascontiguousarray(p, dtype=np.float64)
    d = np.ascontiguousarray(d, dtype=np.float64)
    return float(_boundary_tau_numba(p, d, float(Delta)))
