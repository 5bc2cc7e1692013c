"""
Gauss-Newton point of the least-squares model: solve (J^T J) p = -g.

Two interchangeable strategies share the contract ``solve(B, g, J=None)``:

    * 'cholesky' : Cholesky factorization of the normal-equations matrix B.
    * 'qr'       : economic QR of the Jacobian, B = R^T R, never forming B's factor
                   from the squared system (J is better conditioned than J^T J).

A strategy returns ``None`` when the system is singular or indefinite to within
``singular_rtol``; it does not raise on numeric degeneracy. Pivots are compared
against max(diag B) so both strategies fall back at the same point.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import scipy.linalg as la

from .aux import LINEAR_SOLVERS

Vec = np.ndarray


def _pivot_scale(B: np.ndarray) -> float:
    d = np.diagonal(B)
    return float(np.max(d)) if d.size else 0.0


class LinearSolver:
    """Strategy interface for the Gauss-Newton subproblem."""

    name = "base"

    def __init__(self, singular_rtol: float = 1e-12):
        self.singular_rtol = float(singular_rtol)

    def solve(self, B: np.ndarray, g: Vec, J: Optional[np.ndarray] = None) -> Optional[Vec]:
        raise NotImplementedError

    def _pivots_ok(self, piv_sq: np.ndarray, B: np.ndarray) -> bool:
        scale = _pivot_scale(B)
        if not (np.isfinite(scale) and scale > 0.0):
            return False
        return bool(np.min(piv_sq) > self.singular_rtol * scale)

    @staticmethod
    def _finite_or_none(p: Vec) -> Optional[Vec]:
        if not np.all(np.isfinite(p)):
            logging.debug("[GaussNewton] non-finite solution, treating as singular")
            return None
        return p


class CholeskySolver(LinearSolver):
    """p = -B^{-1} g via B = L L^T."""

    name = "cholesky"

    def solve(self, B, g, J=None):
        try:
            c, lower = la.cho_factor(B, lower=True, check_finite=False)
        except la.LinAlgError:
            logging.debug("[GaussNewton] B is not positive definite")
            return None
        if not self._pivots_ok(np.diagonal(c) ** 2, B):
            logging.debug("[GaussNewton] B is numerically singular (cholesky pivot)")
            return None
        p = -la.cho_solve((c, lower), g, check_finite=False)
        return self._finite_or_none(p)


class QRSolver(LinearSolver):
    """p = -R^{-1} R^{-T} g with R from the economic QR of J."""

    name = "qr"

    def solve(self, B, g, J=None):
        A = B if J is None else J
        m, n = A.shape
        if m < n:
            logging.debug(f"[GaussNewton] rank deficient: {m} residuals < {n} parameters")
            return None
        if not np.all(np.isfinite(A)):
            return None
        if J is None:
            # B p = -g directly: p = -R^{-1} Q^T g; |R_ii| of B scales like L_ii^2
            Q, R = la.qr(A, mode="economic", check_finite=False)
            if not self._pivots_ok(np.abs(np.diagonal(R)), B):
                logging.debug("[GaussNewton] B is numerically singular (qr pivot)")
                return None
            p = -la.solve_triangular(R, Q.T @ g, check_finite=False)
            return self._finite_or_none(p)
        R = la.qr(A, mode="r", check_finite=False)[0][:n]
        if not self._pivots_ok(np.diagonal(R) ** 2, B):
            logging.debug("[GaussNewton] J is numerically rank deficient (qr pivot)")
            return None
        y = la.solve_triangular(R, -g, trans="T", check_finite=False)
        p = la.solve_triangular(R, y, check_finite=False)
        return self._finite_or_none(p)


_SOLVERS = {
    "cholesky": CholeskySolver,
    "qr": QRSolver,
}


def make_linear_solver(kind: str = "cholesky", singular_rtol: float = 1e-12) -> LinearSolver:
    if kind not in _SOLVERS:
        raise ValueError(f"Unknown linear solver {kind!r}; expected one of {LINEAR_SOLVERS}")
    return _SOLVERS[kind](singular_rtol)
