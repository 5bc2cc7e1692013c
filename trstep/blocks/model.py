from __future__ import annotations

from typing import Optional

import numpy as np

Vec = np.ndarray


class QuadraticModel:
    """
    Local Gauss-Newton model of the sum-of-squares cost

        m(h) = fx + h^T g + 1/2 h^T (J^T J) h,     fx = 1/2 ||r||^2

    Holds references to the caller's workspace (J, g) and evaluates the
    curvature term as ||J h||^2 into a reusable buffer, so B is never applied.
    """

    def __init__(self, J: np.ndarray, g: Vec, fx: float = 0.0):
        self.J = J
        self.g = g
        self.fx = float(fx)
        self._Jh = np.empty(J.shape[0], dtype=np.float64)

    def bind(self, fx: float) -> None:
        self.fx = float(fx)

    def curvature(self, h: Vec) -> float:
        """h^T B h."""
        np.matmul(self.J, h, out=self._Jh)
        return float(self._Jh @ self._Jh)

    def value(self, h: Optional[Vec] = None) -> float:
        if h is None:
            return self.fx
        return self.fx - self.reduction(h)

    def reduction(self, h: Vec) -> float:
        """m(0) - m(h)."""
        return -(float(self.g @ h) + 0.5 * self.curvature(h))
