from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from .blocks.aux import DimensionError, InvalidRadius, StepConfig, StepInfo, StepRegime
from .blocks.model import QuadraticModel
from .blocks.tr import _asarray1d, _asarray2d


class TrustRegionStep:
    """
    Base lifecycle for trust-region step providers.

    The outer driver calls ``init(n, m)`` once per problem size, then per
    iteration ``set_inputs(...)`` followed by one or more
    ``compute_step(Delta, step)`` calls, reading ``is_max_step()`` and
    ``predicted_reduction()`` after each.

    Workspace arrays are sized by ``init`` and overwritten in place; an
    instance is not safe for concurrent use.
    """

    def __init__(self, config: Optional[StepConfig] = None):
        self.cfg = (StepConfig() if config is None else config).validate()
        self.n = 0
        self.m = 0
        self.regime: Optional[StepRegime] = None
        self.info: Optional[StepInfo] = None
        self._staged = False
        self._max_step = False
        self._pred_red = 0.0

    # ------------------------- Lifecycle ------------------------- #
    def init(self, n: int, m: int) -> None:
        n, m = int(n), int(m)
        if n <= 0 or m <= 0:
            raise DimensionError(f"sizes must be positive, got n={n}, m={m}")
        if (n, m) != (self.n, self.m):
            self.n, self.m = n, m
            self.x = np.zeros(n)
            self.r = np.zeros(m)
            self.J = np.zeros((m, n))
            self.g = np.zeros(n)
            self.B = np.zeros((n, n))
            self.model = QuadraticModel(self.J, self.g)
            self._allocate(n, m)
        self._staged = False
        self.regime = None
        self.info = None

    def _allocate(self, n: int, m: int) -> None:
        """Hook for subclass workspace."""

    def set_inputs(self, x, residuals, jacobian, gradient=None, fx: Optional[float] = -1.0) -> None:
        if self.n == 0:
            raise RuntimeError("init() must be called before set_inputs()")
        n, m = self.n, self.m
        x = _asarray1d(x, n, "x")
        r = _asarray1d(residuals, m, "residuals")
        J = _asarray2d(jacobian, m, n, "jacobian")
        g = _asarray1d(gradient, n, "gradient")
        if r is None:
            raise DimensionError("residuals are required")
        for name, a in (("residuals", r), ("jacobian", J), ("gradient", g)):
            if a is not None and not np.all(np.isfinite(a)):
                raise ValueError(f"{name} contains non-finite values")

        if x is not None:
            np.copyto(self.x, x)
        np.copyto(self.r, r)
        np.copyto(self.J, J)
        if g is None:
            np.matmul(self.J.T, self.r, out=self.g)
        else:
            np.copyto(self.g, g)
        np.matmul(self.J.T, self.J, out=self.B)

        fx_r = 0.5 * float(self.r @ self.r)
        if fx is None or fx < 0:
            fx = fx_r
        elif abs(fx - fx_r) > self.cfg.cost_consistency_rtol * max(1.0, fx_r):
            logging.warning(
                f"[Step] supplied cost fx={fx:.6e} disagrees with 1/2||r||^2={fx_r:.6e}"
            )
        self.model.bind(fx)
        self._staged = True
        self._inputs_changed()

    def _inputs_changed(self) -> None:
        """Hook: staged inputs were replaced."""

    def compute_step(self, Delta: float, step: np.ndarray) -> StepRegime:
        Delta = self._check_radius(Delta)
        if not self._staged:
            raise RuntimeError("set_inputs() must be called before compute_step()")
        if not isinstance(step, np.ndarray) or step.shape != (self.n,):
            raise DimensionError(
                f"step: expected ndarray of shape ({self.n},) got {np.shape(step)}"
            )
        if not np.issubdtype(step.dtype, np.floating):
            raise DimensionError(f"step: expected a floating-point array, got dtype {step.dtype}")
        info = self._compute(Delta, step)

        pred = self.model.reduction(step)
        if pred < -1e-12 * max(1.0, abs(self.model.fx)):
            logging.warning(
                f"[Step] negative predicted reduction {pred:.3e} ({info.regime.value} step)"
            )
        info.predicted_reduction = pred
        self._pred_red = pred
        self._max_step = info.max_step
        self.regime = info.regime
        self.info = info
        if self.cfg.verbose:
            logging.info(
                f"[Step] {info.regime.value:>12s} Δ={Delta:.3e} |h|={info.step_norm:.3e} "
                f"pred={pred:.3e} max_step={info.max_step}"
            )
        return info.regime

    def _compute(self, Delta: float, step: np.ndarray) -> StepInfo:
        raise NotImplementedError

    # ------------------------- Results ------------------------- #
    def is_max_step(self) -> bool:
        return self._max_step

    def predicted_reduction(self) -> float:
        return self._pred_red

    # ------------------------- Helpers ------------------------- #
    @staticmethod
    def _check_radius(Delta) -> float:
        try:
            Delta = float(Delta)
        except (TypeError, ValueError) as e:
            raise InvalidRadius(f"radius must be a number, got {Delta!r}") from e
        if not math.isfinite(Delta) or Delta <= 0.0:
            raise InvalidRadius(f"radius must be positive and finite, got {Delta}")
        return Delta

    def _gBg(self) -> float:
        """g^T B g evaluated as ||J g||^2."""
        return self.model.curvature(self.g)
