"""
Powell's dogleg step for Gauss-Newton trust-region least squares.

The path runs from the origin through the Cauchy point p_C to the Gauss-Newton
point p_GN. For a radius Delta the step is chosen in this order:

    GAUSS_NEWTON : ||p_GN|| <= Delta                 -> h = p_GN
    CAUCHY       : p_GN unavailable or ||p_C|| >= Delta
                                                    -> h = p_C clipped to Delta
    COMBINED     : ||p_C|| < Delta < ||p_GN||        -> h = p_C + tau (p_GN - p_C),
                                                       ||h|| = Delta

p_GN and the unconstrained Cauchy scalars depend only on the staged inputs, so
they are computed on the first ``compute_step`` after ``set_inputs`` and reused
while the driver retries with other radii.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from .blocks.aux import StepConfig, StepInfo, StepRegime
from .blocks.cauchy import cauchy_point
from .blocks.gauss_newton import LinearSolver, make_linear_solver
from .blocks.tr import boundary_tau, safe_norm
from .step import TrustRegionStep


class DoglegStep(TrustRegionStep):
    def __init__(
        self,
        config: Optional[StepConfig] = None,
        linear_solver: Optional[LinearSolver] = None,
    ):
        super().__init__(config)
        if linear_solver is None:
            linear_solver = make_linear_solver(self.cfg.linear_solver, self.cfg.singular_rtol)
        self.linear_solver = linear_solver

    def _allocate(self, n, m):
        self._p_gn = np.zeros(n)
        self._p_c = np.zeros(n)
        self._d = np.zeros(n)
        self._prepared = False

    def _inputs_changed(self):
        self._prepared = False

    # ------------------------- Per-input state ------------------------- #
    def _prepare(self) -> None:
        g = self.g
        self._gnorm = safe_norm(g)
        self._gBg_val = self.model.curvature(g)

        p = self.linear_solver.solve(self.B, g, self.J)
        self._gn_ok = p is not None
        if self._gn_ok:
            np.copyto(self._p_gn, p)
            self._gn_norm = safe_norm(self._p_gn)
        else:
            logging.debug(
                f"[Dogleg] Gauss-Newton solve failed ({self.linear_solver.name}); "
                "falling back to the Cauchy step"
            )
            self._p_gn.fill(0.0)
            self._gn_norm = math.nan

        # unclipped Cauchy length ||g||^3 / g^T B g
        if self._gnorm == 0.0:
            self._cauchy_len = 0.0
        elif self._gBg_val > 0.0:
            self._cauchy_len = self._gnorm ** 3 / self._gBg_val
        else:
            self._cauchy_len = math.inf
        self._prepared = True

    # ------------------------- Regimes ------------------------- #
    def _compute(self, Delta, step):
        if not self._prepared:
            self._prepare()

        if self._gn_ok and self._gn_norm <= Delta:
            return self._gauss_newton_step(Delta, step)
        if not self._gn_ok or self._cauchy_len >= Delta:
            return self._cauchy_step(Delta, step)
        return self._combined_step(Delta, step)

    def _base_info(self, regime, Delta, step, max_step, cauchy_norm) -> StepInfo:
        return StepInfo(
            regime=regime,
            radius=Delta,
            max_step=max_step,
            step_norm=safe_norm(step),
            cauchy_norm=cauchy_norm,
            gauss_newton_norm=self._gn_norm,
            gauss_newton_failed=not self._gn_ok,
            zero_gradient=self._gnorm == 0.0,
            linear_solver=self.linear_solver.name,
        )

    def _gauss_newton_step(self, Delta, step) -> StepInfo:
        np.copyto(step, self._p_gn)
        logging.debug(f"[Dogleg] Gauss-Newton step |p_GN|={self._gn_norm:.3e} <= Δ={Delta:.3e}")
        return self._base_info(
            StepRegime.GAUSS_NEWTON, Delta, step, False, min(self._cauchy_len, Delta)
        )

    def _cauchy_step(self, Delta, step) -> StepInfo:
        clipped, neg_curv = cauchy_point(self.g, self._gBg_val, Delta, step)
        logging.debug(f"[Dogleg] Cauchy step clipped={clipped} Δ={Delta:.3e}")
        info = self._base_info(StepRegime.CAUCHY, Delta, step, clipped, safe_norm(step))
        info.negative_curvature = neg_curv
        return info

    def _combined_step(self, Delta, step) -> StepInfo:
        p_c, d = self._p_c, self._d
        cauchy_point(self.g, self._gBg_val, Delta, p_c)
        np.subtract(self._p_gn, p_c, out=d)
        tau = boundary_tau(p_c, d, Delta)

        np.multiply(d, tau, out=step)
        step += p_c

        nrm = safe_norm(step)
        if abs(nrm - Delta) > self.cfg.boundary_rtol * Delta:
            logging.debug(f"[Dogleg] combined step off the boundary: |h|={nrm:.12e} Δ={Delta:.12e}")
        logging.debug(f"[Dogleg] combined step tau={tau:.6f} Δ={Delta:.3e}")
        info = self._base_info(StepRegime.COMBINED, Delta, step, True, safe_norm(p_c))
        info.tau = tau
        return info
