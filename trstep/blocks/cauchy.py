from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from ..step import TrustRegionStep
from .aux import StepInfo, StepRegime
from .tr import safe_norm

Vec = np.ndarray


def cauchy_point(g: Vec, gBg: float, Delta: float, out: Vec) -> Tuple[bool, bool]:
    """
    Minimizer of the model along -g, clipped to the trust region.

    Writes p_C = -alpha g into ``out`` with
    alpha = min(||g||^2 / g^T B g, Delta / ||g||).

    Returns
    -------
    clipped : bool
        The radius term was the active one (||p_C|| = Delta).
    negative_curvature : bool
        g^T B g <= 0, so the model is unbounded along -g and the step goes
        straight to the boundary.
    """
    gnorm = safe_norm(g)
    if gnorm == 0.0:
        out.fill(0.0)
        return False, False

    alpha_max = Delta / gnorm
    if gBg <= 0.0:
        logging.debug(f"[Cauchy] non-positive curvature along -g (gBg={gBg:.3e})")
        np.multiply(g, -alpha_max, out=out)
        return True, True

    alpha = gnorm * gnorm / gBg
    clipped = alpha >= alpha_max
    if clipped:
        alpha = alpha_max
    np.multiply(g, -alpha, out=out)
    return clipped, False


class CauchyStep(TrustRegionStep):
    """Steepest-descent step provider: always returns the (clipped) Cauchy point."""

    def _compute(self, Delta, step):
        clipped, neg_curv = cauchy_point(self.g, self._gBg(), Delta, step)
        return StepInfo(
            regime=StepRegime.CAUCHY,
            radius=Delta,
            max_step=clipped,
            step_norm=safe_norm(step),
            cauchy_norm=safe_norm(step),
            negative_curvature=neg_curv,
            zero_gradient=not np.any(self.g),
        )
