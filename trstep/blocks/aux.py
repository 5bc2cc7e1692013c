# aux.py
# Shared configuration, enums, telemetry and error types for the TR step solvers.

from __future__ import annotations

# =========================
# Standard library
# =========================
import math
from dataclasses import dataclass
from enum import Enum

# ======================================
# Errors
# ======================================
class DimensionError(ValueError):
    """Array shapes disagree with the sizes declared at ``init``."""


class InvalidRadius(ValueError):
    """Trust-region radius is not a positive finite number."""


# ======================================
# Enums
# ======================================
class StepRegime(Enum):
    """Which branch of the dogleg path produced the step."""

    CAUCHY = "cauchy"
    GAUSS_NEWTON = "gauss_newton"
    COMBINED = "combined"


LINEAR_SOLVERS = ("cholesky", "qr")


# ======================================
# Global configuration
# ======================================
@dataclass
class StepConfig:
    """
    Configuration for the trust-region step solvers.

    Notes
    -----
    • ``linear_solver`` is only read by ``DoglegStep``; ``CauchyStep`` never
      factors B.
    • ``singular_rtol`` is relative to max(diag B), i.e. to the largest squared
      column norm of J.
    """

    # ---------------- Gauss-Newton ----------------
    linear_solver: str = "cholesky"  # {"cholesky","qr"}
    singular_rtol: float = 1e-12

    # ---------------- Consistency checks ----------------
    cost_consistency_rtol: float = 1e-6
    boundary_rtol: float = 1e-8

    # ---------------- Output ----------------
    verbose: bool = False

    def validate(self) -> "StepConfig":
        if self.linear_solver not in LINEAR_SOLVERS:
            raise ValueError(
                f"linear_solver must be one of {LINEAR_SOLVERS}, got {self.linear_solver!r}"
            )
        for name in ("singular_rtol", "cost_consistency_rtol", "boundary_rtol"):
            val = getattr(self, name)
            if not (math.isfinite(val) and val > 0):
                raise ValueError(f"{name} must be positive, got {val}")
        return self


# ---------- telemetry ----------
@dataclass
class StepInfo:
    regime: StepRegime
    radius: float
    max_step: bool
    step_norm: float
    cauchy_norm: float
    gauss_newton_norm: float = math.nan
    tau: float = math.nan
    predicted_reduction: float = 0.0
    gauss_newton_failed: bool = False
    negative_curvature: bool = False
    zero_gradient: bool = False
    linear_solver: str = "none"

    @property
    def degenerate(self) -> bool:
        return self.gauss_newton_failed or self.negative_curvature or self.zero_gradient
