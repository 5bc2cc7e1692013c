from .blocks.aux import DimensionError, InvalidRadius, StepConfig, StepInfo, StepRegime
from .blocks.cauchy import CauchyStep, cauchy_point
from .blocks.gauss_newton import CholeskySolver, LinearSolver, QRSolver, make_linear_solver
from .blocks.model import QuadraticModel
from .dogleg import DoglegStep
from .step import TrustRegionStep

__all__ = [
    "CauchyStep",
    "CholeskySolver",
    "DimensionError",
    "DoglegStep",
    "InvalidRadius",
    "LinearSolver",
    "QRSolver",
    "QuadraticModel",
    "StepConfig",
    "StepInfo",
    "StepRegime",
    "TrustRegionStep",
    "cauchy_point",
    "make_linear_solver",
]
