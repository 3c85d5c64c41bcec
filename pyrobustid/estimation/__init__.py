#  estimation.__init__.py

from .model import ARModel
from .regression import ar_regression, arx_regression, lagged_matrix
from .solvers import (
    SolveResult,
    ls_solve,
    tls_solve,
    rtls_solve,
    huber_weights,
    bisquare_weights,
    robust_scale,
)
from .estimator import Estimator, EstimationResult, estimate_ar, estimate_arx

__all__ = [
    "ARModel",
    "ar_regression",
    "arx_regression",
    "lagged_matrix",
    "SolveResult",
    "ls_solve",
    "tls_solve",
    "rtls_solve",
    "huber_weights",
    "bisquare_weights",
    "robust_scale",
    "Estimator",
    "EstimationResult",
    "estimate_ar",
    "estimate_arx",
]
