# pyrobustid/__init__.py

from .base import ConvergenceStatus, StoppingCriterion, TimeSeries
from .errors import DegenerateEmbedding, InsufficientData, InvalidDimension, RobustIdError
from .embedding import *
from .decomposition import *
from .filters import *
from .estimation import *
from .analysis import *
from .sweep import SweepPoint, SweepResult, sweep

from ._utils.noise import heavy_tailed_noise, scale_to_ratio, sinusoid_mixture

__version__ = "0.3.0"
__author__ = "BruninLima"

__all__ = ["ConvergenceStatus", "StoppingCriterion", "TimeSeries",
    "RobustIdError", "InvalidDimension", "InsufficientData", "DegenerateEmbedding",
    "embedding_shape", "lag_embedding", "de_embedding",
    "soft_threshold", "singular_value_threshold", "thin_svd",
    "DecompositionResult", "RobustPCA", "rpca",
    "FilterResult", "LowRankFilter", "lowrankfilter", "default_embedding_dim",
    "ARModel", "Estimator", "EstimationResult", "estimate_ar", "estimate_arx",
    "ar_regression", "arx_regression", "ls_solve", "tls_solve", "rtls_solve",
    "freq_response", "magnitude_response", "phase_response", "response_error",
    "welch_psd", "ar_psd",
    "SweepPoint", "SweepResult", "sweep",
    "sinusoid_mixture", "heavy_tailed_noise", "scale_to_ratio",
    "info"]


def info():
    """Print an overview of the processing stages provided by the library."""
    print("\n" + "="*70)
    print("      PyRobustId - Robust Low-Rank Filtering and AR Identification")
    print("="*70)
    sections = {
        "Embedding": "lag_embedding, de_embedding (anti-diagonal averaging)",
        "Decomposition": "RobustPCA / rpca (inexact ALM principal component pursuit)",
        "Filtering": "LowRankFilter, lowrankfilter",
        "Estimation": "estimate_ar, estimate_arx with LS, TLS, RTLS",
        "Analysis": "freq_response, response_error, welch_psd, ar_psd",
        "Sweeps": "sweep (thread pool, per-point status)",
    }
    for stage, funcs in sections.items():
        print(f"\n{stage:25}: {funcs}")

    print("\n" + "-"*70)
    print("Usage example: from pyrobustid import lowrankfilter, estimate_ar")
    print("Documentation: help(pyrobustid.estimate_ar)")
    print("="*70 + "\n")
