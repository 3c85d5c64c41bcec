# estimation.solvers.py
#
#       Linear regression solvers used by the AR estimator:
#        . ordinary least squares,
#        . total least squares (errors-in-variables),
#        . robust total least squares by iterative reweighting.
#
#       Reference:
#        . I. Markovsky, S. Van Huffel, "Overview of total least-squares
#          methods", Signal Processing 87(10), 2007.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np
import scipy.linalg

from pyrobustid.base import ConvergenceStatus, StoppingCriterion
from pyrobustid.decomposition.thresholding import thin_svd
from pyrobustid.errors import InvalidDimension
from pyrobustid.logging import get_logger

__all__ = [
    "SolveResult",
    "ls_solve",
    "tls_solve",
    "rtls_solve",
    "huber_weights",
    "bisquare_weights",
    "robust_scale",
    "WEIGHT_FUNCTIONS",
]

logger = get_logger(__name__)

HUBER_C = 1.345
BISQUARE_C = 4.685


@dataclass
class SolveResult:
    """Solution of ``A theta ~= b``.

    Attributes
    ----------
    theta:
        Parameter vector.
    status:
        CONVERGED for the direct solvers; RTLS reports NOT_CONVERGED when its
        budget runs out.
    iterations:
        1 for the direct solvers.
    weights:
        Final row weights (RTLS only).
    """

    theta: np.ndarray
    status: ConvergenceStatus = ConvergenceStatus.CONVERGED
    iterations: int = 1
    weights: Optional[np.ndarray] = None

    @property
    def converged(self) -> bool:
        return self.status is ConvergenceStatus.CONVERGED


def _check_system(A: np.ndarray, b: np.ndarray):
    A = np.asarray(A, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64).ravel()
    if A.ndim != 2 or A.shape[1] == 0:
        raise InvalidDimension(f"A must be a 2-D matrix with at least one column. Got shape={A.shape}.")
    if A.shape[0] != b.size:
        raise InvalidDimension(f"Inconsistent rows: A has {A.shape[0]}, b has {b.size}.")
    return A, b


def ls_solve(A: np.ndarray, b: np.ndarray) -> SolveResult:
    """Ordinary least squares, ``min ||A theta - b||_2``."""
    A, b = _check_system(A, b)
    theta, *_ = scipy.linalg.lstsq(A, b, check_finite=False)
    return SolveResult(theta=np.asarray(theta, dtype=np.float64))


def tls_solve(A: np.ndarray, b: np.ndarray, weights: Optional[np.ndarray] = None) -> SolveResult:
    """
    Total least squares.

    Finds the smallest perturbation ``[dA | db]`` (Frobenius norm) making
    ``(A + dA) theta = b + db`` consistent. With ``v`` the right singular
    vector of ``[A | b]`` for the smallest singular value,
    ``theta = -v[:-1] / v[-1]``.

    Parameters
    ----------
    weights : ndarray, optional
        Non-negative row weights; row ``k`` of ``[A | b]`` is scaled by
        ``sqrt(weights[k])``.

    Raises
    ------
    numpy.linalg.LinAlgError
        If the problem is non-generic (``v[-1] == 0``).
    """
    A, b = _check_system(A, b)
    Z = np.column_stack((A, b))
    if weights is not None:
        Z = Z * np.sqrt(np.asarray(weights, dtype=np.float64))[:, None]

    _, _, Vt = thin_svd(Z)
    v = Vt[-1]
    if abs(v[-1]) <= np.finfo(np.float64).eps * np.linalg.norm(v):
        raise np.linalg.LinAlgError("Non-generic TLS problem: the last component of the null vector is zero.")
    return SolveResult(theta=-v[:-1] / v[-1])


def huber_weights(u: np.ndarray, c: float = HUBER_C) -> np.ndarray:
    """Huber weights: 1 inside ``|u| <= c``, ``c / |u|`` outside."""
    a = np.abs(np.asarray(u, dtype=np.float64))
    w = np.ones_like(a)
    mask = a > c
    w[mask] = c / a[mask]
    return w


def bisquare_weights(u: np.ndarray, c: float = BISQUARE_C) -> np.ndarray:
    """Tukey bisquare weights: ``(1 - (u/c)^2)^2`` inside ``|u| < c``, 0 outside."""
    r = np.asarray(u, dtype=np.float64) / c
    w = (1.0 - r ** 2) ** 2
    w[np.abs(r) >= 1.0] = 0.0
    return w


WEIGHT_FUNCTIONS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "huber": huber_weights,
    "bisquare": bisquare_weights,
}


def robust_scale(r: np.ndarray) -> float:
    """Normalized median absolute deviation (consistent for Gaussian data)."""
    r = np.asarray(r, dtype=np.float64)
    return float(np.median(np.abs(r - np.median(r))) / 0.6744897501960817)


def _robust_start(A: np.ndarray, b: np.ndarray, scale_floor: float, max_iters: int = 50, tol: float = 1e-6):
    """Huber M-estimate on the algebraic residuals ``A theta - b``, started from LS.

    Starting point of :func:`rtls_solve`; gross outliers in ``b`` only have
    bounded influence on it.
    """
    theta = ls_solve(A, b).theta
    for _ in range(max_iters):
        r = A @ theta - b
        scale = robust_scale(r)
        if scale <= scale_floor:
            break
        sw = np.sqrt(huber_weights(r / scale))
        theta_new, *_ = scipy.linalg.lstsq(A * sw[:, None], b * sw, check_finite=False)
        change = float(np.linalg.norm(theta_new - theta)) / max(float(np.linalg.norm(theta)), np.finfo(np.float64).tiny)
        theta = np.asarray(theta_new, dtype=np.float64)
        if change < tol:
            break
    return theta


def rtls_solve(
    A: np.ndarray,
    b: np.ndarray,
    stopping: Optional[StoppingCriterion] = None,
    weighting: str = "huber",
) -> SolveResult:
    """
    Robust total least squares by iteratively reweighted TLS.

    The iteration starts from a Huber M-estimate on the algebraic residuals
    (least squares followed by reweighted least squares), then repeats:

    1. orthogonal residuals ``r_k = (A_k theta - b_k) / sqrt(1 + ||theta||^2)``;
    2. robust scale ``s = MAD(r) / 0.6745``;
    3. row weights ``w_k = psi(r_k / s)`` (Huber or bisquare);
    4. weighted TLS solve;

    until ``||theta_new - theta|| / ||theta|| < tol`` or the iteration budget is
    exhausted (status NOT_CONVERGED, last iterate returned).

    Parameters
    ----------
    stopping : StoppingCriterion, optional
        Default ``StoppingCriterion.for_rtls()`` (400 iterations, tol 2e-6).
        Applies to the reweighted TLS iterations.
    weighting : {"huber", "bisquare"}
        Robust weight function.
    """
    A, b = _check_system(A, b)
    if weighting not in WEIGHT_FUNCTIONS:
        raise ValueError(f"weighting must be one of {sorted(WEIGHT_FUNCTIONS)}. Got {weighting!r}.")
    psi = WEIGHT_FUNCTIONS[weighting]
    stopping = stopping if stopping is not None else StoppingCriterion.for_rtls()

    # exact fits leave nothing to reweight
    scale_floor = np.finfo(np.float64).eps * max(1.0, float(np.linalg.norm(b)) / np.sqrt(b.size))

    theta = _robust_start(A, b, scale_floor)
    weights = np.ones(b.size, dtype=np.float64)
    status = ConvergenceStatus.NOT_CONVERGED

    it = 0
    for it in range(1, stopping.max_iters + 1):
        r = (A @ theta - b) / np.sqrt(1.0 + float(theta @ theta))
        scale = robust_scale(r)
        if scale <= scale_floor:
            status = ConvergenceStatus.CONVERGED
            break

        weights = psi(r / scale)
        theta_new = tls_solve(A, b, weights=weights).theta

        change = float(np.linalg.norm(theta_new - theta)) / max(float(np.linalg.norm(theta)), np.finfo(np.float64).tiny)
        theta = theta_new
        if stopping.is_met(change):
            status = ConvergenceStatus.CONVERGED
            break

    if status is ConvergenceStatus.CONVERGED:
        logger.debug("RTLS converged after %d iterations", it)
    else:
        logger.warning("RTLS did not converge in %d iterations (tol=%.3g)", it, stopping.tol)

    return SolveResult(theta=theta, status=status, iterations=it, weights=weights)
