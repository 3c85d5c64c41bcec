# estimation.estimator.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import Optional, Union

import numpy as np

from pyrobustid.base import ConvergenceStatus, SeriesLike, StoppingCriterion, validate_signal
from pyrobustid.logging import get_logger
from .model import ARModel
from .regression import ar_regression, arx_regression
from .solvers import SolveResult, ls_solve, rtls_solve, tls_solve

__all__ = ["Estimator", "EstimationResult", "estimate_ar", "estimate_arx"]

logger = get_logger(__name__)


class Estimator(str, Enum):
    """Solve mode of the autoregressive estimator.

    - ``LS``: ordinary least squares. Fast, biased under errors-in-variables.
    - ``TLS``: total least squares. Consistent for white noise on all lagged
      samples, not robust to outliers.
    - ``RTLS``: iteratively reweighted TLS. Tolerates heavy-tailed noise.
    """

    LS = "ls"
    TLS = "tls"
    RTLS = "rtls"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union["Estimator", str]) -> "Estimator":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown estimator {value!r}. Expected one of {[e.value for e in cls]}."
            ) from None

    @property
    def is_iterative(self) -> bool:
        return self is Estimator.RTLS

    def solve(
        self,
        A: np.ndarray,
        b: np.ndarray,
        stopping: Optional[StoppingCriterion] = None,
        weighting: str = "huber",
    ) -> SolveResult:
        """Solve ``A theta ~= b`` with this estimator."""
        if self is Estimator.LS:
            return ls_solve(A, b)
        if self is Estimator.TLS:
            return tls_solve(A, b)
        return rtls_solve(A, b, stopping=stopping, weighting=weighting)


@dataclass
class EstimationResult:
    """Output of :func:`estimate_ar` / :func:`estimate_arx`.

    Attributes
    ----------
    model:
        Estimated ARModel (sample time inherited from the data).
    theta:
        Regression parameter vector.
    status:
        CONVERGED, or NOT_CONVERGED when RTLS ran out of iterations.
    iterations:
        Solver iterations (1 for LS/TLS).
    estimator:
        Solve mode used.
    weights:
        Final RTLS row weights, None otherwise.
    runtime_ms:
        Runtime in milliseconds.
    """

    model: ARModel
    theta: np.ndarray
    status: ConvergenceStatus
    iterations: int
    estimator: Estimator
    weights: Optional[np.ndarray] = None
    runtime_ms: float = 0.0

    @property
    def converged(self) -> bool:
        return self.status is ConvergenceStatus.CONVERGED

    def __repr__(self) -> str:
        return (
            f"<EstimationResult estimator={self.estimator} na={self.model.na} "
            f"status={self.status} iterations={self.iterations}>"
        )


def _finish(
    tag: str,
    sol: SolveResult,
    model: ARModel,
    estimator: Estimator,
    tic: float,
    verbose: bool,
) -> EstimationResult:
    runtime_ms = (perf_counter() - tic) * 1000.0
    if sol.status is not ConvergenceStatus.CONVERGED:
        logger.debug("%s(%s): returning last iterate after %d iterations", tag, estimator, sol.iterations)
    if verbose:
        print(f"[{tag}/{estimator}] Completed in {runtime_ms:.02f} ms ({sol.iterations} iterations, {sol.status})")
    return EstimationResult(
        model=model,
        theta=sol.theta,
        status=sol.status,
        iterations=sol.iterations,
        estimator=estimator,
        weights=sol.weights,
        runtime_ms=runtime_ms,
    )


@validate_signal
def estimate_ar(
    y: np.ndarray,
    na: int,
    estimator: Union[Estimator, str] = Estimator.LS,
    *,
    stopping: Optional[StoppingCriterion] = None,
    weighting: str = "huber",
    dt: Optional[float] = None,
    verbose: bool = False,
) -> EstimationResult:
    """
    Fit an all-pole AR(na) model to a series.

    Parameters
    ----------
    y : array_like of float or TimeSeries
        Output series (possibly the output of a low-rank filter).
    na : int
        Model order.
    estimator : Estimator or {"ls", "tls", "rtls"}
        Solve mode. Default least squares.
    stopping : StoppingCriterion, optional
        RTLS budget/tolerance. Default ``StoppingCriterion.for_rtls()``.
    weighting : {"huber", "bisquare"}
        RTLS weight function.
    dt : float, optional
        Sample time of the model. Taken from ``y`` when it is a TimeSeries,
        1.0 otherwise.
    verbose : bool
        If True, prints the runtime after completion.

    Returns
    -------
    EstimationResult

    Raises
    ------
    InsufficientData
        If the series is too short for ``na``.
    """
    tic = perf_counter()
    kind = Estimator.parse(estimator)

    A, b = ar_regression(y, na)
    sol = kind.solve(A, b, stopping=stopping, weighting=weighting)
    model = ARModel.from_theta(sol.theta, na=na, dt=1.0 if dt is None else dt)

    return _finish("AR", sol, model, kind, tic, verbose)


@validate_signal
def estimate_arx(
    y: np.ndarray,
    u: SeriesLike,
    na: int,
    nb: int,
    estimator: Union[Estimator, str] = Estimator.LS,
    *,
    input_delay: int = 1,
    stopping: Optional[StoppingCriterion] = None,
    weighting: str = "huber",
    dt: Optional[float] = None,
    verbose: bool = False,
) -> EstimationResult:
    """
    Fit an ARX(na, nb) model ``A(z) y = B(z) u + e``.

    Same options as :func:`estimate_ar`; ``u`` must have the length of ``y``.
    The input polynomial starts at ``z^-input_delay``.
    """
    tic = perf_counter()
    kind = Estimator.parse(estimator)

    A, b = arx_regression(y, u, na, nb, input_delay=input_delay)
    sol = kind.solve(A, b, stopping=stopping, weighting=weighting)
    model = ARModel.from_theta(sol.theta, na=na, nb=nb, input_delay=input_delay, dt=1.0 if dt is None else dt)

    return _finish("ARX", sol, model, kind, tic, verbose)
