# estimation.regression.py

from __future__ import annotations

from typing import Tuple

import numpy as np

from pyrobustid.base import SeriesLike, unpack_series, validate_signal
from pyrobustid.errors import InsufficientData, InvalidDimension

__all__ = ["ar_regression", "arx_regression", "lagged_matrix"]


def lagged_matrix(x: np.ndarray, start: int, lags: np.ndarray) -> np.ndarray:
    """
    Columns of delayed samples.

    Row ``r`` (time ``k = start + r``) is ``[x[k - lags[0]], x[k - lags[1]], ...]``.
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    rows = x.size - int(start)
    out = np.empty((rows, len(lags)), dtype=np.float64)
    for c, lag in enumerate(lags):
        out[:, c] = x[start - lag : x.size - lag]
    return out


def _check_rows(n_samples: int, start: int, n_params: int) -> int:
    rows = int(n_samples) - int(start)
    if rows < n_params + 1:
        raise InsufficientData(
            f"Need at least {n_params + 1} regression rows for {n_params} parameters; "
            f"a series of length {n_samples} gives {max(rows, 0)}."
        )
    return rows


@validate_signal
def ar_regression(y: np.ndarray, na: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Regression problem of an AR(na) model.

    For ``k = na, ..., N-1``:

    .. math::
        y[k] \\approx \\theta_1 y[k-1] + \\ldots + \\theta_{na} y[k-na].

    Returns
    -------
    A : ndarray, shape (N - na, na)
    b : ndarray, shape (N - na,)

    Raises
    ------
    InvalidDimension
        If ``na < 1``.
    InsufficientData
        If fewer than ``na + 1`` rows are available.
    """
    na = int(na)
    if na < 1:
        raise InvalidDimension(f"AR order must be >= 1. Got na={na}.")
    _check_rows(y.size, na, na)
    A = lagged_matrix(y, na, np.arange(1, na + 1))
    b = y[na:].copy()
    return A, b


@validate_signal
def arx_regression(
    y: np.ndarray,
    u: SeriesLike,
    na: int,
    nb: int,
    input_delay: int = 1,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Regression problem of an ARX(na, nb) model with input delay ``d``.

    .. math::
        y[k] \\approx \\sum_{i=1}^{na} \\theta_i y[k-i]
                    + \\sum_{j=0}^{nb-1} \\theta_{na+j+1} u[k-d-j].

    Returns
    -------
    A : ndarray, shape (N - start, na + nb)
        ``start = max(na, d + nb - 1)``.
    b : ndarray, shape (N - start,)

    Raises
    ------
    InvalidDimension
        If orders are negative, both are zero, or ``len(u) != len(y)``.
    InsufficientData
        If fewer than ``na + nb + 1`` rows are available.
    """
    u, _ = unpack_series(u, "u")
    na, nb, d = int(na), int(nb), int(input_delay)
    if na < 0 or nb < 0 or d < 0:
        raise InvalidDimension(f"Orders and delay must be >= 0. Got na={na}, nb={nb}, input_delay={d}.")
    if na + nb == 0:
        raise InvalidDimension("At least one of na, nb must be positive.")
    if u.size != y.size:
        raise InvalidDimension(f"Inconsistent lengths: y({y.size}) != u({u.size}).")

    start = max(na, d + nb - 1, 0)
    _check_rows(y.size, start, na + nb)

    blocks = []
    if na > 0:
        blocks.append(lagged_matrix(y, start, np.arange(1, na + 1)))
    if nb > 0:
        blocks.append(lagged_matrix(u, start, d + np.arange(nb)))
    A = np.hstack(blocks)
    b = y[start:].copy()
    return A, b
