# embedding.hankel.py
#
#       Lag (Hankel) embedding of a scalar time series and its inverse,
#       the anti-diagonal averaging used to bring a filtered embedding
#       matrix back to the time domain.

from __future__ import annotations

from typing import Optional

import numpy as np

from pyrobustid.base import validate_signal
from pyrobustid.errors import InvalidDimension
from pyrobustid._utils.typing import MatrixLike

__all__ = ["lag_embedding", "de_embedding", "embedding_shape"]


def embedding_shape(n_samples: int, n: int) -> tuple[int, int]:
    """Shape ``(N - n + 1, n)`` of the embedding of a length-``N`` series.

    Raises
    ------
    InvalidDimension
        If ``n < 1`` or ``n >= N``.
    """
    n_samples = int(n_samples)
    n = int(n)
    if n < 1:
        raise InvalidDimension(f"Embedding dimension must be >= 1. Got n={n}.")
    if n >= n_samples:
        raise InvalidDimension(
            f"Embedding dimension must be smaller than the series length. Got n={n}, N={n_samples}."
        )
    return n_samples - n + 1, n


@validate_signal
def lag_embedding(x: np.ndarray, n: int) -> np.ndarray:
    """
    Sliding-window (Hankel) embedding of a series.

    Parameters
    ----------
    x : array_like of float or TimeSeries
        Series of length ``N``.
    n : int
        Embedding dimension (window width), ``1 <= n < N``.

    Returns
    -------
    H : ndarray, shape (N - n + 1, n)
        ``H[i, j] = x[i + j]``. Every anti-diagonal of ``H`` holds copies of a
        single sample of ``x``. The array is a fresh copy, not a view.

    Raises
    ------
    InvalidDimension
        If ``n < 1`` or ``n >= N``.
    """
    embedding_shape(x.size, n)
    return np.lib.stride_tricks.sliding_window_view(x, int(n)).copy()


def de_embedding(L: MatrixLike, n_samples: Optional[int] = None) -> np.ndarray:
    """
    Reconstruct a series from an embedding matrix by anti-diagonal averaging.

    Sample ``k`` of the output is the mean of all ``L[i, j]`` with ``i + j == k``,
    which inverts :func:`lag_embedding` exactly when ``L`` is a Hankel matrix.

    Parameters
    ----------
    L : array_like, shape (m, n)
        Embedding-shaped matrix (typically the low-rank component).
    n_samples : int, optional
        Expected output length. If given it must equal ``m + n - 1``.

    Returns
    -------
    x : ndarray, shape (m + n - 1,)

    Raises
    ------
    InvalidDimension
        If ``L`` is not a non-empty 2-D array or its shape does not match
        ``n_samples``.
    """
    L = np.asarray(L, dtype=np.float64)
    if L.ndim != 2 or L.size == 0:
        raise InvalidDimension(f"Expected a non-empty 2-D embedding matrix. Got shape={L.shape}.")

    m, n = L.shape
    N = m + n - 1
    if n_samples is not None and int(n_samples) != N:
        raise InvalidDimension(
            f"Embedding of shape {L.shape} maps to {N} samples, not n_samples={n_samples}."
        )

    acc = np.zeros(N, dtype=np.float64)
    counts = np.zeros(N, dtype=np.float64)
    # one column at a time: column j covers samples j .. j+m-1
    for j in range(n):
        acc[j : j + m] += L[:, j]
        counts[j : j + m] += 1.0

    return acc / counts
# EOF
