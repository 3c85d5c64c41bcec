# decomposition.thresholding.py

from __future__ import annotations

from typing import Tuple

import numpy as np
import scipy.linalg

__all__ = ["soft_threshold", "singular_value_threshold", "thin_svd"]


def soft_threshold(X: np.ndarray, tau: float) -> np.ndarray:
    """Entrywise shrinkage: sign(X) * max(|X| - tau, 0)."""
    X = np.asarray(X, dtype=np.float64)
    return np.sign(X) * np.maximum(np.abs(X) - float(tau), 0.0)


def thin_svd(X: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Economy SVD. Falls back to the slower gesvd driver if gesdd fails to converge."""
    try:
        return scipy.linalg.svd(X, full_matrices=False, check_finite=False)
    except np.linalg.LinAlgError:
        return scipy.linalg.svd(X, full_matrices=False, check_finite=False, lapack_driver="gesvd")


def singular_value_threshold(X: np.ndarray, tau: float) -> Tuple[np.ndarray, int]:
    """
    Singular value thresholding operator.

    Shrinks every singular value of ``X`` by ``tau`` and drops those that
    reach zero, which is the proximal operator of ``tau * ||.||_*``.

    Returns
    -------
    Y : ndarray
        Thresholded matrix, same shape as ``X``.
    rank : int
        Number of singular values that survived.
    """
    U, s, Vt = thin_svd(np.asarray(X, dtype=np.float64))
    s = np.maximum(s - float(tau), 0.0)
    rank = int(np.count_nonzero(s))
    if rank == 0:
        return np.zeros_like(X, dtype=np.float64), 0
    Y = (U[:, :rank] * s[:rank]) @ Vt[:rank, :]
    return Y, rank
