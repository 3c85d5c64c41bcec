# decomposition.rpca.py
#
#       Low-rank + sparse decomposition of a matrix (robust PCA) by
#       principal component pursuit, solved with the inexact augmented
#       Lagrange multiplier method.
#
#       Reference:
#        . Z. Lin, M. Chen, Y. Ma, "The Augmented Lagrange Multiplier Method
#          for Exact Recovery of Corrupted Low-Rank Matrices", 2010.
#        . E. Candes, X. Li, Y. Ma, J. Wright, "Robust Principal Component
#          Analysis?", J. ACM 58(3), 2011.

from __future__ import annotations

import warnings
from dataclasses import dataclass
from time import perf_counter
from typing import Optional

import numpy as np

from pyrobustid.base import ConvergenceStatus, StoppingCriterion
from pyrobustid.errors import DegenerateEmbedding, InvalidDimension
from pyrobustid.logging import get_logger
from pyrobustid._utils.typing import MatrixLike
from .thresholding import singular_value_threshold, soft_threshold

__all__ = ["DecompositionResult", "RobustPCA", "rpca"]

logger = get_logger(__name__)


@dataclass
class DecompositionResult:
    """Output of :meth:`RobustPCA.decompose`.

    Attributes
    ----------
    low_rank:
        Low-rank component ``L``.
    sparse:
        Sparse component ``S``.
    status:
        CONVERGED, NOT_CONVERGED (budget exhausted, best iterate returned) or
        DEGENERATE (rank collapse, ``L = 0`` and ``S = H``).
    iterations:
        Number of iterations performed.
    residual:
        Relative residual ``||L + S - H||_F / ||H||_F`` of the returned pair.
    rank:
        Rank retained by the last singular value thresholding step.
    lam:
        Sparsity weight used.
    runtime_ms:
        Runtime in milliseconds.
    """

    low_rank: np.ndarray
    sparse: np.ndarray
    status: ConvergenceStatus
    iterations: int
    residual: float
    rank: int
    lam: float
    runtime_ms: float = 0.0

    @property
    def converged(self) -> bool:
        return self.status is ConvergenceStatus.CONVERGED

    def numerical_rank(self, rtol: float = 1e-3) -> int:
        """Count of singular values of ``L`` above ``rtol * sigma_max``."""
        s = np.linalg.svd(self.low_rank, compute_uv=False)
        if s.size == 0 or s[0] == 0.0:
            return 0
        return int(np.count_nonzero(s > float(rtol) * s[0]))

    def __repr__(self) -> str:
        return (
            f"<DecompositionResult shape={self.low_rank.shape} status={self.status} "
            f"iterations={self.iterations} residual={self.residual:.3g}>"
        )


class RobustPCA:
    """
    Robust principal component analysis by principal component pursuit.

    Solves

    .. math::
        \\min_{L,S} \\|L\\|_* + \\lambda \\|S\\|_1 \\quad \\text{s.t.} \\quad L + S = H

    with the inexact augmented Lagrange multiplier iteration:

    .. math::
        S_{k+1} = \\mathcal{S}_{\\lambda/\\mu_k}(H - L_k + Y_k/\\mu_k),

        L_{k+1} = \\mathcal{D}_{1/\\mu_k}(H - S_{k+1} + Y_k/\\mu_k),

        Y_{k+1} = Y_k + \\mu_k (H - L_{k+1} - S_{k+1}),
        \\qquad \\mu_{k+1} = \\min(\\rho\\mu_k, \\bar\\mu),

    where :math:`\\mathcal{S}` is entrywise soft thresholding and
    :math:`\\mathcal{D}` is singular value thresholding.

    Parameters
    ----------
    lam : float, optional
        Sparsity weight. Default ``1 / sqrt(max(m, n))``.
    rho : float, optional
        Growth factor of the penalty parameter ``mu`` (> 1). Default 1.5.
    mu : float, optional
        Initial penalty. Default ``1.25 / ||H||_2``.
    stopping : StoppingCriterion, optional
        Iteration budget and tolerance on the relative residual
        ``||L + S - H||_F / ||H||_F``. Default ``StoppingCriterion.for_filter()``.

    Notes
    -----
    Each iteration costs one thin SVD of the ``(m, n)`` matrix.
    Exhausting the budget is not an error: the iterate with the smallest
    residual is returned with status ``NOT_CONVERGED``.
    """

    def __init__(
        self,
        lam: Optional[float] = None,
        rho: float = 1.5,
        mu: Optional[float] = None,
        stopping: Optional[StoppingCriterion] = None,
    ) -> None:
        if lam is not None and float(lam) <= 0.0:
            raise ValueError(f"lam must be > 0. Got lam={lam}.")
        if float(rho) <= 1.0:
            raise ValueError(f"rho must be > 1. Got rho={rho}.")
        if mu is not None and float(mu) <= 0.0:
            raise ValueError(f"mu must be > 0. Got mu={mu}.")

        self.lam = None if lam is None else float(lam)
        self.rho = float(rho)
        self.mu = None if mu is None else float(mu)
        self.stopping = stopping if stopping is not None else StoppingCriterion.for_filter()

    def _degenerate(self, D: np.ndarray, lam: float, iterations: int, tic: float) -> DecompositionResult:
        warnings.warn(
            f"Embedding matrix of shape {D.shape} has no low-rank structure; "
            "returning L = 0 and S = H.",
            DegenerateEmbedding,
            stacklevel=3,
        )
        logger.warning("RobustPCA: degenerate embedding %s, rank collapsed to 0", D.shape)
        return DecompositionResult(
            low_rank=np.zeros_like(D),
            sparse=D.copy(),
            status=ConvergenceStatus.DEGENERATE,
            iterations=int(iterations),
            residual=0.0,
            rank=0,
            lam=lam,
            runtime_ms=(perf_counter() - tic) * 1000.0,
        )

    def decompose(self, H: MatrixLike, verbose: bool = False) -> DecompositionResult:
        """
        Decompose ``H`` into low-rank plus sparse components.

        Parameters
        ----------
        H : array_like, shape (m, n)
            Real matrix to decompose.
        verbose : bool, optional
            If True, prints the runtime and outcome after completion.

        Returns
        -------
        DecompositionResult

        Raises
        ------
        InvalidDimension
            If ``H`` is not a non-empty 2-D array.
        """
        tic = perf_counter()

        D = np.asarray(H)
        if np.iscomplexobj(D):
            raise TypeError("RobustPCA does not support complex matrices.")
        D = D.astype(np.float64, copy=False)
        if D.ndim != 2 or D.size == 0:
            raise InvalidDimension(f"Expected a non-empty 2-D matrix. Got shape={D.shape}.")
        if not np.all(np.isfinite(D)):
            raise ValueError("H contains NaN or Inf values.")

        m, n = D.shape
        lam = self.lam if self.lam is not None else 1.0 / np.sqrt(max(m, n))

        norm_fro = float(np.linalg.norm(D))
        if norm_fro == 0.0:
            return self._degenerate(D, lam, 0, tic)

        norm_two = float(np.linalg.norm(D, 2))
        norm_inf = float(np.max(np.abs(D))) / lam
        Y = D / max(norm_two, norm_inf)

        mu = self.mu if self.mu is not None else 1.25 / norm_two
        mu_bar = mu * 1e7

        L = np.zeros_like(D)
        S = np.zeros_like(D)
        rank = 0

        best = (np.inf, L, S, 0)
        status = ConvergenceStatus.NOT_CONVERGED
        it = 0

        for it in range(1, self.stopping.max_iters + 1):
            S = soft_threshold(D - L + Y / mu, lam / mu)
            L, rank = singular_value_threshold(D - S + Y / mu, 1.0 / mu)

            Z = D - L - S
            residual = float(np.linalg.norm(Z)) / norm_fro

            if residual < best[0]:
                best = (residual, L, S, rank)

            if self.stopping.is_met(residual):
                status = ConvergenceStatus.CONVERGED
                break

            Y = Y + mu * Z
            mu = min(mu * self.rho, mu_bar)

        residual, L, S, rank = best

        if rank == 0:
            return self._degenerate(D, lam, it, tic)

        runtime_ms = (perf_counter() - tic) * 1000.0

        if status is ConvergenceStatus.CONVERGED:
            logger.debug(
                "RobustPCA converged after %d iterations (residual=%.3g, rank=%d)", it, residual, rank
            )
        else:
            logger.warning(
                "RobustPCA did not converge in %d iterations (residual=%.3g > tol=%.3g)",
                it, residual, self.stopping.tol,
            )

        if verbose:
            print(f"[RobustPCA] Completed in {runtime_ms:.02f} ms ({it} iterations, {status}, rank={rank})")

        return DecompositionResult(
            low_rank=L,
            sparse=S,
            status=status,
            iterations=it,
            residual=residual,
            rank=rank,
            lam=float(lam),
            runtime_ms=runtime_ms,
        )


def rpca(
    H: MatrixLike,
    lam: Optional[float] = None,
    rho: float = 1.5,
    stopping: Optional[StoppingCriterion] = None,
    verbose: bool = False,
) -> DecompositionResult:
    """Functional form of :meth:`RobustPCA.decompose`."""
    return RobustPCA(lam=lam, rho=rho, stopping=stopping).decompose(H, verbose=verbose)
# EOF
