# pyrobustid/_utils/noise.py
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from scipy import stats

from .typing import ArrayLike

__all__ = ["heavy_tailed_noise", "sinusoid_mixture", "scale_to_ratio"]


def heavy_tailed_noise(
    rng: np.random.Generator,
    n_samples: int,
    alpha: float = 1.5,
    scale: float = 1.0,
) -> np.ndarray:
    """
    Symmetric alpha-sub-Gaussian noise.

    ``x = sqrt(A) * G`` with ``G ~ N(0, 2 scale^2)`` and ``A`` a totally skewed
    positive (alpha/2)-stable variable with scale ``cos(pi alpha / 4)^(2/alpha)``.
    The result is symmetric alpha-stable: impulsive for ``alpha < 2``,
    Gaussian at ``alpha = 2``.
    """
    alpha = float(alpha)
    if not 0.0 < alpha <= 2.0:
        raise ValueError(f"alpha must be in (0, 2]. Got alpha={alpha}.")

    g = rng.normal(0.0, np.sqrt(2.0) * float(scale), size=int(n_samples))
    if alpha == 2.0:
        return g

    a_scale = np.cos(np.pi * alpha / 4.0) ** (2.0 / alpha)
    A = stats.levy_stable.rvs(alpha / 2.0, 1.0, loc=0.0, scale=a_scale, size=int(n_samples), random_state=rng)
    return np.sqrt(np.maximum(A, 0.0)) * g


def sinusoid_mixture(
    freqs: Sequence[float],
    fs: float,
    n_samples: int,
    amplitudes: Optional[ArrayLike] = None,
    phases: Optional[ArrayLike] = None,
) -> np.ndarray:
    """Sum of sinusoids ``sum_i a_i sin(2 pi f_i t + phi_i)``, ``t = k / fs``."""
    freqs = np.asarray(freqs, dtype=float).ravel()
    amps = np.ones_like(freqs) if amplitudes is None else np.asarray(amplitudes, dtype=float).ravel()
    phis = np.zeros_like(freqs) if phases is None else np.asarray(phases, dtype=float).ravel()
    t = np.arange(int(n_samples)) / float(fs)
    return np.sum(amps[:, None] * np.sin(2.0 * np.pi * freqs[:, None] * t[None, :] + phis[:, None]), axis=0)


def scale_to_ratio(noise: ArrayLike, reference: ArrayLike, ratio: float) -> np.ndarray:
    """Rescale ``noise`` so that ``std(noise) == ratio * std(reference)``."""
    noise = np.asarray(noise, dtype=float)
    s = float(np.std(noise))
    if s == 0.0:
        return noise.copy()
    return noise * (float(ratio) * float(np.std(reference)) / s)
