# analysis.frequency.py

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
from scipy import signal

from pyrobustid.base import validate_signal
from pyrobustid.errors import InvalidDimension
from pyrobustid._utils.metrics import db20, rms
from pyrobustid._utils.typing import ArrayLike

if TYPE_CHECKING:
    from pyrobustid.estimation.model import ARModel

__all__ = [
    "freq_response",
    "magnitude_response",
    "phase_response",
    "response_error",
    "welch_psd",
    "ar_psd",
]


def _grid(w: ArrayLike) -> np.ndarray:
    w = np.asarray(w, dtype=np.float64).ravel()
    if w.size == 0:
        raise InvalidDimension("Frequency grid must contain at least one frequency.")
    return w


def freq_response(model: "ARModel", w: ArrayLike) -> np.ndarray:
    """
    Frequency response ``H(e^{j w T}) = B / A`` of a discrete-time model.

    Polynomial evaluation:

        B(e^{jwT}) = sum_k num[k] e^{-j w T k}
        A(e^{jwT}) = sum_k den[k] e^{-j w T k}

    Parameters
    ----------
    model : ARModel
        Model with ``num``, ``den`` and sample time ``dt``.
    w : array_like
        Angular frequencies in rad/s (rad/sample when ``dt == 1``).

    Returns
    -------
    H : ndarray of complex, same length as ``w``.

    Raises
    ------
    InvalidDimension
        If ``w`` is empty.
    """
    w = _grid(w)
    wT = w * float(model.dt)

    E_num = np.exp(-1j * np.outer(wT, np.arange(model.num.size)))
    E_den = np.exp(-1j * np.outer(wT, np.arange(model.den.size)))

    B = E_num @ model.num.astype(np.complex128)
    A = E_den @ model.den.astype(np.complex128)
    # poles exactly on the grid
    A = np.where(np.abs(A) < 1e-300, 1e-300, A)
    return B / A


def magnitude_response(model: "ARModel", w: ArrayLike, db: bool = False) -> np.ndarray:
    """``|H|`` on the grid (``20 log10 |H|`` if ``db``)."""
    H = freq_response(model, w)
    if db:
        return db20(H)
    return np.abs(H)


def phase_response(model: "ARModel", w: ArrayLike, unwrap: bool = True) -> np.ndarray:
    """Phase of ``H`` in radians, unwrapped along the grid by default."""
    phase = np.angle(freq_response(model, w))
    return np.unwrap(phase) if unwrap else phase


def response_error(reference: "ARModel", estimate: "ARModel", w: ArrayLike, db: bool = True) -> float:
    """
    RMS difference of two magnitude responses on a grid.

    With ``db=True`` (default) the difference is taken in decibels, which
    keeps resonance peaks from dominating the error.
    """
    return rms(
        magnitude_response(reference, w, db=db) - magnitude_response(estimate, w, db=db)
    )


@validate_signal
def welch_psd(
    x: np.ndarray,
    fs: float = 1.0,
    nperseg: Optional[int] = None,
    *,
    dt: Optional[float] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Welch periodogram (one-sided, ``scipy.signal.welch``).

    If ``x`` is a TimeSeries its sample rate overrides ``fs``.

    Returns
    -------
    f : ndarray
        Frequencies in Hz.
    Pxx : ndarray
        Power spectral density.
    """
    if dt is not None:
        fs = 1.0 / dt
    if nperseg is None:
        nperseg = min(x.size, 256)
    return signal.welch(x, fs=fs, nperseg=int(nperseg))


def ar_psd(model: "ARModel", w: ArrayLike, noise_variance: float = 1.0) -> np.ndarray:
    """
    One-sided power spectral density of the model driven by white noise.

    ``P(w) = 2 * sigma^2 * dt * |H(e^{jwT})|^2``, the scale of ``welch_psd``
    output at ``f = w / (2 pi)``.
    """
    H = freq_response(model, w)
    return 2.0 * float(noise_variance) * model.dt * np.abs(H) ** 2
