# estimation.model.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from scipy import signal

from pyrobustid.base import SeriesLike, unpack_series
from pyrobustid._utils.typing import ArrayLike

__all__ = ["ARModel"]


def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=np.float64).ravel()
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class ARModel:
    """
    Discrete-time rational model ``H(z) = B(z) / A(z)``.

    Polynomials are in powers of ``z^-1``:

    .. math::
        A(z) = 1 + a_1 z^{-1} + \\ldots + a_{na} z^{-na}, \\qquad
        B(z) = b_0 + b_1 z^{-1} + \\ldots

    A pure AR (all-pole) model has ``num = [1]``. The denominator is
    normalized on construction so that ``den[0] == 1``.

    Attributes
    ----------
    den : ndarray
        Denominator coefficients, length ``na + 1``.
    num : ndarray
        Numerator coefficients (``[1.0]`` for AR models).
    dt : float
        Sample time.
    input_delay : int, optional
        Leading zeros of ``num`` (delay of an exogenous input). None for a
        model without input, whose numerator is only a gain.
    """

    den: np.ndarray
    num: np.ndarray = field(default_factory=lambda: np.array([1.0]))
    dt: float = 1.0
    input_delay: Optional[int] = None

    def __post_init__(self) -> None:
        den = np.asarray(self.den, dtype=np.float64).ravel()
        num = np.asarray(self.num, dtype=np.float64).ravel()
        if den.size == 0 or den[0] == 0.0:
            raise ValueError("den must be non-empty with den[0] != 0.")
        if num.size == 0:
            raise ValueError("num must be non-empty.")
        if not np.isfinite(self.dt) or float(self.dt) <= 0.0:
            raise ValueError(f"dt must be a positive number. Got {self.dt}.")
        lead = den[0]
        object.__setattr__(self, "den", _frozen(den / lead))
        object.__setattr__(self, "num", _frozen(num / lead))
        object.__setattr__(self, "dt", float(self.dt))
        if self.input_delay is not None:
            d = int(self.input_delay)
            if d < 0 or d >= num.size:
                raise ValueError(f"input_delay must be in [0, {num.size}). Got {self.input_delay}.")
            object.__setattr__(self, "input_delay", d)

    @classmethod
    def from_theta(
        cls,
        theta: ArrayLike,
        na: int,
        nb: int = 0,
        input_delay: int = 1,
        dt: float = 1.0,
    ) -> "ARModel":
        """
        Build a model from a regression parameter vector.

        ``theta = [theta_y (na), theta_u (nb)]`` solves
        ``y[k] = sum_i theta_y[i] y[k-1-i] + sum_j theta_u[j] u[k-d-j]``,
        so ``A = [1, -theta_y]`` and ``B = [0]*d + theta_u`` (``B = [1]`` if
        ``nb == 0``).
        """
        theta = np.asarray(theta, dtype=np.float64).ravel()
        na, nb = int(na), int(nb)
        if theta.size != na + nb:
            raise ValueError(f"theta has {theta.size} entries, expected na + nb = {na + nb}.")
        den = np.concatenate(([1.0], -theta[:na]))
        if nb == 0:
            return cls(den=den, num=np.array([1.0]), dt=dt)
        num = np.concatenate((np.zeros(int(input_delay)), theta[na:]))
        return cls(den=den, num=num, dt=dt, input_delay=int(input_delay))

    @classmethod
    def from_poles(cls, poles: ArrayLike, dt: float = 1.0, gain: float = 1.0) -> "ARModel":
        """All-pole model with the given poles (complex poles in conjugate pairs)."""
        den = np.real(np.poly(np.asarray(poles)))
        return cls(den=den, num=np.array([float(gain)]), dt=dt)

    @property
    def na(self) -> int:
        return int(self.den.size - 1)

    @property
    def nb(self) -> int:
        """Number of input coefficients (0 for a model without input)."""
        if self.input_delay is None:
            return 0
        return int(self.num.size - self.input_delay)

    @property
    def theta(self) -> np.ndarray:
        """AR part of the regression vector, ``-den[1:]``."""
        return -self.den[1:]

    @property
    def poles(self) -> np.ndarray:
        if self.na == 0:
            return np.zeros(0, dtype=complex)
        return np.roots(self.den)

    @property
    def is_stable(self) -> bool:
        return bool(np.all(np.abs(self.poles) < 1.0))

    def simulate(self, u: SeriesLike, zi: Optional[ArrayLike] = None) -> np.ndarray:
        """Filter ``u`` through ``B(z)/A(z)`` (``scipy.signal.lfilter``)."""
        x, _ = unpack_series(u, "u")
        if zi is None:
            return signal.lfilter(self.num, self.den, x)
        y, _ = signal.lfilter(self.num, self.den, x, zi=np.asarray(zi, dtype=np.float64))
        return y

    def frequency_response(self, w: ArrayLike) -> np.ndarray:
        """Complex response at angular frequencies ``w`` (rad/s)."""
        from pyrobustid.analysis.frequency import freq_response

        return freq_response(self, w)

    def __repr__(self) -> str:
        return f"<ARModel na={self.na} nb={self.nb} dt={self.dt:g}>"
