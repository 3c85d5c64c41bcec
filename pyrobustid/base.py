# base.py

from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Union

import numpy as np

from pyrobustid._utils.typing import ArrayLike
from pyrobustid.errors import InvalidDimension

__all__ = [
    "ConvergenceStatus",
    "StoppingCriterion",
    "TimeSeries",
    "SeriesLike",
    "unpack_series",
    "validate_signal",
]


class ConvergenceStatus(str, Enum):
    """Outcome of an iterative routine.

    ``NOT_CONVERGED`` and ``DEGENERATE`` are recoverable: the routine still
    returns its best iterate and the caller decides whether to retry.
    """

    CONVERGED = "converged"
    NOT_CONVERGED = "not_converged"
    DEGENERATE = "degenerate"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StoppingCriterion:
    """Iteration budget and tolerance for the fixed-point iterations.

    Attributes
    ----------
    max_iters:
        Hard cap on the number of iterations (>= 1).
    tol:
        Convergence tolerance on the monitored relative change (>= 0).
    """

    max_iters: int = 1000
    tol: float = 1e-3

    def __post_init__(self) -> None:
        if int(self.max_iters) < 1:
            raise ValueError(f"max_iters must be >= 1. Got {self.max_iters}.")
        if not np.isfinite(self.tol) or float(self.tol) < 0.0:
            raise ValueError(f"tol must be a finite value >= 0. Got {self.tol}.")
        object.__setattr__(self, "max_iters", int(self.max_iters))
        object.__setattr__(self, "tol", float(self.tol))

    @classmethod
    def for_rtls(cls) -> "StoppingCriterion":
        """Defaults of the robust total least-squares solver."""
        return cls(max_iters=400, tol=2e-6)

    @classmethod
    def for_filter(cls) -> "StoppingCriterion":
        """Defaults of the low-rank embedding filter."""
        return cls(max_iters=1000, tol=1e-3)

    def is_met(self, change: float) -> bool:
        return bool(np.isfinite(change) and change < self.tol)


@dataclass(frozen=True, eq=False)
class TimeSeries:
    """Uniformly sampled real time series.

    The values are stored as a read-only float64 copy, so a captured series
    cannot be modified by downstream stages.
    """

    values: np.ndarray
    dt: float = 1.0
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        values = _as_real_vector(self.values, "values")
        values = values.copy()
        values.setflags(write=False)
        if not np.isfinite(self.dt) or float(self.dt) <= 0.0:
            raise ValueError(f"dt must be a positive number. Got {self.dt}.")
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "dt", float(self.dt))

    def __len__(self) -> int:
        return int(self.values.size)

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self.values, dtype=dtype)

    @property
    def fs(self) -> float:
        return 1.0 / self.dt

    @property
    def time(self) -> np.ndarray:
        return np.arange(len(self)) * self.dt

    def with_values(self, values: ArrayLike) -> "TimeSeries":
        """New series sharing this one's sample time."""
        return TimeSeries(values=np.asarray(values), dt=self.dt, name=self.name)

    def __repr__(self) -> str:
        return f"<TimeSeries N={len(self)} dt={self.dt:g}>"


SeriesLike = Union[TimeSeries, ArrayLike]


def _as_real_vector(x: Any, what: str = "signal") -> np.ndarray:
    arr = np.asarray(x)
    if np.iscomplexobj(arr):
        raise TypeError(f"Complex data is not supported for {what}.")
    if arr.ndim > 1:
        if sum(1 for s in arr.shape if s != 1) > 1:
            raise InvalidDimension(f"{what} must be one-dimensional. Got shape={arr.shape}.")
    arr = np.ravel(arr).astype(np.float64, copy=False)
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{what} contains NaN or Inf values.")
    return arr


def unpack_series(x: SeriesLike, what: str = "signal") -> Tuple[np.ndarray, Optional[float]]:
    """Return ``(values, dt)`` for a TimeSeries or a plain 1-D array-like.

    ``dt`` is None for plain arrays.
    """
    if isinstance(x, TimeSeries):
        return np.array(x.values, dtype=np.float64), x.dt
    return _as_real_vector(x, what), None


def validate_signal(method: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator normalizing the first signal argument of a function or method.

    - Accepts a TimeSeries or any 1-D real array-like, positional or by name.
    - Converts it to a flat float64 ndarray.
    - If the wrapped callable has a keyword ``dt`` left at None, the sample time
      of a TimeSeries argument is forwarded to it.

    Complex data raises TypeError; NaN/Inf raise ValueError.
    """
    sig = inspect.signature(method)
    names = list(sig.parameters.keys())
    pos = 1 if names and names[0] == "self" else 0
    name = names[pos]
    accepts_dt = "dt" in sig.parameters

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        args = list(args)
        if len(args) > pos:
            raw = args[pos]
        elif name in kwargs:
            raw = kwargs[name]
        else:
            raise TypeError(f"Missing signal argument '{name}'.")

        values, dt = unpack_series(raw, what=name)

        if len(args) > pos:
            args[pos] = values
        else:
            kwargs[name] = values

        if accepts_dt and dt is not None and kwargs.get("dt") is None:
            kwargs["dt"] = dt

        return method(*args, **kwargs)

    return wrapper
#EOF
