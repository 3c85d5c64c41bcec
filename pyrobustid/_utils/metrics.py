# pyrobustid/_utils/metrics.py
import numpy as np
from .typing import ArrayLike

__all__ = ["db20", "rms"]


def db20(x: ArrayLike, *, eps: float = 1e-12) -> np.ndarray:
    """20*log10(|x|), floored at ``eps`` so zeros of a response stay finite."""
    x = np.asarray(x)
    return 20.0 * np.log10(np.maximum(np.abs(x), eps))


def rms(x: ArrayLike) -> float:
    """Root mean square of a real or complex array (NaN if empty)."""
    x = np.asarray(x)
    if x.size == 0:
        return float("nan")
    return float(np.sqrt(np.mean(np.abs(x) ** 2)))
