# pyrobustid/_utils/typing.py
from __future__ import annotations
from typing import Union, Sequence
import numpy as np

# 1-D real input (series, coefficient vectors, frequency grids)
ArrayLike = Union[np.ndarray, Sequence[Union[int, float]]]

# 2-D real input (embedding matrices)
MatrixLike = Union[np.ndarray, Sequence[Sequence[Union[int, float]]]]

__all__ = ["ArrayLike", "MatrixLike"]
