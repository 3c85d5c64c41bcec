# errors.py

from __future__ import annotations

__all__ = [
    "RobustIdError",
    "InvalidDimension",
    "InsufficientData",
    "DegenerateEmbedding",
]


class RobustIdError(Exception):
    """Base class for all pyrobustid errors."""


class InvalidDimension(RobustIdError, ValueError):
    """A shape or size precondition was violated.

    Raised for embedding dimensions outside ``1 <= n < N``, malformed
    matrices handed to the de-embedder, mismatched input/output lengths and
    empty frequency grids. Always fatal to the call.
    """


class InsufficientData(RobustIdError, ValueError):
    """Not enough samples to build a well-posed regression for the requested order."""


class DegenerateEmbedding(UserWarning):
    """The embedding matrix has no recoverable low-rank structure.

    Emitted (never raised) by the decomposer when the rank collapses to zero.
    The call still returns ``L = 0`` and ``S = H``.
    """
