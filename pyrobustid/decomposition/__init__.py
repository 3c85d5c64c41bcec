#  decomposition.__init__.py

from .rpca import DecompositionResult, RobustPCA, rpca
from .thresholding import singular_value_threshold, soft_threshold, thin_svd

__all__ = [
    "DecompositionResult",
    "RobustPCA",
    "rpca",
    "singular_value_threshold",
    "soft_threshold",
    "thin_svd",
]
