#  filters.__init__.py

from .lowrank import FilterResult, LowRankFilter, lowrankfilter, default_embedding_dim

__all__ = [
    "FilterResult",
    "LowRankFilter",
    "lowrankfilter",
    "default_embedding_dim",
]
