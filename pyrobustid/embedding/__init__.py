#  embedding.__init__.py

from .hankel import lag_embedding, de_embedding, embedding_shape

__all__ = [
    "lag_embedding",
    "de_embedding",
    "embedding_shape",
]
