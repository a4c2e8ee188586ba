from .embedding_provider import EmbeddingProvider
from .reranker import Reranker
from .token_estimator import CharacterTokenEstimator, TokenEstimator
from .vector_store import VectorStore

__all__ = [
    "EmbeddingProvider",
    "Reranker",
    "CharacterTokenEstimator",
    "TokenEstimator",
    "VectorStore",
]
