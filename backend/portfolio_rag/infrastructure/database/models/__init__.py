from .content_chunk_models import EMBEDDING_DIMENSIONS, ContentChunkModel

__all__ = [
    "EMBEDDING_DIMENSIONS",
    "ContentChunkModel",
]
