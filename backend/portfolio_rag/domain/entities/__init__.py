from .content_chunk import (
    ChunkWithEmbedding,
    ContentChunk,
    EmbeddingBatch,
    EmbeddingResult,
    SearchFilters,
    SearchResult,
    SourceType,
    TextChunk,
    VectorStoreStats,
)
from .retrieval import (
    PerformanceReport,
    RAGContext,
    RetrievalOptions,
    RetrievedContext,
)

__all__ = [
    "ChunkWithEmbedding",
    "ContentChunk",
    "EmbeddingBatch",
    "EmbeddingResult",
    "SearchFilters",
    "SearchResult",
    "SourceType",
    "TextChunk",
    "VectorStoreStats",
    "PerformanceReport",
    "RAGContext",
    "RetrievalOptions",
    "RetrievedContext",
]
