"""Abstract repository interface (port) for content chunks and vector search."""

from abc import ABC, abstractmethod
from typing import Any

from portfolio_rag.domain.entities import (
    ChunkWithEmbedding,
    ContentChunk,
    SearchFilters,
    SearchResult,
    VectorStoreStats,
)


class VectorStore(ABC):
    """Port for chunk persistence and similarity search.

    Every method raises VectorStoreError on failure; nothing is retried.
    """

    @abstractmethod
    async def store_chunk(
        self,
        content: str,
        embedding: list[float],
        source_type: str,
        source_id: str,
        chunk_index: int,
        token_count: int,
        metadata: dict[str, Any] | None = None,
        category: str | None = None,
    ) -> ContentChunk:
        """Insert a single chunk and return the stored row."""
        ...

    @abstractmethod
    async def store_chunks_batch(
        self,
        chunks: list[ChunkWithEmbedding],
        source_type: str,
        source_id: str,
        metadata: dict[str, Any] | None = None,
        category: str | None = None,
    ) -> list[ContentChunk]:
        """Insert all chunks of one source with a single multi-row statement."""
        ...

    @abstractmethod
    async def search_similar(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        filters: SearchFilters | None = None,
    ) -> list[SearchResult]:
        """Find chunks most similar to the query embedding.

        Args:
            query_embedding: The query vector.
            top_k: Maximum number of results.
            filters: Optional source_type / category / source_id constraints.

        Returns:
            List of SearchResult ordered by descending similarity.
        """
        ...

    @abstractmethod
    async def delete_chunks_by_source(self, source_type: str, source_id: str) -> int:
        """Delete all chunks for a source. Returns count of deleted rows."""
        ...

    @abstractmethod
    async def update_source_embeddings(
        self,
        source_type: str,
        source_id: str,
        chunks: list[ChunkWithEmbedding],
        metadata: dict[str, Any] | None = None,
        category: str | None = None,
    ) -> list[ContentChunk]:
        """Replace a source's chunk set. Readers see either the old or the new set."""
        ...

    @abstractmethod
    async def get_chunks_by_source(self, source_type: str, source_id: str) -> list[ContentChunk]:
        """Return every chunk of a source ordered by chunk_index."""
        ...

    @abstractmethod
    async def get_stats(self) -> VectorStoreStats:
        """Return chunk counts overall, per source type and per category."""
        ...
