"""Embedding service — orchestrates text chunking, embedding generation, and storage.

This is an application service that coordinates:
1. Splitting source text into overlapping chunks
2. Generating embeddings via the EmbeddingProvider
3. Replacing a source's chunks via the VectorStore
"""

import logging
import math
import time
from typing import Any

from portfolio_rag.application.interfaces.embedding_provider import EmbeddingProvider
from portfolio_rag.application.interfaces.vector_store import VectorStore
from portfolio_rag.application.services.chunking import TextChunker, format_content_for_indexing
from portfolio_rag.domain.entities import (
    ChunkWithEmbedding,
    ContentChunk,
    EmbeddingBatch,
    EmbeddingResult,
)
from portfolio_rag.domain.exceptions import EmbeddingError
from portfolio_rag.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Application service for generating and storing content embeddings.

    Handles the full flow: chunk text → generate embeddings → store chunks.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        *,
        chunker: TextChunker | None = None,
    ):
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._chunker = chunker or TextChunker()
        self._log = PipelineLogger("portfolio_rag.application.indexing")

    async def embed_text(self, text: str) -> EmbeddingResult:
        """Embed one string; the token count is the provider's exact figure."""
        try:
            batch = await self._embedding_provider.generate_embeddings([text])
            self._check_batch(batch, expected=1)
        except EmbeddingError as exc:
            logger.error("Failed to generate embedding: %s", exc)
            raise EmbeddingError(
                f"Embedding generation failed: {exc}", status_code=exc.status_code
            ) from exc

        logger.debug(
            "Embedding generated: text_length=%d tokens=%d dims=%d",
            len(text),
            batch.total_tokens,
            len(batch.embeddings[0]),
        )
        return EmbeddingResult(embedding=batch.embeddings[0], token_count=batch.total_tokens)

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Embed many strings in a single provider round trip.

        The provider only reports total usage, so each result carries an even
        share of it (rounded up) as an estimate.
        """
        if not texts:
            return []

        try:
            batch = await self._embedding_provider.generate_embeddings(texts)
            self._check_batch(batch, expected=len(texts))
        except EmbeddingError as exc:
            logger.error("Failed to generate batch embeddings (count=%d): %s", len(texts), exc)
            raise EmbeddingError(
                f"Batch embedding generation failed: {exc}", status_code=exc.status_code
            ) from exc

        per_item_tokens = math.ceil(batch.total_tokens / len(texts))
        logger.info(
            "Batch embeddings generated: count=%d total_tokens=%d",
            len(texts),
            batch.total_tokens,
        )
        return [
            EmbeddingResult(embedding=embedding, token_count=per_item_tokens)
            for embedding in batch.embeddings
        ]

    async def chunk_and_embed(
        self,
        text: str,
        chunk_size: int | None = None,
        overlap: int | None = None,
    ) -> list[ChunkWithEmbedding]:
        """Chunk ``text`` and embed every chunk, preserving chunk order."""
        chunker = self._chunker
        if chunk_size is not None or overlap is not None:
            chunker = TextChunker(
                chunk_size if chunk_size is not None else chunker.chunk_size,
                overlap if overlap is not None else chunker.overlap,
                estimator=chunker.estimator,
            )

        chunks = chunker.chunk(text)
        if not chunks:
            return []

        results = await self.embed_batch([chunk.content for chunk in chunks])

        return [
            ChunkWithEmbedding(
                content=chunk.content,
                index=chunk.index,
                token_count=chunk.token_count,
                start_position=chunk.start_position,
                end_position=chunk.end_position,
                embedding=result.embedding,
            )
            for chunk, result in zip(chunks, results, strict=True)
        ]

    async def index_source(
        self,
        source_type: str,
        source_id: str,
        title: str,
        content: str,
        *,
        additional_fields: dict[str, str | list[str]] | None = None,
        metadata: dict[str, Any] | None = None,
        category: str | None = None,
    ) -> list[ContentChunk]:
        """(Re)index one source: format → chunk → embed → replace stored chunks.

        Returns:
            The stored chunks, ordered by chunk_index.
        """
        start = time.monotonic()
        text = format_content_for_indexing(title, content, additional_fields)

        with self._log.timed_step(
            PipelineStage.EMBED, f"Embedding {source_type}/{source_id}", chars=len(text)
        ):
            chunks = await self.chunk_and_embed(text)

        with self._log.timed_step(
            PipelineStage.STORE, f"Replacing chunks of {source_type}/{source_id}"
        ):
            stored = await self._vector_store.update_source_embeddings(
                source_type,
                source_id,
                chunks,
                metadata=metadata,
                category=category,
            )

        duration_ms = int((time.monotonic() - start) * 1000)
        self._log.stats(
            source=f"{source_type}/{source_id}",
            chunks=len(stored),
            tokens=sum(c.token_count for c in stored),
            duration_ms=duration_ms,
        )
        return stored

    async def remove_source(self, source_type: str, source_id: str) -> int:
        """Delete every chunk of a source. Returns the number removed."""
        deleted = await self._vector_store.delete_chunks_by_source(source_type, source_id)
        self._log.step_complete(
            PipelineStage.INDEX, f"Removed {source_type}/{source_id}", deleted=deleted
        )
        return deleted

    def _check_batch(self, batch: EmbeddingBatch, *, expected: int) -> None:
        """Reject responses with the wrong vector count or dimensionality."""
        if len(batch.embeddings) != expected:
            raise EmbeddingError(
                f"expected {expected} embeddings, received {len(batch.embeddings)}"
            )
        dimensions = self._embedding_provider.dimensions
        for embedding in batch.embeddings:
            if len(embedding) != dimensions:
                raise EmbeddingError(
                    f"expected {dimensions}-dimensional embeddings, received {len(embedding)}"
                )
