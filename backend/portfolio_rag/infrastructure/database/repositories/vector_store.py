"""SQLAlchemy implementation of the VectorStore — pgvector-powered chunk storage and search."""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_rag.application.interfaces.vector_store import VectorStore
from portfolio_rag.domain.entities import (
    ChunkWithEmbedding,
    ContentChunk,
    SearchFilters,
    SearchResult,
    VectorStoreStats,
)
from portfolio_rag.domain.exceptions import VectorStoreError
from portfolio_rag.infrastructure.database import statements
from portfolio_rag.infrastructure.database.models.content_chunk_models import EMBEDDING_DIMENSIONS

logger = logging.getLogger(__name__)


class PgVectorStore(VectorStore):
    """Concrete vector store backed by PostgreSQL + pgvector.

    The store flushes through the injected session but never commits; the
    session owner decides when a unit of work is durable.
    """

    def __init__(self, session: AsyncSession, *, dimensions: int = EMBEDDING_DIMENSIONS):
        self._session = session
        self._dimensions = dimensions

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
        operation = "Failed to store chunk"
        self._check_dimensions(operation, [embedding])

        row = statements.chunk_row(
            content, embedding, source_type, source_id, chunk_index, token_count, metadata, category
        )
        try:
            result = await self._session.execute(statements.build_single_insert(row))
            stored = self._to_domain(result.mappings().one(), embedding)
        except SQLAlchemyError as exc:
            raise self._wrap(
                operation, exc, source_type=source_type, source_id=source_id
            ) from exc

        logger.debug(
            "Chunk stored: %s/%s index=%d tokens=%d",
            source_type,
            source_id,
            chunk_index,
            token_count,
        )
        return stored

    async def store_chunks_batch(
        self,
        chunks: list[ChunkWithEmbedding],
        source_type: str,
        source_id: str,
        metadata: dict[str, Any] | None = None,
        category: str | None = None,
    ) -> list[ContentChunk]:
        if not chunks:
            return []

        operation = "Failed to store chunks in batch"
        self._check_dimensions(operation, [c.embedding for c in chunks])

        try:
            stored = await self._insert_batch(chunks, source_type, source_id, metadata, category)
        except SQLAlchemyError as exc:
            raise self._wrap(
                operation, exc, source_type=source_type, source_id=source_id
            ) from exc

        logger.info("Stored %d chunks for %s/%s", len(stored), source_type, source_id)
        return stored

    async def search_similar(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        filters: SearchFilters | None = None,
    ) -> list[SearchResult]:
        operation = "Vector search failed"
        self._check_dimensions(operation, [query_embedding])

        query = statements.build_similarity_search(query_embedding, top_k, filters)
        try:
            result = await self._session.execute(query)
            rows = result.mappings().all()
        except SQLAlchemyError as exc:
            raise self._wrap(operation, exc, filters=filters) from exc

        results = [
            SearchResult(
                chunk=self._to_domain(row),
                similarity=float(row["similarity"]),
                distance=float(row["distance"]),
            )
            for row in rows
        ]

        logger.info(
            "Vector search completed: top_k=%d filters=%s results=%d avg_similarity=%.3f",
            top_k,
            filters,
            len(results),
            sum(r.similarity for r in results) / len(results) if results else 0.0,
        )
        return results

    async def delete_chunks_by_source(self, source_type: str, source_id: str) -> int:
        try:
            count = await self._delete(source_type, source_id)
        except SQLAlchemyError as exc:
            raise self._wrap(
                "Failed to delete chunks", exc, source_type=source_type, source_id=source_id
            ) from exc

        logger.info("Deleted %d chunks for %s/%s", count, source_type, source_id)
        return count

    async def update_source_embeddings(
        self,
        source_type: str,
        source_id: str,
        chunks: list[ChunkWithEmbedding],
        metadata: dict[str, Any] | None = None,
        category: str | None = None,
    ) -> list[ContentChunk]:
        """Replace a source's chunks inside one SAVEPOINT.

        If the insert fails the delete is rolled back with it, and other
        connections never observe the source without chunks.
        """
        operation = "Failed to replace source embeddings"
        self._check_dimensions(operation, [c.embedding for c in chunks])

        try:
            async with self._session.begin_nested():
                deleted = await self._delete(source_type, source_id)
                stored = await self._insert_batch(
                    chunks, source_type, source_id, metadata, category
                )
        except SQLAlchemyError as exc:
            raise self._wrap(
                operation, exc, source_type=source_type, source_id=source_id
            ) from exc

        logger.info(
            "Replaced chunks for %s/%s: deleted=%d inserted=%d",
            source_type,
            source_id,
            deleted,
            len(stored),
        )
        return stored

    async def get_chunks_by_source(self, source_type: str, source_id: str) -> list[ContentChunk]:
        try:
            result = await self._session.execute(
                statements.build_select_by_source(source_type, source_id)
            )
            rows = result.mappings().all()
        except SQLAlchemyError as exc:
            raise self._wrap(
                "Failed to get chunks", exc, source_type=source_type, source_id=source_id
            ) from exc

        return [self._to_domain(row) for row in rows]

    async def get_stats(self) -> VectorStoreStats:
        try:
            total = (await self._session.execute(statements.build_count_total())).scalar_one()
            by_type = (await self._session.execute(statements.build_count_by_type())).all()
            by_category = (await self._session.execute(statements.build_count_by_category())).all()
        except SQLAlchemyError as exc:
            raise self._wrap("Failed to get stats", exc) from exc

        return VectorStoreStats(
            total_chunks=int(total or 0),
            chunks_by_type={source_type: int(count) for source_type, count in by_type},
            chunks_by_category={category: int(count) for category, count in by_category},
        )

    # ── Internals ────────────────────────────────────────────────────

    async def _delete(self, source_type: str, source_id: str) -> int:
        result = await self._session.execute(
            statements.build_delete_by_source(source_type, source_id)
        )
        return result.rowcount or 0

    async def _insert_batch(
        self,
        chunks: list[ChunkWithEmbedding],
        source_type: str,
        source_id: str,
        metadata: dict[str, Any] | None,
        category: str | None,
    ) -> list[ContentChunk]:
        if not chunks:
            return []

        result = await self._session.execute(
            statements.build_batch_insert(chunks, source_type, source_id, metadata, category)
        )
        embeddings = {chunk.index: chunk.embedding for chunk in chunks}
        stored = [
            self._to_domain(row, embeddings.get(row["chunk_index"]))
            for row in result.mappings().all()
        ]
        # RETURNING order is not guaranteed to follow VALUES order.
        stored.sort(key=lambda c: c.chunk_index)
        return stored

    def _check_dimensions(self, operation: str, embeddings: list[list[float]]) -> None:
        for embedding in embeddings:
            if len(embedding) != self._dimensions:
                raise VectorStoreError(
                    operation,
                    f"expected {self._dimensions}-dimensional embedding, got {len(embedding)}",
                )

    @staticmethod
    def _wrap(operation: str, exc: SQLAlchemyError, **context: Any) -> VectorStoreError:
        logger.error("%s: %s (%s)", operation, exc, context)
        return VectorStoreError(operation, str(exc))

    @staticmethod
    def _to_domain(row: Mapping[str, Any], embedding: list[float] | None = None) -> ContentChunk:
        return ContentChunk(
            id=row["id"],
            content=row["content"],
            source_type=row["source_type"],
            source_id=row["source_id"],
            category=row["category"],
            metadata=row["metadata"] or {},
            chunk_index=row["chunk_index"],
            token_count=row["token_count"],
            embedding=list(embedding) if embedding is not None else [],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
