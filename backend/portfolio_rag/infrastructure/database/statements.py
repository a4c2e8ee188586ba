"""SQL statement builders for the content chunk table.

All values travel as bound parameters; filter values and vectors are never
interpolated into SQL text.
"""

from typing import Any

from sqlalchemy import Delete, Insert, Select, bindparam, delete, func, insert, select

from pgvector.sqlalchemy import Vector

from portfolio_rag.domain.entities import ChunkWithEmbedding, SearchFilters
from portfolio_rag.infrastructure.database.models.content_chunk_models import ContentChunkModel

chunks_table = ContentChunkModel.__table__

# Everything except the embedding itself, which callers never need back.
CHUNK_COLUMNS = (
    chunks_table.c.id,
    chunks_table.c.content,
    chunks_table.c.source_type,
    chunks_table.c.source_id,
    chunks_table.c.category,
    chunks_table.c.metadata,
    chunks_table.c.chunk_index,
    chunks_table.c.token_count,
    chunks_table.c.created_at,
    chunks_table.c.updated_at,
)


def chunk_row(
    content: str,
    embedding: list[float],
    source_type: str,
    source_id: str,
    chunk_index: int,
    token_count: int,
    metadata: dict[str, Any] | None = None,
    category: str | None = None,
) -> dict[str, Any]:
    """Column values for one row; ``id`` and timestamps come from the server."""
    return {
        "content": content,
        "embedding": embedding,
        "source_type": source_type,
        "source_id": source_id,
        "category": category,
        "metadata": metadata or {},
        "chunk_index": chunk_index,
        "token_count": token_count,
    }


def build_batch_insert(
    chunks: list[ChunkWithEmbedding],
    source_type: str,
    source_id: str,
    metadata: dict[str, Any] | None = None,
    category: str | None = None,
) -> Insert:
    """One multi-row ``INSERT ... VALUES (...), (...) RETURNING`` for a source's chunks."""
    rows = [
        chunk_row(
            chunk.content,
            chunk.embedding,
            source_type,
            source_id,
            chunk.index,
            chunk.token_count,
            metadata,
            category,
        )
        for chunk in chunks
    ]
    return insert(chunks_table).values(rows).returning(*CHUNK_COLUMNS)


def build_single_insert(row: dict[str, Any]) -> Insert:
    return insert(chunks_table).values(**row).returning(*CHUNK_COLUMNS)


def build_similarity_search(
    query_embedding: list[float],
    top_k: int,
    filters: SearchFilters | None = None,
) -> Select:
    """Nearest chunks by cosine distance.

    The query vector is bound once; the selected ``distance`` column and the
    ORDER BY use the same labelled expression.
    """
    query_vector = bindparam(
        "query_vector", value=query_embedding, type_=Vector(len(query_embedding))
    )
    distance_expr = chunks_table.c.embedding.cosine_distance(query_vector)
    distance = distance_expr.label("distance")

    stmt = select(
        *CHUNK_COLUMNS,
        distance,
        (1 - distance_expr).label("similarity"),
    )

    if filters is not None:
        if filters.source_type:
            stmt = stmt.where(chunks_table.c.source_type == filters.source_type)
        if filters.category:
            stmt = stmt.where(chunks_table.c.category == filters.category)
        if filters.source_id:
            stmt = stmt.where(chunks_table.c.source_id == filters.source_id)

    return stmt.order_by(distance).limit(top_k)


def build_delete_by_source(source_type: str, source_id: str) -> Delete:
    return delete(chunks_table).where(
        chunks_table.c.source_type == source_type,
        chunks_table.c.source_id == source_id,
    )


def build_select_by_source(source_type: str, source_id: str) -> Select:
    return (
        select(*CHUNK_COLUMNS)
        .where(
            chunks_table.c.source_type == source_type,
            chunks_table.c.source_id == source_id,
        )
        .order_by(chunks_table.c.chunk_index.asc())
    )


def build_count_total() -> Select:
    return select(func.count()).select_from(chunks_table)


def build_count_by_type() -> Select:
    return select(chunks_table.c.source_type, func.count()).group_by(chunks_table.c.source_type)


def build_count_by_category() -> Select:
    return (
        select(chunks_table.c.category, func.count())
        .where(chunks_table.c.category.is_not(None))
        .group_by(chunks_table.c.category)
    )
