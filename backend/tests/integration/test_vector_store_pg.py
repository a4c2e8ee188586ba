"""Integration tests for PgVectorStore against a live PostgreSQL + pgvector."""

import uuid
from contextlib import asynccontextmanager

import pytest
from sqlalchemy import delete

from portfolio_rag.domain.entities import ChunkWithEmbedding, SearchFilters
from portfolio_rag.infrastructure.database import (
    ContentChunkModel,
    create_engine,
    create_session_factory,
    init_schema,
)
from portfolio_rag.infrastructure.database.repositories import PgVectorStore

DIMS = 1536


def _one_hot(position: int) -> list[float]:
    vector = [0.0] * DIMS
    vector[position] = 1.0
    return vector


def _blend(first: int, second: int, weight: float) -> list[float]:
    vector = [0.0] * DIMS
    vector[first] = weight
    vector[second] = 1.0 - weight
    return vector


def _chunks(count: int, position: int = 0) -> list[ChunkWithEmbedding]:
    return [
        ChunkWithEmbedding(
            content=f"chunk {i}",
            index=i,
            token_count=2,
            start_position=0,
            end_position=7,
            embedding=_one_hot(position + i),
        )
        for i in range(count)
    ]


@asynccontextmanager
async def _store_session():
    """Yield (store, session) on a fresh engine; skip when PostgreSQL is unreachable."""
    engine = create_engine()
    try:
        await init_schema(engine)
    except Exception as exc:  # pragma: no cover - environment dependent
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable in this environment: {exc}")

    created: list[str] = []
    try:
        async with create_session_factory(engine)() as session:
            try:
                yield PgVectorStore(session), session, created
            finally:
                await session.rollback()
                if created:
                    await session.execute(
                        delete(ContentChunkModel).where(ContentChunkModel.source_id.in_(created))
                    )
                    await session.commit()
    finally:
        await engine.dispose()


def _source_id(created: list[str]) -> str:
    source_id = f"test-{uuid.uuid4()}"
    created.append(source_id)
    return source_id


@pytest.mark.asyncio
async def test_batch_store_then_read_back_in_chunk_order():
    async with _store_session() as (store, session, created):
        source_id = _source_id(created)

        stored = await store.store_chunks_batch(
            _chunks(3), "project", source_id, metadata={"title": "Portfolio"}, category="web"
        )
        await session.commit()

        assert [c.chunk_index for c in stored] == [0, 1, 2]
        assert all(c.id for c in stored)

        fetched = await store.get_chunks_by_source("project", source_id)
        assert [c.chunk_index for c in fetched] == [0, 1, 2]
        assert fetched[0].metadata == {"title": "Portfolio"}
        assert fetched[0].category == "web"


@pytest.mark.asyncio
async def test_search_respects_source_type_filter_and_similarity_order():
    async with _store_session() as (store, session, created):
        project_id = _source_id(created)
        blog_id = _source_id(created)

        await store.store_chunk("near", _blend(10, 11, 0.9), "project", project_id, 0, 1)
        await store.store_chunk("far", _blend(10, 11, 0.2), "project", project_id, 1, 1)
        await store.store_chunk("blog", _one_hot(10), "blog", blog_id, 0, 1)
        await session.commit()

        results = await store.search_similar(
            _one_hot(10), 10, SearchFilters(source_type="project", source_id=project_id)
        )

        assert [r.chunk.content for r in results] == ["near", "far"]
        assert all(r.chunk.source_type == "project" for r in results)
        assert results[0].similarity > results[1].similarity
        assert results[0].similarity == pytest.approx(1 - results[0].distance)


@pytest.mark.asyncio
async def test_update_source_embeddings_replaces_previous_chunks():
    async with _store_session() as (store, session, created):
        source_id = _source_id(created)

        await store.store_chunks_batch(_chunks(3), "blog", source_id)
        await session.commit()

        replaced = await store.update_source_embeddings("blog", source_id, _chunks(2, position=50))
        await session.commit()

        fetched = await store.get_chunks_by_source("blog", source_id)
        assert [c.id for c in fetched] == [c.id for c in replaced]
        assert [c.chunk_index for c in fetched] == [0, 1]


@pytest.mark.asyncio
async def test_delete_and_stats():
    async with _store_session() as (store, session, created):
        source_id = _source_id(created)

        await store.store_chunks_batch(_chunks(2), "skill", source_id, category="backend")
        await session.commit()

        stats = await store.get_stats()
        assert stats.total_chunks >= 2
        assert stats.chunks_by_type.get("skill", 0) >= 2
        assert stats.chunks_by_category.get("backend", 0) >= 2

        assert await store.delete_chunks_by_source("skill", source_id) == 2
        await session.commit()
        assert await store.get_chunks_by_source("skill", source_id) == []
