"""FastAPI dependency injection — wires infrastructure to the application layer.

Every request gets its own store and services bound to its own session;
nothing is shared between requests apart from the settings and engine pool.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_rag.application.interfaces import EmbeddingProvider
from portfolio_rag.application.services import EmbeddingService, RetrievalService, TextChunker
from portfolio_rag.config import Settings, get_settings
from portfolio_rag.domain.entities import RetrievalOptions
from portfolio_rag.infrastructure.database.repositories import PgVectorStore
from portfolio_rag.infrastructure.database.session import get_db_session
from portfolio_rag.infrastructure.openai import OpenAIEmbeddingProvider


def build_embedding_provider(settings: Settings) -> OpenAIEmbeddingProvider:
    return OpenAIEmbeddingProvider(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.embedding_model,
        model_dimensions=settings.embedding_dimensions,
        timeout=settings.embedding_timeout,
    )


def build_retrieval_service(
    session: AsyncSession,
    settings: Settings,
    embedding_provider: EmbeddingProvider | None = None,
) -> RetrievalService:
    """Compose the full read path for one unit of work."""
    vector_store = PgVectorStore(session, dimensions=settings.embedding_dimensions)
    embedding_service = EmbeddingService(
        embedding_provider=embedding_provider or build_embedding_provider(settings),
        vector_store=vector_store,
        chunker=TextChunker(settings.chunk_size, settings.chunk_overlap),
    )
    return RetrievalService(
        embedding_service=embedding_service,
        vector_store=vector_store,
        default_options=RetrievalOptions(
            top_k=settings.retrieval_top_k,
            min_similarity=settings.retrieval_min_similarity,
        ),
        target_ms=settings.retrieval_target_ms,
    )


async def get_vector_store(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[PgVectorStore, None]:
    """Provides a PgVectorStore bound to the request's session."""
    settings = get_settings()
    yield PgVectorStore(session, dimensions=settings.embedding_dimensions)


async def get_embedding_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[EmbeddingService, None]:
    """Provides an EmbeddingService for indexing pipelines."""
    settings = get_settings()
    yield EmbeddingService(
        embedding_provider=build_embedding_provider(settings),
        vector_store=PgVectorStore(session, dimensions=settings.embedding_dimensions),
        chunker=TextChunker(settings.chunk_size, settings.chunk_overlap),
    )


async def get_retrieval_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[RetrievalService, None]:
    """Provides a RetrievalService with the OpenAI provider and pgvector store."""
    yield build_retrieval_service(session, get_settings())
