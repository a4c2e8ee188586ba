"""Retrieval service — turns a user query into prompt-ready portfolio context.

Flow per query:
  1. Embed the query.
  2. Over-fetch ``top_k * 2`` candidates from the vector store.
  3. Drop candidates below ``min_similarity``.
  4. Re-rank and keep ``top_k``.
  5. Render the survivors as numbered context sections.
"""

import logging
import time
from dataclasses import fields

from portfolio_rag.application.interfaces.reranker import Reranker
from portfolio_rag.application.interfaces.vector_store import VectorStore
from portfolio_rag.application.services import context_formatter
from portfolio_rag.application.services.embedding_service import EmbeddingService
from portfolio_rag.application.services.reranking import KeywordBoostReranker
from portfolio_rag.domain.entities import (
    PerformanceReport,
    RAGContext,
    RetrievalOptions,
    RetrievedContext,
    SearchFilters,
    SearchResult,
)
from portfolio_rag.domain.exceptions import EmbeddingError, RetrievalError, VectorStoreError
from portfolio_rag.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)

RETRIEVAL_MULTIPLIER = 2  # over-fetch factor, leaves room for re-ranking
DEFAULT_TARGET_MS = 200.0
DEFAULT_OPTIONS = RetrievalOptions(top_k=5, min_similarity=0.5, include_metadata=True)

PERFORMANCE_QUERIES = (
    "React projects",
    "TypeScript experience",
    "full-stack development",
    "API design",
    "database optimization",
)


class RetrievalService:
    """Application service for query-time context retrieval.

    Stateless between calls: every retrieval performs one embedding round
    trip and one vector store round trip.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        *,
        reranker: Reranker | None = None,
        default_options: RetrievalOptions | None = None,
        target_ms: float = DEFAULT_TARGET_MS,
    ):
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._reranker = reranker or KeywordBoostReranker()
        self._default_options = _merge_options(DEFAULT_OPTIONS, default_options)
        self._target_ms = target_ms
        self._log = PipelineLogger("portfolio_rag.application.retrieval")

    async def retrieve_context(
        self,
        query: str,
        options: RetrievalOptions | None = None,
    ) -> RAGContext:
        """Retrieve, filter, re-rank and format context for ``query``.

        Raises:
            RetrievalError: embedding or vector search failed; no partial
                context is returned.
        """
        options = _merge_options(self._default_options, options)
        start = time.perf_counter()

        try:
            logger.debug("Generating query embedding for %r", query)
            query_embedding = await self._embedding_service.embed_text(query)

            logger.debug(
                "Searching similar chunks: top_k=%d source_type=%s category=%s",
                options.top_k,
                options.source_type,
                options.category,
            )
            candidates = await self._vector_store.search_similar(
                query_embedding.embedding,
                options.top_k * RETRIEVAL_MULTIPLIER,
                SearchFilters(source_type=options.source_type, category=options.category),
            )
        except (EmbeddingError, VectorStoreError) as exc:
            logger.error("Context retrieval failed for %r: %s", query, exc)
            raise RetrievalError(f"Context retrieval failed: {exc}") from exc

        relevant = [c for c in candidates if c.similarity >= options.min_similarity]
        ranked = self._reranker.rerank(relevant, query)[: options.top_k]

        contexts = [self._to_context(result, options.include_metadata) for result in ranked]
        formatted = context_formatter.format_context(contexts)

        retrieval_time_ms = (time.perf_counter() - start) * 1000
        avg_similarity = (
            sum(c.similarity for c in contexts) / len(contexts) if contexts else 0.0
        )

        logger.info(
            "Context retrieved: query=%r candidates=%d kept=%d avg_similarity=%.3f time_ms=%.1f",
            query,
            len(candidates),
            len(contexts),
            avg_similarity,
            retrieval_time_ms,
        )

        return RAGContext(
            query=query,
            contexts=contexts,
            formatted_context=formatted,
            total_chunks=len(contexts),
            avg_similarity=avg_similarity,
            retrieval_time_ms=retrieval_time_ms,
        )

    async def retrieve_by_source(self, source_type: str, source_id: str) -> list[RetrievedContext]:
        """Every chunk of one source, in chunk order, without similarity search."""
        try:
            chunks = await self._vector_store.get_chunks_by_source(source_type, source_id)
        except VectorStoreError as exc:
            logger.error("Failed to retrieve %s/%s: %s", source_type, source_id, exc)
            raise RetrievalError(f"Failed to retrieve by source: {exc}") from exc

        return [
            RetrievedContext(
                content=chunk.content,
                source_type=chunk.source_type,
                source_id=chunk.source_id,
                similarity=1.0,
                chunk_index=chunk.chunk_index,
                metadata=chunk.metadata,
            )
            for chunk in chunks
        ]

    def format_prompt_with_context(self, user_message: str, rag_context: RAGContext) -> str:
        """Inject retrieved context ahead of the user's question."""
        return context_formatter.format_prompt_with_context(user_message, rag_context)

    async def performance_check(self, queries: list[str] | None = None) -> PerformanceReport:
        """Run a panel of representative queries and compare mean latency to the target.

        Diagnostic only; nothing is rejected for being slow.
        """
        panel = list(queries) if queries else list(PERFORMANCE_QUERIES)
        times: list[float] = []

        with self._log.timed_step(
            PipelineStage.DIAGNOSTIC, "Retrieval performance check", queries=len(panel)
        ):
            for query in panel:
                result = await self.retrieve_context(query)
                times.append(result.retrieval_time_ms)
                self._log.detail(
                    query,
                    time_ms=f"{result.retrieval_time_ms:.1f}",
                    chunks=result.total_chunks,
                )

        avg = sum(times) / len(times)
        report = PerformanceReport(
            avg_retrieval_time_ms=avg,
            meets_requirement=avg < self._target_ms,
            sample_size=len(times),
            times_ms=times,
        )
        self._log.stats(
            avg_ms=f"{avg:.1f}",
            target_ms=self._target_ms,
            meets_requirement=report.meets_requirement,
        )
        return report

    @staticmethod
    def _to_context(result: SearchResult, include_metadata: bool) -> RetrievedContext:
        return RetrievedContext(
            content=result.chunk.content,
            source_type=result.chunk.source_type,
            source_id=result.chunk.source_id,
            similarity=result.similarity,
            chunk_index=result.chunk.chunk_index,
            metadata=result.chunk.metadata if include_metadata else None,
        )


def _merge_options(
    base: RetrievalOptions, override: RetrievalOptions | None
) -> RetrievalOptions:
    """Fields set on ``override`` win; ``None`` fields keep the ``base`` value."""
    if override is None:
        return base
    return RetrievalOptions(
        **{
            f.name: getattr(override, f.name)
            if getattr(override, f.name) is not None
            else getattr(base, f.name)
            for f in fields(RetrievalOptions)
        }
    )
