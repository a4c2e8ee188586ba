"""Agent tool for semantic search over indexed portfolio content.

The conversational agent calls this tool with JSON arguments. Unlike the
retrieval service, the tool never raises: failures come back as
``success=False`` so the agent can decide to answer without context.
"""

import logging
from typing import Any

from pydantic import ValidationError

from portfolio_rag.application.schemas.search_context import (
    ContextSearchHit,
    ContextSource,
    SearchContextInput,
    SearchContextOutput,
)
from portfolio_rag.application.services.retrieval_service import RetrievalService
from portfolio_rag.domain.entities import RetrievalOptions, SourceType
from portfolio_rag.domain.exceptions import RAGError

logger = logging.getLogger(__name__)

TOOL_MIN_SIMILARITY = 0.5

SEARCH_CONTEXT_TOOL: dict[str, Any] = {
    "name": "searchContext",
    "description": (
        "Search portfolio content using semantic search. Finds the most relevant "
        "projects, blog posts, skills, and experience based on the user's query. "
        "Use this to provide context-aware responses about the portfolio owner's work."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "The search query or user question",
            },
            "top_k": {
                "type": "number",
                "description": "Number of results to retrieve (default: 5)",
                "default": 5,
            },
            "source_type": {
                "type": "string",
                "enum": [s.value for s in SourceType],
                "description": "Filter by content type (optional)",
            },
            "category": {
                "type": "string",
                "description": "Filter by category (optional)",
            },
        },
        "required": ["query"],
    },
}


async def search_context(
    retrieval_service: RetrievalService,
    arguments: dict[str, Any],
) -> dict[str, Any]:
    """Validate tool arguments, retrieve context and shape it for the agent."""
    raw_query = str(arguments.get("query", ""))

    try:
        params = SearchContextInput.model_validate(arguments)
    except ValidationError as exc:
        logger.warning("Invalid searchContext arguments: %s", exc.errors())
        return _failure(raw_query, f"Invalid search arguments: {exc.error_count()} error(s)")

    logger.info(
        "Searching context: query=%r top_k=%d source_type=%s category=%s",
        params.query,
        params.top_k,
        params.source_type,
        params.category,
    )

    try:
        rag_context = await retrieval_service.retrieve_context(
            params.query,
            RetrievalOptions(
                top_k=params.top_k,
                source_type=params.source_type.value if params.source_type else None,
                category=params.category,
                min_similarity=TOOL_MIN_SIMILARITY,
                include_metadata=True,
            ),
        )
    except RAGError as exc:
        logger.error("Context search failed for %r: %s", params.query, exc)
        return _failure(params.query, str(exc))

    hits = [
        ContextSearchHit(
            content=ctx.content,
            source=ContextSource(type=ctx.source_type, id=ctx.source_id),
            similarity=ctx.similarity,
            metadata=ctx.metadata,
        )
        for ctx in rag_context.contexts
    ]

    return SearchContextOutput(
        success=True,
        query=params.query,
        results=hits,
        total_results=len(hits),
        avg_similarity=rag_context.avg_similarity,
        retrieval_time_ms=rag_context.retrieval_time_ms,
    ).model_dump()


def _failure(query: str, error: str) -> dict[str, Any]:
    return SearchContextOutput(success=False, query=query, error=error).model_dump()
