"""Pydantic schemas for the agent-facing context search tool."""

from typing import Any

from pydantic import BaseModel, Field

from portfolio_rag.domain.entities import SourceType


# ── Request Schemas ──────────────────────────────────────────────────


class SearchContextInput(BaseModel):
    """Arguments the conversational agent passes to ``searchContext``."""

    query: str = Field(..., min_length=1, description="The search query or user question")
    top_k: int = Field(default=5, ge=1, le=20, description="Number of results to retrieve")
    source_type: SourceType | None = Field(default=None, description="Filter by content type")
    category: str | None = Field(default=None, description="Filter by category")


# ── Response Schemas ─────────────────────────────────────────────────


class ContextSource(BaseModel):
    """Owning entity of a retrieved chunk."""

    type: str
    id: str


class ContextSearchHit(BaseModel):
    """A single retrieved chunk as returned to the agent."""

    content: str
    source: ContextSource
    similarity: float
    metadata: dict[str, Any] | None = None


class SearchContextOutput(BaseModel):
    """Result of a context search. Returned on failure too, with ``error`` set."""

    success: bool
    query: str
    results: list[ContextSearchHit] = []
    total_results: int = 0
    avg_similarity: float | None = None
    retrieval_time_ms: float | None = None
    error: str | None = None
