"""Domain entities for context retrieval — the read side of the RAG pipeline."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RetrievalOptions:
    """Tunables for a single retrieve_context call.

    Fields left as ``None`` fall back to the retrieval service's configured
    defaults.
    """

    top_k: int | None = None
    source_type: str | None = None
    category: str | None = None
    min_similarity: float | None = None
    include_metadata: bool | None = None


@dataclass
class RetrievedContext:
    """A chunk selected for prompt injection."""

    content: str
    source_type: str
    source_id: str
    similarity: float
    chunk_index: int
    metadata: dict[str, Any] | None = None


@dataclass
class RAGContext:
    """Everything retrieved for one query, ready to hand to the agent."""

    query: str
    contexts: list[RetrievedContext] = field(default_factory=list)
    formatted_context: str = ""
    total_chunks: int = 0
    avg_similarity: float = 0.0
    retrieval_time_ms: float = 0.0


@dataclass
class PerformanceReport:
    """Outcome of running the retrieval latency diagnostic."""

    avg_retrieval_time_ms: float
    meets_requirement: bool
    sample_size: int
    times_ms: list[float] = field(default_factory=list)
