"""Domain entities for content chunks — text fragments with vector embeddings."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class SourceType(str, Enum):
    """Kind of portfolio entity a chunk was derived from."""

    PROJECT = "project"
    BLOG = "blog"
    SKILL = "skill"
    EXPERIENCE = "experience"


@dataclass
class TextChunk:
    """A bounded slice of text produced by the chunker.

    ``start_position`` / ``end_position`` are character offsets into the
    text that was chunked, so ``text[start_position:end_position] == content``.
    """

    content: str
    index: int
    token_count: int
    start_position: int
    end_position: int


@dataclass
class ChunkWithEmbedding(TextChunk):
    """A TextChunk with its embedding vector attached."""

    embedding: list[float] = field(default_factory=list)


@dataclass
class EmbeddingResult:
    """One embedding vector plus the tokens it consumed."""

    embedding: list[float]
    token_count: int


@dataclass
class EmbeddingBatch:
    """Raw response of a provider call: one vector per input, in input order."""

    embeddings: list[list[float]]
    total_tokens: int
    model: str = ""


@dataclass
class ContentChunk:
    """A persisted chunk of portfolio content, suitable for vector search.

    A source ``(source_type, source_id)`` owns a contiguous, zero-based run
    of chunk indexes. The whole run is replaced when the source is re-indexed.
    """

    content: str
    source_type: str
    source_id: str
    chunk_index: int
    token_count: int
    category: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    embedding: list[float] = field(default_factory=list)
    id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SearchResult:
    """A single result from a vector similarity search."""

    chunk: ContentChunk
    similarity: float  # 1 - cosine distance
    distance: float


@dataclass
class SearchFilters:
    """Optional equality filters for similarity search, AND-combined."""

    source_type: str | None = None
    category: str | None = None
    source_id: str | None = None


@dataclass
class VectorStoreStats:
    """Chunk counts for the whole store."""

    total_chunks: int = 0
    chunks_by_type: dict[str, int] = field(default_factory=dict)
    chunks_by_category: dict[str, int] = field(default_factory=dict)
