"""Sentence-aware text chunking with token-bounded overlap.

Text is split into sentences on terminal punctuation (``.``, ``!``, ``?``)
followed by whitespace. Sentences are packed greedily into chunks of at most
``chunk_size`` estimated tokens; each new chunk is seeded with the trailing
sentences of the previous one until ``overlap`` tokens are covered.
"""

import logging
import re

from portfolio_rag.application.interfaces.token_estimator import (
    CharacterTokenEstimator,
    TokenEstimator,
)
from portfolio_rag.domain.entities import TextChunk

logger = logging.getLogger(__name__)

# ── Chunking constants ──────────────────────────────────────────────
DEFAULT_CHUNK_SIZE = 500  # tokens
DEFAULT_CHUNK_OVERLAP = 50  # tokens

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
_default_estimator = CharacterTokenEstimator()

# (start, end, token_count) of one sentence inside the chunked text
_Sentence = tuple[int, int, int]


def estimate_token_count(text: str) -> int:
    """Approximate token count (~4 characters per token)."""
    return _default_estimator.estimate(text)


class TextChunker:
    """Splits text into overlapping, token-bounded chunks."""

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_CHUNK_OVERLAP,
        *,
        estimator: TokenEstimator | None = None,
    ):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0:
            raise ValueError(f"overlap must not be negative, got {overlap}")
        self._chunk_size = chunk_size
        self._overlap = overlap
        self._estimator = estimator or _default_estimator

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    @property
    def estimator(self) -> TokenEstimator:
        return self._estimator

    def chunk(self, text: str) -> list[TextChunk]:
        """Split ``text`` into chunks with contiguous zero-based indexes.

        A text that fits in one chunk comes back as a single chunk whose
        content is the input with leading and trailing whitespace removed;
        whitespace between sentences is kept. Offsets index the untrimmed
        input.
        """
        sentences = self._split_sentences(text)
        chunks: list[TextChunk] = []

        current: list[_Sentence] = []
        current_tokens = 0

        for sentence in sentences:
            sentence_tokens = sentence[2]

            if current_tokens + sentence_tokens > self._chunk_size and current:
                chunks.append(self._build_chunk(text, current, current_tokens, len(chunks)))
                current = self._overlap_tail(current)
                current_tokens = sum(s[2] for s in current)

            current.append(sentence)
            current_tokens += sentence_tokens

        if current:
            chunks.append(self._build_chunk(text, current, current_tokens, len(chunks)))

        if chunks:
            logger.debug(
                "Text chunked: length=%d chunks=%d avg_tokens=%.1f",
                len(text),
                len(chunks),
                sum(c.token_count for c in chunks) / len(chunks),
            )
        return chunks

    def _split_sentences(self, text: str) -> list[_Sentence]:
        """Locate sentence spans, dropping whitespace-only fragments."""
        spans: list[tuple[int, int]] = []
        start = 0
        for match in _SENTENCE_BOUNDARY.finditer(text):
            spans.append((start, match.start()))
            start = match.end()
        spans.append((start, len(text)))

        sentences: list[_Sentence] = []
        for span_start, span_end in spans:
            segment = text[span_start:span_end]
            stripped = segment.strip()
            if not stripped:
                continue
            lead = len(segment) - len(segment.lstrip())
            begin = span_start + lead
            end = begin + len(stripped)
            sentences.append((begin, end, self._estimator.estimate(stripped)))
        return sentences

    def _overlap_tail(self, sentences: list[_Sentence]) -> list[_Sentence]:
        """Trailing whole sentences covering at least ``overlap`` tokens."""
        tail: list[_Sentence] = []
        tail_tokens = 0
        for sentence in reversed(sentences):
            if tail_tokens >= self._overlap:
                break
            tail.insert(0, sentence)
            tail_tokens += sentence[2]
        return tail

    @staticmethod
    def _build_chunk(
        text: str, sentences: list[_Sentence], token_count: int, index: int
    ) -> TextChunk:
        start = sentences[0][0]
        end = sentences[-1][1]
        return TextChunk(
            content=text[start:end],
            index=index,
            token_count=token_count,
            start_position=start,
            end_position=end,
        )


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[TextChunk]:
    """Chunk ``text`` with the default character-based token estimator."""
    return TextChunker(chunk_size, overlap).chunk(text)


def format_content_for_indexing(
    title: str,
    content: str,
    additional_fields: dict[str, str | list[str]] | None = None,
) -> str:
    """Build the canonical text that gets chunked and embedded for a source.

    Titles and extra fields are written into the text itself so they are
    represented in embedding space, not only in stored metadata.

    >>> format_content_for_indexing("Gali", "A RAG engine.", {"Technologies": ["Python", "pgvector"]})
    'Title: Gali\\n\\nContent: A RAG engine.\\n\\nTechnologies: Python, pgvector'
    """
    parts = [f"Title: {title}", f"Content: {content}"]

    for key, value in (additional_fields or {}).items():
        if isinstance(value, (list, tuple)):
            parts.append(f"{key}: {', '.join(value)}")
        else:
            parts.append(f"{key}: {value}")

    return "\n\n".join(parts)
