"""Keyword-boosted re-ranking of similarity search candidates."""

import json

from portfolio_rag.application.interfaces.reranker import Reranker
from portfolio_rag.domain.entities import SearchResult, SourceType

# ── Re-ranking score weights ────────────────────────────────────────
SIMILARITY_MULTIPLIER = 10.0
KEYWORD_BOOST_WEIGHT = 0.5    # per query term found in the chunk content
METADATA_BOOST_WEIGHT = 0.3   # per query term found in the serialized metadata
PROJECT_TYPE_BOOST = 0.2      # projects answer most portfolio questions


class KeywordBoostReranker(Reranker):
    """Linear scorer: scaled similarity plus literal keyword and source-type boosts."""

    def score(self, result: SearchResult, query: str) -> float:
        terms = query.lower().split()
        score = result.similarity * SIMILARITY_MULTIPLIER

        content = result.chunk.content.lower()
        score += sum(1 for term in terms if term in content) * KEYWORD_BOOST_WEIGHT

        if result.chunk.metadata:
            metadata = json.dumps(
                result.chunk.metadata, separators=(",", ":"), ensure_ascii=False, default=str
            ).lower()
            score += sum(1 for term in terms if term in metadata) * METADATA_BOOST_WEIGHT

        if result.chunk.source_type == SourceType.PROJECT.value:
            score += PROJECT_TYPE_BOOST

        return score
