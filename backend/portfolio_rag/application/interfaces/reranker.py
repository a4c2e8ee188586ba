"""Abstract interface (port) for re-ranking similarity search candidates."""

from abc import ABC, abstractmethod

from portfolio_rag.domain.entities import SearchResult


class Reranker(ABC):
    """Scores candidates for a query; higher scores rank first."""

    @abstractmethod
    def score(self, result: SearchResult, query: str) -> float:
        """Relevance score of one candidate for ``query``."""
        ...

    def rerank(self, results: list[SearchResult], query: str) -> list[SearchResult]:
        """Return ``results`` sorted by descending score.

        The sort is stable, so equal scores keep the store's order.
        """
        scored = [(self.score(result, query), result) for result in results]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [result for _, result in scored]
