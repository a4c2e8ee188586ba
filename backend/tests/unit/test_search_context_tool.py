"""Unit tests for the searchContext agent tool."""

import pytest

from portfolio_rag.application.services import SEARCH_CONTEXT_TOOL, search_context
from portfolio_rag.domain.entities import RAGContext, RetrievalOptions, RetrievedContext
from portfolio_rag.domain.exceptions import RetrievalError


# ── Fakes ──


class FakeRetrievalService:
    def __init__(self, contexts: list[RetrievedContext] | None = None, fail: bool = False):
        self.calls: list[tuple[str, RetrievalOptions]] = []
        self._contexts = contexts or []
        self._fail = fail

    async def retrieve_context(self, query: str, options: RetrievalOptions) -> RAGContext:
        self.calls.append((query, options))
        if self._fail:
            raise RetrievalError("Context retrieval failed: Vector search failed: timeout")
        return RAGContext(
            query=query,
            contexts=self._contexts,
            formatted_context="ignored",
            total_chunks=len(self._contexts),
            avg_similarity=0.8 if self._contexts else 0.0,
            retrieval_time_ms=12.5,
        )


def _context(source_id: str) -> RetrievedContext:
    return RetrievedContext(
        content=f"About {source_id}",
        source_type="project",
        source_id=source_id,
        similarity=0.8,
        chunk_index=0,
        metadata={"title": source_id},
    )


# ── Tests ──


def test_tool_definition_requires_query():
    schema = SEARCH_CONTEXT_TOOL["input_schema"]

    assert SEARCH_CONTEXT_TOOL["name"] == "searchContext"
    assert schema["required"] == ["query"]
    assert schema["properties"]["source_type"]["enum"] == ["project", "blog", "skill", "experience"]


@pytest.mark.asyncio
async def test_search_context_returns_hits():
    service = FakeRetrievalService([_context("p1"), _context("p2")])

    output = await search_context(
        service, {"query": "react", "top_k": 3, "source_type": "project", "category": "web"}
    )

    assert output["success"] is True
    assert output["query"] == "react"
    assert output["total_results"] == 2
    assert output["avg_similarity"] == pytest.approx(0.8)
    assert output["retrieval_time_ms"] == pytest.approx(12.5)
    assert output["error"] is None
    assert output["results"][0] == {
        "content": "About p1",
        "source": {"type": "project", "id": "p1"},
        "similarity": 0.8,
        "metadata": {"title": "p1"},
    }

    query, options = service.calls[0]
    assert query == "react"
    assert options == RetrievalOptions(
        top_k=3,
        source_type="project",
        category="web",
        min_similarity=0.5,
        include_metadata=True,
    )


@pytest.mark.asyncio
async def test_search_context_defaults_top_k():
    service = FakeRetrievalService()

    output = await search_context(service, {"query": "anything"})

    assert output["success"] is True
    assert output["results"] == []
    assert service.calls[0][1].top_k == 5
    assert service.calls[0][1].source_type is None


@pytest.mark.asyncio
async def test_search_context_rejects_empty_query():
    service = FakeRetrievalService()

    output = await search_context(service, {"query": ""})

    assert output["success"] is False
    assert "Invalid search arguments" in output["error"]
    assert service.calls == []


@pytest.mark.asyncio
async def test_search_context_rejects_unknown_source_type():
    output = await search_context(FakeRetrievalService(), {"query": "q", "source_type": "podcast"})

    assert output["success"] is False


@pytest.mark.asyncio
async def test_search_context_reports_retrieval_failure():
    output = await search_context(FakeRetrievalService(fail=True), {"query": "q"})

    assert output["success"] is False
    assert output["query"] == "q"
    assert output["results"] == []
    assert "Context retrieval failed" in output["error"]
