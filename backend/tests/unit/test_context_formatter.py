"""Unit tests for context and prompt formatting."""

from portfolio_rag.application.services import (
    format_context,
    format_metadata,
    format_prompt_with_context,
)
from portfolio_rag.domain.entities import RAGContext, RetrievedContext


def _context(content: str, similarity: float = 0.876, metadata: dict | None = None) -> RetrievedContext:
    return RetrievedContext(
        content=content,
        source_type="project",
        source_id="p1",
        similarity=similarity,
        chunk_index=0,
        metadata=metadata,
    )


def test_no_contexts_yields_fixed_message():
    assert format_context([]) == "No relevant context found."


def test_single_context_without_metadata():
    text = format_context([_context("Built a chat agent.")])

    assert text == (
        "Relevant information from portfolio:\n\n"
        "[Context 1] (project, similarity: 0.88)\n"
        "Built a chat agent."
    )


def test_sections_are_numbered_and_separated():
    contexts = [_context(f"Chunk {i}.") for i in range(3)]

    text = format_context(contexts)

    assert text.count("[Context ") == 3
    assert text.count("\n\n---\n\n") == 2
    assert "[Context 3]" in text


def test_metadata_line_follows_content():
    ctx = _context(
        "Dashboard for metrics.",
        similarity=0.5,
        metadata={
            "category": "frontend",
            "tags": ["charts"],
            "title": "Metrics UI",
            "technologies": ["React", "D3"],
        },
    )

    text = format_context([ctx])

    assert text.endswith(
        "Dashboard for metrics.\n"
        "Metadata: Title: Metrics UI, Technologies: React, D3, Tags: charts, Category: frontend"
    )


def test_metadata_without_known_fields_adds_no_line():
    text = format_context([_context("Plain.", metadata={"year": 2024})])

    assert "Metadata:" not in text


def test_format_metadata_skips_absent_fields():
    assert format_metadata({"title": "Only Title"}) == "Title: Only Title"
    assert format_metadata({"tags": ["a", "b"], "category": "x"}) == "Tags: a, b, Category: x"
    assert format_metadata({}) == ""


def test_prompt_wraps_user_question_with_context():
    rag_context = RAGContext(query="q", formatted_context="No relevant context found.")

    prompt = format_prompt_with_context("What stack do you use?", rag_context)

    assert prompt.startswith("No relevant context found.\n\n---\n\nUser question: What stack do you use?\n\n")
    assert "general knowledge" in prompt
