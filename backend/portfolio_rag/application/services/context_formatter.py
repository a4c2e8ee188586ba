"""Rendering of retrieved chunks into prompt-ready text."""

from typing import Any

from portfolio_rag.domain.entities import RAGContext, RetrievedContext

NO_CONTEXT_MESSAGE = "No relevant context found."
CONTEXT_PREAMBLE = "Relevant information from portfolio:\n\n"
SECTION_SEPARATOR = "\n\n---\n\n"

_ANSWER_INSTRUCTION = (
    "Please answer the user's question using the relevant information provided above. "
    "If the context doesn't contain relevant information, use your general knowledge "
    "about the portfolio owner's work."
)


def format_context(contexts: list[RetrievedContext]) -> str:
    """Render contexts in rank order as numbered sections."""
    if not contexts:
        return NO_CONTEXT_MESSAGE

    sections = []
    for number, ctx in enumerate(contexts, start=1):
        parts = [
            f"[Context {number}] ({ctx.source_type}, similarity: {ctx.similarity:.2f})",
            ctx.content,
        ]
        if ctx.metadata:
            metadata_line = format_metadata(ctx.metadata)
            if metadata_line:
                parts.append(f"Metadata: {metadata_line}")
        sections.append("\n".join(parts))

    return CONTEXT_PREAMBLE + SECTION_SEPARATOR.join(sections)


def format_metadata(metadata: dict[str, Any]) -> str:
    """Title, technologies, tags and category, in that order, when present."""
    parts: list[str] = []

    if metadata.get("title"):
        parts.append(f"Title: {metadata['title']}")

    technologies = metadata.get("technologies")
    if isinstance(technologies, list):
        parts.append(f"Technologies: {', '.join(str(t) for t in technologies)}")

    tags = metadata.get("tags")
    if isinstance(tags, list):
        parts.append(f"Tags: {', '.join(str(t) for t in tags)}")

    if metadata.get("category"):
        parts.append(f"Category: {metadata['category']}")

    return ", ".join(parts)


def format_prompt_with_context(user_message: str, rag_context: RAGContext) -> str:
    """Wrap the user's message with retrieved context for the generation model."""
    return (
        f"{rag_context.formatted_context}\n\n"
        "---\n\n"
        f"User question: {user_message}\n\n"
        f"{_ANSWER_INSTRUCTION}"
    )
