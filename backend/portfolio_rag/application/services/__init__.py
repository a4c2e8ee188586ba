from .chunking import TextChunker, chunk_text, estimate_token_count, format_content_for_indexing
from .context_formatter import format_context, format_metadata, format_prompt_with_context
from .embedding_service import EmbeddingService
from .reranking import KeywordBoostReranker
from .retrieval_service import RetrievalService
from .search_context_tool import SEARCH_CONTEXT_TOOL, search_context

__all__ = [
    "TextChunker",
    "chunk_text",
    "estimate_token_count",
    "format_content_for_indexing",
    "format_context",
    "format_metadata",
    "format_prompt_with_context",
    "EmbeddingService",
    "KeywordBoostReranker",
    "RetrievalService",
    "SEARCH_CONTEXT_TOOL",
    "search_context",
]
