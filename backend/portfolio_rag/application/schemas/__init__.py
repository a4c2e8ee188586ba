from .search_context import (
    ContextSearchHit,
    ContextSource,
    SearchContextInput,
    SearchContextOutput,
)

__all__ = [
    "ContextSearchHit",
    "ContextSource",
    "SearchContextInput",
    "SearchContextOutput",
]
