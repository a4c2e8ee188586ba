from .vector_store import PgVectorStore

__all__ = [
    "PgVectorStore",
]
