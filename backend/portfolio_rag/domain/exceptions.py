"""Domain-specific exceptions — framework-independent."""


class RAGError(Exception):
    """Base class for failures raised by the retrieval subsystem."""


class EmbeddingError(RAGError):
    """Raised when the embedding provider rejects a request or is unreachable."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class VectorStoreError(RAGError):
    """Raised when the vector store cannot complete an operation.

    The message is prefixed with the failing operation, e.g.
    ``"Vector search failed: <driver error>"``.
    """

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation}: {detail}")


class RetrievalError(RAGError):
    """Raised when context retrieval aborts at any stage."""
