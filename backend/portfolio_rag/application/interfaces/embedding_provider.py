"""Abstract interface (port) for embedding generation."""

from abc import ABC, abstractmethod

from portfolio_rag.domain.entities import EmbeddingBatch


class EmbeddingProvider(ABC):
    """Port for generating text embeddings; implemented in the infrastructure layer."""

    @abstractmethod
    async def generate_embeddings(self, texts: list[str]) -> EmbeddingBatch:
        """Generate embedding vectors for a batch of texts in one round trip.

        Args:
            texts: List of text strings to embed.

        Returns:
            An EmbeddingBatch with one vector per input text, in input order,
            and the total token usage reported by the service.

        Raises:
            EmbeddingError: the service rejected the request or was unreachable.
        """
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the dimensionality of the embedding vectors produced by this provider."""
        ...
