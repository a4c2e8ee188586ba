"""OpenAI-compatible infrastructure package."""

from .openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
