"""OpenAI-compatible embedding provider — calls the /embeddings endpoint.

Default model: text-embedding-3-small (1536 dimensions). Any service that
speaks the same wire format (Azure OpenAI proxies, OpenRouter, local
gateways) works by pointing ``base_url`` at it.
"""

import logging
from typing import Any

import httpx

from portfolio_rag.application.interfaces.embedding_provider import EmbeddingProvider
from portfolio_rag.domain.entities import EmbeddingBatch
from portfolio_rag.domain.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter — generates embeddings via the OpenAI /embeddings API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "text-embedding-3-small",
        model_dimensions: int = 1536,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._dimensions = model_dimensions
        self._timeout = timeout
        self._http_client = http_client

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def generate_embeddings(self, texts: list[str]) -> EmbeddingBatch:
        """Generate embeddings for a batch of texts in one request."""
        if not texts:
            return EmbeddingBatch(embeddings=[], total_tokens=0, model=self._model)

        if not self._api_key:
            raise EmbeddingError("OPENAI_API_KEY is not configured")

        url = f"{self._base_url}/embeddings"
        payload: dict[str, Any] = {
            "model": self._model,
            "input": texts,
            "dimensions": self._dimensions,
        }

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.post(
                    url, headers=self._get_headers(), json=payload
                )
            except httpx.HTTPError as exc:
                logger.error("Embedding API unreachable: %s", exc)
                raise EmbeddingError(f"Embedding API request failed: {exc}") from exc

            if response.status_code != 200:
                error_text = response.text[:500]
                logger.error(
                    "Embedding API error %d: %s", response.status_code, error_text
                )
                raise EmbeddingError(
                    f"Embedding API returned {response.status_code}: {error_text}",
                    status_code=response.status_code,
                )

            try:
                data = response.json()
                embeddings_data = list(data["data"])
                if not all(isinstance(item, dict) for item in embeddings_data):
                    raise TypeError("embedding items must be objects")
                # Sort by index to ensure correct ordering
                embeddings_data.sort(key=lambda x: x.get("index", 0))
                result = [item["embedding"] for item in embeddings_data]
                usage = data.get("usage") or {}
                total_tokens = int(usage.get("total_tokens") or 0)
            except (ValueError, KeyError, TypeError, AttributeError) as exc:
                raise EmbeddingError(f"Malformed embedding response: {exc}") from exc

            logger.debug(
                "Generated %d embeddings (model=%s, dims=%d, tokens=%d)",
                len(result),
                data.get("model", self._model),
                len(result[0]) if result else 0,
                total_tokens,
            )
            return EmbeddingBatch(
                embeddings=result,
                total_tokens=total_tokens,
                model=data.get("model", self._model),
            )

        finally:
            if should_close:
                await client.aclose()
