"""OpenAI embeddings provider."""

from __future__ import annotations

import time
from typing import Any

from openai import AsyncOpenAI

from observability.logger import get_logger
from protocols.errors import ConfigurationError, EmbeddingError
from providers.retry import retrying

log = get_logger(__name__)

_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddings:
    """OpenAI embedding models. Implements EmbeddingProvider protocol.

    Inputs are sent in request chunks of ``batch_size``; the whole call still
    succeeds or fails as one batch.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        *,
        dimensions: int | None = None,
        batch_size: int = 512,
        max_attempts: int = 1,
        client: Any | None = None,
    ) -> None:
        if not api_key and client is None:
            raise ConfigurationError("OpenAI API key is required for OpenAIEmbeddings.")
        self.name = model
        self.dimensions = dimensions or _MODEL_DIMENSIONS.get(model)
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self._client = client or AsyncOpenAI(api_key=api_key)

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        start = time.perf_counter()
        vectors: list[list[float]] = []
        try:
            for offset in range(0, len(texts), self.batch_size):
                chunk = texts[offset : offset + self.batch_size]
                vectors.extend(await self._embed_chunk(chunk))
        except Exception as e:
            log.warning("openai.embeddings.failed", model=self.name, count=len(texts), error=str(e))
            raise EmbeddingError(str(e)) from e

        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"OpenAI returned {len(vectors)} embeddings for {len(texts)} inputs"
            )

        log.info(
            "openai.embeddings.success",
            model=self.name,
            count=len(texts),
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return vectors

    async def _embed_chunk(self, chunk: list[str]) -> list[list[float]]:
        kwargs: dict[str, Any] = {"model": self.name, "input": chunk}
        if self.dimensions and self.dimensions != _MODEL_DIMENSIONS.get(self.name):
            kwargs["dimensions"] = self.dimensions

        async for attempt in retrying(self.max_attempts):
            with attempt:
                response = await self._client.embeddings.create(**kwargs)

        # Responses carry an index; don't assume they come back in order
        data = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in data]
