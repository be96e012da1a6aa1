"""Embedding provider protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Any class that can produce vector embeddings from text.

    ``generate_embeddings`` returns one vector per input, in input order.
    It fails as a whole (``EmbeddingError``) and never returns partial results.
    An empty input returns ``[]`` without any remote call.
    """

    name: str
    dimensions: int | None

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]: ...
