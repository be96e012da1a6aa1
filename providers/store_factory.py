"""Closed-variant dispatch from a store config to its backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from observability.logger import get_logger
from protocols.errors import ConfigurationError
from schemas.config import AstraStoreConfig, InMemoryStoreConfig, parse_vector_store_config

if TYPE_CHECKING:
    from protocols.embeddings import EmbeddingProvider
    from protocols.vector_store import VectorStore

log = get_logger(__name__)


def create_vector_store(
    config: InMemoryStoreConfig | AstraStoreConfig | dict[str, Any],
    embedder: EmbeddingProvider,
) -> VectorStore:
    """Build the backend selected by ``config.provider``."""
    if isinstance(config, dict):
        config = parse_vector_store_config(config)

    log.info("store.create", provider=getattr(config, "provider", None))

    if isinstance(config, InMemoryStoreConfig):
        from providers.memory_store import InMemoryVectorStore

        return InMemoryVectorStore(embedder)

    if isinstance(config, AstraStoreConfig):
        from providers.astra_store import AstraVectorStore

        return AstraVectorStore(config, embedder)

    raise ConfigurationError(
        f"Unsupported vector store provider: {getattr(config, 'provider', config)!r}"
    )
