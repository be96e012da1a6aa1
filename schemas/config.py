"""Configuration models for vector stores and retrieval."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from protocols.errors import ConfigurationError


class InMemoryStoreConfig(BaseModel):
    """Process-local store. Nothing to configure besides the tag."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["in-memory"] = "in-memory"


class AstraStoreConfig(BaseModel):
    """DataStax Astra DB collection with a vector index."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["datastax_astra"] = "datastax_astra"
    token: str = Field(min_length=1)
    endpoint: str = Field(min_length=1)
    collection_name: str = Field(min_length=1)
    keyspace: str = Field(min_length=1)
    embedding_dimension: int = Field(ge=1)


VectorStoreConfig = Annotated[
    Union[InMemoryStoreConfig, AstraStoreConfig],
    Field(discriminator="provider"),
]

_CONFIG_ADAPTER: TypeAdapter[VectorStoreConfig] = TypeAdapter(VectorStoreConfig)


def parse_vector_store_config(raw: Mapping[str, Any]) -> InMemoryStoreConfig | AstraStoreConfig:
    """Validate a raw mapping into one of the closed store config variants."""
    try:
        return _CONFIG_ADAPTER.validate_python(dict(raw))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid vector store config: {e}") from e


class RetrieverConfig(BaseModel):
    """Tunables shared by every retrieve() call."""

    model_config = ConfigDict(frozen=True)

    top_k: int = Field(default=5, ge=1)
    # Compared as-is against the backend's score; no rescaling of cosine's [-1, 1].
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)

    @classmethod
    def build(
        cls,
        top_k: int | None = None,
        similarity_threshold: float | None = None,
    ) -> RetrieverConfig:
        """Build from optional values, ``None`` meaning the default."""
        values: dict[str, Any] = {}
        if top_k is not None:
            values["top_k"] = top_k
        if similarity_threshold is not None:
            values["similarity_threshold"] = similarity_threshold
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid retriever config: {e}") from e
