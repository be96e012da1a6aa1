"""Environment-driven configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemas.config import AstraStoreConfig, InMemoryStoreConfig, parse_vector_store_config


class Settings(BaseSettings):
    """All configuration comes from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- LLM ---
    llm_provider: Literal["openai", "anthropic", "dummy"] = "openai"
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.0
    llm_max_tokens: int = 1024
    llm_max_attempts: int = Field(default=1, ge=1)

    # --- Embeddings ---
    embedding_provider: Literal["openai", "local"] = "openai"
    openai_embedding_model_name: str = "text-embedding-3-small"
    embedding_dimensions: int | None = None

    # --- Vector store ---
    vector_store_provider: Literal["in-memory", "datastax_astra"] = "in-memory"
    astra_db_application_token: str = ""
    astra_db_api_endpoint: str = ""
    astra_db_collection: str = ""
    astra_db_namespace: str = "default_keyspace"
    astra_db_embedding_dimension: int = 1536

    # --- Retrieval ---
    retriever_top_k: int = 5
    retriever_similarity_threshold: float = 0.7
    prompt_version: str = "v1"
    rag_data_dir: str = "rag_data"

    # --- Observability ---
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @property
    def is_offline(self) -> bool:
        """True when no hosted model can be used."""
        return self.llm_provider == "dummy" or not (self.openai_api_key or self.anthropic_api_key)

    def vector_store_config(self) -> InMemoryStoreConfig | AstraStoreConfig:
        """Build the store config variant selected by ``vector_store_provider``."""
        if self.vector_store_provider == "in-memory":
            return parse_vector_store_config({"provider": "in-memory"})
        return parse_vector_store_config({
            "provider": "datastax_astra",
            "token": self.astra_db_application_token,
            "endpoint": self.astra_db_api_endpoint,
            "collection_name": self.astra_db_collection,
            "keyspace": self.astra_db_namespace,
            "embedding_dimension": self.astra_db_embedding_dimension,
        })


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
