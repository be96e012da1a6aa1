"""Builds the pipeline's collaborators from Settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from config.settings import Settings, get_settings
from observability.logger import get_logger
from pipeline.rag import RAGPipeline
from providers.dummy_llm import DummyLLM
from providers.local_embeddings import LocalEmbeddings
from providers.store_factory import create_vector_store

if TYPE_CHECKING:
    from protocols.data_source import DocumentSource
    from protocols.embeddings import EmbeddingProvider
    from protocols.llm import Generator

log = get_logger(__name__)


def build_embedder(settings: Settings) -> EmbeddingProvider:
    """Local hashing embeddings only when asked for; OpenAI without a key is a ConfigurationError."""
    if settings.embedding_provider == "local":
        return LocalEmbeddings(dim=settings.embedding_dimensions or 256)

    from providers.openai_embeddings import OpenAIEmbeddings

    return OpenAIEmbeddings(
        api_key=settings.openai_api_key,
        model=settings.openai_embedding_model_name,
        dimensions=settings.embedding_dimensions,
        max_attempts=settings.llm_max_attempts,
    )


def build_generator(settings: Settings) -> Generator:
    """Pick the generator; missing credentials for the chosen provider are a ConfigurationError."""
    if settings.llm_provider == "dummy":
        return DummyLLM()

    if settings.llm_provider == "anthropic":
        from providers.anthropic_llm import AnthropicLLM

        return AnthropicLLM(
            api_key=settings.anthropic_api_key,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            max_attempts=settings.llm_max_attempts,
        )

    from providers.openai_llm import OpenAILLM

    return OpenAILLM(
        api_key=settings.openai_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        max_attempts=settings.llm_max_attempts,
    )


def build_pipeline(
    settings: Settings | None = None,
    *,
    data_loader: DocumentSource | None = None,
    embedder: EmbeddingProvider | None = None,
    generator: Generator | None = None,
) -> RAGPipeline:
    """Wire embedder, vector store, generator and pipeline from settings."""
    settings = settings or get_settings()
    embedder = embedder or build_embedder(settings)
    generator = generator or build_generator(settings)
    store = create_vector_store(settings.vector_store_config(), embedder)

    log.info(
        "rag.factory.built",
        store=settings.vector_store_provider,
        embedder=embedder.name,
        generator=getattr(generator, "provider_name", "unknown"),
    )
    return RAGPipeline(
        vector_store=store,
        embedder=embedder,
        generator=generator,
        data_loader=data_loader,
        retriever_top_k=settings.retriever_top_k,
        retriever_similarity_threshold=settings.retriever_similarity_threshold,
        prompt_version=settings.prompt_version,
    )
