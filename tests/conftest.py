"""Shared fixtures for tests: all using dummy/in-memory providers."""

from __future__ import annotations

import pytest

from pipeline.rag import RAGPipeline
from providers.dummy_llm import DummyLLM
from providers.local_embeddings import LocalEmbeddings
from providers.memory_store import InMemoryVectorStore
from schemas.documents import Document
from tests.fakes import CountingGenerator, ScriptedEmbeddings


# Unit vectors for the A/B/C topic scenario
TOPIC_VECTORS: dict[str, list[float]] = {
    "Topic A: tyre compounds": [1.0, 0.0, 0.0],
    "Topic B: engine regulations": [0.0, 1.0, 0.0],
    "Topic C: team budgets": [0.0, 0.0, 1.0],
    "what are the engine rules?": [0.2, 0.9, 0.1],
    "unrelated question": [-1.0, 0.0, 0.0],
}


@pytest.fixture
def dummy_llm() -> DummyLLM:
    return DummyLLM()


@pytest.fixture
def embedder() -> LocalEmbeddings:
    return LocalEmbeddings(dim=64)


@pytest.fixture
def vector_store(embedder) -> InMemoryVectorStore:
    return InMemoryVectorStore(embedder)


@pytest.fixture
def scripted_embedder() -> ScriptedEmbeddings:
    return ScriptedEmbeddings(dict(TOPIC_VECTORS))


@pytest.fixture
def topic_store(scripted_embedder) -> InMemoryVectorStore:
    return InMemoryVectorStore(scripted_embedder)


@pytest.fixture
def generator() -> CountingGenerator:
    return CountingGenerator()


@pytest.fixture
def topic_documents() -> list[Document]:
    return [
        Document(id="a", content="Topic A: tyre compounds", metadata={"topic": "A"}),
        Document(id="b", content="Topic B: engine regulations", metadata={"topic": "B"}),
        Document(id="c", content="Topic C: team budgets", metadata={"topic": "C"}),
    ]


@pytest.fixture
async def topic_pipeline(topic_store, scripted_embedder, generator, topic_documents) -> RAGPipeline:
    pipeline = RAGPipeline(
        vector_store=topic_store,
        embedder=scripted_embedder,
        generator=generator,
        retriever_top_k=3,
        retriever_similarity_threshold=0.5,
    )
    await pipeline.add_documents(topic_documents)
    return pipeline
