"""Tests for the retriever: threshold filtering, degradation and context formatting."""

from __future__ import annotations

import numpy as np
import pytest

from pipeline.retriever import CONTEXT_SEPARATOR, Retriever, format_context, is_relevant
from protocols.errors import ConfigurationError, StorageError
from schemas.config import RetrieverConfig
from schemas.documents import Document
from tests.fakes import ScriptedEmbeddings


class FixedStore:
    """Store stub returning canned results in the given order."""

    def __init__(self, results: list[Document] | None = None, error: Exception | None = None) -> None:
        self.results = results or []
        self.error = error
        self.searches: list[tuple[list[float], int]] = []

    async def add_documents(self, documents: list[Document]) -> None:
        return None

    async def similarity_search(self, query_embedding: list[float], top_k: int = 5) -> list[Document]:
        self.searches.append((query_embedding, top_k))
        if self.error is not None:
            raise self.error
        return self.results[:top_k]

    async def delete_documents(self, doc_ids: list[str]) -> int:
        return 0

    async def count(self) -> int:
        return len(self.results)


def _retriever(store, threshold: float = 0.7, top_k: int = 5) -> Retriever:
    embedder = ScriptedEmbeddings({"q": [1.0, 0.0, 0.0]})
    return Retriever(store, embedder, RetrieverConfig(top_k=top_k, similarity_threshold=threshold))


def test_defaults():
    config = RetrieverConfig()
    assert config.top_k == 5
    assert config.similarity_threshold == 0.7


def test_build_treats_none_as_default_and_zero_as_value():
    assert RetrieverConfig.build().similarity_threshold == 0.7
    assert RetrieverConfig.build(similarity_threshold=0.0).similarity_threshold == 0.0


@pytest.mark.parametrize("top_k,threshold", [(0, 0.5), (3, -0.1), (3, 1.5)])
def test_invalid_config(top_k, threshold):
    with pytest.raises(ConfigurationError):
        RetrieverConfig.build(top_k=top_k, similarity_threshold=threshold)


def test_is_relevant_inclusive_bound():
    assert is_relevant(Document(id="x", similarity=0.7), 0.7)
    assert not is_relevant(Document(id="x", similarity=0.6999), 0.7)
    assert is_relevant(Document(id="x"), 0.99)


async def test_threshold_filters_and_keeps_order():
    store = FixedStore([
        Document(id="hi", content="hi", similarity=0.95),
        Document(id="edge", content="edge", similarity=0.7),
        Document(id="low", content="low", similarity=0.69),
        Document(id="neg", content="neg", similarity=-0.3),
    ])

    results = await _retriever(store, threshold=0.7).retrieve("q")

    assert [d.id for d in results] == ["hi", "edge"]


@pytest.mark.parametrize("threshold", [0.0, 0.25, 0.5, 0.75, 1.0])
async def test_never_returns_below_threshold(threshold):
    store = FixedStore([
        Document(id=str(i), content=str(i), similarity=s)
        for i, s in enumerate([1.0, 0.8, 0.5, 0.3, 0.0, -0.5])
    ])

    results = await _retriever(store, threshold=threshold, top_k=10).retrieve("q")

    assert all(d.similarity is None or d.similarity >= threshold for d in results)


async def test_unscored_documents_pass_through():
    store = FixedStore([Document(id="plain", content="no score")])

    results = await _retriever(store, threshold=0.99).retrieve("q")

    assert [d.id for d in results] == ["plain"]


async def test_passes_top_k_to_store():
    store = FixedStore()
    await _retriever(store, top_k=3).retrieve("q")
    assert store.searches == [([1.0, 0.0, 0.0], 3)]


async def test_embedding_failure_degrades_to_empty():
    store = FixedStore([Document(id="x", content="x", similarity=1.0)])
    retriever = _retriever(store)
    retriever.embedder.fail_with = RuntimeError("auth failed")

    assert await retriever.retrieve("q") == []
    assert store.searches == []


async def test_empty_embedding_degrades_to_empty():
    class EmptyEmbeddings(ScriptedEmbeddings):
        async def generate_embeddings(self, texts):
            return []

    store = FixedStore([Document(id="x", content="x", similarity=1.0)])
    retriever = Retriever(store, EmptyEmbeddings({}))

    assert await retriever.retrieve("q") == []


async def test_numpy_rows_from_embedder_are_accepted():
    class ArrayEmbeddings(ScriptedEmbeddings):
        async def generate_embeddings(self, texts):
            return np.array([[0.0, 1.0, 0.0]])

    store = FixedStore([Document(id="x", content="x", similarity=0.9)])
    retriever = Retriever(store, ArrayEmbeddings({}))

    assert [d.id for d in await retriever.retrieve("q")] == ["x"]
    assert store.searches == [([0.0, 1.0, 0.0], 5)]
    assert all(type(v) is float for v in store.searches[0][0])


async def test_empty_numpy_row_degrades_to_empty():
    class EmptyRowEmbeddings(ScriptedEmbeddings):
        async def generate_embeddings(self, texts):
            return np.zeros((1, 0))

    retriever = Retriever(FixedStore([Document(id="x", content="x", similarity=0.9)]), EmptyRowEmbeddings({}))

    assert await retriever.retrieve("q") == []


async def test_storage_error_propagates():
    store = FixedStore(error=StorageError("backend unreachable"))

    with pytest.raises(StorageError):
        await _retriever(store).retrieve("q")


async def test_topic_scenario_returns_only_b(topic_store, scripted_embedder, topic_documents):
    await topic_store.add_documents(topic_documents)
    retriever = Retriever(
        topic_store, scripted_embedder, RetrieverConfig(top_k=3, similarity_threshold=0.5),
    )

    results = await retriever.retrieve("what are the engine rules?")

    assert [d.id for d in results] == ["b"]
    assert results[0].similarity >= 0.5


def test_format_context_empty():
    assert format_context([]) == ""


def test_format_context_separator():
    docs = [Document(id="1", content="a"), Document(id="2", content="b")]
    assert format_context(docs) == "a\n\n---\n\nb"
    assert CONTEXT_SEPARATOR == "\n\n---\n\n"


def test_format_context_no_dedup():
    docs = [Document(id="1", content="same"), Document(id="2", content="same")]
    assert format_context(docs) == "same" + CONTEXT_SEPARATOR + "same"
