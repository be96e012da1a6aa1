"""Tests for the Astra DB store against an in-process fake collection."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from protocols.errors import ConfigurationError, EmbeddingError, StorageError
from protocols.vector_store import VectorStore
from providers.astra_store import AstraVectorStore, from_astra_record, to_astra_record
from providers.local_embeddings import LocalEmbeddings
from schemas.config import AstraStoreConfig
from schemas.documents import Document
from tests.fakes import ScriptedEmbeddings


class FakeCollection:
    """Minimal async stand-in for an astrapy collection."""

    def __init__(self, hits: list[dict] | None = None) -> None:
        self.hits = hits or []
        self.inserted: list[dict] = []
        self.find_calls: list[dict] = []
        self.deleted_filters: list[dict] = []
        self.error: Exception | None = None

    async def insert_many(self, records):
        if self.error is not None:
            raise self.error
        self.inserted.extend(records)
        return SimpleNamespace(inserted_ids=[r["_id"] for r in records])

    def find(self, filter, *, sort, limit, include_similarity):
        if self.error is not None:
            raise self.error
        self.find_calls.append(
            {"filter": filter, "sort": sort, "limit": limit, "include_similarity": include_similarity}
        )
        return self._cursor(self.hits[:limit])

    async def _cursor(self, records):
        for record in records:
            yield record

    async def delete_many(self, filter):
        if self.error is not None:
            raise self.error
        self.deleted_filters.append(filter)
        return SimpleNamespace(deleted_count=len(filter["_id"]["$in"]))

    async def estimated_document_count(self):
        if self.error is not None:
            raise self.error
        return len(self.inserted)


@pytest.fixture
def astra_config() -> AstraStoreConfig:
    return AstraStoreConfig(
        token="AstraCS:test",
        endpoint="https://db-id-region.apps.astra.datastax.com",
        collection_name="f1_docs",
        keyspace="default_keyspace",
        embedding_dimension=3,
    )


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def astra_store(astra_config, collection) -> AstraVectorStore:
    embedder = ScriptedEmbeddings({"engine": [0.0, 1.0, 0.0]})
    return AstraVectorStore(astra_config, embedder, collection=collection)


def test_record_shape():
    doc = Document(id="d1", content="engine", metadata={"type": "rules"}, embedding=[0.1, 0.2, 0.3])

    record = to_astra_record(doc)

    assert record == {
        "_id": "d1",
        "text": "engine",
        "$vector": [0.1, 0.2, 0.3],
        "metadata": {"type": "rules"},
    }


def test_record_without_metadata_omits_field():
    record = to_astra_record(Document(id="d1", content="x", embedding=[1.0]))
    assert "metadata" not in record


def test_from_record_maps_similarity():
    doc = from_astra_record({"_id": "d1", "text": "engine", "$similarity": 0.93})

    assert doc.id == "d1"
    assert doc.content == "engine"
    assert doc.similarity == 0.93
    assert doc.metadata == {}


def test_satisfies_protocol(astra_store):
    assert isinstance(astra_store, VectorStore)


def test_dimension_mismatch_rejected(astra_config, collection):
    with pytest.raises(ConfigurationError, match="64-dim"):
        AstraVectorStore(astra_config, LocalEmbeddings(dim=64), collection=collection)


async def test_add_embeds_missing_and_skips_empty(astra_store, collection):
    docs = [
        Document(id="a", content="engine"),
        Document(id="b", content="", embedding=[1.0, 0.0, 0.0]),
        Document(id="c", content=""),
    ]

    await astra_store.add_documents(docs)

    assert [r["_id"] for r in collection.inserted] == ["a", "b"]
    assert collection.inserted[0]["$vector"] == [0.0, 1.0, 0.0]
    assert astra_store.embedder.calls == [["engine"]]


async def test_add_nothing_storable_makes_no_insert(astra_store, collection):
    await astra_store.add_documents([Document(id="x", content="")])
    await astra_store.add_documents([])
    assert collection.inserted == []


async def test_add_embedding_failure_raises(astra_store, collection):
    astra_store.embedder.fail_with = RuntimeError("quota")

    with pytest.raises(EmbeddingError):
        await astra_store.add_documents([Document(id="a", content="engine")])

    assert collection.inserted == []


async def test_insert_failure_is_storage_error(astra_store, collection):
    collection.error = RuntimeError("timeout")

    with pytest.raises(StorageError, match="timeout"):
        await astra_store.add_documents([Document(id="a", content="x", embedding=[1.0, 0.0, 0.0])])


async def test_search_sorts_by_vector_and_reports_similarity(astra_config):
    hits = [
        {"_id": "a", "text": "first", "metadata": {"k": 1}, "$similarity": 0.95},
        {"_id": "b", "text": "second", "$similarity": 0.81},
        {"_id": "c", "text": "third", "$similarity": 0.60},
    ]
    collection = FakeCollection(hits)
    store = AstraVectorStore(astra_config, ScriptedEmbeddings({}), collection=collection)

    results = await store.similarity_search([0.1, 0.2, 0.3], top_k=2)

    assert [(d.id, d.similarity) for d in results] == [("a", 0.95), ("b", 0.81)]
    assert results[0].metadata == {"k": 1}
    assert collection.find_calls == [
        {"filter": {}, "sort": {"$vector": [0.1, 0.2, 0.3]}, "limit": 2, "include_similarity": True}
    ]


async def test_search_failure_is_storage_error(astra_store, collection):
    collection.error = RuntimeError("unreachable")

    with pytest.raises(StorageError, match="unreachable"):
        await astra_store.similarity_search([0.0, 0.0, 1.0])


async def test_delete_and_count(astra_store, collection):
    await astra_store.add_documents([Document(id="a", content="x", embedding=[1.0, 0.0, 0.0])])

    assert await astra_store.count() == 1
    assert await astra_store.delete_documents(["a", "zzz"]) == 2
    assert collection.deleted_filters == [{"_id": {"$in": ["a", "zzz"]}}]
    assert await astra_store.delete_documents([]) == 0


async def test_ensure_collection_noop_with_injected_collection(astra_store):
    await astra_store.ensure_collection()
