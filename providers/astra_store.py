"""DataStax Astra DB vector store: inserts and searches through the Data API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from astrapy import DataAPIClient
from astrapy.constants import VectorMetric
from astrapy.info import CollectionDefinition

from observability.logger import get_logger
from protocols.errors import ConfigurationError, StorageError
from providers.store_common import embed_missing
from schemas.config import AstraStoreConfig
from schemas.documents import Document

if TYPE_CHECKING:
    from protocols.embeddings import EmbeddingProvider

log = get_logger(__name__)

# Reserved Data API field names
VECTOR_FIELD = "$vector"
SIMILARITY_FIELD = "$similarity"
TEXT_FIELD = "text"


def to_astra_record(doc: Document) -> dict[str, Any]:
    record: dict[str, Any] = {
        "_id": doc.id,
        TEXT_FIELD: doc.content,
        VECTOR_FIELD: doc.embedding,
    }
    if doc.metadata:
        record["metadata"] = doc.metadata
    return record


def from_astra_record(record: dict[str, Any]) -> Document:
    return Document(
        id=str(record.get("_id", "")),
        content=record.get(TEXT_FIELD) or "",
        metadata=record.get("metadata") or {},
        embedding=record.get(VECTOR_FIELD),
        similarity=record.get(SIMILARITY_FIELD),
    )


class AstraVectorStore:
    """Astra DB collection with a vector index. Implements VectorStore protocol.

    Similarity is whatever the collection's metric reports; for ``cosine`` Astra
    already maps it to [0, 1].
    """

    provider: str = "datastax_astra"

    def __init__(
        self,
        config: AstraStoreConfig,
        embedder: EmbeddingProvider,
        *,
        collection: Any | None = None,
    ) -> None:
        if embedder.dimensions is not None and embedder.dimensions != config.embedding_dimension:
            raise ConfigurationError(
                f"Embedder '{embedder.name}' produces {embedder.dimensions}-dim vectors, "
                f"collection '{config.collection_name}' is configured for {config.embedding_dimension}"
            )

        self.config = config
        self.embedder = embedder
        self._database: Any | None = None

        if collection is not None:
            self._collection = collection
        else:
            try:
                client = DataAPIClient(token=config.token)
                self._database = client.get_async_database(
                    config.endpoint, keyspace=config.keyspace,
                )
                self._collection = self._database.get_collection(config.collection_name)
            except Exception as e:
                raise ConfigurationError(f"Astra DB client initialization failed: {e}") from e

        log.info(
            "store.astra.init",
            collection=config.collection_name,
            keyspace=config.keyspace,
            dimension=config.embedding_dimension,
        )

    async def ensure_collection(self) -> None:
        """Create the collection with the configured dimension (cosine metric) if missing."""
        if self._database is None:
            return
        definition = (
            CollectionDefinition.builder()
            .set_vector_dimension(self.config.embedding_dimension)
            .set_vector_metric(VectorMetric.COSINE)
            .build()
        )
        try:
            self._collection = await self._database.create_collection(
                self.config.collection_name, definition=definition,
            )
            log.info("store.astra.collection_ready", collection=self.config.collection_name)
        except Exception as e:
            if "already exists" in str(e).lower():
                log.info("store.astra.collection_exists", collection=self.config.collection_name)
                return
            raise StorageError(
                f"Could not create collection '{self.config.collection_name}': {e}"
            ) from e

    async def add_documents(self, documents: list[Document]) -> None:
        if not documents:
            return

        storable = await embed_missing(documents, self.embedder)
        if not storable:
            log.info("store.astra.insert.empty", received=len(documents))
            return

        records = [to_astra_record(doc) for doc in storable]
        try:
            result = await self._collection.insert_many(records)
        except Exception as e:
            raise StorageError(f"Astra DB insert_many of {len(records)} documents failed: {e}") from e

        log.info(
            "store.astra.insert",
            received=len(documents),
            inserted=len(getattr(result, "inserted_ids", records)),
        )

    async def similarity_search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
    ) -> list[Document]:
        try:
            cursor = self._collection.find(
                {},
                sort={VECTOR_FIELD: query_embedding},
                limit=top_k,
                include_similarity=True,
            )
            results = [from_astra_record(record) async for record in cursor]
        except Exception as e:
            raise StorageError(f"Astra DB similarity search failed: {e}") from e

        log.info(
            "store.astra.search",
            top_k=top_k,
            returned=len(results),
            doc_ids=[doc.id for doc in results],
        )
        return results

    async def delete_documents(self, doc_ids: list[str]) -> int:
        if not doc_ids:
            return 0
        try:
            result = await self._collection.delete_many({"_id": {"$in": list(doc_ids)}})
        except Exception as e:
            raise StorageError(f"Astra DB delete failed: {e}") from e
        removed = int(getattr(result, "deleted_count", 0) or 0)
        log.info("store.astra.delete", requested=len(doc_ids), removed=removed)
        return removed

    async def count(self) -> int:
        try:
            return int(await self._collection.estimated_document_count())
        except Exception as e:
            raise StorageError(f"Astra DB count failed: {e}") from e
