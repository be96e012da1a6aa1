"""In-memory vector store for RAG, ranked by exact cosine similarity with numpy."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import numpy as np

from observability.logger import get_logger
from protocols.errors import StorageError
from providers.store_common import embed_missing
from schemas.documents import Document

if TYPE_CHECKING:
    from protocols.embeddings import EmbeddingProvider

log = get_logger(__name__)


def cosine_similarities(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine of ``query`` against every row of ``matrix``. Zero-norm rows score 0.0."""
    row_norms = np.linalg.norm(matrix, axis=1)
    query_norm = float(np.linalg.norm(query))
    denom = row_norms * query_norm
    dots = matrix @ query
    sims = np.zeros_like(dots)
    np.divide(dots, denom, out=sims, where=denom > 0)
    return np.clip(sims, -1.0, 1.0)


class InMemoryVectorStore:
    """Process-local store keyed by document id. Implements VectorStore protocol.

    Scores are raw cosine similarity in [-1, 1].
    """

    provider: str = "in-memory"

    def __init__(self, embedder: EmbeddingProvider) -> None:
        self.embedder = embedder
        self.dim: int | None = embedder.dimensions
        self._documents: dict[str, Document] = {}
        self._lock = threading.Lock()

    async def add_documents(self, documents: list[Document]) -> None:
        if not documents:
            return

        storable = await embed_missing(documents, self.embedder)

        with self._lock:
            dim = self.dim
            for doc in storable:
                size = len(doc.embedding or [])
                if dim is None:
                    dim = size
                if size != dim:
                    raise StorageError(
                        f"Document {doc.id} has embedding dimension {size}, store expects {dim}"
                    )
            self.dim = dim
            for doc in storable:
                self._documents[doc.id] = doc.stored_copy()
            total = len(self._documents)

        log.info(
            "store.memory.upsert",
            received=len(documents),
            stored=len(storable),
            total=total,
        )

    async def similarity_search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
    ) -> list[Document]:
        with self._lock:
            docs = list(self._documents.values())
            dim = self.dim

        if not docs or top_k < 1:
            return []
        if len(query_embedding) != dim:
            raise StorageError(
                f"Query embedding dimension {len(query_embedding)} does not match store dimension {dim}"
            )

        matrix = np.array([doc.embedding for doc in docs], dtype=np.float64)
        query = np.array(query_embedding, dtype=np.float64)
        sims = cosine_similarities(matrix, query)

        k = min(top_k, len(docs))
        # Stable sort keeps insertion order among equal scores
        top_indices = np.argsort(-sims, kind="stable")[:k]

        results = [docs[i].with_similarity(float(sims[i])) for i in top_indices.tolist()]
        log.info(
            "store.memory.search",
            top_k=top_k,
            returned=len(results),
            top_score=round(results[0].similarity, 4) if results else 0.0,
        )
        return results

    async def delete_documents(self, doc_ids: list[str]) -> int:
        removed = 0
        with self._lock:
            for doc_id in doc_ids:
                if self._documents.pop(doc_id, None) is not None:
                    removed += 1
        log.info("store.memory.delete", requested=len(doc_ids), removed=removed)
        return removed

    async def count(self) -> int:
        with self._lock:
            return len(self._documents)

    async def get(self, doc_id: str) -> Document | None:
        with self._lock:
            doc = self._documents.get(doc_id)
        return doc.stored_copy() if doc is not None else None
