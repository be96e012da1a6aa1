"""Ingestion steps shared by every vector store backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

from observability.logger import get_logger
from protocols.errors import EmbeddingError
from schemas.documents import Document

if TYPE_CHECKING:
    from protocols.embeddings import EmbeddingProvider

log = get_logger(__name__)


async def embed_missing(
    documents: list[Document],
    embedder: EmbeddingProvider,
) -> list[Document]:
    """Embed every document that has content but no vector, in one batch call.

    Vectors are assigned back onto the given documents in input order. Returns the
    documents that are storable afterwards; the rest are skipped with a warning.
    """
    to_embed = [doc for doc in documents if not doc.is_storable and doc.content]

    if to_embed:
        log.info(
            "store.embedding.batch",
            embedder=getattr(embedder, "name", "unknown"),
            count=len(to_embed),
        )
        try:
            vectors = await embedder.generate_embeddings([doc.content for doc in to_embed])
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding batch of {len(to_embed)} documents failed: {e}") from e

        if len(vectors) != len(to_embed):
            raise EmbeddingError(
                f"Embedder returned {len(vectors)} vectors for {len(to_embed)} documents"
            )
        for doc, vector in zip(to_embed, vectors):
            doc.embedding = list(vector)

    storable: list[Document] = []
    for doc in documents:
        if not doc.is_storable:
            log.warning("store.document.skipped", doc_id=doc.id, reason="no content and no embedding")
            continue
        storable.append(doc)
    return storable
