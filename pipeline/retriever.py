"""Retriever: embeds a query, searches the store and keeps only relevant documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

from observability.logger import get_logger
from schemas.config import RetrieverConfig
from schemas.documents import Document

if TYPE_CHECKING:
    from observability.tracer import QueryTracer
    from protocols.embeddings import EmbeddingProvider
    from protocols.vector_store import VectorStore

log = get_logger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"


def is_relevant(doc: Document, threshold: float) -> bool:
    """Unscored documents pass through; scored ones need ``similarity >= threshold``."""
    if doc.similarity is None:
        return True
    return doc.similarity >= threshold


def format_context(documents: list[Document]) -> str:
    """Join document contents with the context separator."""
    return CONTEXT_SEPARATOR.join(doc.content for doc in documents)


class Retriever:
    """Turns a text query into a relevance-filtered, ranked list of documents."""

    def __init__(
        self,
        store: VectorStore,
        embedder: EmbeddingProvider,
        config: RetrieverConfig | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.config = config or RetrieverConfig()
        log.info(
            "retriever.init",
            top_k=self.config.top_k,
            similarity_threshold=self.config.similarity_threshold,
        )

    @property
    def top_k(self) -> int:
        return self.config.top_k

    @property
    def similarity_threshold(self) -> float:
        return self.config.similarity_threshold

    async def embed_query(self, query: str) -> list[float] | None:
        """Embed a single query. Failures degrade to ``None`` instead of raising."""
        try:
            vectors = await self.embedder.generate_embeddings([query])
        except Exception as e:
            log.warning("retriever.embed.failed", query=query[:80], error=str(e))
            return None

        if len(vectors) == 0 or len(vectors[0]) == 0:
            log.warning("retriever.embed.empty", query=query[:80])
            return None
        return [float(x) for x in vectors[0]]

    async def retrieve(self, query: str, tracer: QueryTracer | None = None) -> list[Document]:
        """Retrieve relevant documents for a query.

        Returns an empty list when the query cannot be embedded. Storage errors propagate.
        """
        if tracer:
            tracer.start_step("embedding")
        query_embedding = await self.embed_query(query)
        if tracer:
            tracer.end_step("embedding")
        if query_embedding is None:
            return []

        if tracer:
            tracer.start_step("searching")
        results = await self.store.similarity_search(query_embedding, top_k=self.top_k)
        if tracer:
            tracer.end_step("searching")

        if tracer:
            tracer.start_step("filtering")
        relevant: list[Document] = []
        for doc in results:
            if is_relevant(doc, self.similarity_threshold):
                relevant.append(doc)
                continue
            log.debug(
                "retriever.filtered_out",
                doc_id=doc.id,
                similarity=doc.similarity,
                threshold=self.similarity_threshold,
            )
        if tracer:
            tracer.end_step("filtering")
            tracer.set_retrieved(len(relevant))

        log.info(
            "retriever.search",
            query=query[:80],
            results_count=len(results),
            relevant_count=len(relevant),
            top_score=round(results[0].similarity, 4) if results and results[0].similarity is not None else None,
        )
        return relevant

    def format_context(self, documents: list[Document]) -> str:
        return format_context(documents)
