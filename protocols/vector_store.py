"""Vector store protocol for RAG."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from schemas.documents import Document


@runtime_checkable
class VectorStore(Protocol):
    """Any class that can store embedded documents and search them by vector."""

    async def add_documents(self, documents: list[Document]) -> None: ...

    async def similarity_search(
        self, query_embedding: list[float], top_k: int = 5,
    ) -> list[Document]: ...

    async def delete_documents(self, doc_ids: list[str]) -> int: ...

    async def count(self) -> int: ...
