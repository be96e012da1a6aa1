"""Ingestion source protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from schemas.documents import Document


@runtime_checkable
class DocumentSource(Protocol):
    """Any class that can load raw material and hand it over as Documents."""

    async def load_and_chunk(self) -> list[Document]: ...
