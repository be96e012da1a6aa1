"""Document schema flowing through ingestion, storage and retrieval."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Document(BaseModel):
    """A piece of source text, optionally embedded.

    ``similarity`` is only set on search results and is never persisted by a store.
    """

    id: str
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] | None = None
    similarity: float | None = None

    @property
    def is_storable(self) -> bool:
        return self.embedding is not None and len(self.embedding) > 0

    def stored_copy(self) -> Document:
        """Copy suitable for persisting: detached from the caller, no search annotation."""
        return self.model_copy(update={"similarity": None}, deep=True)

    def with_similarity(self, score: float) -> Document:
        return self.model_copy(update={"similarity": score}, deep=True)
