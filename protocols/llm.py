"""Generator (LLM) protocol: structural subtyping, no ABC needed."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from schemas.generation import GenerationResult


@runtime_checkable
class Generator(Protocol):
    """Any class that implements generate() and generate_stream() can answer prompts."""

    provider_name: str
    model_id: str

    async def generate(self, prompt: str) -> GenerationResult:
        """Send prompt to the LLM and return the full response."""
        ...

    def generate_stream(self, prompt: str) -> AsyncIterator[str]:
        """Stream the response as text chunks. Single consumer, not restartable."""
        ...
