"""Deterministic dummy LLM for tests and offline demos."""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import AsyncIterator

from schemas.generation import GenerationMetadata, GenerationResult, TokenUsage

_RULE = "---------------------"
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


def _extract_context(prompt: str) -> str:
    """Extract the text between the two context rules, falling back to full text."""
    parts = prompt.split(_RULE)
    if len(parts) >= 3:
        return parts[1].strip()
    return prompt.strip()


def _extract_query(prompt: str) -> str:
    for line in prompt.split("\n"):
        if line.strip().startswith("Query:"):
            return line.split("Query:", 1)[1].strip()
    return ""


class DummyLLM:
    """LLM that answers with the first sentence of the context. Implements Generator protocol."""

    provider_name: str = "dummy"
    model_id: str = "dummy-echo-v1"

    def __init__(self, chunk_delay: float = 0.0) -> None:
        self.chunk_delay = chunk_delay

    def answer(self, prompt: str) -> str:
        context = _extract_context(prompt)
        first_block = context.split("\n\n---\n\n", 1)[0].strip()
        first_sentence = _SENTENCE_RE.split(first_block, 1)[0] if first_block else ""
        query = _extract_query(prompt)

        if not first_sentence:
            return "I don't know."
        if query:
            return f'Regarding "{query}": {first_sentence}'
        return first_sentence

    async def generate(self, prompt: str) -> GenerationResult:
        start = time.perf_counter()
        text = self.answer(prompt)
        prompt_tokens = len(prompt.split())
        completion_tokens = len(text.split())

        return GenerationResult(
            text=text,
            metadata=GenerationMetadata(
                finish_reason="stop",
                token_usage=TokenUsage(
                    prompt_tokens=prompt_tokens,
                    completion_tokens=completion_tokens,
                    total_tokens=prompt_tokens + completion_tokens,
                ),
                provider=self.provider_name,
                model_id=self.model_id,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
            ),
        )

    async def generate_stream(self, prompt: str) -> AsyncIterator[str]:
        words = self.answer(prompt).split(" ")
        for i, word in enumerate(words):
            yield word if i == len(words) - 1 else word + " "
            if self.chunk_delay:
                await asyncio.sleep(self.chunk_delay)
