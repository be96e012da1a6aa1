"""Claude API generator with streaming and observability."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from typing import Any

import anthropic

from observability.logger import get_logger
from observability.metrics import estimate_cost
from protocols.errors import ConfigurationError, GenerationError
from providers.retry import retrying
from schemas.generation import GenerationMetadata, GenerationResult, TokenUsage

log = get_logger(__name__)


class AnthropicLLM:
    """Claude LLM provider via Anthropic SDK. Implements Generator protocol."""

    provider_name: str = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        *,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        max_attempts: int = 1,
        client: Any | None = None,
    ) -> None:
        if not api_key and client is None:
            raise ConfigurationError("Anthropic API key is required for the Anthropic generator.")
        self.model_id = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key)

    def _request(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model_id,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def generate(self, prompt: str) -> GenerationResult:
        start = time.perf_counter()
        try:
            async for attempt in retrying(self.max_attempts, max_wait=5.0):
                with attempt:
                    message = await self._client.messages.create(**self._request(prompt))
        except Exception as e:
            log.warning("anthropic.generate.failed", model=self.model_id, error=str(e))
            raise GenerationError(str(e)) from e

        latency_ms = (time.perf_counter() - start) * 1000
        text = "".join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        )
        usage = TokenUsage(
            prompt_tokens=message.usage.input_tokens,
            completion_tokens=message.usage.output_tokens,
            total_tokens=message.usage.input_tokens + message.usage.output_tokens,
        )

        log.info(
            "anthropic.generate.success",
            model=self.model_id,
            input_tokens=usage.prompt_tokens,
            output_tokens=usage.completion_tokens,
            latency_ms=round(latency_ms, 2),
        )

        return GenerationResult(
            text=text,
            metadata=GenerationMetadata(
                finish_reason=message.stop_reason,
                token_usage=usage,
                provider=self.provider_name,
                model_id=self.model_id,
                latency_ms=round(latency_ms, 2),
                estimated_cost_usd=estimate_cost(
                    self.model_id, usage.prompt_tokens, usage.completion_tokens,
                ),
            ),
        )

    async def generate_stream(self, prompt: str) -> AsyncIterator[str]:
        try:
            async with self._client.messages.stream(**self._request(prompt)) as stream:
                async for text in stream.text_stream:
                    if text:
                        yield text
        except Exception as e:
            log.warning("anthropic.stream.failed", model=self.model_id, error=str(e))
            raise GenerationError(str(e)) from e
