"""OpenAI chat completions generator."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from observability.logger import get_logger
from observability.metrics import estimate_cost
from protocols.errors import ConfigurationError, GenerationError
from providers.retry import retrying
from schemas.generation import GenerationMetadata, GenerationResult, TokenUsage

log = get_logger(__name__)


class OpenAILLM:
    """OpenAI GPT models. Implements Generator protocol."""

    provider_name: str = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        max_attempts: int = 1,
        client: Any | None = None,
    ) -> None:
        if not api_key and client is None:
            raise ConfigurationError("OpenAI API key is required for the OpenAI generator.")
        self.model_id = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts
        self._client = client or AsyncOpenAI(api_key=api_key)

    def _request(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model_id,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def generate(self, prompt: str) -> GenerationResult:
        start = time.perf_counter()
        try:
            async for attempt in retrying(self.max_attempts):
                with attempt:
                    completion = await self._client.chat.completions.create(**self._request(prompt))
            if not completion.choices:
                raise GenerationError(f"OpenAI returned no choices for model '{self.model_id}'")
        except GenerationError:
            raise
        except Exception as e:
            log.warning("openai.generate.failed", model=self.model_id, error=str(e))
            raise GenerationError(str(e)) from e

        latency_ms = (time.perf_counter() - start) * 1000
        choice = completion.choices[0]
        usage = TokenUsage()
        if completion.usage is not None:
            usage = TokenUsage(
                prompt_tokens=completion.usage.prompt_tokens or 0,
                completion_tokens=completion.usage.completion_tokens or 0,
                total_tokens=completion.usage.total_tokens or 0,
            )

        log.info(
            "openai.generate.success",
            model=self.model_id,
            input_tokens=usage.prompt_tokens,
            output_tokens=usage.completion_tokens,
            latency_ms=round(latency_ms, 2),
        )

        return GenerationResult(
            text=choice.message.content or "",
            metadata=GenerationMetadata(
                finish_reason=choice.finish_reason,
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
            stream = await self._client.chat.completions.create(
                **self._request(prompt), stream=True,
            )
        except Exception as e:
            log.warning("openai.stream.failed", model=self.model_id, error=str(e))
            raise GenerationError(str(e)) from e

        chunks = 0
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    chunks += 1
                    yield delta
        except Exception as e:
            log.warning("openai.stream.failed", model=self.model_id, error=str(e))
            raise GenerationError(str(e)) from e
        finally:
            # Also runs on aclose() when the consumer abandons the stream
            await stream.close()

        log.info("openai.stream.done", model=self.model_id, chunks=chunks)
