"""Opt-in retry policy for provider adapters (off unless max_attempts > 1)."""

from __future__ import annotations

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential


def retrying(max_attempts: int = 1, max_wait: float = 8.0) -> AsyncRetrying:
    """Build a tenacity controller; with ``max_attempts=1`` the call runs exactly once."""
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=1, max=max_wait),
        reraise=True,
    )
