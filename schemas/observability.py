"""Observability schemas for pipeline queries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueryRunRecord(BaseModel):
    """Summary of a single query through the pipeline."""

    run_id: str = Field(default_factory=lambda: str(uuid4()))
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime | None = None
    outcome: Literal["answered", "no_context", "streamed", "abandoned", "failed", "pending"] = "pending"
    documents_retrieved: int = 0
    step_latencies_ms: dict[str, float] = Field(default_factory=dict)
    total_latency_ms: float = 0.0
