"""Query tracing: tracks run_id, per-state timings and the outcome of one query."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from observability.logger import get_logger
from schemas.observability import QueryRunRecord

log = get_logger(__name__)


class QueryTracer:
    """Tracks a single query as it moves through the pipeline states.

    States: embedding, searching, filtering, prompt_building, generating.
    One tracer per call; tracers are never shared between queries.
    """

    def __init__(self, query: str = "") -> None:
        self._record = QueryRunRecord()
        self.run_id = self._record.run_id
        self.query = query[:80]
        self._started = time.perf_counter()
        self._step_start: float | None = None

    def start_step(self, step_name: str) -> None:
        self._step_start = time.perf_counter()
        log.debug("rag.step.start", step=step_name, run_id=self.run_id)

    def end_step(self, step_name: str) -> float:
        elapsed = 0.0
        if self._step_start is not None:
            elapsed = (time.perf_counter() - self._step_start) * 1000
        self._record.step_latencies_ms[step_name] = round(elapsed, 2)
        log.debug(
            "rag.step.end",
            step=step_name,
            run_id=self.run_id,
            latency_ms=round(elapsed, 2),
        )
        self._step_start = None
        return elapsed

    def set_retrieved(self, count: int) -> None:
        self._record.documents_retrieved = count

    def finish(self, outcome: str) -> QueryRunRecord:
        """Close the trace and return the run record."""
        self._record.outcome = outcome  # type: ignore[assignment]
        self._record.finished_at = datetime.now(timezone.utc)
        self._record.total_latency_ms = round((time.perf_counter() - self._started) * 1000, 2)
        log.info(
            "rag.query.done",
            run_id=self.run_id,
            query=self.query,
            outcome=outcome,
            documents=self._record.documents_retrieved,
            latency_ms=self._record.total_latency_ms,
        )
        return self.to_record()

    def to_record(self) -> QueryRunRecord:
        return self._record.model_copy(deep=True)
