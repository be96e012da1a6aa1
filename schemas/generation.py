"""Generator outputs and the pipeline's answer envelope."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from schemas.documents import Document
from schemas.observability import QueryRunRecord


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class GenerationMetadata(BaseModel):
    """What the provider reported about a single generation."""

    model_config = ConfigDict(protected_namespaces=())

    finish_reason: str | None = None
    token_usage: TokenUsage | None = None
    provider: str = ""
    model_id: str = ""
    latency_ms: float = 0.0
    estimated_cost_usd: float = 0.0


class GenerationResult(BaseModel):
    text: str = ""
    metadata: GenerationMetadata = Field(default_factory=GenerationMetadata)


class RAGResponse(BaseModel):
    """Answer to a query, with the documents it was grounded on."""

    text: str
    source_documents: list[Document] = Field(default_factory=list)
    metadata: GenerationMetadata = Field(default_factory=GenerationMetadata)
    trace: QueryRunRecord | None = None
