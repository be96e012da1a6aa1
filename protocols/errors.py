"""Error taxonomy shared by every capability contract."""


class RAGError(Exception):
    """Base exception for the RAG pipeline."""

    pass


class ConfigurationError(RAGError):
    """Raised at construction when a backend config or credential is bad or missing."""

    pass


class EmbeddingError(RAGError):
    """Raised when an embedding batch call fails. Always covers the whole batch."""

    pass


class StorageError(RAGError):
    """Raised when an insert or search against a vector store backend fails."""

    pass


class GenerationError(RAGError):
    """Raised when the LLM call fails. Carries the provider's message verbatim."""

    pass
