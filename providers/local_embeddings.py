"""Hash-based local embeddings for demo and testing (no external API needed)."""

from __future__ import annotations

import hashlib
import math
import re

EMBEDDING_DIM = 256

_TOKEN_RE = re.compile(r"[a-z0-9]+")


class LocalEmbeddings:
    """Deterministic bag-of-words embeddings via feature hashing. Implements EmbeddingProvider.

    Texts sharing words get positive cosine similarity, which is enough for offline
    demos; it is not a semantic model.
    """

    def __init__(self, dim: int = EMBEDDING_DIM):
        self.dimensions = dim
        self.name = f"local-hash-{dim}"

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        return [self._hash_embed(t) for t in texts]

    def _hash_embed(self, text: str) -> list[float]:
        """Project each token onto a bucket and sign chosen by SHA-256."""
        vec = [0.0] * self.dimensions
        for token in _TOKEN_RE.findall(text.lower()):
            h = hashlib.sha256(token.encode()).digest()
            bucket = int.from_bytes(h[:4], "big") % self.dimensions
            sign = 1.0 if h[4] & 1 else -1.0
            vec[bucket] += sign

        # L2 normalize; empty text stays the zero vector
        norm = math.sqrt(sum(x * x for x in vec))
        if norm == 0:
            return vec
        return [x / norm for x in vec]
