"""
Embedding providers that turn record content into vectors.
"""

from abc import ABC, abstractmethod
import hashlib

import ollama

from ..core.errors import EmbeddingError


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Text is hashed repeatedly (SHA-256 over the text plus a block counter)
    until enough bytes exist to fill every dimension, so the same text always
    maps to the same vector and no model is needed.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector using hash function."""
        vector = []
        block = 0
        while len(vector) < self.dimension:
            digest = hashlib.sha256(f"{block}:{text}".encode()).digest()
            for i in range(0, len(digest), 4):
                if len(vector) >= self.dimension:
                    break
                value = int.from_bytes(digest[i:i + 4], "big")
                # Map to [-1, 1]
                vector.append((value / (2**32)) * 2 - 1)
            block += 1

        return vector

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class OllamaEmbedding(IEmbeddingProvider):
    """Embedding provider backed by a local Ollama server's /api/embed endpoint."""

    def __init__(self, model_name: str = "nomic-embed-text", host: str = None, client=None):
        self.model_name = model_name
        self._client = client or ollama.Client(host=host)
        self._dimension = None

    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector using the Ollama model."""
        try:
            response = self._client.embed(model=self.model_name, input=text)
        except (ollama.ResponseError, ConnectionError) as e:
            raise EmbeddingError(f"ollama embed failed for model {self.model_name}: {e}") from e

        embeddings = response["embeddings"]
        if not embeddings or not embeddings[0]:
            raise EmbeddingError(f"ollama returned no embeddings for model {self.model_name}")

        embedding = list(embeddings[0])
        if self._dimension is None:
            self._dimension = len(embedding)
        return embedding

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            # Probe the model with a dummy string
            self.embed_text("test")
        return self._dimension
