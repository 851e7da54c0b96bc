"""
Environment-driven configuration for the vector store and its indexing pipeline.
"""

import os
from pathlib import Path

# Store file location
STORE_PATH = os.getenv("STORE_PATH", "./data/vectors.json")

# Debug flag
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Embedding configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|ollama
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
OLLAMA_EMBED_MODEL = os.getenv("OLLAMA_EMBED_MODEL", "nomic-embed-text")

# Indexing and search
INDEX_CONCURRENCY = int(os.getenv("INDEX_CONCURRENCY", "4"))
SEARCH_DEFAULT_TOP_K = int(os.getenv("SEARCH_DEFAULT_TOP_K", "5"))

# Version string
VERSION = "1.0.0"


def get_vector_store():
    """Create a fresh, empty in-memory vector store."""
    from ..vector.index import InMemoryVectorStore
    return InMemoryVectorStore()


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)

    if provider == "ollama":
        from ..vector.embeddings import OllamaEmbedding
        return OllamaEmbedding(
            model_name=os.getenv("OLLAMA_EMBED_MODEL", OLLAMA_EMBED_MODEL),
            host=os.getenv("OLLAMA_HOST", OLLAMA_HOST),
        )

    from ..vector.embeddings import DeterministicHashEmbedding
    return DeterministicHashEmbedding(dimension=EMBED_DIM)


def get_store_path() -> str:
    """Get the store file path, read dynamically so tests can override it."""
    return os.getenv("STORE_PATH", STORE_PATH)


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_store_directory():
    """Ensure the store file's directory exists."""
    Path(get_store_path()).parent.mkdir(parents=True, exist_ok=True)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if EMBED_PROVIDER not in ["hash", "ollama"]:
        issues.append(f"Invalid EMBED_PROVIDER: {EMBED_PROVIDER}")

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if INDEX_CONCURRENCY < 1:
        issues.append("INDEX_CONCURRENCY must be >= 1")

    if SEARCH_DEFAULT_TOP_K < 1:
        issues.append("SEARCH_DEFAULT_TOP_K must be >= 1")

    if not STORE_PATH:
        issues.append("STORE_PATH must not be empty")

    return issues
