"""
Error taxonomy for the vector store.
All errors are recoverable: the store remains usable after any of them is raised.
"""


class VectorStoreError(Exception):
    """Base exception for vector store operations."""
    pass


class DimensionMismatch(VectorStoreError):
    """Embedding length disagrees with the store's configured dimension."""

    def __init__(self, expected: int, actual: int, record_id: str = None):
        self.expected = expected
        self.actual = actual
        self.record_id = record_id
        message = f"Vector dimension {actual} does not match expected dimension {expected}"
        if record_id is not None:
            message += f" (record {record_id})"
        super().__init__(message)


class CorruptData(VectorStoreError):
    """Persisted store document is malformed."""
    pass


class IOFailure(VectorStoreError):
    """Underlying file read or write failed."""
    pass


class InvalidArgument(VectorStoreError, ValueError):
    """Caller passed an invalid argument (bad top_k, empty id, unknown type)."""
    pass


class EmbeddingError(VectorStoreError):
    """One or more texts could not be embedded."""

    def __init__(self, message: str, failures: dict = None):
        self.failures = failures or {}
        super().__init__(message)
