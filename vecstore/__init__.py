"""
Embedded vector store with brute-force cosine similarity search over a music catalog.
"""

from .core.errors import (
    VectorStoreError,
    DimensionMismatch,
    CorruptData,
    IOFailure,
    InvalidArgument,
    EmbeddingError,
)
from .vector import InMemoryVectorStore, IVectorStore, VectorRecord, QueryResult, ItemType, cosine_similarity
from .vector import track_to_record, artist_to_record, playlist_to_record
from .core.indexing import IndexingService

__version__ = "1.0.0"

__all__ = [
    'VectorStoreError',
    'DimensionMismatch',
    'CorruptData',
    'IOFailure',
    'InvalidArgument',
    'EmbeddingError',
    'InMemoryVectorStore',
    'IVectorStore',
    'VectorRecord',
    'QueryResult',
    'ItemType',
    'cosine_similarity',
    'track_to_record',
    'artist_to_record',
    'playlist_to_record',
    'IndexingService',
]
