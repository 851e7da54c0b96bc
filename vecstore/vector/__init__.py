"""
Vector records, similarity scoring, the in-memory store and its JSON persistence.
"""

# Package initialization for vector module
from .index import IVectorStore, InMemoryVectorStore
from .types import VectorRecord, QueryResult, ItemType
from .similarity import cosine_similarity
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, OllamaEmbedding
from .documents import TrackData, ArtistData, PlaylistData, track_to_record, artist_to_record, playlist_to_record

__all__ = [
    'IVectorStore',
    'InMemoryVectorStore',
    'VectorRecord',
    'QueryResult',
    'ItemType',
    'cosine_similarity',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'OllamaEmbedding',
    'TrackData',
    'ArtistData',
    'PlaylistData',
    'track_to_record',
    'artist_to_record',
    'playlist_to_record'
]
