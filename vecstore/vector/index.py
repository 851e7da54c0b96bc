"""
In-memory vector store with brute-force cosine similarity search.

Items live in a primary id index and a secondary type index that are kept
consistent on every mutation. All mutations take the write side of a
reader/writer lock; searches and counts share the read side.
"""

import heapq
import numbers
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Set

import numpy as np

from ..core.errors import DimensionMismatch, InvalidArgument
from ..core.locks import ReadWriteLock
from ..util.logging import logger
from .persistence import read_document, write_document
from .similarity import cosine_scores
from .types import ItemType, QueryResult, VectorRecord

_PRIMITIVES = (str, bool, int, float, type(None))


class IVectorStore(ABC):
    """Abstract interface for vector storage operations."""

    @abstractmethod
    def add(self, record: VectorRecord) -> None:
        """Add a single vector record to the store."""
        pass

    @abstractmethod
    def batch_add(self, records: List[VectorRecord]) -> None:
        """Add multiple vector records to the store."""
        pass

    @abstractmethod
    def search(self, query_vector, top_k: int = 5, item_type=None) -> List[QueryResult]:
        """Search for similar vectors and return ranked results."""
        pass

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Delete a vector record by ID."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Total number of records."""
        pass

    @abstractmethod
    def count_by_type(self, item_type) -> int:
        """Number of records of one type."""
        pass

    @abstractmethod
    def save(self, path) -> None:
        """Persist the whole store to path."""
        pass

    @abstractmethod
    def load(self, path, missing_ok: bool = False) -> bool:
        """Replace the store contents with the document at path."""
        pass


class InMemoryVectorStore(IVectorStore):
    """In-memory implementation of IVectorStore using cosine similarity."""

    def __init__(self, dimension: int = None):
        """
        Initialize an empty store.

        Args:
            dimension: Fixed embedding dimension. When None the first record
                added decides it, and clear() forgets it again.
        """
        if dimension is not None and dimension < 1:
            raise InvalidArgument("dimension must be >= 1")

        self._lock = ReadWriteLock()
        self._configured_dimension = dimension
        self._dimension = dimension
        self._records: Dict[str, VectorRecord] = {}   # record_id -> VectorRecord
        self._type_index: Dict[ItemType, Set[str]] = {}  # type -> record ids

        # Stacked vectors for scoring, rebuilt lazily after a mutation
        self._matrix_lock = threading.Lock()
        self._matrix = None

    @property
    def dimension(self) -> Optional[int]:
        """Current embedding dimension, or None for an unconfigured empty store."""
        with self._lock.read():
            return self._dimension

    # ---------- mutation ----------

    def add(self, record: VectorRecord) -> None:
        """Insert or replace a record by id."""
        with self._lock.write():
            try:
                prepared = self._prepare(record, self._dimension)
            except (DimensionMismatch, InvalidArgument) as e:
                logger.log_vector_operation("add", getattr(record, "id", None), {"error": str(e)}, status="failed")
                raise

            replaced = self._put(prepared)
            if self._dimension is None:
                self._dimension = prepared.dimension
            self._matrix = None

        logger.log_vector_operation("add", prepared.id, {"type": prepared.type.value, "replaced": replaced})

    def batch_add(self, records: List[VectorRecord]) -> None:
        """
        Add records as one logical operation.

        Every record is validated before anything is stored; if any record
        is invalid the error is raised and the store is left unchanged.
        Later records with a repeated id replace earlier ones.
        """
        records = list(records)
        if not records:
            return

        with self._lock.write():
            dimension = self._dimension
            prepared = []
            try:
                for record in records:
                    item = self._prepare(record, dimension)
                    if dimension is None:
                        dimension = item.dimension
                    prepared.append(item)
            except (DimensionMismatch, InvalidArgument) as e:
                logger.log_batch_operation("batch_add", [getattr(r, "id", None) for r in records],
                                           {"error": str(e)}, status="failed")
                raise

            for item in prepared:
                self._put(item)
            self._dimension = dimension
            self._matrix = None

        logger.log_batch_operation("batch_add", [item.id for item in prepared])

    def delete(self, record_id: str) -> bool:
        """Delete a vector record by ID. Returns False if it was not stored."""
        with self._lock.write():
            record = self._records.pop(record_id, None)
            if record is None:
                return False

            bucket = self._type_index.get(record.type)
            if bucket is not None:
                bucket.discard(record_id)
                if not bucket:
                    del self._type_index[record.type]
            if not self._records:
                self._dimension = self._configured_dimension
            self._matrix = None

        logger.log_vector_operation("delete", record_id)
        return True

    def clear(self) -> None:
        """Clear all records; the store then behaves as freshly constructed."""
        with self._lock.write():
            removed = len(self._records)
            self._records = {}
            self._type_index = {}
            self._dimension = self._configured_dimension
            self._matrix = None

        logger.log_operation("vector.clear", "success", {"removed": removed})

    # ---------- queries ----------

    def get(self, record_id: str) -> Optional[VectorRecord]:
        with self._lock.read():
            record = self._records.get(record_id)
        return None if record is None else record.copy()

    def count(self) -> int:
        with self._lock.read():
            return len(self._records)

    def count_by_type(self, item_type) -> int:
        item_type = ItemType.parse(item_type)
        with self._lock.read():
            return len(self._type_index.get(item_type, ()))

    def type_counts(self) -> Dict[str, int]:
        """Counts for every type currently present."""
        with self._lock.read():
            return {t.value: len(ids) for t, ids in self._type_index.items()}

    def ids(self) -> List[str]:
        """Stored ids in insertion order."""
        with self._lock.read():
            return list(self._records)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, record_id) -> bool:
        with self._lock.read():
            return record_id in self._records

    def search(self, query_vector, top_k: int = 5, item_type=None) -> List[QueryResult]:
        """
        Return the top_k records most similar to query_vector, best first.

        Equal scores keep insertion order. When item_type is given (and is
        not "all") only records of that type are considered. An empty store
        yields an empty list.
        """
        if isinstance(top_k, bool) or not isinstance(top_k, numbers.Integral) or top_k <= 0:
            raise InvalidArgument(f"top_k must be a positive integer, got {top_k!r}")
        wanted = None if item_type in (None, "", "all") else ItemType.parse(item_type)

        try:
            query = np.asarray(query_vector, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"query vector must be numeric: {e}") from e
        if query.ndim != 1:
            raise InvalidArgument(f"query vector must be one-dimensional, got shape {query.shape}")
        if not np.all(np.isfinite(query)):
            raise InvalidArgument("query vector contains non-finite values")

        with self._lock.read():
            if not self._records:
                logger.log_search(top_k, 0, 0, wanted and wanted.value)
                return []
            if query.shape[0] != self._dimension:
                raise DimensionMismatch(expected=self._dimension, actual=query.shape[0])

            records, matrix, norms, types = self._scoring_matrix()
            scores = cosine_scores(matrix, norms, query)

            if wanted is None:
                candidates = range(len(records))
            else:
                candidates = [i for i, t in enumerate(types) if t is wanted]

            if top_k >= len(candidates):
                best = sorted(candidates, key=scores.__getitem__, reverse=True)
            else:
                best = heapq.nlargest(top_k, candidates, key=scores.__getitem__)

            results = [QueryResult(record=records[i].copy(), score=float(scores[i])) for i in best]

        logger.log_search(top_k, len(results), len(candidates), wanted and wanted.value)
        return results

    # ---------- persistence ----------

    def save(self, path) -> None:
        """
        Write the store to path as a single JSON document.

        Only the snapshot is taken under the read lock; encoding and the
        atomic file write happen after it is released.
        """
        with self._lock.read():
            records = list(self._records.values())
            dimension = self._dimension

        try:
            size = write_document(path, dimension, records)
        except Exception as e:
            logger.log_persistence_operation("save", path, len(records), status="failed", details={"error": str(e)})
            raise

        logger.log_persistence_operation("save", path, len(records), details={"bytes": size})

    def load(self, path, missing_ok: bool = False) -> bool:
        """
        Replace the store contents with the document at path.

        The file is read and validated before the write lock is taken, so a
        failed load leaves the current contents untouched. Returns False
        (and changes nothing) when missing_ok is set and path does not exist.
        """
        if missing_ok and not Path(path).exists():
            logger.log_persistence_operation("load", path, status="skipped", details={"reason": "missing"})
            return False

        try:
            dimension, records = read_document(path)
            if (self._configured_dimension is not None and dimension is not None
                    and dimension != self._configured_dimension):
                raise DimensionMismatch(expected=self._configured_dimension, actual=dimension)
            if dimension is None:
                dimension = self._configured_dimension

            loaded: Dict[str, VectorRecord] = {}
            for record in records:
                loaded[record.id] = self._prepare(record, dimension)
        except Exception as e:
            logger.log_persistence_operation("load", path, status="failed", details={"error": str(e)})
            raise

        type_index: Dict[ItemType, Set[str]] = {}
        for record in loaded.values():
            type_index.setdefault(record.type, set()).add(record.id)

        with self._lock.write():
            self._records = loaded
            self._type_index = type_index
            self._dimension = dimension if loaded else self._configured_dimension
            self._matrix = None

        logger.log_persistence_operation("load", path, len(loaded))
        return True

    # ---------- internals ----------

    def _put(self, record: VectorRecord) -> bool:
        """Store a validated record in both indexes. Caller holds the write lock."""
        previous = self._records.get(record.id)
        if previous is not None and previous.type is not record.type:
            bucket = self._type_index[previous.type]
            bucket.discard(record.id)
            if not bucket:
                del self._type_index[previous.type]

        self._records[record.id] = record
        self._type_index.setdefault(record.type, set()).add(record.id)
        return previous is not None

    @staticmethod
    def _prepare(record: VectorRecord, dimension: Optional[int]) -> VectorRecord:
        """Validate a record and return a private copy safe to store."""
        if not isinstance(record, VectorRecord):
            raise InvalidArgument(f"expected VectorRecord, got {type(record).__name__}")
        if not isinstance(record.id, str) or not record.id.strip():
            raise InvalidArgument(f"record id must be a non-empty string, got {record.id!r}")
        if record.vector is None:
            raise InvalidArgument(f"record {record.id} has no embedding")

        vector = np.array(record.vector, dtype=np.float64)
        if vector.ndim != 1 or vector.shape[0] == 0:
            raise InvalidArgument(f"record {record.id} embedding must be a non-empty 1-D vector")
        if dimension is not None and vector.shape[0] != dimension:
            raise DimensionMismatch(expected=dimension, actual=vector.shape[0], record_id=record.id)
        if not np.all(np.isfinite(vector)):
            raise InvalidArgument(f"record {record.id} embedding contains non-finite values")

        metadata = dict(record.metadata or {})
        for key, value in metadata.items():
            if not isinstance(key, str):
                raise InvalidArgument(f"record {record.id} metadata keys must be strings")
            if not isinstance(value, _PRIMITIVES):
                raise InvalidArgument(
                    f"record {record.id} metadata value for {key!r} must be a primitive, "
                    f"got {type(value).__name__}"
                )

        vector.setflags(write=False)
        return VectorRecord(
            id=record.id,
            type=ItemType.parse(record.type),
            vector=vector,
            metadata=metadata,
            content=record.content or "",
        )

    def _scoring_matrix(self):
        """Stacked vectors, row norms and types in insertion order. Caller holds the read lock."""
        with self._matrix_lock:
            if self._matrix is None:
                records = list(self._records.values())
                matrix = np.vstack([r.vector for r in records])
                norms = np.sqrt(np.einsum("ij,ij->i", matrix, matrix))
                types = [r.type for r in records]
                self._matrix = (records, matrix, norms, types)
            return self._matrix
