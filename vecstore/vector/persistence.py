"""
JSON persistence for the vector store.

Document layout (version 1):

    {"version": 1, "dimension": 384, "items": [
        {"id": "...", "type": "track", "content": "...",
         "metadata": {...}, "embedding": [0.1, ...]}, ...]}

A bare JSON list of items (the layout written by earlier releases) is also
accepted on read.
"""

import json
import math
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..core.errors import CorruptData, DimensionMismatch, IOFailure
from .types import ItemType, VectorRecord

FORMAT_VERSION = 1
WRITE_BUFFER_SIZE = 1 << 16


class StoredItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    content: str = ""
    metadata: Dict[str, Union[bool, int, float, str, None]] = {}
    embedding: Optional[List[float]] = None

    @field_validator('id')
    @classmethod
    def id_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('id cannot be empty')
        return v

    @field_validator('type')
    @classmethod
    def type_must_be_valid(cls, v):
        valid_types = [t.value for t in ItemType]
        if v.lower() not in valid_types:
            raise ValueError(f'type must be one of: {valid_types}')
        return v.lower()


class StoreDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: int = FORMAT_VERSION
    dimension: Optional[int] = None
    items: List[StoredItem] = []

    @field_validator('version')
    @classmethod
    def version_must_be_supported(cls, v):
        if v > FORMAT_VERSION:
            raise ValueError(f'unsupported store format version {v}')
        return v

    @field_validator('dimension')
    @classmethod
    def dimension_must_be_positive(cls, v):
        if v is not None and v < 1:
            raise ValueError('dimension must be >= 1')
        return v


def encode_document(dimension: Optional[int], records: Iterable[VectorRecord]) -> Dict[str, object]:
    """Build the JSON-ready store document."""
    return {
        "version": FORMAT_VERSION,
        "dimension": dimension,
        "items": [record.to_dict() for record in records],
    }


def decode_document(raw) -> Tuple[Optional[int], List[VectorRecord]]:
    """
    Validate a parsed JSON value and turn it into records.

    Raises CorruptData for schema problems and DimensionMismatch when item
    embeddings disagree with each other or with the declared dimension.
    """
    if isinstance(raw, list):
        raw = {"items": raw}
    if not isinstance(raw, dict):
        raise CorruptData(f"store document must be an object or a list, got {type(raw).__name__}")

    try:
        document = StoreDocument.model_validate(raw)
    except ValidationError as e:
        raise CorruptData(f"invalid store document: {e.error_count()} validation error(s): {e}") from e

    dimension = document.dimension
    records = []
    for item in document.items:
        if not item.embedding:
            raise CorruptData(f"item {item.id} has no embedding")
        if not all(math.isfinite(v) for v in item.embedding):
            raise CorruptData(f"item {item.id} embedding contains non-finite values")
        if dimension is None:
            dimension = len(item.embedding)
        elif len(item.embedding) != dimension:
            raise DimensionMismatch(expected=dimension, actual=len(item.embedding), record_id=item.id)

        records.append(VectorRecord(
            id=item.id,
            type=item.type,
            vector=item.embedding,
            metadata=dict(item.metadata),
            content=item.content,
        ))

    return dimension, records


def write_document(path, dimension: Optional[int], records: List[VectorRecord]) -> int:
    """
    Atomically write the store document to path and return its size in bytes.

    The document is streamed through a buffered writer into a temporary file
    beside path, fsynced, then renamed over path. On failure the temporary
    file is removed and any existing file at path is left untouched.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        raise IOFailure(f"failed to prepare store file {path}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8", buffering=WRITE_BUFFER_SIZE) as f:
            json.dump(encode_document(dimension, records), f, separators=(",", ":"))
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
        return path.stat().st_size
    except BaseException as e:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        if isinstance(e, OSError):
            raise IOFailure(f"failed to write store {path}: {e}") from e
        raise


def read_document(path) -> Tuple[Optional[int], List[VectorRecord]]:
    """Read and decode the store document at path."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorruptData(f"malformed store file {path}: {e}") from e
    except OSError as e:
        raise IOFailure(f"failed to read store {path}: {e}") from e

    return decode_document(raw)
