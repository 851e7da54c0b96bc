"""
Record and result types held by the vector store.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

import numpy as np

from ..core.errors import InvalidArgument

MetadataValue = Union[str, int, float, bool, None]


class ItemType(str, Enum):
    """Catalog categories an item can belong to."""

    TRACK = "track"
    PLAYLIST = "playlist"
    ARTIST = "artist"
    ALBUM = "album"

    @classmethod
    def parse(cls, value) -> "ItemType":
        """Coerce a string or ItemType into an ItemType."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = [t.value for t in cls]
            raise InvalidArgument(f"item type must be one of: {valid}, got {value!r}") from None


@dataclass
class VectorRecord:
    """Represents a vector record with metadata."""

    id: str
    """Caller-assigned identifier, unique within a store"""

    type: ItemType
    """Catalog category used by the type index"""

    vector: Optional[np.ndarray]
    """Embedding; None until the indexing pipeline fills it in"""

    metadata: Dict[str, MetadataValue] = field(default_factory=dict)
    """Opaque primitive metadata (title, display name, source URL, ...)"""

    content: str = ""
    """Text the embedding was generated from"""

    def __post_init__(self):
        self.type = ItemType.parse(self.type)
        if self.vector is not None:
            self.vector = np.asarray(self.vector, dtype=np.float64)

    @property
    def dimension(self) -> int:
        return 0 if self.vector is None else int(self.vector.shape[0])

    def copy(self) -> "VectorRecord":
        """Shallow copy with its own metadata dict; the vector array is shared."""
        return VectorRecord(
            id=self.id,
            type=self.type,
            vector=self.vector,
            metadata=dict(self.metadata),
            content=self.content,
        )

    def to_dict(self) -> Dict[str, object]:
        """Convert record to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "content": self.content,
            "metadata": dict(self.metadata),
            "embedding": [] if self.vector is None else self.vector.tolist(),
        }


@dataclass
class QueryResult:
    """Represents a search result from vector store."""

    record: VectorRecord
    """The matching record"""

    score: float
    """Cosine similarity of the match, in [-1, 1]"""

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def metadata(self) -> Dict[str, MetadataValue]:
        return self.record.metadata
