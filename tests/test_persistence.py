"""
Tests for saving and loading the vector store as a JSON document.
"""

import json
import os
from unittest.mock import patch

import pytest
import numpy as np

from vecstore.core.errors import CorruptData, DimensionMismatch, IOFailure
from vecstore.vector.index import InMemoryVectorStore
from vecstore.vector.persistence import FORMAT_VERSION, decode_document, read_document, write_document
from vecstore.vector.types import VectorRecord


@pytest.fixture
def store_path(tmp_path):
    """Path for a store file inside a not-yet-existing directory."""
    return tmp_path / "data" / "vectors.json"


@pytest.fixture
def populated_store():
    rng = np.random.default_rng(42)
    store = InMemoryVectorStore()
    types = ["track", "track", "playlist", "artist", "album"]
    for i in range(25):
        store.add(VectorRecord(
            id=f"item:{i}",
            type=types[i % len(types)],
            vector=rng.normal(size=128),
            metadata={"name": f"Item {i}", "rank": i, "score": i / 10, "explicit": i % 2 == 0, "url": None},
            content=f"content for item {i}",
        ))
    return store


class TestRoundTrip:
    """Save then load reproduces the store."""

    def test_save_and_load(self, populated_store, store_path):
        """Counts, per-type counts, ids and dimension survive a round trip."""
        populated_store.save(store_path)

        loaded = InMemoryVectorStore()
        assert loaded.load(store_path) is True

        assert loaded.count() == populated_store.count()
        assert loaded.dimension == populated_store.dimension == 128
        assert loaded.type_counts() == populated_store.type_counts()
        for item_type in ["track", "playlist", "artist", "album"]:
            assert loaded.count_by_type(item_type) == populated_store.count_by_type(item_type)
        assert set(loaded.ids()) == set(populated_store.ids())

    def test_records_and_scores_preserved(self, populated_store, store_path):
        """Metadata, content and vectors come back exactly."""
        populated_store.save(store_path)
        loaded = InMemoryVectorStore()
        loaded.load(store_path)

        original = populated_store.get("item:3")
        restored = loaded.get("item:3")
        assert restored.metadata == original.metadata
        assert restored.content == original.content
        assert restored.type == original.type
        np.testing.assert_array_equal(restored.vector, original.vector)

        query = np.random.default_rng(0).normal(size=128)
        before = [(r.id, r.score) for r in populated_store.search(query, top_k=5)]
        after = [(r.id, r.score) for r in loaded.search(query, top_k=5)]
        assert after == before

    def test_empty_store_round_trip(self, store_path):
        InMemoryVectorStore().save(store_path)

        loaded = InMemoryVectorStore()
        loaded.load(store_path)
        assert loaded.count() == 0
        assert loaded.dimension is None

    def test_load_replaces_existing_contents(self, populated_store, store_path):
        populated_store.save(store_path)

        target = InMemoryVectorStore()
        target.add(VectorRecord(id="stale", type="track", vector=[1.0, 0.0]))
        target.load(store_path)

        assert "stale" not in target
        assert target.dimension == 128


class TestSaveFile:
    """Properties of the written file."""

    def test_document_layout(self, populated_store, store_path):
        populated_store.save(store_path)

        with open(store_path, encoding="utf-8") as f:
            document = json.load(f)

        assert document["version"] == FORMAT_VERSION
        assert document["dimension"] == 128
        assert len(document["items"]) == 25
        assert set(document["items"][0]) == {"id", "type", "content", "metadata", "embedding"}

    def test_save_creates_parent_directory(self, populated_store, store_path):
        assert not store_path.parent.exists()
        populated_store.save(store_path)
        assert store_path.exists()

    def test_no_temp_files_left_behind(self, populated_store, store_path):
        populated_store.save(store_path)
        populated_store.save(store_path)

        assert os.listdir(store_path.parent) == ["vectors.json"]

    def test_failed_write_keeps_previous_file(self, populated_store, store_path):
        """A failure mid-write leaves the old document intact and no temp file."""
        populated_store.save(store_path)
        original_bytes = store_path.read_bytes()

        with patch("vecstore.vector.persistence.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(IOFailure):
                populated_store.save(store_path)

        assert store_path.read_bytes() == original_bytes
        assert os.listdir(store_path.parent) == ["vectors.json"]

    def test_unwritable_location_raises_io_failure(self, populated_store, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(IOFailure):
            populated_store.save(blocker / "vectors.json")


class TestLoadErrors:
    """Load failures are surfaced and never partially applied."""

    def test_malformed_json(self, populated_store, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"version": 1, "items": [')
        count_before = populated_store.count()

        with pytest.raises(CorruptData):
            populated_store.load(path)

        assert populated_store.count() == count_before

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "bad_schema.json"
        path.write_text(json.dumps({"items": [{"id": "x", "type": "podcast", "embedding": [1.0]}]}))

        with pytest.raises(CorruptData):
            InMemoryVectorStore().load(path)

    def test_item_without_embedding(self, tmp_path):
        path = tmp_path / "no_embedding.json"
        path.write_text(json.dumps({"items": [{"id": "x", "type": "track", "embedding": []}]}))

        with pytest.raises(CorruptData):
            InMemoryVectorStore().load(path)

    def test_inconsistent_dimensions(self, tmp_path):
        path = tmp_path / "mixed.json"
        path.write_text(json.dumps({"items": [
            {"id": "a", "type": "track", "embedding": [1.0, 0.0]},
            {"id": "b", "type": "track", "embedding": [1.0, 0.0, 0.0]},
        ]}))
        store = InMemoryVectorStore()
        store.add(VectorRecord(id="keep", type="artist", vector=[1.0]))

        with pytest.raises(DimensionMismatch):
            store.load(path)

        assert store.ids() == ["keep"]

    @pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_embedding_is_corrupt(self, tmp_path, token):
        """NaN and Infinity tokens in a stored embedding mean a corrupt document."""
        path = tmp_path / "non_finite.json"
        path.write_text('{"dimension": 2, "items": [{"id": "a", "type": "track", "embedding": [' + token + ', 1.0]}]}')
        store = InMemoryVectorStore()
        store.add(VectorRecord(id="keep", type="track", vector=[1.0, 0.0]))

        with pytest.raises(CorruptData):
            store.load(path)

        assert store.ids() == ["keep"]

    def test_declared_dimension_disagrees(self):
        with pytest.raises(DimensionMismatch):
            decode_document({"dimension": 3, "items": [{"id": "a", "type": "track", "embedding": [1.0, 0.0]}]})

    def test_unsupported_version(self):
        with pytest.raises(CorruptData):
            decode_document({"version": FORMAT_VERSION + 1, "items": []})

    def test_non_object_document(self):
        with pytest.raises(CorruptData):
            decode_document("just a string")

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(IOFailure):
            InMemoryVectorStore().load(tmp_path / "missing.json")

    def test_missing_file_ok(self, tmp_path):
        store = InMemoryVectorStore()
        store.add(VectorRecord(id="keep", type="track", vector=[1.0, 0.0]))

        assert store.load(tmp_path / "missing.json", missing_ok=True) is False
        assert store.count() == 1


def test_legacy_list_document(tmp_path):
    """A bare list of documents from earlier releases still loads."""
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps([
        {"id": "track:1", "type": "track", "content": "Song by Band",
         "metadata": {"name": "Song", "artists": "Band"}, "embedding": [0.1, 0.2, 0.3]},
        {"id": "artist:9", "type": "artist", "content": "Band",
         "metadata": {"name": "Band"}, "embedding": [0.3, 0.2, 0.1]},
    ], indent=2))

    store = InMemoryVectorStore()
    store.load(path)

    assert store.count() == 2
    assert store.dimension == 3
    assert store.get("track:1").metadata["artists"] == "Band"


def test_duplicate_ids_in_document_last_wins():
    dimension, records = decode_document({"items": [
        {"id": "a", "type": "track", "embedding": [1.0]},
        {"id": "a", "type": "album", "embedding": [2.0]},
    ]})
    assert dimension == 1
    assert len(records) == 2


def test_write_and_read_document_directly(tmp_path):
    records = [VectorRecord(id="a", type="track", vector=[0.5, 0.5], metadata={"n": 1})]
    size = write_document(tmp_path / "direct.json", 2, records)

    assert size == (tmp_path / "direct.json").stat().st_size
    dimension, decoded = read_document(tmp_path / "direct.json")
    assert dimension == 2
    assert decoded[0].id == "a"
    assert decoded[0].metadata == {"n": 1}
