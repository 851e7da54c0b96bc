"""
Tests for cosine similarity scoring.
"""

import math

import pytest
import numpy as np

from vecstore.core.errors import DimensionMismatch, InvalidArgument
from vecstore.vector.similarity import cosine_similarity, cosine_scores


@pytest.mark.parametrize("a,b,expected", [
    ([1.0, 0.0, 0.0], [1.0, 0.0, 0.0], 1.0),
    ([1.0, 0.0, 0.0], [0.0, 1.0, 0.0], 0.0),
    ([1.0, 0.0, 0.0], [-1.0, 0.0, 0.0], -1.0),
    ([1.0, 1.0], [1.0, 0.0], 1.0 / math.sqrt(2)),
    ([3.0, 4.0], [6.0, 8.0], 1.0),
])
def test_known_values(a, b, expected):
    """Cosine similarity of simple vectors."""
    assert cosine_similarity(a, b) == pytest.approx(expected)


def test_self_similarity_is_one():
    """A non-zero vector is perfectly similar to itself."""
    rng = np.random.default_rng(1)
    for dim in (3, 128, 384):
        v = rng.normal(size=dim)
        assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_symmetry():
    """cos(a, b) == cos(b, a)."""
    rng = np.random.default_rng(2)
    a = rng.normal(size=384)
    b = rng.normal(size=384)

    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))


def test_zero_vector_returns_zero():
    """Zero magnitude on either side gives 0, not NaN."""
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_empty_vectors_return_zero():
    assert cosine_similarity([], []) == 0.0


def test_length_mismatch_raises():
    with pytest.raises(DimensionMismatch):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_result_stays_in_range():
    """Rounding never pushes the result outside [-1, 1]."""
    v = np.full(384, 0.1)
    assert -1.0 <= cosine_similarity(v, v) <= 1.0
    assert -1.0 <= cosine_similarity(v, -v) <= 1.0


def test_float32_inputs_accumulate_in_float64():
    """Inputs of any float dtype are scored in float64."""
    rng = np.random.default_rng(3)
    a = rng.normal(size=384).astype(np.float32)
    b = rng.normal(size=384).astype(np.float32)

    expected = cosine_similarity(a.astype(np.float64), b.astype(np.float64))
    assert cosine_similarity(a, b) == expected


def test_cosine_scores_matches_pairwise():
    """Matrix scoring agrees with pairwise scoring, including zero rows."""
    rng = np.random.default_rng(4)
    matrix = rng.normal(size=(10, 8))
    matrix[3] = 0.0
    norms = np.linalg.norm(matrix, axis=1)
    query = rng.normal(size=8)

    scores = cosine_scores(matrix, norms, query)

    assert scores[3] == 0.0
    for i, row in enumerate(matrix):
        assert scores[i] == pytest.approx(cosine_similarity(row, query))


def test_cosine_scores_zero_query():
    matrix = np.eye(3)
    scores = cosine_scores(matrix, np.ones(3), np.zeros(3))
    assert scores.tolist() == [0.0, 0.0, 0.0]


@pytest.mark.parametrize("a,b", [(3.0, [1.0]), ([1.0], 2.0), ([[1.0, 0.0]], [[1.0, 0.0]])])
def test_non_vector_inputs_raise(a, b):
    """Scalars and matrices are not vectors."""
    with pytest.raises(InvalidArgument):
        cosine_similarity(a, b)
