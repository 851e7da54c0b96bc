"""
Cosine similarity between two equal-length vectors.
"""

import math

import numpy as np

from ..core.errors import DimensionMismatch, InvalidArgument


def cosine_similarity(a, b) -> float:
    """
    Compute dot(a, b) / (|a| * |b|) with float64 accumulation.

    Returns 0.0 when either vector has zero magnitude or both are empty.
    Raises DimensionMismatch when the lengths differ and InvalidArgument
    when either input is not a 1-D vector.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    if a.ndim != 1 or b.ndim != 1:
        raise InvalidArgument(f"vectors must be one-dimensional, got shapes {a.shape} and {b.shape}")
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(expected=a.shape[0], actual=b.shape[0])
    if a.shape[0] == 0:
        return 0.0

    dot_product = float(np.dot(a, b))
    norm_a = float(np.dot(a, a))
    norm_b = float(np.dot(b, b))

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    similarity = dot_product / (math.sqrt(norm_a) * math.sqrt(norm_b))
    # Rounding can push |similarity| a hair past 1
    return max(-1.0, min(1.0, similarity))


def cosine_scores(matrix: np.ndarray, norms: np.ndarray, query: np.ndarray) -> np.ndarray:
    """
    Score every row of matrix against query in one pass.

    norms holds the precomputed L2 norm of each row. Rows with zero norm,
    or a zero query, score 0.0.
    """
    query_norm = math.sqrt(float(np.dot(query, query)))
    if query_norm == 0.0 or matrix.shape[0] == 0:
        return np.zeros(matrix.shape[0], dtype=np.float64)

    dots = matrix @ query
    denom = norms * query_norm
    scores = np.divide(dots, denom, out=np.zeros_like(dots), where=denom != 0.0)
    return np.clip(scores, -1.0, 1.0, out=scores)
