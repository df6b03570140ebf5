"""
Similarity utilities — cosine similarity for semantic matching.
"""

from typing import List, Sequence

import numpy as np


def cosine_similarity(v1: Sequence[float], v2: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors. Mismatched or empty vectors score 0."""
    if v1 is None or v2 is None or len(v1) == 0 or len(v2) == 0 or len(v1) != len(v2):
        return 0.0
    v1_arr = np.asarray(v1, dtype=float)
    v2_arr = np.asarray(v2, dtype=float)
    dot_product = np.dot(v1_arr, v2_arr)
    norm_product = np.linalg.norm(v1_arr) * np.linalg.norm(v2_arr)
    return float(dot_product / norm_product) if norm_product > 0 else 0.0


def similarity_from_distance(distance: float) -> float:
    """Invert a cosine distance (1 - cos) back to a [0, 1] similarity."""
    return min(1.0, max(0.0, 1.0 - distance))


def weighted_mean(vectors: List[np.ndarray], weights: List[float]) -> List[float]:
    """Weighted mean of equal-length vectors; weights must sum to a positive value."""
    total = float(sum(weights))
    stacked = np.vstack(vectors)
    return list((stacked * np.asarray(weights)[:, None]).sum(axis=0) / total)
