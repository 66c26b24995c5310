"""
Encoding distance module.

Distances between face encodings. Encodings of different length are never
compared element-wise; they are treated as infinitely distant so that
placeholder or malformed gallery rows cannot crash a batch.
"""

import numpy as np
from typing import Callable, Dict, Sequence

MISMATCH_DISTANCE = float('inf')

DistanceFunction = Callable[[Sequence[float], Sequence[float]], float]


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Compute Euclidean distance between two encodings.

    Args:
        a: First encoding
        b: Second encoding

    Returns:
        Square root of the summed squared differences, or
        MISMATCH_DISTANCE if the lengths differ
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.shape != vb.shape:
        return MISMATCH_DISTANCE

    return float(np.linalg.norm(va - vb))


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Compute cosine distance (1 - cosine similarity) between two encodings.

    Zero-norm vectors have no direction and are treated as maximally distant.

    Returns:
        Distance in range [0, 2], or MISMATCH_DISTANCE if the lengths differ
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.shape != vb.shape:
        return MISMATCH_DISTANCE

    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        return MISMATCH_DISTANCE

    similarity = float(np.dot(va, vb) / norm)
    # Clamp rounding noise so that d(a, a) == 0
    return max(0.0, 1.0 - min(1.0, similarity))


_DISTANCE_FUNCTIONS: Dict[str, DistanceFunction] = {
    'euclidean': euclidean_distance,
    'cosine': cosine_distance,
}


def get_distance_function(name: str) -> DistanceFunction:
    """
    Look up a distance function by metric name.

    Raises:
        ValueError: If the metric is unknown
    """
    try:
        return _DISTANCE_FUNCTIONS[name]
    except KeyError:
        raise ValueError(f'Unknown distance metric: {name!r}') from None
