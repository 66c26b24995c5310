"""
Gallery module.

Holds enrolled (student, encoding) rows for one batch and answers
nearest-neighbour queries against them.
"""

import json
import numpy as np
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from .distance import DistanceFunction, euclidean_distance
from ..logging_config import get_logger

logger = get_logger(__name__)

_EMPTY = np.zeros(0, dtype=np.float64)


def parse_encoding(raw: Any) -> np.ndarray:
    """
    Convert a stored encoding into a float vector.

    Stores return encodings either as JSON arrays or as JSON text
    (e.g. '[0.12, -0.03, ...]'). Anything that cannot be read as a flat
    numeric vector becomes a zero-length placeholder.

    Args:
        raw: Encoding as returned by the store

    Returns:
        1-D float64 array, empty if unreadable
    """
    if raw is None:
        return _EMPTY

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return _EMPTY

    if isinstance(raw, (bool, dict)):
        return _EMPTY

    try:
        vector = np.asarray(raw, dtype=np.float64)
    except (TypeError, ValueError, OverflowError):
        # OverflowError: JSON integers too large for a float64
        return _EMPTY

    if vector.ndim != 1 or not np.all(np.isfinite(vector)):
        return _EMPTY

    return vector


class Gallery:
    """
    Enrolled encodings for every student.

    A student may own several rows; a probe is compared with all of them and
    the closest one wins (best-of-N).
    """

    def __init__(
        self,
        student_ids: List[str],
        encodings: List[np.ndarray],
        distance_fn: DistanceFunction = euclidean_distance
    ):
        if len(student_ids) != len(encodings):
            raise ValueError('student_ids and encodings must have equal length')

        self._student_ids = student_ids
        self._encodings = encodings
        self._distance_fn = distance_fn

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Tuple[Any, Any]],
        distance_fn: DistanceFunction = euclidean_distance
    ) -> 'Gallery':
        """
        Build a gallery from store rows.

        Args:
            rows: Iterable of (student_id, encoding) pairs
            distance_fn: Distance function used by nearest()

        Returns:
            Gallery instance
        """
        student_ids: List[str] = []
        encodings: List[np.ndarray] = []
        placeholders = 0

        for student_id, raw in rows:
            vector = parse_encoding(raw)
            if vector.size == 0:
                placeholders += 1
            student_ids.append(str(student_id))
            encodings.append(vector)

        if placeholders:
            logger.warning(
                f'Gallery has {placeholders} empty or unreadable encodings, '
                f'they will never match'
            )

        return cls(student_ids, encodings, distance_fn)

    def __len__(self) -> int:
        return len(self._student_ids)

    @property
    def student_ids(self) -> List[str]:
        """Distinct student IDs in gallery order."""
        return list(dict.fromkeys(self._student_ids))

    def nearest(self, probe: Sequence[float]) -> Tuple[Optional[str], float]:
        """
        Find the closest gallery row to a probe.

        Every row is scanned. A later row replaces the current best only if
        it is strictly closer, so ties keep the earliest row.

        Args:
            probe: Encoding to match

        Returns:
            Tuple of (student_id, distance), or (None, inf) if no row has
            the probe's length
        """
        best_distance = float('inf')
        best_student: Optional[str] = None

        for student_id, encoding in zip(self._student_ids, self._encodings):
            distance = self._distance_fn(probe, encoding)
            if distance < best_distance:
                best_distance = distance
                best_student = student_id

        return best_student, best_distance
