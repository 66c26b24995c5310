"""
In-memory store module.

Thread-safe store for local runs and tests. Attendance is unique per
(student, subject, session date), the same constraint the database holds.
"""

import json
import threading
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from .base import AttendanceStore
from ..logging_config import get_logger

logger = get_logger(__name__)


class MemoryStore(AttendanceStore):
    """Store keeping subjects, gallery rows and attendance in process."""

    name = 'memory'

    def __init__(
        self,
        subjects: Optional[Dict[str, str]] = None,
        gallery: Optional[Iterable[Tuple[str, Any]]] = None
    ):
        """
        Args:
            subjects: Mapping of subject code to subject ID
            gallery: (student_id, encoding) rows
        """
        self._lock = threading.Lock()
        self._subjects: Dict[str, str] = dict(subjects or {})
        self._gallery: List[Tuple[str, Any]] = list(gallery or [])
        self._attendance: Dict[Tuple[str, str, date], datetime] = {}
        self.write_calls = 0

    @classmethod
    def from_gallery_file(
        cls,
        path: str,
        subjects: Optional[Dict[str, str]] = None
    ) -> 'MemoryStore':
        """
        Build a store from a JSON gallery file.

        The file holds a list of {"student_id": ..., "encoding": [...]}
        objects.

        Raises:
            ValueError: If the file is not a list of such objects
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, list):
            raise ValueError(f'Gallery file {path} must contain a JSON array')

        rows = []
        for item in data:
            if not isinstance(item, dict) or 'student_id' not in item:
                raise ValueError(f'Gallery file {path} has an entry without student_id')
            rows.append((str(item['student_id']), item.get('encoding')))

        logger.info(f'Loaded {len(rows)} gallery rows from {path}')
        return cls(subjects=subjects, gallery=rows)

    def add_subject(self, subject_code: str, subject_id: str) -> None:
        with self._lock:
            self._subjects[subject_code] = subject_id

    def enroll(self, student_id: str, encoding: Any) -> None:
        with self._lock:
            self._gallery.append((student_id, encoding))

    def resolve_subject(self, subject_code: str) -> Optional[str]:
        with self._lock:
            return self._subjects.get(subject_code)

    def fetch_all_encodings(self) -> List[Tuple[str, Any]]:
        with self._lock:
            return list(self._gallery)

    def record_attendance(
        self,
        student_id: str,
        subject_id: str,
        marked_at: datetime
    ) -> None:
        key = (student_id, subject_id, marked_at.date())
        with self._lock:
            self.write_calls += 1
            if key in self._attendance:
                logger.debug(f'Attendance for student {student_id} already recorded')
                return
            self._attendance[key] = marked_at

    def attendance(self) -> List[Tuple[str, str, datetime]]:
        """Recorded marks as (student_id, subject_id, marked_at)."""
        with self._lock:
            return [
                (student_id, subject_id, marked_at)
                for (student_id, subject_id, _), marked_at in self._attendance.items()
            ]
