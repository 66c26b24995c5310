"""
Attendance store interface.

The matcher only talks to storage through these three calls.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional, Tuple


class AttendanceStore(ABC):
    """Gallery read, subject lookup and attendance write."""

    name = 'store'

    @abstractmethod
    def resolve_subject(self, subject_code: str) -> Optional[str]:
        """
        Resolve a subject code.

        Returns:
            Subject ID, or None if the code is unknown

        Raises:
            StoreError: If the lookup itself fails
        """

    @abstractmethod
    def fetch_all_encodings(self) -> List[Tuple[str, Any]]:
        """
        Read every enrolled encoding.

        Returns:
            List of (student_id, encoding) rows; encodings are returned as
            stored and may be malformed

        Raises:
            StoreError: If the read fails
        """

    @abstractmethod
    def record_attendance(
        self,
        student_id: str,
        subject_id: str,
        marked_at: datetime
    ) -> None:
        """
        Record a student as present.

        A record that already exists for the session is not an error.

        Raises:
            StoreError: If the write fails
        """
