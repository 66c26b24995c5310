"""
Match report module.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ProbeAssignment:
    """Outcome for one probe in a batch."""

    index: int
    student_id: Optional[str]
    distance: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'studentId': self.student_id,
            'distance': self.distance,
        }


@dataclass
class FailedWrite:
    """Attendance write that failed for a matched student."""

    student_id: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {'studentId': self.student_id, 'error': self.error}


@dataclass
class MatchReport:
    """
    Result of one batch.

    Counts are derived from the collections so they always agree:
    marked == len(marked_students), unknown == len(unknown_faces).
    """

    success: bool = True
    marked_students: List[str] = field(default_factory=list)
    unknown_faces: List[int] = field(default_factory=list)
    failed_writes: List[FailedWrite] = field(default_factory=list)
    assignments: List[ProbeAssignment] = field(default_factory=list)

    @property
    def marked(self) -> int:
        return len(self.marked_students)

    @property
    def unknown(self) -> int:
        return len(self.unknown_faces)

    def to_dict(self) -> Dict[str, Any]:
        """Render the report in its wire form."""
        return {
            'success': self.success,
            'marked': self.marked,
            'unknown': self.unknown,
            'markedStudents': list(self.marked_students),
            'unknownFaces': list(self.unknown_faces),
            'failedWrites': [f.to_dict() for f in self.failed_writes],
            'assignments': [a.to_dict() for a in self.assignments],
        }
