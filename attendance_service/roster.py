"""
Teacher roster module.

Loads the teacher/subject roster from a JSON file at startup:

    {
      "teachers": [
        {"username": "maths", "email": "maths@school.edu",
         "subject_code": "MATHS", "subject_name": "Maths"}
      ]
    }

Credentials are not part of the roster and are never read from it.
"""

import json
from dataclasses import dataclass
from typing import Dict, List, Optional
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TeacherEntry:
    """One teacher and the subject they take."""

    username: str
    email: str
    subject_code: str
    subject_name: str


class Roster:
    """Read-only teacher to subject mapping."""

    def __init__(self, teachers: List[TeacherEntry]):
        self.teachers = list(teachers)
        self._by_username: Dict[str, TeacherEntry] = {}
        for teacher in self.teachers:
            key = teacher.username.lower()
            if key in self._by_username:
                raise ValueError(f'Duplicate teacher username: {teacher.username!r}')
            self._by_username[key] = teacher

    def __len__(self) -> int:
        return len(self.teachers)

    def subject_for_teacher(self, username: str) -> Optional[str]:
        """Subject code for a teacher login (case-insensitive), or None."""
        teacher = self._by_username.get(username.strip().lower())
        return teacher.subject_code if teacher else None

    def subject_codes(self) -> List[str]:
        """Distinct subject codes in roster order."""
        return list(dict.fromkeys(t.subject_code for t in self.teachers))

    def subjects(self) -> List[Dict[str, str]]:
        """Distinct subjects as {subject_code, subject_name} dicts."""
        seen: Dict[str, Dict[str, str]] = {}
        for teacher in self.teachers:
            seen.setdefault(teacher.subject_code, {
                'subject_code': teacher.subject_code,
                'subject_name': teacher.subject_name,
            })
        return list(seen.values())


def parse_roster(data: object) -> Roster:
    """
    Build a roster from decoded JSON.

    Raises:
        ValueError: If required fields are missing
    """
    if not isinstance(data, dict) or not isinstance(data.get('teachers'), list):
        raise ValueError('Roster must be an object with a "teachers" array')

    teachers: List[TeacherEntry] = []
    for index, item in enumerate(data['teachers']):
        if not isinstance(item, dict):
            raise ValueError(f'Roster entry {index} must be an object')

        missing = [k for k in ('username', 'subject_code') if not item.get(k)]
        if missing:
            raise ValueError(f'Roster entry {index} is missing {", ".join(missing)}')

        teachers.append(TeacherEntry(
            username=str(item['username']),
            email=str(item.get('email', '')),
            subject_code=str(item['subject_code']),
            subject_name=str(item.get('subject_name') or item['subject_code']),
        ))

    return Roster(teachers)


def load_roster(path: str) -> Roster:
    """
    Load the roster from a JSON file.

    Args:
        path: Path to roster file

    Returns:
        Roster instance

    Raises:
        ValueError: If the file is not valid JSON or not a valid roster
        OSError: If the file cannot be read
    """
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f'Roster file {path} is not valid JSON: {e}') from e

    roster = parse_roster(data)
    logger.info(f'Loaded roster with {len(roster)} teachers from {path}')
    return roster
