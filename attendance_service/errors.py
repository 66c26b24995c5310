"""
Error taxonomy for Attendance Service.

Each error carries the HTTP status and machine-readable code used when it
is rendered by the Flask app. A probe with no close gallery entry is not an
error; it is reported through the match report.
"""

from typing import Optional


class AttendanceError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500
    code = 'internal_error'

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {'error': self.message, 'code': self.code}


class ValidationError(AttendanceError):
    """Request fields are missing or malformed."""

    status_code = 400
    code = 'bad_request'


class NotFoundError(AttendanceError):
    """Subject code does not resolve to a known subject."""

    status_code = 404
    code = 'unknown_subject'


class StoreError(AttendanceError):
    """Gallery read, subject lookup or attendance write failed."""

    status_code = 500
    code = 'store_error'
