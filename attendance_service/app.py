"""
Flask application for HTTP API.

Provides:
- POST /api/mark-attendance: Match a capture batch and mark attendance
- POST /functions/v1/mark-attendance: Same endpoint, legacy path
- GET /api/subjects: Subjects from the teacher roster
- GET /api/teachers/<username>/subject: Subject taken by a teacher
- GET /health: Service health check
"""

import time
from typing import Optional
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from .config import Config
from .errors import AttendanceError, NotFoundError, ValidationError
from .logging_config import get_logger
from .matching import EncodingMatcher, validate_request
from .roster import Roster
from .stores.base import AttendanceStore
from .utils.timing import format_uptime

logger = get_logger(__name__)

CORS_HEADERS = ['authorization', 'x-client-info', 'apikey', 'content-type']


def create_app(
    config: Config,
    store: AttendanceStore,
    roster: Optional[Roster] = None
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Service configuration
        store: Attendance store used by the matcher
        roster: Optional teacher/subject roster

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    CORS(app, allow_headers=CORS_HEADERS, send_wildcard=True)

    matcher = EncodingMatcher.from_config(store, config)
    started_at = time.time()

    app.config['MATCHER'] = matcher
    app.config['ROSTER'] = roster

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(error: AttendanceError):
        if error.status_code >= 500:
            logger.error(f'❌ {error.code}: {error.message}')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        if isinstance(error, HTTPException):
            return error
        logger.error(f'❌ Unexpected error: {error}', exc_info=True)
        return jsonify({'error': str(error) or 'Unknown error', 'code': 'internal_error'}), 500

    @app.route('/api/mark-attendance', methods=['POST'])
    @app.route('/functions/v1/mark-attendance', methods=['POST'])
    def mark_attendance():
        """Match a batch of face encodings and mark attendance."""
        payload = request.get_json(silent=True)
        if payload is None:
            raise ValidationError('Request body must be JSON')

        subject_code, probes = validate_request(payload)
        report = matcher.match_batch(subject_code, probes)
        return jsonify(report.to_dict())

    @app.route('/api/subjects')
    def subjects():
        """List subjects from the roster."""
        return jsonify({'subjects': roster.subjects() if roster else []})

    @app.route('/api/teachers/<username>/subject')
    def teacher_subject(username: str):
        """Subject code for a teacher login."""
        subject_code = roster.subject_for_teacher(username) if roster else None
        if subject_code is None:
            raise NotFoundError(f'Unknown teacher: {username}', code='unknown_teacher')
        return jsonify({'username': username, 'subject_code': subject_code})

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'service': config.service_name,
            'store': store.name,
            'threshold': matcher.threshold,
            'metric': matcher.metric,
            'uptime': format_uptime(time.time() - started_at),
        })

    return app
