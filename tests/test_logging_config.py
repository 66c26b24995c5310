"""Tests for logging setup and batch context."""

import logging

from attendance_service.logging_config import (
    BatchContextFilter,
    batch_context,
    current_subject,
    setup_logging,
)
from attendance_service.matching import EncodingMatcher

from conftest import RecordingStore


def make_record():
    return logging.LogRecord('test', logging.INFO, __file__, 1, 'hello', None, None)


def test_filter_adds_service_and_subject():
    log_filter = BatchContextFilter('attendance')

    record = make_record()
    assert log_filter.filter(record)
    assert record.service_name == 'attendance'
    assert record.subject == '-'

    with batch_context('DSA'):
        record = make_record()
        log_filter.filter(record)
        assert record.subject == 'DSA'

    assert current_subject() == '-'


def test_context_is_reset_after_error():
    try:
        with batch_context('OS'):
            raise RuntimeError('boom')
    except RuntimeError:
        pass

    assert current_subject() == '-'


def test_write_threads_see_batch_subject():
    seen = []

    class SubjectSpy(RecordingStore):
        def record_attendance(self, student_id, subject_id, marked_at):
            seen.append(current_subject())

    store = SubjectSpy(subjects={'DSA': 'subj-dsa'}, gallery=[('a', [0.0]), ('b', [1.0])])

    EncodingMatcher(store, write_workers=2).match_batch('DSA', [[0.0], [1.0]])

    assert seen == ['DSA', 'DSA']
    assert current_subject() == '-'


def test_setup_logging_installs_one_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging('attendance', debug=False)
        setup_logging('attendance', debug=True)

        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert any(isinstance(f, BatchContextFilter) for f in root.handlers[0].filters)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
