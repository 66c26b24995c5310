"""
Logging configuration for Attendance Service.

Every record carries the service name and, while a batch is being matched,
the subject code of that batch. Concurrent batches log from different
threads, so the subject is kept in a context variable rather than on the
handler.
"""

import contextvars
import logging
import sys
from contextlib import contextmanager
from typing import Iterator

_current_subject: contextvars.ContextVar[str] = contextvars.ContextVar(
    'current_subject', default='-'
)

# Chatty third-party loggers kept at WARNING unless debugging
_QUIET_LOGGERS = ('urllib3', 'werkzeug')


class BatchContextFilter(logging.Filter):
    """Add service name and current batch subject to log records."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        record.subject = _current_subject.get()
        return True


@contextmanager
def batch_context(subject_code: str) -> Iterator[None]:
    """Tag log records emitted inside the block with a subject code."""
    token = _current_subject.set(subject_code)
    try:
        yield
    finally:
        _current_subject.reset(token)


def current_subject() -> str:
    return _current_subject.get()


def setup_logging(service_name: str, debug: bool = False) -> None:
    """
    Configure logging for the service.

    Args:
        service_name: Service identifier for log context
        debug: Enable debug level logging
    """
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] [service=%(service_name)s subject=%(subject)s] '
        '%(name)s: %(message)s'
    ))
    handler.addFilter(BatchContextFilter(service_name))
    root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(level if debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
