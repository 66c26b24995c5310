"""Shared fixtures for the attendance service tests."""

from datetime import datetime, timezone

import pytest

from attendance_service.config import Config
from attendance_service.errors import StoreError
from attendance_service.stores import MemoryStore

FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def make_config(**overrides) -> Config:
    values = dict(
        service_name='attendance-test',
        http_port=5001,
        store_backend='memory',
        supabase_url='',
        supabase_key='',
        request_timeout=5.0,
        store_retries=1,
        roster_file=None,
        gallery_file=None,
        match_threshold=0.6,
        distance_metric='euclidean',
        duplicate_policy='batch',
        write_workers=1,
        debug_mode=False,
    )
    values.update(overrides)
    return Config(**values)


class RecordingStore(MemoryStore):
    """Memory store that keeps every write call and can fail on demand."""

    def __init__(self, *args, fail_for=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_for = set(fail_for)
        self.writes = []
        self.gallery_reads = 0

    def fetch_all_encodings(self):
        self.gallery_reads += 1
        return super().fetch_all_encodings()

    def record_attendance(self, student_id, subject_id, marked_at):
        self.writes.append((student_id, subject_id))
        if student_id in self.fail_for:
            raise StoreError(f'insert rejected for {student_id}')
        super().record_attendance(student_id, subject_id, marked_at)


class BrokenGalleryStore(RecordingStore):
    """Store whose gallery read always fails."""

    def fetch_all_encodings(self):
        self.gallery_reads += 1
        raise StoreError('student_images unavailable')


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def gallery_rows():
    return [
        ('alice', [0.0, 0.0, 0.0]),
        ('bob', [1.0, 1.0, 1.0]),
        ('alice', [0.05, 0.0, 0.0]),
        ('carol', [5.0, 5.0, 5.0]),
    ]


@pytest.fixture
def store(gallery_rows):
    return RecordingStore(subjects={'DSA': 'subj-dsa'}, gallery=gallery_rows)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
