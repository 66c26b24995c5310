"""
Encoding matcher module.

Matches one batch of probe encodings against the enrolled gallery and
records attendance for every matched student, once per batch.
"""

import contextvars
import math
import threading
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from .distance import get_distance_function
from .gallery import Gallery
from .report import FailedWrite, MatchReport, ProbeAssignment
from ..config import Config
from ..errors import NotFoundError, StoreError
from ..logging_config import batch_context, get_logger
from ..stores.base import AttendanceStore

logger = get_logger(__name__)

DEFAULT_THRESHOLD = 0.6


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WrittenSet:
    """Students already claimed for a write in the current batch."""

    def __init__(self):
        self._lock = threading.Lock()
        self._students = set()

    def claim(self, student_id: str) -> bool:
        """
        Atomically check and mark a student.

        Returns:
            True if the caller should issue the write
        """
        with self._lock:
            if student_id in self._students:
                return False
            self._students.add(student_id)
            return True


class EncodingMatcher:
    """
    Nearest-neighbour matcher with per-batch duplicate suppression.

    Each probe is compared with every gallery row. It is assigned to the
    closest student when that distance is below the threshold; otherwise
    it is reported as an unknown face.
    """

    def __init__(
        self,
        store: AttendanceStore,
        threshold: float = DEFAULT_THRESHOLD,
        metric: str = 'euclidean',
        duplicate_policy: str = 'batch',
        write_workers: int = 1,
        clock: Callable[[], datetime] = _utcnow
    ):
        if threshold <= 0:
            raise ValueError('threshold must be positive')
        if duplicate_policy not in ('batch', 'none'):
            raise ValueError(f'Unknown duplicate policy: {duplicate_policy!r}')
        if write_workers < 1:
            raise ValueError('write_workers must be at least 1')

        self.store = store
        self.threshold = threshold
        self.metric = metric
        self.duplicate_policy = duplicate_policy
        self.write_workers = write_workers
        self._distance_fn = get_distance_function(metric)
        self._clock = clock

    @classmethod
    def from_config(cls, store: AttendanceStore, config: Config) -> 'EncodingMatcher':
        return cls(
            store,
            threshold=config.match_threshold,
            metric=config.distance_metric,
            duplicate_policy=config.duplicate_policy,
            write_workers=config.write_workers,
        )

    def match_batch(
        self,
        subject_code: str,
        probes: Sequence[Sequence[float]]
    ) -> MatchReport:
        """
        Match a batch of probes and record attendance.

        Args:
            subject_code: Validated subject code
            probes: Validated probe encodings, in capture order

        Returns:
            MatchReport for the batch

        Raises:
            NotFoundError: If the subject code is unknown
            StoreError: If subject lookup or gallery read fails
        """
        with batch_context(subject_code):
            return self._match(subject_code, probes)

    def _match(
        self,
        subject_code: str,
        probes: Sequence[Sequence[float]]
    ) -> MatchReport:
        logger.info(f'Batch for subject {subject_code}: {len(probes)} probes')

        subject_id = self.store.resolve_subject(subject_code)
        if subject_id is None:
            logger.info(f'Unknown subject code {subject_code!r}')
            raise NotFoundError('Invalid subject code')

        gallery = self._load_gallery()

        report = MatchReport()
        written = WrittenSet()
        marked_at = self._clock()
        pending: List[Tuple[str, Future]] = []

        with ThreadPoolExecutor(
            max_workers=self.write_workers,
            thread_name_prefix='attendance-write'
        ) as executor:
            for index, probe in enumerate(probes):
                student_id, distance = gallery.nearest(probe)
                shown = distance if math.isfinite(distance) else None

                if student_id is None or distance >= self.threshold:
                    logger.debug(f'Probe {index}: no match (best distance {shown})')
                    report.unknown_faces.append(index)
                    report.assignments.append(ProbeAssignment(index, None, shown))
                    continue

                logger.debug(f'Probe {index}: student {student_id} at {distance:.4f}')
                report.assignments.append(ProbeAssignment(index, student_id, distance))

                if self.duplicate_policy == 'batch' and not written.claim(student_id):
                    continue

                # Worker threads do not inherit the batch logging context
                future = executor.submit(
                    contextvars.copy_context().run,
                    self._write, student_id, subject_id, marked_at
                )
                pending.append((student_id, future))

        self._collect_writes(pending, report)

        logger.info(
            f'✅ Batch for subject {subject_code} done: '
            f'{report.marked} marked, {report.unknown} unknown, '
            f'{len(report.failed_writes)} failed writes'
        )
        return report

    def _load_gallery(self) -> Gallery:
        rows = self.store.fetch_all_encodings()
        gallery = Gallery.from_rows(rows, self._distance_fn)
        logger.debug(
            f'Gallery loaded: {len(gallery)} encodings, '
            f'{len(gallery.student_ids)} students'
        )
        return gallery

    def _write(
        self,
        student_id: str,
        subject_id: str,
        marked_at: datetime
    ) -> Optional[str]:
        """
        Issue one attendance write.

        Returns:
            None on success, error message on failure
        """
        try:
            self.store.record_attendance(student_id, subject_id, marked_at)
            return None
        except StoreError as e:
            logger.warning(f'❌ Attendance write failed for student {student_id}: {e}')
            return str(e)
        except Exception as e:
            logger.exception(f'❌ Unexpected error writing attendance for student {student_id}')
            return str(e) or e.__class__.__name__

    @staticmethod
    def _collect_writes(
        pending: List[Tuple[str, Future]],
        report: MatchReport
    ) -> None:
        # student -> (any success, last error), in first-write order
        outcomes: Dict[str, Tuple[bool, Optional[str]]] = OrderedDict()

        for student_id, future in pending:
            error = future.result()
            succeeded, last_error = outcomes.get(student_id, (False, None))
            if error is None:
                succeeded = True
            else:
                last_error = error
            outcomes[student_id] = (succeeded, last_error)

        for student_id, (succeeded, last_error) in outcomes.items():
            if succeeded:
                report.marked_students.append(student_id)
            else:
                report.failed_writes.append(FailedWrite(student_id, last_error or ''))
