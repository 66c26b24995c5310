"""
Supabase store module.

Reads subjects and student encodings and writes attendance rows through the
Supabase PostgREST API.
"""

import requests
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from .base import AttendanceStore
from ..config import Config
from ..errors import StoreError
from ..logging_config import get_logger
from ..utils.timing import retry_with_backoff

logger = get_logger(__name__)

PAGE_SIZE = 1000

# Postgres unique_violation, returned by PostgREST on duplicate inserts
UNIQUE_VIOLATION = '23505'

RANGE_NOT_SATISFIABLE = 416

# Server-side 5xx surfaces as HTTPError; client errors become StoreError
TRANSIENT_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.HTTPError,
)


class SupabaseStore(AttendanceStore):
    """
    Store backed by the Supabase tables `subjects`, `student_images` and
    `attendance`.

    Reads are retried with backoff. Attendance inserts are not retried here;
    a failed batch can be resubmitted as a whole.
    """

    name = 'supabase'

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        retries: int = 3,
        retry_delay: float = 0.5,
        session: Optional[requests.Session] = None
    ):
        if not base_url:
            raise ValueError('Supabase URL is required')
        if not api_key:
            raise ValueError('Supabase service role key is required')

        self.rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.update({
            'apikey': api_key,
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
        })

    @classmethod
    def from_config(cls, config: Config) -> 'SupabaseStore':
        return cls(
            config.supabase_url,
            config.supabase_key,
            timeout=config.request_timeout,
            retries=config.store_retries,
        )

    def resolve_subject(self, subject_code: str) -> Optional[str]:
        params = {
            'select': 'id',
            'subject_code': f'eq.{subject_code}',
            'limit': '1',
        }
        rows = self._read(
            lambda: self._get_json('subjects', params),
            f'subject lookup for {subject_code!r}'
        )
        if not rows:
            return None
        if rows[0].get('id') is None:
            raise StoreError(f'Subject {subject_code!r} has no id')
        return str(rows[0]['id'])

    def fetch_all_encodings(self) -> List[Tuple[str, Any]]:
        rows = self._read(self._fetch_image_rows, 'gallery read')
        logger.info(f'Fetched {len(rows)} student encodings from Supabase')
        return [
            (str(row['student_id']), row.get('encoding'))
            for row in rows
            if row.get('student_id') is not None
        ]

    def record_attendance(
        self,
        student_id: str,
        subject_id: str,
        marked_at: datetime
    ) -> None:
        # marked_at is filled by the table default; the row itself is the fact
        url = f'{self.rest_url}/attendance'
        payload = {'student_id': student_id, 'subject_id': subject_id}

        try:
            response = self.session.post(
                url,
                json=payload,
                headers={'Prefer': 'return=minimal'},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise StoreError(f'Timeout writing attendance to {url}') from None
        except requests.exceptions.RequestException as e:
            raise StoreError(f'Error writing attendance: {e}') from e

        if response.ok:
            return

        if self._is_duplicate(response):
            logger.debug(f'Attendance for student {student_id} already recorded')
            return

        raise StoreError(
            f'Attendance write failed: {response.status_code} {response.text}'
        )

    def _fetch_image_rows(self) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page = self._get_json(
                'student_images',
                {'select': 'student_id,encoding', 'order': 'id'},
                headers={'Range': f'{offset}-{offset + PAGE_SIZE - 1}'},
                # PostgREST answers 416 once the offset is past the last row,
                # which happens when the row count is a multiple of PAGE_SIZE
                past_end_ok=offset > 0,
            )
            rows.extend(page)
            if len(page) < PAGE_SIZE:
                return rows
            offset += PAGE_SIZE

    def _get_json(
        self,
        table: str,
        params: Dict[str, str],
        headers: Optional[Dict[str, str]] = None,
        past_end_ok: bool = False
    ) -> List[Dict[str, Any]]:
        url = f'{self.rest_url}/{table}'
        response = self.session.get(
            url, params=params, headers=headers, timeout=self.timeout
        )

        if response.status_code == RANGE_NOT_SATISFIABLE and past_end_ok:
            return []
        if response.status_code >= 500:
            # HTTPError is retried by _read; 4xx below is not
            response.raise_for_status()
        if not response.ok:
            raise StoreError(
                f'Request to {table} rejected: {response.status_code} {response.text}'
            )

        data = response.json()
        if not isinstance(data, list):
            raise StoreError(f'Unexpected response from {table}: {data!r}')
        if not all(isinstance(row, dict) for row in data):
            raise StoreError(f'Unexpected row in {table} response')
        return data

    def _read(self, func, what: str):
        try:
            return retry_with_backoff(
                func,
                max_attempts=self.retries,
                initial_delay=self.retry_delay,
                retry_on=TRANSIENT_ERRORS,
            )
        except StoreError as e:
            logger.error(f'❌ Supabase {what} failed: {e}')
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f'❌ Supabase {what} failed: {e}')
            raise StoreError(f'Supabase {what} failed: {e}') from e
        except ValueError as e:
            logger.error(f'❌ Supabase {what} returned invalid JSON: {e}')
            raise StoreError(f'Supabase {what} returned invalid JSON') from e

    @staticmethod
    def _is_duplicate(response: requests.Response) -> bool:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get('code'):
            return body['code'] == UNIQUE_VIOLATION
        return response.status_code == 409
