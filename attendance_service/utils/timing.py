"""
Timing utilities.

Uptime formatting and retry helpers for store calls.
"""

import time
from typing import Callable, Tuple, Type, TypeVar
from ..logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


_UPTIME_UNITS = (('d', 86400), ('h', 3600), ('m', 60))


def format_uptime(seconds: float) -> str:
    """
    Format service uptime for /health, e.g. "1d 2h 30m 45s".

    Zero-valued larger units are omitted; seconds are always shown.
    """
    remaining = max(0, int(seconds))
    parts = []
    for suffix, size in _UPTIME_UNITS:
        value, remaining = divmod(remaining, size)
        if value:
            parts.append(f'{value}{suffix}')
    parts.append(f'{remaining}s')
    return ' '.join(parts)


def retry_with_backoff(
    func: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep
) -> T:
    """
    Retry function with exponential backoff.

    Args:
        func: Function to retry
        max_attempts: Maximum number of attempts
        initial_delay: Delay before the second attempt, in seconds
        backoff_factor: Backoff multiplier
        retry_on: Exception types that trigger another attempt; anything
            else propagates immediately
        sleep: Sleep function (replaced in tests)

    Returns:
        Function result

    Raises:
        Last exception if all attempts fail
    """
    if max_attempts < 1:
        raise ValueError('max_attempts must be at least 1')

    delay = initial_delay

    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except retry_on as e:
            if attempt == max_attempts:
                raise
            logger.warning(
                f'Attempt {attempt}/{max_attempts} failed ({e}), '
                f'retrying in {delay:.1f}s'
            )
            sleep(delay)
            delay *= backoff_factor

    raise RuntimeError('Retry failed with no exception')
