"""
Request validation module.

Checks a mark-attendance request before any store access.
"""

import math
import re
from numbers import Real
from typing import Any, List, Tuple
from ..errors import ValidationError

SUBJECT_CODE_PATTERN = re.compile(r'^[A-Za-z0-9_.\-]{1,64}$')


def validate_subject_code(value: Any) -> str:
    """
    Validate a subject code.

    Returns:
        The code with surrounding whitespace removed

    Raises:
        ValidationError: If missing, not a string or not an identifier
    """
    if value is None:
        raise ValidationError('subject_code is required')
    if not isinstance(value, str):
        raise ValidationError('subject_code must be a string')

    code = value.strip()
    if not code:
        raise ValidationError('subject_code is required')
    if not SUBJECT_CODE_PATTERN.match(code):
        raise ValidationError(f'subject_code is not a valid identifier: {code!r}')

    return code


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def validate_probes(value: Any) -> List[List[float]]:
    """
    Validate the batch of probe encodings.

    An empty batch is valid. Every probe must be a non-empty list of finite
    numbers; one bad probe rejects the whole batch.

    Raises:
        ValidationError: If the batch is malformed
    """
    if value is None:
        raise ValidationError('encodings is required')
    if not isinstance(value, (list, tuple)):
        raise ValidationError('encodings must be an array')

    probes: List[List[float]] = []
    for index, probe in enumerate(value):
        if not isinstance(probe, (list, tuple)):
            raise ValidationError(f'encodings[{index}] must be an array of numbers')
        if len(probe) == 0:
            raise ValidationError(f'encodings[{index}] is empty')
        if not all(_is_number(x) for x in probe):
            raise ValidationError(f'encodings[{index}] must contain only finite numbers')
        probes.append([float(x) for x in probe])

    return probes


def validate_request(payload: Any) -> Tuple[str, List[List[float]]]:
    """
    Validate a mark-attendance request body.

    Args:
        payload: Decoded JSON body

    Returns:
        Tuple of (subject_code, probes)

    Raises:
        ValidationError: If any field is missing or malformed
    """
    if not isinstance(payload, dict):
        raise ValidationError('Invalid request. Provide subject_code and encodings array')

    subject_code = validate_subject_code(payload.get('subject_code'))
    probes = validate_probes(payload.get('encodings'))
    return subject_code, probes
