"""Tests for mark-attendance request validation."""

import pytest

from attendance_service.errors import ValidationError
from attendance_service.matching.validation import (
    validate_probes,
    validate_request,
    validate_subject_code,
)


def test_valid_request():
    subject_code, probes = validate_request({
        'subject_code': ' DSA ',
        'encodings': [[0.1, 0.2], [1, 2]],
    })

    assert subject_code == 'DSA'
    assert probes == [[0.1, 0.2], [1.0, 2.0]]


def test_empty_batch_is_valid():
    assert validate_request({'subject_code': 'OS', 'encodings': []}) == ('OS', [])


@pytest.mark.parametrize('payload', [
    None,
    [],
    'DSA',
    {},
    {'encodings': [[0.1]]},
    {'subject_code': '', 'encodings': [[0.1]]},
    {'subject_code': '   ', 'encodings': [[0.1]]},
    {'subject_code': 42, 'encodings': [[0.1]]},
    {'subject_code': 'DSA; drop table', 'encodings': [[0.1]]},
    {'subject_code': 'x' * 65, 'encodings': [[0.1]]},
    {'subject_code': 'DSA'},
    {'subject_code': 'DSA', 'encodings': None},
    {'subject_code': 'DSA', 'encodings': 'abc'},
    {'subject_code': 'DSA', 'encodings': {'0': [0.1]}},
])
def test_invalid_requests(payload):
    with pytest.raises(ValidationError):
        validate_request(payload)


@pytest.mark.parametrize('probes', [
    [[0.1, 0.2], 'face'],
    [[0.1, 0.2], []],
    [[0.1, 'x']],
    [[0.1, None]],
    [[True, 0.5]],
    [[0.1, float('nan')]],
    [[float('inf')]],
    [[[0.1, 0.2]]],
])
def test_one_bad_probe_rejects_batch(probes):
    with pytest.raises(ValidationError):
        validate_probes(probes)


def test_error_names_probe_index():
    with pytest.raises(ValidationError, match=r'encodings\[1\]'):
        validate_probes([[0.1], ['bad']])


@pytest.mark.parametrize('code', ['DSA', 'Basket_Course', 'cs-101', 'os.2026', 'nosuchsubject'])
def test_identifier_subject_codes(code):
    assert validate_subject_code(code) == code
