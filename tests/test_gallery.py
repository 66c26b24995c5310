"""Tests for gallery parsing and nearest-neighbour lookup."""

import pytest

from attendance_service.matching.distance import cosine_distance
from attendance_service.matching.gallery import Gallery, parse_encoding


HUGE_INT_TEXT = '[1' + '0' * 400 + ', 0.0]'


@pytest.mark.parametrize('raw', [
    None,
    'not json',
    '{"a": 1}',
    {'a': 1},
    True,
    [[1.0, 2.0]],
    ['x', 'y'],
    [1.0, float('nan')],
    HUGE_INT_TEXT,
    [10 ** 400, 0.0],
])
def test_unreadable_encodings_become_placeholders(raw):
    assert parse_encoding(raw).size == 0


def test_parse_encoding_accepts_json_text():
    assert parse_encoding('[0.5, -0.25]').tolist() == [0.5, -0.25]


def test_nearest_scans_whole_gallery():
    # First row is under threshold but a later row is closer
    gallery = Gallery.from_rows([
        ('bob', [0.5, 0.0]),
        ('alice', [0.1, 0.0]),
    ])

    student, distance = gallery.nearest([0.0, 0.0])

    assert student == 'alice'
    assert distance == pytest.approx(0.1)


def test_nearest_uses_best_of_student_encodings():
    gallery = Gallery.from_rows([
        ('alice', [0.4, 0.0]),
        ('alice', [0.1, 0.0]),
    ])

    student, distance = gallery.nearest([0.0, 0.0])

    assert student == 'alice'
    assert distance == pytest.approx(0.1)


def test_ties_keep_earliest_row():
    gallery = Gallery.from_rows([
        ('first', [0.2, 0.0]),
        ('second', [-0.2, 0.0]),
    ])

    assert gallery.nearest([0.0, 0.0])[0] == 'first'


def test_placeholder_rows_never_match():
    gallery = Gallery.from_rows([
        ('pending', []),
        ('broken', None),
        ('short', [0.0]),
    ])

    student, distance = gallery.nearest([0.0, 0.0])

    assert student is None
    assert distance == float('inf')


def test_empty_gallery():
    gallery = Gallery.from_rows([])

    assert len(gallery) == 0
    assert gallery.nearest([0.1, 0.2]) == (None, float('inf'))


def test_student_ids_are_distinct_and_ordered():
    gallery = Gallery.from_rows([('b', [1.0]), ('a', [2.0]), ('b', [3.0]), (7, [4.0])])

    assert gallery.student_ids == ['b', 'a', '7']
    assert len(gallery) == 4


def test_custom_distance_function():
    gallery = Gallery.from_rows([('alice', [2.0, 0.0]), ('bob', [0.0, 1.0])], cosine_distance)

    student, distance = gallery.nearest([10.0, 0.0])

    assert student == 'alice'
    assert distance == pytest.approx(0.0, abs=1e-12)


def test_mismatched_constructor_lengths():
    with pytest.raises(ValueError):
        Gallery(['a'], [])
