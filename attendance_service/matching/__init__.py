"""
Matching package.

Contains modules for:
- Encoding distances
- Gallery loading and nearest-neighbour lookup
- Request validation
- Batch matching and match reports
"""

from .distance import (
    MISMATCH_DISTANCE,
    cosine_distance,
    euclidean_distance,
    get_distance_function,
)
from .gallery import Gallery, parse_encoding
from .matcher import EncodingMatcher
from .report import FailedWrite, MatchReport, ProbeAssignment
from .validation import validate_probes, validate_request, validate_subject_code

__all__ = [
    'MISMATCH_DISTANCE',
    'cosine_distance',
    'euclidean_distance',
    'get_distance_function',
    'Gallery',
    'parse_encoding',
    'EncodingMatcher',
    'FailedWrite',
    'MatchReport',
    'ProbeAssignment',
    'validate_probes',
    'validate_request',
    'validate_subject_code',
]
