"""
Configuration module for Attendance Service.

Loads configuration from environment variables with sensible defaults.
All settings are immutable after initialization.
"""

import os
from dataclasses import dataclass
from typing import Optional


DISTANCE_METRICS = ('euclidean', 'cosine')
DUPLICATE_POLICIES = ('batch', 'none')
STORE_BACKENDS = ('supabase', 'memory')


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration for Attendance Service.

    Service Identity:
        service_name: Name of this service instance (shown in logs)
        http_port: Port for Flask HTTP server

    Store:
        store_backend: 'supabase' (PostgREST over HTTP) or 'memory'
        supabase_url: Base URL of the Supabase project
        supabase_key: Service role key sent as apikey/bearer token
        request_timeout: Seconds before a store HTTP call is abandoned
        store_retries: Attempts for idempotent store reads
        roster_file: Optional JSON file with the teacher/subject roster
        gallery_file: Optional JSON file seeding the memory store gallery

    Matching:
        match_threshold: Maximum distance for a probe to match (exclusive)
        distance_metric: 'euclidean' or 'cosine'
        duplicate_policy: 'batch' writes each student once per batch,
            'none' writes once per matching probe
        write_workers: Threads issuing attendance writes (1 = sequential)

    System:
        debug_mode: Enable debug logging
    """

    # Service
    service_name: str
    http_port: int

    # Store
    store_backend: str
    supabase_url: str
    supabase_key: str
    request_timeout: float
    store_retries: int
    roster_file: Optional[str]
    gallery_file: Optional[str]

    # Matching
    match_threshold: float
    distance_metric: str
    duplicate_policy: str
    write_workers: int

    # System
    debug_mode: bool

    def __post_init__(self):
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(f'Unknown store backend: {self.store_backend!r}')
        if self.distance_metric not in DISTANCE_METRICS:
            raise ValueError(f'Unknown distance metric: {self.distance_metric!r}')
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ValueError(f'Unknown duplicate policy: {self.duplicate_policy!r}')
        if self.match_threshold <= 0:
            raise ValueError('match_threshold must be positive')
        if self.write_workers < 1:
            raise ValueError('write_workers must be at least 1')
        if self.store_retries < 1:
            raise ValueError('store_retries must be at least 1')


def load_config() -> Config:
    """
    Load configuration from environment variables.

    Returns:
        Config: Immutable configuration object

    Raises:
        ValueError: If a value cannot be parsed or is out of range
    """
    return Config(
        # Service
        service_name=os.getenv('SERVICE_NAME', 'attendance'),
        http_port=int(os.getenv('HTTP_PORT', '5001')),

        # Store
        store_backend=os.getenv('STORE_BACKEND', 'supabase').lower(),
        supabase_url=os.getenv('SUPABASE_URL', '').rstrip('/'),
        supabase_key=os.getenv('SUPABASE_SERVICE_ROLE_KEY', ''),
        request_timeout=float(os.getenv('REQUEST_TIMEOUT', '10')),
        store_retries=int(os.getenv('STORE_RETRIES', '3')),
        roster_file=os.getenv('ROSTER_FILE') or None,
        gallery_file=os.getenv('GALLERY_FILE') or None,

        # Matching
        match_threshold=float(os.getenv('MATCH_THRESHOLD', '0.6')),
        distance_metric=os.getenv('DISTANCE_METRIC', 'euclidean').lower(),
        duplicate_policy=os.getenv('DUPLICATE_POLICY', 'batch').lower(),
        write_workers=int(os.getenv('WRITE_WORKERS', '1')),

        # System
        debug_mode=os.getenv('DEBUG', 'false').lower() == 'true',
    )
