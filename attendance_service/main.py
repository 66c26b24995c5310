"""
Attendance Service - Main Entry Point

Serves the mark-attendance API for capture devices.
"""

import argparse
import dataclasses
import os
import sys
from pathlib import Path
from typing import Optional
from .app import create_app
from .config import Config, STORE_BACKENDS, load_config
from .logging_config import setup_logging, get_logger
from .roster import Roster, load_roster
from .stores import AttendanceStore, MemoryStore, SupabaseStore

logger = get_logger(__name__)


def _load_local_env() -> None:
    """Load environment variables from attendance_service/.env if present."""
    env_path = Path(__file__).resolve().parent / '.env'
    if not env_path.exists():
        return

    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        os.environ.setdefault(key.strip(), value.strip())


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Attendance Service - Face Encoding Matcher'
    )

    parser.add_argument(
        '--port',
        type=int,
        help='HTTP port (or set HTTP_PORT)'
    )

    parser.add_argument(
        '--store',
        choices=STORE_BACKENDS,
        help='Store backend (or set STORE_BACKEND)'
    )

    parser.add_argument(
        '--threshold',
        type=float,
        help='Match distance threshold (or set MATCH_THRESHOLD)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Override configuration with command line flags that were given."""
    overrides = {}
    if args.port is not None:
        overrides['http_port'] = args.port
    if args.store is not None:
        overrides['store_backend'] = args.store
    if args.threshold is not None:
        overrides['match_threshold'] = args.threshold
    if args.debug:
        overrides['debug_mode'] = True
    return dataclasses.replace(config, **overrides)


def build_store(config: Config, roster: Optional[Roster] = None) -> AttendanceStore:
    """
    Create the configured store.

    The memory store gets one subject per roster subject code (the code
    doubles as the subject ID) and its gallery from GALLERY_FILE.
    """
    if config.store_backend == 'supabase':
        return SupabaseStore.from_config(config)

    subjects = {code: code for code in roster.subject_codes()} if roster else {}
    if config.gallery_file:
        return MemoryStore.from_gallery_file(config.gallery_file, subjects=subjects)
    return MemoryStore(subjects=subjects)


def main(argv: Optional[list] = None) -> None:
    """Main entry point."""
    _load_local_env()
    args = parse_args(argv)

    try:
        config = apply_args(load_config(), args)
    except ValueError as e:
        print(f'Invalid configuration: {e}', file=sys.stderr)
        sys.exit(2)

    setup_logging(config.service_name, config.debug_mode)

    logger.info('=' * 60)
    logger.info('Attendance Service')
    logger.info('=' * 60)
    logger.info(f'Store: {config.store_backend}')
    logger.info(f'Metric: {config.distance_metric} (threshold {config.match_threshold})')
    logger.info(f'Duplicate policy: {config.duplicate_policy}')
    logger.info(f'Write workers: {config.write_workers}')
    logger.info('=' * 60)

    try:
        roster = load_roster(config.roster_file) if config.roster_file else None
        store = build_store(config, roster)
        app = create_app(config, store, roster)

        logger.info(f'Listening on port {config.http_port}')
        app.run(
            host='0.0.0.0',
            port=config.http_port,
            threaded=True,
            debug=False,
            use_reloader=False
        )

    except KeyboardInterrupt:
        logger.info('Received keyboard interrupt, shutting down...')
        sys.exit(0)
    except Exception as e:
        logger.error(f'Fatal error: {e}', exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
