"""Configuration: argument parser and config file loader."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any

from hubsync.errors import ConfigError
from hubsync.models import DEFAULT_INTERVAL, DEFAULT_MAX_BACKOFF, REPO_SYNC_TIMEOUT, SyncConfig

try:
    import tomllib
except ModuleNotFoundError:
    try:
        import tomli as tomllib  # type: ignore[no-redef]
    except ImportError:
        tomllib = None  # type: ignore[assignment]

CONFIG_FILE_NAME = '.hubsync.toml'

# dest -> flag, for every value that must be set on the command line or in the config file
REQUIRED_OPTIONS = {
    'source_url': '--ghes-source-url',
    'source_token': '--ghes-source-token',
    'source_org': '--source-org',
    'target_url': '--ghes-target-url',
    'target_token': '--ghes-target-token',
    'target_org': '--target-org',
    'cache_path': '--cache-path',
}


def create_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all hubsync flags."""
    # Lazy import to avoid circular dependency with __init__.py
    from hubsync import __version__

    parser = argparse.ArgumentParser(
        allow_abbrev=False,
        description="Mirror all repositories of an organization to another GitHub (Enterprise) instance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --ghes-source-url=https://ghe.a.example --ghes-source-token=T1 --source-org=eng \\
           --ghes-target-url=https://ghe.b.example --ghes-target-token=T2 --target-org=eng-mirror \\
           --cache-path=/var/cache/hubsync
  %(prog)s ... --repo-name=api,web --once     # Sync two repositories once and exit
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--ghes-source-url', dest='source_url', metavar='URL',
                       help='Web URL of the source instance')
    parser.add_argument('--ghes-source-token', dest='source_token', metavar='TOKEN',
                       help='Access token for the source instance')
    parser.add_argument('--source-org', dest='source_org', metavar='ORG_NAME',
                       help='Organization to mirror from')
    parser.add_argument('--ghes-target-url', dest='target_url', metavar='URL',
                       help='Web URL of the destination instance')
    parser.add_argument('--ghes-target-token', dest='target_token', metavar='TOKEN',
                       help='Access token for the destination instance')
    parser.add_argument('--target-org', dest='target_org', metavar='ORG_NAME',
                       help='Organization to mirror into')
    parser.add_argument('--cache-path', dest='cache_path', metavar='PATH',
                       help='Directory holding the local bare mirrors')
    parser.add_argument('--repo-name', dest='repo_name', metavar='NAME[,NAME...]',
                       help='Only sync these repositories (comma-separated)')
    parser.add_argument('--timeout', type=float, default=REPO_SYNC_TIMEOUT,
                       help=f'Per-repository deadline in seconds (default: {REPO_SYNC_TIMEOUT})')
    parser.add_argument('--interval', type=float, default=DEFAULT_INTERVAL,
                       help=f'Seconds to wait between batches (default: {DEFAULT_INTERVAL:g})')
    parser.add_argument('--max-backoff', type=float, default=DEFAULT_MAX_BACKOFF,
                       help=f'Upper bound of the delay after failed batches (default: {DEFAULT_MAX_BACKOFF:g})')
    parser.add_argument('--parallel', action='store_true',
                       help='Sync repositories in parallel')
    parser.add_argument('--max-workers', type=int, default=min(os.cpu_count() or 4, 8),
                       help='Max parallel workers (default: min(cpu_count, 8))')
    parser.add_argument('--once', action='store_true',
                       help='Run a single batch and exit instead of looping forever')
    parser.add_argument('--json', dest='json_output', action='store_true',
                       help='Print batch results as JSON (suppresses normal output)')
    parser.add_argument('--log', dest='log_output', action='store_true',
                       help='Send progress and summaries to the log instead of the console')
    parser.add_argument('--verbose', action='store_true',
                       help='Verbose output')
    parser.add_argument('--config', type=str, default=None,
                       help=f'Path to config file (default: {CONFIG_FILE_NAME} in the current or home directory)')

    return parser


def load_config_file(search_dir: Path, config_path: str | None = None) -> dict[str, Any]:
    """Load .hubsync.toml from explicit path, search dir, or home dir.

    Returns empty dict if not found or tomllib is unavailable.
    """
    candidates = [Path(config_path)] if config_path else [search_dir / CONFIG_FILE_NAME, Path.home() / CONFIG_FILE_NAME]
    for path in candidates:
        if path.is_file():
            if tomllib is None:
                print(f"Warning: Found {path} but tomllib/tomli not available (Python 3.11+ or pip install tomli). Ignoring.")
                return {}
            try:
                with open(path, 'rb') as f:
                    return tomllib.load(f)
            except Exception as e:
                print(f"Warning: Failed to parse {path}: {e}")
                return {}
    if config_path:
        print(f"Warning: Config file '{config_path}' not found. Ignoring.")
    return {}


def missing_options(values: dict[str, Any]) -> list[str]:
    """Return the flags of required options that have no value."""
    return [flag for dest, flag in REQUIRED_OPTIONS.items() if not values.get(dest)]


def validate_config(config: SyncConfig) -> None:
    """Reject numeric settings the sync loop cannot run with. Raises ConfigError."""
    def _number(value) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    if not _number(config.repo_timeout) or config.repo_timeout <= 0:
        raise ConfigError(f"timeout must be a positive number of seconds, got {config.repo_timeout!r}")
    if not _number(config.interval) or config.interval < 0:
        raise ConfigError(f"interval must be a non-negative number of seconds, got {config.interval!r}")
    if not _number(config.max_backoff) or config.max_backoff < 0:
        raise ConfigError(f"max_backoff must be a non-negative number of seconds, got {config.max_backoff!r}")
    if not isinstance(config.max_workers, int) or isinstance(config.max_workers, bool) or config.max_workers < 1:
        raise ConfigError(f"max_workers must be a positive integer, got {config.max_workers!r}")
