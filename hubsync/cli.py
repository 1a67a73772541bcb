"""CLI entry point: main() function."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from colorama import Fore, Style

from hubsync.config import (
    REQUIRED_OPTIONS,
    create_argument_parser,
    load_config_file,
    missing_options,
    validate_config,
)
from hubsync.daemon import run_forever
from hubsync.errors import ConfigError
from hubsync.hosting import GithubHostingClient
from hubsync.models import BatchResult, HostConfig, SyncConfig
from hubsync.orchestrator import SyncOrchestrator
from hubsync.output import ConsoleOutputHandler, LoggingOutputHandler, NullOutputHandler
from hubsync.reporter import SummaryReporter


def _explicit_dests(parser, argv: list[str]) -> set[str]:
    """Return the dests of options given on the command line (as --flag or --flag=value)."""
    explicit = set()
    for action in parser._actions:
        if action.dest in ('help', 'version'):
            continue
        for opt_string in action.option_strings:
            if any(arg == opt_string or arg.startswith(opt_string + '=') for arg in argv):
                explicit.add(action.dest)
                break
    return explicit


def main(argv: list[str] | None = None):
    """Main entry point"""
    argv = sys.argv[1:] if argv is None else argv
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    file_config = load_config_file(Path.cwd(), args.config)
    cli_explicit = _explicit_dests(parser, argv)

    def effective(dest: str, toml_key: str | None = None):
        toml_key = toml_key or dest
        if dest in cli_explicit:
            return getattr(args, dest)
        if toml_key in file_config:
            return file_config[toml_key]
        return getattr(args, dest)

    required = {dest: effective(dest) for dest in REQUIRED_OPTIONS}
    try:
        missing = missing_options(required)
        if missing:
            raise ConfigError(f"missing value for: {', '.join(missing)}")

        config = SyncConfig(
            source_org=required['source_org'],
            destination_org=required['target_org'],
            cache_path=Path(required['cache_path']).expanduser().resolve(),
            name_filter=effective('repo_name'),
            repo_timeout=effective('timeout'),
            interval=effective('interval'),
            max_backoff=effective('max_backoff'),
            parallel=effective('parallel'),
            max_workers=effective('max_workers'),
            verbose=effective('verbose'),
            json_output=effective('json_output'),
        )
        validate_config(config)
    except ConfigError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        sys.exit(e.exit_code)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    # PyGithub and urllib3 are chatty at DEBUG
    logging.getLogger('github').setLevel(logging.INFO)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    if config.json_output:
        output = NullOutputHandler()
    elif effective('log_output'):
        output = LoggingOutputHandler()
    else:
        output = ConsoleOutputHandler(verbose=config.verbose)

    source = GithubHostingClient(HostConfig(required['source_url'], required['source_token']))
    destination = GithubHostingClient(HostConfig(required['target_url'], required['target_token']))
    orchestrator = SyncOrchestrator(config, source, destination, output)
    reporter = SummaryReporter(output)

    def report(cycle: int | None, result: BatchResult) -> None:
        if config.json_output:
            print(json.dumps(result.to_dict()), flush=True)
        else:
            reporter.print_summary(result, cycle)

    try:
        if effective('once'):
            result = orchestrator.run_batch()
            report(None, result)
            sys.exit(1 if result.has_failures() else 0)

        output.info(f"Mirroring {config.source_org} -> {config.destination_org} every {config.interval:g}s")
        run_forever(
            orchestrator,
            interval=config.interval,
            max_backoff=config.max_backoff,
            on_cycle=report,
        )

    except KeyboardInterrupt:
        if not config.json_output:
            output.warning("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        if config.json_output:
            print(json.dumps({'error': str(e)}, indent=2))
        else:
            print(f"{Fore.RED}Unexpected error: {e}{Style.RESET_ALL}")
            if config.verbose:
                import traceback
                traceback.print_exc()
        sys.exit(1)
