"""
Command-line interface for provisioning sync.

Available commands:
- run: Execute one sync from CSV inputs
- schedule: Run syncs periodically
- report: Render reports from previous runs
- validate-config: Check a configuration file
"""

import sys

from sync_utils.logging import setup_logging
from sync_utils.tracing import initialize_tracing, shutdown_tracing

from .commands import cmd_report, cmd_run, cmd_schedule, cmd_validate_config
from .parser import create_parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the provisioning-sync CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        json_format=args.log_json,
    )

    if args.otlp_endpoint or args.trace_console:
        initialize_tracing(
            otlp_endpoint=args.otlp_endpoint,
            console_export=args.trace_console,
        )

    commands = {
        'run': cmd_run,
        'schedule': cmd_schedule,
        'report': cmd_report,
        'validate-config': cmd_validate_config,
    }

    if args.command not in commands:
        parser.print_help()
        sys.exit(1)

    try:
        commands[args.command](args)
    finally:
        shutdown_tracing()


__all__ = [
    'main',
    'cmd_run',
    'cmd_schedule',
    'cmd_report',
    'cmd_validate_config',
    'create_parser',
]


if __name__ == '__main__':
    main()
