"""
Command-line argument parser for the provisioning-sync CLI.
"""

import argparse

EPILOG = """
Examples:
  # One-time run, result CSV plus JSON report
  provisioning-sync run --config sync.yaml --provided staff_info.csv \\
      --current staff_master.csv --output sync_result.csv --report report.json

  # Fail the job when the result contains duplicate keys
  provisioning-sync run --config sync.yaml --provided p.csv --current c.csv --fail-on-duplicates

  # Nightly run at 02:00
  provisioning-sync schedule --cron "0 2 * * *" --config sync.yaml \\
      --provided p.csv --current c.csv --output-dir ./sync_results

  # Re-render a saved report
  provisioning-sync report --input report.json --format console

  # Check a configuration file
  provisioning-sync validate-config --config sync.yaml
"""

REPORT_FORMATS = ["console", "json", "csv"]


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO",
                               help="Logging level (default: INFO)")
    logging_group.add_argument("--log-file", help="Also log to this file (rotated at 10MB)")
    logging_group.add_argument("--log-json", action="store_true", help="Emit log records as JSON")

    tracing_group = parser.add_argument_group("tracing")
    tracing_group.add_argument("--otlp-endpoint", help="Export spans to this OTLP gRPC endpoint")
    tracing_group.add_argument("--trace-console", action="store_true", help="Print finished spans to stdout")


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", required=True, help="Sync configuration file (YAML or JSON)")


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    _add_config_argument(parser)
    parser.add_argument("--provided", required=True, help="CSV file with the newly provided records")
    parser.add_argument("--current", required=True, help="CSV file with the currently recorded records")
    parser.add_argument("--database", default=":memory:",
                        help="SQLite file holding the input and result tables (default: in memory)")
    parser.add_argument("--metrics-file", help="Write Prometheus metrics to this textfile-collector file")


def _add_run_command(subparsers) -> None:
    run_parser = subparsers.add_parser("run", help="Run one sync")
    _add_input_arguments(run_parser)
    run_parser.add_argument("--output", help="Write the sync result table to this CSV file")
    run_parser.add_argument("--report", help="Write the run report to this file")
    run_parser.add_argument("--format", choices=REPORT_FORMATS, default="console",
                            help="Report format (default: console; json when --report is given)")
    run_parser.add_argument("--fail-on-duplicates", action="store_true",
                            help="Exit with code 2 when the result contains duplicate keys")


def _add_schedule_command(subparsers) -> None:
    schedule_parser = subparsers.add_parser("schedule", help="Run syncs periodically")
    _add_input_arguments(schedule_parser)
    when = schedule_parser.add_mutually_exclusive_group()
    when.add_argument("--cron", help='Five-field cron expression, e.g. "0 2 * * *"')
    when.add_argument("--interval", type=int, default=3600, help="Seconds between runs (default: 3600)")
    schedule_parser.add_argument("--output-dir", default="./sync_results",
                                 help="Directory for timestamped result CSVs and reports (default: ./sync_results)")


def _add_report_command(subparsers) -> None:
    report_parser = subparsers.add_parser("report", help="Render the JSON report of a previous run")
    report_parser.add_argument("--input", required=True, help="JSON report written by 'run --report'")
    report_parser.add_argument("--format", choices=REPORT_FORMATS, default="console",
                               help="Output format (default: console)")
    report_parser.add_argument("--output", help="Output file (required for json and csv)")


def create_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with its four subcommands."""
    parser = argparse.ArgumentParser(
        prog="provisioning-sync",
        description="Reconcile provided and current account records into ADD/UPDATE/DELETE/KEEP actions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    _add_global_options(parser)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    _add_run_command(subparsers)
    _add_schedule_command(subparsers)
    _add_report_command(subparsers)
    _add_config_argument(subparsers.add_parser("validate-config", help="Validate a configuration file"))

    return parser
