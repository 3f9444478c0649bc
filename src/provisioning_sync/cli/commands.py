"""
CLI command implementations.

This module contains the implementation of the CLI commands:
- run: One-time sync
- schedule: Periodic scheduled sync
- report: Report rendering from previous runs
- validate-config: Configuration check
"""

import argparse
import logging
import sys
from pathlib import Path

from prometheus_client import CollectorRegistry

from sync_utils.metrics import SyncMetrics

from ..errors import SyncError
from ..model import load_config
from ..report import (
    export_report_csv,
    export_report_json,
    format_report_console,
    generate_report,
    load_report_json,
)
from ..scheduler import SyncScheduler, sync_job
from ..transfer import run_file_sync

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_DUPLICATES = 2


def _write_report(report: dict, report_format: str, output: str | None) -> None:
    if output and report_format == "json":
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        export_report_json(report, output)
        logger.info(f"Report saved to {output}")
    elif output and report_format == "csv":
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        export_report_csv(report, output)
        logger.info(f"Report saved to {output}")
    else:
        print(format_report_console(report))


def cmd_run(args: argparse.Namespace) -> None:
    """
    Run one sync

    Exits 0 on success, 1 on configuration or storage failure, and 2 when
    duplicate result keys are found and ``--fail-on-duplicates`` is set.

    Args:
        args: Parsed command-line arguments
    """
    logger.info("Starting sync run")

    metrics = SyncMetrics(CollectorRegistry()) if args.metrics_file else None

    try:
        config = load_config(args.config)

        file_sync = run_file_sync(
            config,
            args.provided,
            args.current,
            database=args.database,
            output_path=args.output,
            metrics=metrics,
        )

        report = generate_report(file_sync.result)
        report["imports"] = [stats.to_dict() for stats in file_sync.imports]

        report_format = args.format
        if args.report and report_format == "console":
            report_format = "json"
        _write_report(report, report_format, args.report)

    except SyncError as e:
        logger.error(f"Sync failed: {e}")
        sys.exit(EXIT_FAILURE)

    finally:
        if metrics is not None:
            metrics.write_textfile(args.metrics_file)

    if not file_sync.result.success:
        logger.warning(f"Sync found {len(file_sync.result.duplicates)} duplicate result key(s)")
        if args.fail_on_duplicates:
            sys.exit(EXIT_DUPLICATES)

    logger.info("Sync completed successfully")
    sys.exit(EXIT_SUCCESS)


def cmd_schedule(args: argparse.Namespace) -> None:
    """
    Schedule periodic sync runs

    Args:
        args: Parsed command-line arguments
    """
    logger.info("Setting up sync scheduler")

    try:
        # Fail fast on a broken configuration instead of at the first trigger
        load_config(args.config)
    except SyncError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(EXIT_FAILURE)

    Path(args.output_dir).mkdir(parents=True, exist_ok=True)

    job_kwargs = {
        "config_path": args.config,
        "provided_path": args.provided,
        "current_path": args.current,
        "output_dir": args.output_dir,
        "database": args.database,
        "metrics": SyncMetrics(CollectorRegistry()) if args.metrics_file else None,
        "metrics_file": args.metrics_file,
    }

    scheduler = SyncScheduler()

    try:
        if args.cron:
            scheduler.add_cron_job(sync_job, args.cron, "sync_job", **job_kwargs)
            logger.info(f"Scheduled sync with cron: {args.cron}")
        else:
            scheduler.add_interval_job(sync_job, args.interval, "sync_job", **job_kwargs)
            logger.info(f"Scheduled sync every {args.interval} seconds")
    except ValueError as e:
        logger.error(f"Invalid schedule: {e}")
        sys.exit(EXIT_FAILURE)

    logger.info("Starting scheduler (press Ctrl+C to stop)")
    scheduler.start()


def cmd_report(args: argparse.Namespace) -> None:
    """
    Render a report from a previous run's JSON file

    Args:
        args: Parsed command-line arguments
    """
    logger.info(f"Loading sync report from {args.input}")

    try:
        report = load_report_json(args.input)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load report: {e}")
        sys.exit(EXIT_FAILURE)

    if args.format in ("csv", "json") and not args.output:
        logger.error(f"Output file required for {args.format.upper()} format")
        sys.exit(EXIT_FAILURE)

    try:
        _write_report(report, args.format, args.output)
    except (KeyError, OSError) as e:
        logger.error(f"Failed to process report: {e}")
        sys.exit(EXIT_FAILURE)


def cmd_validate_config(args: argparse.Namespace) -> None:
    """
    Validate a configuration file and print a short summary

    Args:
        args: Parsed command-line arguments
    """
    try:
        config = load_config(args.config)
    except SyncError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"INVALID: {e}")
        sys.exit(EXIT_FAILURE)

    print(f"OK: {args.config}")
    print(f"  provided: {config.provided.name} (keys: {', '.join(config.provided.key_columns)})")
    print(f"  current:  {config.current.name} (keys: {', '.join(config.current.key_columns)})")
    print(f"  result:   {config.result.name} ({len(config.result_fields)} fields)")
    sys.exit(EXIT_SUCCESS)
