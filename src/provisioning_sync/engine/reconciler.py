"""
Sync engine entry point.

``Reconciler.reconcile`` rebuilds the result table from the Provided and
Current input tables of a store:

    filter -> stage -> ADD / UPDATE / DELETE / KEEP -> excluded KEEP -> check

The whole rebuild runs in one transaction, so a failed run leaves the
previous result in place and a repeated run yields the same result.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sync_utils.logging import ContextLogger
from sync_utils.metrics import SyncMetrics
from sync_utils.tracing import add_span_attributes, trace_operation

from ..errors import ConfigurationError
from ..model.schema import SYNC_ACTION_COLUMN, SyncAction, SyncConfig, TableSchema
from ..store import SyncStore, query
from .classifier import PASS_ORDER, Classifier
from .consistency import DuplicateKey, check_duplicates
from .excluded import reintroduce_excluded
from .filters import FilterResult, FilterStats, filter_rows
from .resolver import FieldResolver

logger = logging.getLogger(__name__)

STAGE_SUFFIX = "_sync_stage"


@dataclass
class SyncRunResult:
    """Outcome of one reconciliation run."""

    result_table: str
    action_counts: dict[SyncAction, int]
    reintroduced_keep: int = 0
    filter_stats: list[FilterStats] = field(default_factory=list)
    duplicates: list[DuplicateKey] = field(default_factory=list)
    duration_seconds: float = 0.0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def success(self) -> bool:
        """True when the consistency check found no duplicate keys."""
        return not self.duplicates

    @property
    def total_rows(self) -> int:
        return sum(self.action_counts.values()) + self.reintroduced_keep

    def count(self, action: SyncAction) -> int:
        count = self.action_counts.get(action, 0)
        if action is SyncAction.KEEP:
            count += self.reintroduced_keep
        return count

    def to_dict(self) -> dict[str, Any]:
        return {
            "result_table": self.result_table,
            "status": "SUCCESS" if self.success else "DUPLICATES",
            "started_at": self.started_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "actions": {action.value: self.count(action) for action in PASS_ORDER},
            "reintroduced_keep": self.reintroduced_keep,
            "total_rows": self.total_rows,
            "filters": [stats.to_dict() for stats in self.filter_stats],
            "duplicates": [duplicate.to_dict() for duplicate in self.duplicates],
        }


class Reconciler:
    """Rebuilds a sync result table from Provided and Current tables."""

    def __init__(self, config: SyncConfig, metrics: SyncMetrics | None = None):
        """
        Args:
            config: Validated sync configuration
            metrics: Optional Prometheus metrics sink
        """
        self.config = config
        self.metrics = metrics
        self.resolver = FieldResolver(config)

        if not config.result.key_columns:
            raise ConfigurationError(
                f"Table {config.result.name} declares no key columns",
                identifier=config.result.name,
            )

    def reconcile(self, store: SyncStore) -> SyncRunResult:
        """
        Run one full reconciliation against ``store``

        Args:
            store: Store holding the loaded Provided and Current tables

        Returns:
            SyncRunResult with per-action counts, filter statistics and any
            duplicate result keys

        Raises:
            ConfigurationError: If keys, tables or columns are inconsistent
            StorageError: If the store fails; the result table is unchanged
        """
        config = self.config
        run_logger = ContextLogger(
            __name__,
            provided_table=config.provided.name,
            current_table=config.current.name,
            result_table=config.result.name,
        )
        started_at = datetime.now(UTC)
        start = time.monotonic()

        try:
            with trace_operation("reconcile", result_table=config.result.name):
                # Key configuration errors surface before anything is written
                classifier = Classifier(config, store, self.resolver)
                self._check_input_table(store, config.provided)
                self._check_input_table(store, config.current)

                with store.transaction():
                    self._prepare_result_table(store)

                    provided = self._filter(store, config.provided, config.provided_filter)
                    current = self._filter(store, config.current, config.current_filter)

                    provided_stage = self._stage(store, config.provided, provided)
                    current_stage = self._stage(store, config.current, current)

                    counts = classifier.run(provided_stage, current_stage)

                    with trace_operation("reintroduce_excluded"):
                        reintroduced = reintroduce_excluded(config, store, current.excluded, self.resolver)

                    with trace_operation("consistency_check"):
                        duplicates = check_duplicates(store, config.result.name, config.result.key_columns)

                    for stage in (provided_stage, current_stage):
                        store.execute(query.drop_table(stage))

                add_span_attributes(duplicates=len(duplicates), reintroduced_keep=reintroduced)
        except Exception:
            if self.metrics is not None:
                self.metrics.record_run(config.result.name, success=False, duration=time.monotonic() - start)
            raise

        result = SyncRunResult(
            result_table=config.result.name,
            action_counts=counts,
            reintroduced_keep=reintroduced,
            filter_stats=[provided.stats, current.stats],
            duplicates=duplicates,
            duration_seconds=time.monotonic() - start,
            started_at=started_at,
        )

        run_logger.info(
            "Sync run complete: "
            + ", ".join(f"{action.value}={result.count(action)}" for action in PASS_ORDER)
            + f" in {result.duration_seconds:.2f}s",
            duplicates=len(duplicates),
        )
        if duplicates:
            run_logger.warning(f"{len(duplicates)} duplicate result key(s) detected")

        self._record_metrics(result)
        return result

    def _check_input_table(self, store: SyncStore, table: TableSchema) -> None:
        if not store.table_exists(table.name):
            raise ConfigurationError(
                f"Input table {table.name} does not exist; load it before reconciling",
                identifier=table.name,
            )
        present = set(store.table_columns(table.name))
        for column in table.column_names:
            if column not in present:
                raise ConfigurationError(
                    f"Input table {table.name} has no column '{column}'", identifier=column
                )

    def _prepare_result_table(self, store: SyncStore) -> None:
        result = self.config.result
        store.create_table(result, extra_columns=[(SYNC_ACTION_COLUMN, "")])

        present = set(store.table_columns(result.name))
        for column in result.column_names + [SYNC_ACTION_COLUMN]:
            if column not in present:
                raise ConfigurationError(
                    f"Result table {result.name} has no column '{column}'; drop it or fix the configuration",
                    identifier=column,
                )

        store.truncate(result.name)

    def _filter(self, store: SyncStore, table: TableSchema, filter_config) -> FilterResult:
        with trace_operation("filter", table=table.name):
            rows = store.read_rows(table.name, table.column_names)
            return filter_rows(rows, filter_config, table.name)

    def _stage(self, store: SyncStore, table: TableSchema, filtered: FilterResult) -> str:
        stage_name = f"{table.name}{STAGE_SUFFIX}"
        store.create_table(stage_name, columns=table.columns, temporary=True, replace=True)
        store.insert_rows(stage_name, table.column_names, filtered.passed)
        logger.debug(f"Staged {len(filtered.passed)} row(s) of {table.name} in {stage_name}")
        return stage_name

    def _record_metrics(self, result: SyncRunResult) -> None:
        if self.metrics is None:
            return
        # Only committed runs count their filtered rows
        for stats in result.filter_stats:
            self.metrics.record_filtered(stats.table, stats.excluded)
        self.metrics.record_duplicates(result.result_table, len(result.duplicates))
        self.metrics.record_run(
            result.result_table,
            success=result.success,
            duration=result.duration_seconds,
            action_counts={action.value: result.count(action) for action in PASS_ORDER},
        )


def reconcile(store: SyncStore, config: SyncConfig, metrics: SyncMetrics | None = None) -> SyncRunResult:
    """Rebuild ``config.result`` in ``store``; see ``Reconciler.reconcile``."""
    return Reconciler(config, metrics=metrics).reconcile(store)
