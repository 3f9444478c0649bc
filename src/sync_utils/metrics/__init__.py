"""
Prometheus metrics for provisioning sync

Usage:
    from sync_utils.metrics import SyncMetrics

    metrics = SyncMetrics()
    metrics.record_run("sync_result", success=True, duration=1.4,
                       action_counts={"ADD": 3, "KEEP": 120})
    metrics.write_textfile("/var/lib/node_exporter/provisioning_sync.prom")
"""

from .sync import SyncMetrics

__all__ = ["SyncMetrics"]
