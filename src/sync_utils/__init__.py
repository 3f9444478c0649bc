"""
Utility modules for provisioning sync

Provides:
- logging: console/JSON logging setup and context loggers
- metrics: Prometheus metrics for sync runs
- tracing: OpenTelemetry spans around engine steps
- retry: exponential backoff for transient store errors
- sql_safety: identifier validation and quoting
"""

__version__ = "1.0.0"
__all__ = ["logging", "metrics", "tracing", "retry", "sql_safety"]
