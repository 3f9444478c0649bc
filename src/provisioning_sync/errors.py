"""
Exception hierarchy for provisioning sync.

Configuration errors are fatal and name the offending identifier. Storage
errors wrap the driver's exception. Data problems (duplicate result keys) are
not exceptions: they are returned in the run result.
"""


class SyncError(Exception):
    """Base class for all provisioning sync errors."""


class ConfigurationError(SyncError, ValueError):
    """The configuration cannot produce a meaningful sync result."""

    def __init__(self, message: str, identifier: str | None = None):
        super().__init__(message)
        self.identifier = identifier


class StorageError(SyncError):
    """The embedded store failed to execute a step."""

    def __init__(self, message: str, statement: str | None = None):
        super().__init__(message)
        self.statement = statement
