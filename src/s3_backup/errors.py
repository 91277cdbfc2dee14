"""Error types raised by the backup engine.

Every error is fatal to the run. They propagate up to the CLI, which reports
the message and exits with a non-zero status.
"""


class BackupError(Exception):
    """Base class for all backup errors."""

    pass


class ConfigurationError(BackupError):
    """Configuration file is missing required structure or is not valid JSON."""

    pass


class MetadataCorruptionError(BackupError):
    """Persisted metadata cannot be decoded."""

    pass


class FilesystemAccessError(BackupError):
    """A local path could not be read, listed or written."""

    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Cannot access {path}: {error.strerror or error}")


class FilterCompilationError(BackupError):
    """A filter pattern is not a valid regular expression."""

    def __init__(self, target: str, pattern: str, error: Exception):
        self.target = target
        self.pattern = pattern
        super().__init__(f"Invalid pattern {pattern!r} for {target}: {error}")


class TransportError(BackupError):
    """An upload or delete against the object store failed."""

    pass


class ConsistencyError(BackupError):
    """A path was reached twice in one run (overlapping targets or a cycle)."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Already processed: {path}")
