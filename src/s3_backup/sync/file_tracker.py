"""Persisted modification times for change detection and backup state management."""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import FilesystemAccessError, MetadataCorruptionError

logger = logging.getLogger(__name__)

NANOSECONDS = 1_000_000_000


def format_timestamp(mtime_ns: int) -> str:
    """Format a nanosecond epoch timestamp as RFC 3339 in UTC.

    Trailing zeros of the fractional part are trimmed, and the fraction is
    omitted entirely for whole seconds.

    Args:
        mtime_ns: Nanoseconds since the epoch (``os.stat_result.st_mtime_ns``)

    Returns:
        Timestamp string such as ``2024-01-02T03:04:05.5Z``
    """
    seconds, nanos = divmod(mtime_ns, NANOSECONDS)
    text = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    return text + "Z"


def parse_timestamp(value: str) -> int:
    """Parse an RFC 3339 timestamp into nanoseconds since the epoch.

    Args:
        value: Timestamp string, with optional fraction of up to nine digits
            and either ``Z`` or a numeric UTC offset

    Returns:
        Nanoseconds since the epoch

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, not {type(value).__name__}")
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"

    nanos = 0
    if "." in text:
        head, rest = text.split(".", 1)
        digits = len(rest) - len(rest.lstrip("0123456789"))
        fraction, offset = rest[:digits], rest[digits:]
        if not fraction or len(fraction) > 9:
            raise ValueError(f"invalid fractional seconds in {value!r}")
        nanos = int(fraction.ljust(9, "0"))
        text = head + offset

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp without UTC offset: {value!r}")
    whole = parsed - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (whole.days * 86400 + whole.seconds) * NANOSECONDS + nanos


class MetadataStore:
    """Mapping of backed-up path to its last uploaded modification time.

    Every mutation rewrites the whole file before returning, so an interrupted
    run never re-uploads files that were already recorded.
    """

    def __init__(self, metadata_file: Path):
        """Initialize the store.

        Args:
            metadata_file: Path to the JSON metadata file
        """
        self.metadata_file = Path(metadata_file)
        self._entries: Dict[str, str] = {}
        self._instants: Dict[str, int] = {}

    def load(self) -> "MetadataStore":
        """Load entries from disk, creating an empty file first if absent.

        Returns:
            The store itself

        Raises:
            MetadataCorruptionError: If the file is not a JSON object of timestamps
            FilesystemAccessError: If the file cannot be read or created
        """
        if not self.metadata_file.exists():
            logger.info(f"Creating empty metadata file {self.metadata_file}")
            self.persist()

        try:
            with open(self.metadata_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            # Invalid JSON or bytes that are not UTF-8
            raise MetadataCorruptionError(f"Malformed metadata file {self.metadata_file}: {e}") from e
        except OSError as e:
            raise FilesystemAccessError(str(self.metadata_file), e) from e

        if not isinstance(data, dict):
            raise MetadataCorruptionError(
                f"Metadata file {self.metadata_file} must contain a JSON object"
            )

        entries = {}
        instants = {}
        for path, value in data.items():
            try:
                instants[path] = parse_timestamp(value)
            except ValueError as e:
                raise MetadataCorruptionError(
                    f"Invalid timestamp for {path} in {self.metadata_file}: {e}"
                ) from e
            entries[path] = value

        self._entries = entries
        self._instants = instants
        logger.debug(f"Loaded {len(entries)} metadata entries from {self.metadata_file}")
        return self

    def persist(self):
        """Rewrite the metadata file with the current entries.

        The entries go to a temporary file next to the metadata file, which then
        replaces it, so a failed write leaves the previous contents in place.
        Keys are ASCII-escaped because paths that are not valid UTF-8 carry
        surrogate characters.
        """
        tmp_file = self.metadata_file.with_name(self.metadata_file.name + ".tmp")
        try:
            with open(tmp_file, 'w', encoding='utf-8') as f:
                json.dump(self._entries, f, indent=2, ensure_ascii=True, sort_keys=True)
            os.replace(tmp_file, self.metadata_file)
        except OSError as e:
            tmp_file.unlink(missing_ok=True)
            raise FilesystemAccessError(str(self.metadata_file), e) from e

    def get(self, key: str) -> Optional[str]:
        """Get the stored timestamp for a path.

        Args:
            key: Local path

        Returns:
            Timestamp string if the path is tracked, None otherwise
        """
        return self._entries.get(key)

    def set(self, key: str, timestamp: str):
        """Record a timestamp for a path and persist.

        Args:
            key: Local path
            timestamp: RFC 3339 timestamp
        """
        self._instants[key] = parse_timestamp(timestamp)
        self._entries[key] = timestamp
        self.persist()

    def remove(self, key: str):
        """Forget a path and persist."""
        self._entries.pop(key, None)
        self._instants.pop(key, None)
        self.persist()

    def needs_backup(self, key: str, mtime_ns: int) -> bool:
        """Check whether a file changed since it was last uploaded.

        Only an exact match of the stored instant counts as unchanged.

        Args:
            key: Local path
            mtime_ns: Current modification time in nanoseconds

        Returns:
            True if the file is untracked or its modification time differs
        """
        stored = self._instants.get(key)
        return stored is None or stored != mtime_ns

    def keys(self) -> List[str]:
        """Tracked paths in sorted order."""
        return sorted(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def file_mtime(stat: os.stat_result) -> str:
    """Timestamp string for a file's modification time."""
    return format_timestamp(stat.st_mtime_ns)
