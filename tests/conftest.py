"""Shared pytest fixtures for the backup tests."""

import io
import json
import os
from pathlib import Path

import pytest
from rich.console import Console

from s3_backup.config.settings import BackupConfig, BackupPaths
from s3_backup.errors import TransportError
from s3_backup.sync.backup_manager import BackupManager
from s3_backup.sync.file_tracker import MetadataStore

HOST = "testhost"


class FakeDestination:
    """In-memory object store recording every call."""

    def __init__(self, fail_on=None):
        self.objects = {}
        self.puts = []
        self.deletes = []
        self.fail_on = fail_on

    def put(self, key, body):
        if self.fail_on and key.endswith(self.fail_on):
            raise TransportError(f"upload of {key} refused")
        data = body if isinstance(body, bytes) else body.read()
        self.objects[key] = data
        self.puts.append(key)

    def delete(self, key):
        if self.fail_on and key.endswith(self.fail_on):
            raise TransportError(f"delete of {key} refused")
        self.objects.pop(key, None)
        self.deletes.append(key)


def write_file(path: Path, content: str = "data", mtime_ns: int = None) -> Path:
    """Create a file with optional fixed modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mtime_ns is not None:
        os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


@pytest.fixture
def backup_paths(tmp_path):
    """Bootstrap directory inside the test's temporary directory."""
    return BackupPaths(tmp_path / ".backup").ensure()


@pytest.fixture
def source_dir(tmp_path):
    """Source tree with a few files and nested folders."""
    root = tmp_path / "source"
    write_file(root / "a.txt", "alpha", 1_700_000_000_000_000_000)
    write_file(root / "b.log", "bravo!", 1_700_000_001_000_000_000)
    write_file(root / "docs" / "c.txt", "charlie", 1_700_000_002_500_000_000)
    write_file(root / "cache" / "d.txt", "delta", 1_700_000_003_000_000_000)
    return root


@pytest.fixture
def destination():
    return FakeDestination()


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console(output):
    return Console(file=output, soft_wrap=True, width=200)


@pytest.fixture
def make_config():
    """Build a BackupConfig from a mapping of target path to filter lists."""
    def _make(paths, bucket="test-bucket"):
        return BackupConfig.model_validate({
            "bucket": bucket,
            "paths": {str(path): filters for path, filters in paths.items()},
        })
    return _make


@pytest.fixture
def make_manager(backup_paths, destination, console):
    """Create a BackupManager over a freshly loaded metadata store."""
    def _make(config, run=False, prune=False, dest=None):
        metadata = MetadataStore(backup_paths.metadata_file).load()
        return BackupManager(
            config,
            metadata,
            destination=dest or destination,
            host=HOST,
            run=run,
            prune=prune,
            console=console,
        )
    return _make


def read_metadata(paths: BackupPaths) -> dict:
    return json.loads(paths.metadata_file.read_text())
