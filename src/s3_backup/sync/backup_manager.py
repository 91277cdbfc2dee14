"""Main backup manager orchestrating the backup process."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console

from ..config.settings import BackupConfig
from ..errors import FilesystemAccessError
from ..utils.file_utils import FileHelper
from .file_tracker import MetadataStore, file_mtime
from .filters import FilterRuleSet
from .traverser import ProcessedSet, Traverser

# Module logger
logger = logging.getLogger(__name__)


@dataclass
class BackupSummary:
    """Outcome of one run."""
    total_bytes: int = 0
    files_planned: int = 0
    files_uploaded: int = 0
    files_skipped: int = 0
    pruned: List[str] = field(default_factory=list)


class BackupManager:
    """Back up every configured target, then optionally prune.

    In plan mode nothing is uploaded, deleted or written to the metadata
    store; the manager only reports what a live run would do.
    """

    def __init__(
        self,
        config: BackupConfig,
        metadata: MetadataStore,
        destination=None,
        host: str = "",
        run: bool = False,
        prune: bool = False,
        console: Optional[Console] = None
    ):
        """Initialize backup manager.

        Args:
            config: Backup configuration
            metadata: Loaded metadata store
            destination: Object store with ``put``/``delete``; required when ``run`` is set
            host: Host name prefixed to every object key
            run: Upload and delete for real
            prune: Reconcile the metadata store after the backup
            console: Console for progress output
        """
        if run and destination is None:
            raise ValueError("A destination is required for a live run")

        self.config = config
        self.metadata = metadata
        self.destination = destination
        self.host = host
        self.run_mode = run
        self.prune_mode = prune
        self.console = console or Console(soft_wrap=True)
        self.metadata_file = os.path.abspath(str(metadata.metadata_file))

        self.processed = ProcessedSet()
        self.traverser = Traverser(self.backup_file, self.processed, self.console)
        self.summary = BackupSummary()

        # All patterns are compiled before traversal starts
        self.targets = self._compile_targets()

    def _compile_targets(self) -> List[Tuple[str, FilterRuleSet]]:
        targets = []
        for name in self.config.sorted_paths():
            rules = FilterRuleSet.from_path_config(name, self.config.paths[name])
            targets.append((FileHelper.normalize_path(name), rules))

        metadata_path = Path(self.metadata_file)
        targets.append((
            self.metadata_file,
            FilterRuleSet.exact(metadata_path.name, metadata_path.parent.name),
        ))
        return targets

    def run(self) -> BackupSummary:
        """Run the backup over all targets.

        Returns:
            Summary of the run
        """
        mode = "live" if self.run_mode else "plan"
        logger.info(f"Starting {mode} run over {len(self.targets)} targets")

        total = 0
        for path, rules in self.targets:
            logger.debug(f"Processing target {path}")
            total += self.traverser.visit(path, True, rules)

        if self.prune_mode:
            self.prune()

        self.summary.total_bytes = total
        self.console.print(f"Total size: {FileHelper.format_file_size(total)}")
        logger.info(
            f"Finished {mode} run: {self.summary.files_uploaded} uploaded, "
            f"{self.summary.files_planned} planned, {self.summary.files_skipped} unchanged, "
            f"{len(self.summary.pruned)} pruned, {total} bytes"
        )
        return self.summary

    def backup_file(self, path: str, st: os.stat_result) -> int:
        """Back up one accepted file if it changed.

        Args:
            path: Local file path
            st: Stat result taken during traversal

        Returns:
            File size if it needs backup, 0 if unchanged
        """
        if not self.metadata.needs_backup(path, st.st_mtime_ns):
            logger.debug(f"Unchanged since {self.metadata.get(path)}: {path}")
            self.summary.files_skipped += 1
            return 0

        if not self.run_mode:
            self.plan(path, st)
        else:
            self.upload(path, st)
        return st.st_size

    def plan(self, path: str, st: os.stat_result):
        self.summary.files_planned += 1
        self.console.print(
            f"Should backup {FileHelper.display_path(path)} with {FileHelper.format_file_size(st.st_size)} ...",
            markup=False
        )

    def upload(self, path: str, st: os.stat_result):
        """Upload a file and record its modification time."""
        self.console.print(
            f"Backing up {FileHelper.display_path(path)} with {FileHelper.format_file_size(st.st_size)} ...",
            markup=False
        )
        key = FileHelper.create_remote_key(self.host, path)
        try:
            with open(path, 'rb') as f:
                self.destination.put(key, f)
        except OSError as e:
            raise FilesystemAccessError(path, e) from e

        self.summary.files_uploaded += 1
        # The metadata file never gets an entry of its own
        if path != self.metadata_file:
            self.metadata.set(path, file_mtime(st))

    def prune(self):
        """Remove remote objects for tracked paths not visited in this run."""
        visited = self.processed.visited_paths()
        stale = [key for key in self.metadata.keys() if key not in visited]
        logger.info(f"Pruning {len(stale)} of {len(self.metadata)} tracked paths")

        for key in stale:
            if not self.run_mode:
                self.console.print(f"Should prune {FileHelper.display_path(key)} ...", markup=False)
                continue

            self.console.print(f"Pruning {FileHelper.display_path(key)} ...", markup=False)
            self.destination.delete(FileHelper.create_remote_key(self.host, key))
            self.metadata.remove(key)
            self.summary.pruned.append(key)
