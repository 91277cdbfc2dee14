"""Recursive filesystem walk applying folder and file filters."""

import logging
import os
import stat
from typing import Callable, Optional, Set

from rich.console import Console

from ..errors import ConsistencyError, FilesystemAccessError
from ..utils.file_utils import FileHelper
from .filters import FilterRuleSet

logger = logging.getLogger(__name__)

FileHandler = Callable[[str, os.stat_result], int]


class ProcessedSet:
    """Paths visited during one run.

    Directories are keyed by their resolved location, which catches symlink
    cycles and targets nested in other targets. Files are keyed by the path
    they were reached through, so a symlinked file is backed up under each
    of its names.
    """

    def __init__(self):
        self._dirs: Set[str] = set()
        self._visited: Set[str] = set()

    def add(self, path: str, directory: bool = False):
        """Record a visited path.

        Args:
            path: Path as reached by the traversal
            directory: Whether the path is a directory

        Raises:
            ConsistencyError: If the path, or for a directory another route
                to the same location, was already visited in this run
        """
        if path in self._visited:
            raise ConsistencyError(path)
        if directory:
            canonical = os.path.realpath(path)
            if canonical in self._dirs:
                raise ConsistencyError(path)
            self._dirs.add(canonical)
        self._visited.add(path)

    def __contains__(self, path: str) -> bool:
        return path in self._visited

    def visited_paths(self) -> Set[str]:
        """Paths exactly as they were reached by the traversal."""
        return set(self._visited)


class Traverser:
    """Walk backup targets and hand accepted files to a handler.

    The handler receives the file path and its stat result and returns the
    number of bytes it processed.
    """

    def __init__(self, handler: FileHandler, processed: Optional[ProcessedSet] = None,
                 console: Optional[Console] = None):
        self.handler = handler
        self.processed = processed if processed is not None else ProcessedSet()
        self.console = console or Console(soft_wrap=True)

    def visit(self, path: str, forced: bool, rules: FilterRuleSet) -> int:
        """Visit a path and everything beneath it.

        Args:
            path: File or directory to visit
            forced: Skip the folder filters for this path itself
            rules: Filter rules of the backup target

        Returns:
            Number of bytes processed beneath this path
        """
        try:
            st = os.stat(path)
        except OSError as e:
            raise FilesystemAccessError(path, e) from e

        if stat.S_ISDIR(st.st_mode):
            return self._visit_dir(path, forced, rules)
        if stat.S_ISREG(st.st_mode):
            return self._visit_file(path, st, rules)

        logger.debug(f"Skipping special file {path}")
        return 0

    def _visit_dir(self, path: str, forced: bool, rules: FilterRuleSet) -> int:
        name = os.path.basename(path)
        if not forced and not rules.accepts_folder(name):
            logger.debug(f"Folder filtered out: {path}")
            return 0

        self.processed.add(path, directory=True)
        try:
            entries = sorted(os.listdir(path))
        except OSError as e:
            raise FilesystemAccessError(path, e) from e

        total = 0
        for entry in entries:
            total += self.visit(os.path.join(path, entry), False, rules)

        if total > 0:
            self.console.print(
                f"{FileHelper.display_path(path)} size: {FileHelper.format_file_size(total)}",
                markup=False
            )
        return total

    def _visit_file(self, path: str, st: os.stat_result, rules: FilterRuleSet) -> int:
        if not rules.accepts_file(os.path.basename(path)):
            logger.debug(f"File filtered out: {path}")
            return 0

        self.processed.add(path)
        return self.handler(path, st)
