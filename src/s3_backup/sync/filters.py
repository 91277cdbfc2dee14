"""Compile include/exclude patterns into whole-name matchers."""

import re
from dataclasses import dataclass
from typing import Iterable, Tuple

from ..config.settings import PathConfig
from ..errors import FilterCompilationError

PATTERN_FLAGS = re.DOTALL | re.MULTILINE


def compile_pattern(pattern: str, target: str = "") -> re.Pattern:
    """Compile a raw filter pattern.

    Args:
        pattern: Regular expression as written in the configuration
        target: Name of the backup target, used in error messages

    Returns:
        Compiled pattern, to be used with whole-string matching

    Raises:
        FilterCompilationError: If the pattern is not a valid expression
    """
    try:
        return re.compile(pattern, PATTERN_FLAGS)
    except re.error as e:
        raise FilterCompilationError(target, pattern, e) from e


def compile_patterns(patterns: Iterable[str], target: str = "") -> Tuple[re.Pattern, ...]:
    return tuple(compile_pattern(p, target) for p in patterns)


def matches_any(name: str, patterns: Iterable[re.Pattern]) -> bool:
    """Check whether any pattern matches the entire name."""
    return any(p.fullmatch(name) for p in patterns)


@dataclass(frozen=True)
class FilterRuleSet:
    """Compiled filter rules for one backup target."""
    include_files: Tuple[re.Pattern, ...] = ()
    exclude_files: Tuple[re.Pattern, ...] = ()
    include_folders: Tuple[re.Pattern, ...] = ()
    exclude_folders: Tuple[re.Pattern, ...] = ()

    @classmethod
    def from_path_config(cls, target: str, path_config: PathConfig) -> "FilterRuleSet":
        """Build a rule set from a ``PathConfig``.

        Args:
            target: Name of the backup target
            path_config: Wire-format filter lists

        Returns:
            FilterRuleSet with every pattern compiled
        """
        return cls(
            include_files=compile_patterns(path_config.include_files, target),
            exclude_files=compile_patterns(path_config.exclude_files, target),
            include_folders=compile_patterns(path_config.include_folders, target),
            exclude_folders=compile_patterns(path_config.exclude_folders, target),
        )

    @classmethod
    def exact(cls, file_name: str, folder_name: str) -> "FilterRuleSet":
        """Rule set accepting only the given file name inside the given folder name."""
        return cls(
            include_files=(compile_pattern(re.escape(file_name)),),
            include_folders=(compile_pattern(re.escape(folder_name)),),
        )

    def accepts_file(self, name: str) -> bool:
        return _accepts(name, self.include_files, self.exclude_files)

    def accepts_folder(self, name: str) -> bool:
        return _accepts(name, self.include_folders, self.exclude_folders)


def _accepts(name: str, include: Tuple[re.Pattern, ...], exclude: Tuple[re.Pattern, ...]) -> bool:
    # Exclude is checked on its own, not as the negation of include
    if include and not matches_any(name, include):
        return False
    if matches_any(name, exclude):
        return False
    return True
