"""Sync engine for backup operations."""

from .backup_manager import BackupManager, BackupSummary
from .file_tracker import MetadataStore
from .filters import FilterRuleSet
from .traverser import ProcessedSet, Traverser

__all__ = ["BackupManager", "BackupSummary", "MetadataStore", "FilterRuleSet", "ProcessedSet", "Traverser"]
