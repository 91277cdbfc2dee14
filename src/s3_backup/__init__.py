"""
S3 Incremental Backup

Filter-driven incremental backup of local directory trees to AWS S3, with
optional pruning of objects whose source is gone or no longer selected.
"""

__version__ = "1.0.0"
__author__ = "S3 Backup Tool"
__description__ = "Incremental backup of local directories to AWS S3"

from .config.settings import BackupConfig
from .sync.backup_manager import BackupManager

__all__ = ["BackupConfig", "BackupManager"]
