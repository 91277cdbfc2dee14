"""Configuration management for the backup application."""

from .settings import BackupConfig, BackupPaths, PathConfig

__all__ = ["BackupConfig", "BackupPaths", "PathConfig"]
