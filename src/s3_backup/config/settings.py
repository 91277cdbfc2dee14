"""Configuration settings and models for the backup application."""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ConfigurationError, FilesystemAccessError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "S3_BACKUP_HOME"
BOOTSTRAP_DIR_NAME = ".backup"
CONFIG_FILE_NAME = "config.json"
METADATA_FILE_NAME = "metadata.json"


class PathConfig(BaseModel):
    """Filter patterns for one backup target, as written in config.json."""
    model_config = ConfigDict(populate_by_name=True)

    include_files: List[str] = Field(default_factory=list, alias="includeFiles")
    exclude_files: List[str] = Field(default_factory=list, alias="excludeFiles")
    include_folders: List[str] = Field(default_factory=list, alias="includeFolders")
    exclude_folders: List[str] = Field(default_factory=list, alias="excludeFolders")


class BackupConfig(BaseModel):
    """Main configuration class."""
    bucket: str = ""
    paths: Dict[str, PathConfig] = Field(default_factory=dict)

    @classmethod
    def from_json(cls, config_path: Union[str, Path]) -> "BackupConfig":
        """Load configuration from a JSON file."""
        config_path = Path(config_path)
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except ValueError as e:
            raise ConfigurationError(f"Malformed configuration file {config_path}: {e}") from e
        except OSError as e:
            raise FilesystemAccessError(str(config_path), e) from e

        try:
            return cls.model_validate(config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    def to_json(self, config_path: Union[str, Path]) -> None:
        """Save configuration to a JSON file."""
        config_path = Path(config_path)
        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(self.model_dump(by_alias=True), f, indent=2)
        except OSError as e:
            raise FilesystemAccessError(str(config_path), e) from e

    @classmethod
    def load_or_create(cls, config_path: Union[str, Path]) -> "BackupConfig":
        """Load configuration, writing an empty one first if the file is absent."""
        config_path = Path(config_path)
        if not config_path.exists():
            logger.info(f"Creating default configuration at {config_path}")
            cls().to_json(config_path)
        return cls.from_json(config_path)

    def sorted_paths(self) -> List[str]:
        """Target names in processing order."""
        return sorted(self.paths)


class BackupPaths:
    """Location of the bootstrap directory and the files it holds."""

    def __init__(self, home: Optional[Union[str, Path]] = None):
        """Initialize bootstrap paths.

        Args:
            home: Bootstrap directory; defaults to ``$S3_BACKUP_HOME`` or
                ``~/.backup``
        """
        if home is None:
            home = os.getenv(HOME_ENV_VAR) or Path.home() / BOOTSTRAP_DIR_NAME
        self.home = Path(home).expanduser().absolute()

    @property
    def config_file(self) -> Path:
        return self.home / CONFIG_FILE_NAME

    @property
    def metadata_file(self) -> Path:
        return self.home / METADATA_FILE_NAME

    @property
    def log_file(self) -> Path:
        return self.home / "logs" / "backup.log"

    def ensure(self) -> "BackupPaths":
        """Create the bootstrap directory if it does not exist."""
        try:
            self.home.mkdir(mode=0o750, parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemAccessError(str(self.home), e) from e
        return self
