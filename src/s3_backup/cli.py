"""Command-line interface for the S3 backup application."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console

from . import __version__
from .auth.cloud_auth import AWSAuth
from .config.settings import BackupConfig, BackupPaths
from .destinations.s3 import S3Destination
from .errors import BackupError, ConfigurationError
from .sync.backup_manager import BackupManager
from .sync.file_tracker import MetadataStore
from .utils.file_utils import FileHelper
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

console = Console(soft_wrap=True)
error_console = Console(stderr=True, soft_wrap=True)


@click.command()
@click.version_option(version=__version__)
@click.option('--run', '-run', 'run',
              is_flag=True,
              help='Upload changed files (default: only show what would be backed up)')
@click.option('--prune', '-prune', 'prune',
              is_flag=True,
              help='Delete remote objects whose local file is gone or filtered out')
@click.option('--home',
              type=click.Path(file_okay=False, path_type=Path),
              default=None,
              help='Bootstrap directory holding config.json and metadata.json (default: ~/.backup)')
@click.option('--verbose', '-v',
              is_flag=True,
              help='Also write log messages to the console')
def cli(run: bool, prune: bool, home: Path, verbose: bool):
    """Incremental backup of local directories to AWS S3.

    Targets and their filters are read from config.json in the bootstrap
    directory. Without -run nothing is uploaded or deleted.
    """
    try:
        paths = BackupPaths(home).ensure()
        setup_logging(log_level="DEBUG", log_file=paths.log_file, log_to_console=verbose)

        config = BackupConfig.load_or_create(paths.config_file)
        metadata = MetadataStore(paths.metadata_file).load()

        destination = None
        host = ""
        if run:
            if not config.bucket:
                raise ConfigurationError(f"No bucket configured in {paths.config_file}")
            host = FileHelper.get_host_name()
            destination = S3Destination(AWSAuth.from_env(), config.bucket)
        else:
            console.print("🔍 DRY RUN MODE - No files will be uploaded", style="yellow bold")

        manager = BackupManager(
            config,
            metadata,
            destination=destination,
            host=host,
            run=run,
            prune=prune,
            console=console
        )
        manager.run()

    except BackupError as e:
        logger.error(f"Backup aborted: {e}")
        error_console.print(f"❌ Error: {e}", style="red bold", markup=False)
        sys.exit(1)


if __name__ == '__main__':
    cli()
