"""Allow running the backup with ``python -m s3_backup``."""

from .cli import cli

if __name__ == '__main__':
    cli()
