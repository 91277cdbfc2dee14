"""Tests for logging setup."""

import logging

import pytest

from s3_backup.errors import FilesystemAccessError
from s3_backup.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("s3_backup")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_log_file_is_created(tmp_path):
    log_file = tmp_path / "logs" / "backup.log"

    logger = setup_logging(log_file=log_file, log_to_console=False)
    logger.info("hello")

    assert "hello" in log_file.read_text()


def test_log_directory_blocked_by_file(tmp_path):
    (tmp_path / "logs").write_text("")

    with pytest.raises(FilesystemAccessError):
        setup_logging(log_file=tmp_path / "logs" / "backup.log", log_to_console=False)
