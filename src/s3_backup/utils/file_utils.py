"""File utility functions."""

import os
import socket


class FileHelper:
    """Helper class for file operations."""

    @staticmethod
    def format_file_size(size_bytes: int) -> str:
        """Format file size in human readable format.

        Args:
            size_bytes: Size in bytes

        Returns:
            Formatted size string
        """
        if size_bytes == 0:
            return "0 B"

        size_names = ["B", "KB", "MB", "GB", "TB", "PB"]
        i = 0

        while size_bytes >= 1024 and i < len(size_names) - 1:
            size_bytes /= 1024.0
            i += 1

        return f"{size_bytes:.1f} {size_names[i]}"

    @staticmethod
    def normalize_path(path: str) -> str:
        """Absolute, normalized form of a configured path.

        Symlinks are kept as they are so the path stays the one the user wrote.

        Args:
            path: Path as written in the configuration, ``~`` allowed

        Returns:
            Absolute path string
        """
        return os.path.abspath(os.path.expanduser(path))

    @staticmethod
    def display_path(path: str) -> str:
        """Path safe to print, with undecodable bytes shown as escapes."""
        return path.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")

    @staticmethod
    def create_remote_key(host: str, local_path: str) -> str:
        """Create the object key for a local file.

        Args:
            host: Name of the machine the file lives on
            local_path: Absolute local path

        Returns:
            Object key, the host name directly followed by the path
        """
        return f"{host}{local_path}"

    @staticmethod
    def get_host_name() -> str:
        """Name of this machine, used as the key prefix."""
        return socket.gethostname()
