"""Authentication for cloud storage."""

from .cloud_auth import AWSAuth

__all__ = ["AWSAuth"]
