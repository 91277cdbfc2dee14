"""Cloud storage authentication handling."""

import os
import logging
from typing import Optional

import boto3

logger = logging.getLogger(__name__)

class AWSAuth:
    """Handle AWS authentication and S3 client creation."""

    def __init__(
        self,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        session_token: Optional[str] = None,
        region: Optional[str] = None
    ):
        """Initialize AWS authentication.

        Args:
            access_key_id: AWS access key ID
            secret_access_key: AWS secret access key
            session_token: AWS session token (for temporary credentials)
            region: AWS region; None defers to the shared AWS configuration
        """
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.session_token = session_token
        self.region = region
        self._s3_client = None

    def get_s3_client(self):
        """Get authenticated S3 client.

        Returns:
            boto3 S3 client
        """
        if self._s3_client is None:
            # Use provided credentials or fall back to default credential chain
            if self.access_key_id and self.secret_access_key:
                self._s3_client = boto3.client(
                    's3',
                    aws_access_key_id=self.access_key_id,
                    aws_secret_access_key=self.secret_access_key,
                    aws_session_token=self.session_token,
                    region_name=self.region
                )
            else:
                # Use default credential chain (environment, shared config, instance profile)
                self._s3_client = boto3.client('s3', region_name=self.region)
            logger.debug("S3 client created")

        return self._s3_client

    @classmethod
    def from_env(cls) -> "AWSAuth":
        """Create AWS auth from environment variables.

        Returns:
            AWSAuth instance
        """
        return cls(
            access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
            secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
            session_token=os.getenv('AWS_SESSION_TOKEN'),
            region=os.getenv('AWS_REGION') or os.getenv('AWS_DEFAULT_REGION')
        )
