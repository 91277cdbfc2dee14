"""AWS S3 destination handler."""

import logging
from typing import BinaryIO, Union

from botocore.exceptions import BotoCoreError, ClientError

from ..auth.cloud_auth import AWSAuth
from ..errors import TransportError

logger = logging.getLogger(__name__)


class S3Destination:
    """Put and delete objects in one S3 bucket."""

    def __init__(self, auth: AWSAuth, bucket: str):
        """Initialize S3 destination.

        Args:
            auth: AWS authentication handler
            bucket: Target bucket name
        """
        self.auth = auth
        self.bucket = bucket
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = self.auth.get_s3_client()
        return self._client

    def put(self, key: str, body: Union[bytes, BinaryIO]):
        """Upload an object.

        Args:
            key: Object key
            body: File object opened in binary mode, or bytes

        Raises:
            TransportError: If the upload fails
        """
        try:
            self._get_client().put_object(Bucket=self.bucket, Key=key, Body=body)
        except (BotoCoreError, ClientError) as e:
            raise TransportError(f"Upload of s3://{self.bucket}/{key} failed: {e}") from e
        logger.debug(f"Uploaded s3://{self.bucket}/{key}")

    def delete(self, key: str):
        """Delete an object.

        Raises:
            TransportError: If the delete fails
        """
        try:
            self._get_client().delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise TransportError(f"Delete of s3://{self.bucket}/{key} failed: {e}") from e
        logger.debug(f"Deleted s3://{self.bucket}/{key}")
