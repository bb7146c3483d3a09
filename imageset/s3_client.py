"""
S3Client - S3/MinIO storage backend for uploading image variants.
"""

import io
import logging
import os
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StorageError
from .s3_config import S3Config
from .storage import Content, StorageBackend, StoredReference


class S3Client(StorageBackend):
    """
    Wrapper for S3/MinIO uploads.

    Streams content with boto3's managed transfer, switching to multipart
    uploads above the buffer size.
    """

    BUFFER_SIZE = 5 * 1024 * 1024

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 client.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}
            ),
            verify=config.verify_ssl
        )
        self._transfer_config = TransferConfig(
            multipart_threshold=self.BUFFER_SIZE,
            multipart_chunksize=self.BUFFER_SIZE,
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def put(
        self,
        bucket: str,
        key: str,
        content: Content,
        content_type: str,
        cache_control: str
    ) -> StoredReference:
        """Upload content to S3 with content type and cache headers."""
        try:
            with self._open(content) as fileobj:
                self._client.upload_fileobj(
                    fileobj,
                    bucket,
                    key,
                    ExtraArgs={
                        'ContentType': content_type,
                        'CacheControl': cache_control,
                    },
                    Config=self._transfer_config,
                )
        except (ClientError, BotoCoreError, S3UploadFailedError, OSError) as e:
            self.logger.error(f"Upload failed for s3://{bucket}/{key}: {e}")
            raise StorageError(f"Upload failed for s3://{bucket}/{key}: {e}") from e

        self.logger.debug(f"Uploaded s3://{bucket}/{key} ({content_type})")
        return StoredReference(
            key=key,
            bucket=bucket,
            scheme=self.config.scheme,
            host=self.config.host,
        )

    @staticmethod
    @contextmanager
    def _open(content: Content) -> Iterator[BinaryIO]:
        """Yield a readable binary file object for bytes, a path or a file."""
        if isinstance(content, (bytes, bytearray)):
            yield io.BytesIO(content)
        elif isinstance(content, (str, os.PathLike)):
            with open(content, 'rb') as f:
                yield f
        else:
            yield content
