"""
S3Config - Connection settings for S3/MinIO storage.
"""

import os
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlsplit

from .config import str2bool


@dataclass
class S3Config:
    """
    S3 connection settings.

    Attributes:
        endpoint: Endpoint URL (None for AWS)
        access_key: Access key id
        secret_key: Secret access key
        region: Region name
        verify_ssl: Verify TLS certificates
    """
    endpoint: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = None
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> 'S3Config':
        """Create configuration from environment variables."""
        return cls(
            endpoint=os.getenv('S3_ENDPOINT') or None,
            access_key=os.getenv('S3_ACCESS_KEY') or None,
            secret_key=os.getenv('S3_SECRET_KEY') or None,
            region=os.getenv('S3_REGION') or None,
            verify_ssl=str2bool(os.getenv('S3_VERIFY_SSL', 'true'), raise_exc=True),
        )

    @property
    def scheme(self) -> str:
        """URL scheme including '://', used to build public URLs."""
        if self.endpoint:
            return f"{urlsplit(self.endpoint).scheme or 'https'}://"
        return 'https://'

    @property
    def host(self) -> str:
        """Host (and port) of the endpoint, used to build public URLs."""
        if self.endpoint:
            parts = urlsplit(self.endpoint)
            return parts.netloc or parts.path
        if self.region:
            return f"s3.{self.region}.amazonaws.com"
        return 's3.amazonaws.com'

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if self.endpoint and not urlsplit(self.endpoint).netloc:
            errors.append(f"S3_ENDPOINT is not a URL: {self.endpoint}")
        if bool(self.access_key) != bool(self.secret_key):
            errors.append("S3_ACCESS_KEY and S3_SECRET_KEY must be set together")
        return errors
