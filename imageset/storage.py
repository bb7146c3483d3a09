"""
Storage backend interface shared by the S3 and local filesystem clients.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union


Content = Union[bytes, str, os.PathLike, BinaryIO]


@dataclass(frozen=True)
class StoredReference:
    """
    Reference to a stored object.

    Either ``location`` is a ready URL or path, or ``scheme`` and ``host``
    are set and the public URL is built from them.

    Attributes:
        key: Object key within the bucket
        bucket: Bucket the object was written to
        location: Ready-made URL or filesystem path
        scheme: URL scheme including '://' (e.g. 'https://')
        host: Storage host, with port if any
    """
    key: str
    bucket: str = ''
    location: Optional[str] = None
    scheme: Optional[str] = None
    host: Optional[str] = None

    def build_url(self, asset_host: Optional[str] = None) -> str:
        """
        Public URL (or path) for this object.

        An asset host gives ``{asset_host}/{key}``; otherwise the ready
        location is used, or ``{scheme}{host}/{bucket}/{key}``.
        """
        if asset_host:
            return f"{asset_host.rstrip('/')}/{self.key}"
        if self.location:
            return self.location
        return f"{self.scheme}{self.host}/{self.bucket}/{self.key}"


class StorageBackend(ABC):
    """Anything that can persist a variant and hand back a reference."""

    @abstractmethod
    def put(
        self,
        bucket: str,
        key: str,
        content: Content,
        content_type: str,
        cache_control: str
    ) -> StoredReference:
        """
        Store content under a key.

        Args:
            bucket: Destination bucket
            key: Destination key
            content: Bytes, a file path or a readable binary file object
            content_type: MIME type to record
            cache_control: Cache-Control header to record

        Returns:
            StoredReference for the written object

        Raises:
            StorageError: If the write fails
        """
