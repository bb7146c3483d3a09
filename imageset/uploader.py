"""
Uploader - Overridable base class for storing every version of an upload.

Subclass and override ``validate``, ``storage_dir`` or ``filename`` to
customise behaviour::

    class ProfileImageUploader(Uploader):
        extension_whitelist = ('.jpg', '.jpeg', '.png')

        def storage_dir(self, version, scope=None):
            return f"uploads/profile_images/{scope.id}"
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from .config import ImageConfig
from .exceptions import ImageSetError, ValidationError
from .naming import NamingPolicy
from .size_catalog import ORIGINAL, THUMBNAIL, SizeCatalog
from .storage import StorageBackend
from .variant_encoder import ImageSource, VariantEncoder, VariantPolicy


class Uploader:
    """
    Stores the original, the thumbnail and every catalog size of an image.

    Versions are stored one after another; the first failure is raised and
    no result is returned for the upload.
    """

    extension_whitelist: Tuple[str, ...] = ('.jpg', '.jpeg', '.gif', '.png', '.webp', '.avif')

    def __init__(
        self,
        config: ImageConfig,
        storage: StorageBackend,
        encoder: Optional[VariantEncoder] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.storage = storage
        self.logger = logger or logging.getLogger(__name__)
        self.encoder = encoder or VariantEncoder(config.encode, logger=self.logger)
        self.catalog = SizeCatalog(config)

    def versions(self) -> List[str]:
        return self.catalog.versions()

    def validate(self, file_name: str) -> bool:
        """Accept files whose extension is in the whitelist."""
        return os.path.splitext(file_name)[1].lower() in self.extension_whitelist

    def storage_dir(self, version: str, scope: Any = None) -> str:
        return self.config.prefix

    def filename(self, version: str, file_name: str) -> str:
        """Stored name without extension, e.g. 'md_photo'."""
        return f"{version}_{NamingPolicy.base_name(file_name)}"

    def transform(self, version: str) -> VariantPolicy:
        """Resize policy for a version."""
        if version == ORIGINAL:
            return VariantPolicy.original()
        if version == THUMBNAIL:
            return VariantPolicy.thumbnail()
        return VariantPolicy.named_width(self.catalog.get_width(version))

    def headers(self, version: str) -> Dict[str, str]:
        return {
            'content_type': self.encoder.content_type(),
            'cache_control': self.config.cache_control,
        }

    def key_for(self, version: str, file_name: str, scope: Any = None) -> str:
        """Storage key for one version of a file."""
        name = f"{self.filename(version, file_name)}.{self.config.output_extension}"
        return NamingPolicy.build_key(self.storage_dir(version, scope), name)

    def store(self, source: ImageSource, file_name: str, scope: Any = None) -> Dict[str, str]:
        """
        Encode and store every version.

        Args:
            source: Image bytes or a file path
            file_name: Original file name
            scope: Optional object passed to storage_dir

        Returns:
            Dict of version -> URL or path

        Raises:
            ValidationError: If validate() rejects the file
            ConfigError: If no bucket is configured
        """
        if not self.validate(file_name):
            raise ValidationError(f"Unsupported file: {file_name}")

        bucket = self.config.require_bucket()
        urls: Dict[str, str] = {}

        with self.encoder.load(source) as image:
            for version in self.versions():
                key = self.key_for(version, file_name, scope)
                headers = self.headers(version)
                try:
                    with self.encoder.encode(image, self.transform(version), version) as result:
                        stored = self.storage.put(bucket, key, result.path, **headers)
                except ImageSetError as e:
                    if e.variant is None:
                        raise type(e)(str(e), variant=version) from e
                    raise
                urls[version] = stored.build_url(self.config.asset_host)
                self.logger.debug(f"Stored {version} of {file_name} at {key}")

        return urls
