"""
LocalClient - Filesystem storage backend.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import StorageError
from .storage import Content, StorageBackend, StoredReference


@dataclass
class LocalConfig:
    """
    Local filesystem storage settings.

    Attributes:
        root_path: Directory that keys are resolved against
        create_root: Create root_path if it is missing
    """
    root_path: str
    create_root: bool = True

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if not self.root_path:
            errors.append("Local root path is required")
        elif os.path.exists(self.root_path) and not os.path.isdir(self.root_path):
            errors.append(f"Local root is not a directory: {self.root_path}")
        elif not os.path.exists(self.root_path) and not self.create_root:
            errors.append(f"Local root does not exist: {self.root_path}")
        return errors


class LocalClient(StorageBackend):
    """
    Writes variants below a root directory.

    The bucket argument is ignored; keys map to paths relative to the root.
    Content type and cache control have nowhere to live on a plain
    filesystem and are only logged.
    """

    def __init__(self, config: LocalConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def path_for(self, key: str) -> str:
        """Absolute path for a key, refusing keys that escape the root."""
        root = os.path.abspath(self.config.root_path)
        path = os.path.abspath(os.path.join(root, key))
        if os.path.commonpath([root, path]) != root:
            raise StorageError(f"Key escapes local root: {key}")
        return path

    def put(
        self,
        bucket: str,
        key: str,
        content: Content,
        content_type: str,
        cache_control: str
    ) -> StoredReference:
        """Write content to ``{root}/{key}``."""
        path = self.path_for(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            if isinstance(content, (bytes, bytearray)):
                with open(path, 'wb') as f:
                    f.write(content)
            elif isinstance(content, (str, os.PathLike)):
                shutil.copyfile(content, path)
            else:
                with open(path, 'wb') as f:
                    shutil.copyfileobj(content, f)
        except OSError as e:
            self.logger.error(f"Write failed for {path}: {e}")
            raise StorageError(f"Write failed for {path}: {e}") from e

        self.logger.debug(f"Wrote {path} ({content_type})")
        return StoredReference(key=key, bucket=bucket, location=path)
