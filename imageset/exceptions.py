"""
Exceptions raised by the imageset pipeline.
"""

from typing import Optional


class ImageSetError(Exception):
    """Base class for all imageset errors."""

    def __init__(self, message: str, variant: Optional[str] = None):
        self.variant = variant
        if variant:
            message = f"[{variant}] {message}"
        super().__init__(message)


class ConfigError(ImageSetError):
    """Required configuration is missing or a size name is not in the catalog."""
    pass


class DecodeError(ImageSetError):
    """The source image could not be decoded."""
    pass


class EncodeError(ImageSetError):
    """Resizing or re-encoding a variant failed."""
    pass


class StorageError(ImageSetError):
    """The storage backend rejected or failed a write."""
    pass


class ValidationError(ImageSetError):
    """Bad input to the uploader or the CLI, e.g. an unsupported extension."""
    pass
