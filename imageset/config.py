"""
ImageConfig - Process-wide configuration for variant generation and upload.

Built once at startup (directly or from the environment) and passed to every
component that needs it.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .exceptions import ConfigError


DEFAULT_SIZES: Dict[str, int] = {
    'xs': 320,
    'sm': 768,
    'md': 1024,
    'lg': 1280,
    'xl': 1536,
}

DEFAULT_OUTPUT_FORMAT = 'webp'
DEFAULT_MAX_AGE = 31_536_000
DEFAULT_PREFIX = 'uploads'


def str2bool(value, raise_exc=False):
    """converts diverse string values into boolean True or False."""
    true_set = {'yes', 'true', 't', 'y', '1'}
    false_set = {'no', 'false', 'f', 'n', '0'}

    if isinstance(value, str):
        value = value.lower()
        if value in true_set:
            return True
        if value in false_set:
            return False

    if raise_exc:
        raise ValueError('Expected "%s"' % '", "'.join(true_set | false_set))
    return None


def parse_sizes(value: str) -> Dict[str, int]:
    """
    Parse a size catalog written as ``name:width`` pairs.

    Args:
        value: e.g. ``"xs:320,sm:768"``

    Returns:
        Ordered dict of name -> width

    Raises:
        ConfigError: On malformed pairs, duplicate names or non-positive widths
    """
    sizes: Dict[str, int] = {}
    for pair in value.split(','):
        pair = pair.strip()
        if not pair:
            continue
        name, sep, width = pair.partition(':')
        name = name.strip()
        if not sep or not name:
            raise ConfigError(f"Invalid size entry {pair!r}, expected name:width")
        try:
            parsed = int(width)
        except ValueError:
            raise ConfigError(f"Invalid width for size {name!r}: {width!r}") from None
        if name in sizes:
            raise ConfigError(f"Duplicate size name: {name}")
        if parsed <= 0:
            raise ConfigError(f"Width for size {name!r} must be positive, got {parsed}")
        sizes[name] = parsed
    return sizes


@dataclass(frozen=True)
class EncodeOptions:
    """
    Encoder settings passed through to Pillow.

    Attributes:
        quality: Lossy quality 1-100
        effort: Compression effort 1-10 (mapped per format)
        minimize_file_size: Ask the codec for its smallest output
        strip_metadata: Drop EXIF and ICC data from the output
        output_format: Target format ('webp', 'avif', 'jpeg', 'png', ...)
    """
    quality: int = 75
    effort: int = 10
    minimize_file_size: bool = True
    strip_metadata: bool = True
    output_format: str = DEFAULT_OUTPUT_FORMAT

    @property
    def extension(self) -> str:
        """File extension for the output format, without the dot."""
        return self.output_format.lower().lstrip('.')


@dataclass
class ImageConfig:
    """
    Configuration consumed by the variant pipeline.

    Attributes:
        sizes: Ordered name -> width catalog (None uses DEFAULT_SIZES)
        encode: Encoder options
        max_age: Cache-Control max-age in seconds
        bucket: Destination bucket (required for uploads)
        asset_host: Optional public host used instead of the storage URL
        prefix: Default key prefix for uploads
    """
    sizes: Optional[Dict[str, int]] = None
    encode: EncodeOptions = field(default_factory=EncodeOptions)
    max_age: int = DEFAULT_MAX_AGE
    bucket: Optional[str] = None
    asset_host: Optional[str] = None
    prefix: str = DEFAULT_PREFIX

    @classmethod
    def from_env(cls) -> 'ImageConfig':
        """Create configuration from environment variables."""
        sizes_value = os.getenv('IMAGESET_SIZES')
        encode = EncodeOptions(
            quality=int(os.getenv('IMAGESET_QUALITY', '75')),
            effort=int(os.getenv('IMAGESET_EFFORT', '10')),
            minimize_file_size=str2bool(os.getenv('IMAGESET_MINIMIZE_FILE_SIZE', 'true'), raise_exc=True),
            strip_metadata=str2bool(os.getenv('IMAGESET_STRIP_METADATA', 'true'), raise_exc=True),
            output_format=os.getenv('IMAGESET_OUTPUT_FORMAT', DEFAULT_OUTPUT_FORMAT),
        )
        return cls(
            sizes=parse_sizes(sizes_value) if sizes_value else None,
            encode=encode,
            max_age=int(os.getenv('IMAGESET_MAX_AGE', str(DEFAULT_MAX_AGE))),
            bucket=os.getenv('S3_BUCKET') or None,
            asset_host=os.getenv('IMAGESET_ASSET_HOST') or None,
            prefix=os.getenv('IMAGESET_PREFIX', DEFAULT_PREFIX),
        )

    @property
    def output_extension(self) -> str:
        return self.encode.extension

    @property
    def cache_control(self) -> str:
        """Cache-Control header value for uploaded variants."""
        return f"public, max-age={self.max_age}"

    def require_bucket(self) -> str:
        """
        Return the configured bucket.

        Raises:
            ConfigError: If no bucket is configured
        """
        if not self.bucket:
            raise ConfigError("No bucket name configured (set S3_BUCKET)")
        return self.bucket

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if self.sizes is not None:
            if not self.sizes:
                errors.append("Size catalog must not be empty")
            for name, width in self.sizes.items():
                if not isinstance(width, int) or width <= 0:
                    errors.append(f"Width for size {name!r} must be a positive integer")
        if self.max_age < 0:
            errors.append("max_age must not be negative")
        if not self.encode.output_format:
            errors.append("output_format must not be empty")
        return errors
