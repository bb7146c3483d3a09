"""
SizeCatalog - Resolves the configured name -> width variant catalog.
"""

from dataclasses import dataclass
from typing import List

from .config import DEFAULT_SIZES, ImageConfig
from .exceptions import ConfigError


ORIGINAL = 'original'
THUMBNAIL = 'thumbnail'

# Fixed width of the thumbnail version; not part of the catalog.
THUMBNAIL_WIDTH = 320


@dataclass(frozen=True)
class SizeSpec:
    """
    One catalog entry.

    Attributes:
        name: Variant name (e.g. 'xs')
        width: Target pixel width
    """
    name: str
    width: int


class SizeCatalog:
    """
    Ordered catalog of image size variants.

    Reads the sizes from configuration on every call and falls back to
    DEFAULT_SIZES when none are configured.
    """

    def __init__(self, config: ImageConfig):
        self.config = config

    def resolve(self) -> List[SizeSpec]:
        """
        Resolve the catalog in configured order.

        Raises:
            ConfigError: If the catalog is empty or has a non-positive width
        """
        sizes = self.config.sizes if self.config.sizes is not None else DEFAULT_SIZES
        if not sizes:
            raise ConfigError("Size catalog is empty")

        specs = []
        for name, width in sizes.items():
            if not isinstance(width, int) or width <= 0:
                raise ConfigError(f"Width for size {name!r} must be a positive integer, got {width!r}")
            specs.append(SizeSpec(name=name, width=width))
        return specs

    @property
    def names(self) -> List[str]:
        return [spec.name for spec in self.resolve()]

    def get_width(self, name: str) -> int:
        """
        Return the width for a size name.

        Raises:
            ConfigError: If the name is not in the catalog
        """
        for spec in self.resolve():
            if spec.name == name:
                return spec.width
        raise ConfigError(f"Unknown image size: {name}")

    def versions(self) -> List[str]:
        """All uploader versions: original, thumbnail, then the catalog names."""
        versions = [ORIGINAL, THUMBNAIL]
        for name in self.names:
            if name not in versions:
                versions.append(name)
        return versions
