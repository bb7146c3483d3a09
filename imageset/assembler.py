"""
ResultAssembler - Builds the final width -> URL map.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Union

from .exceptions import ConfigError


DEFAULT_KEY = 'default'
THUMBNAIL_KEY = 'thumbnail'


@dataclass(frozen=True)
class UploadedReference:
    """
    A variant after upload.

    Attributes:
        variant_name: Variant name (e.g. 'xs')
        width: Catalog width of the variant
        location: Public URL or filesystem path
    """
    variant_name: str
    width: int
    location: str


class ResultAssembler:
    """
    Turns per-width references into a VariantURLMap.

    The largest width is aliased as 'default' and the smallest as
    'thumbnail'. On equal widths the first entry in iteration order wins.
    """

    def assemble(self, references: Mapping[int, Union[UploadedReference, str]]) -> Dict[str, str]:
        """
        Build the URL map.

        Args:
            references: Width -> reference, in catalog order

        Returns:
            Dict of stringified width -> location, plus 'default' and 'thumbnail'

        Raises:
            ConfigError: If references is empty
        """
        if not references:
            raise ConfigError("Cannot assemble a URL map from an empty catalog")

        data = {str(width): self._location(ref) for width, ref in references.items()}

        widths = list(references.keys())
        largest = max(widths)
        smallest = min(widths)

        data[DEFAULT_KEY] = data[str(largest)]
        data[THUMBNAIL_KEY] = data[str(smallest)]
        return data

    @staticmethod
    def _location(ref: Union[UploadedReference, str]) -> str:
        return ref.location if isinstance(ref, UploadedReference) else ref
