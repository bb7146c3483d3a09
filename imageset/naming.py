"""
NamingPolicy - Output file names and storage keys for variants.
"""

import os
import uuid
from typing import Dict, Iterable


class NamingPolicy:
    """
    Derives variant file names.

    Names are ``{variant}_{base}.{ext}``. With ``generate_unique`` the base is
    replaced by a random 128-bit token rendered as 32 hex characters.
    """

    def __init__(self, extension: str = 'webp'):
        self.extension = extension.lower().lstrip('.')

    @staticmethod
    def unique_token() -> str:
        """Return a fresh 128-bit random identifier as a 32-character hex string."""
        return uuid.uuid4().hex

    @staticmethod
    def base_name(file_name: str) -> str:
        """Basename of a path with its extension removed."""
        return os.path.splitext(os.path.basename(file_name))[0]

    def build_name(self, original_file_name: str, variant_name: str, generate_unique: bool = False) -> str:
        """
        Build the file name for one variant.

        Args:
            original_file_name: Name or path of the uploaded file
            variant_name: Variant name (e.g. 'xs')
            generate_unique: Replace the base name with a fresh unique token

        Returns:
            File name such as 'xs_photo.webp'
        """
        base = self.unique_token() if generate_unique else self.base_name(original_file_name)
        return f"{variant_name}_{base}.{self.extension}"

    def build_set_names(
        self,
        original_file_name: str,
        variant_names: Iterable[str],
        generate_unique: bool = False
    ) -> Dict[str, str]:
        """
        Build names for a whole upload set sharing one base.

        With ``generate_unique`` a single token is generated for the set so
        every variant of one upload can be recognised by its id.
        """
        base = self.unique_token() if generate_unique else original_file_name
        return {name: self.build_name(base, name) for name in variant_names}

    @staticmethod
    def build_optimized_name(file_name: str, size: str, fmt: str) -> str:
        """Local optimizer output name, e.g. 'photo_md.webp'."""
        return f"{NamingPolicy.base_name(file_name)}_{size}.{fmt.lower().lstrip('.')}"

    @staticmethod
    def build_key(prefix: str, name: str) -> str:
        """Join a key prefix and a file name."""
        prefix = (prefix or '').strip('/')
        return f"{prefix}/{name}" if prefix else name
