"""
UploadOrchestrator - Encodes every catalog size of an image and uploads it.
"""

import logging
import os
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional

from PIL import Image

from .assembler import ResultAssembler, UploadedReference
from .config import ImageConfig
from .exceptions import ImageSetError, ValidationError
from .naming import NamingPolicy
from .size_catalog import SizeCatalog, SizeSpec
from .storage import StorageBackend
from .variant_encoder import ImageSource, VariantEncoder, VariantPolicy


class UploadOrchestrator:
    """
    Uploads a complete set of image sizes to a storage backend.

    Every size in the catalog is resized, encoded and uploaded. The call is
    all-or-nothing: the first failure cancels pending variants and is
    raised, and no partial URL map is returned. Variants that were already
    uploaded are not deleted.
    """

    def __init__(
        self,
        config: ImageConfig,
        storage: StorageBackend,
        encoder: Optional[VariantEncoder] = None,
        naming: Optional[NamingPolicy] = None,
        max_workers: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize orchestrator.

        Args:
            config: Image configuration
            storage: Storage backend variants are written to
            encoder: Variant encoder (default: built from config.encode)
            naming: Naming policy (default: config output extension)
            max_workers: Concurrent variants; 1 runs sequentially,
                None uses the executor default
            logger: Optional logger instance
        """
        self.config = config
        self.storage = storage
        self.logger = logger or logging.getLogger(__name__)
        self.encoder = encoder or VariantEncoder(config.encode, logger=self.logger)
        self.naming = naming or NamingPolicy(config.output_extension)
        self.catalog = SizeCatalog(config)
        self.assembler = ResultAssembler()
        self.max_workers = max_workers

    def upload_complete_set(
        self,
        source: ImageSource,
        destination_prefix: Optional[str] = None,
        file_name: Optional[str] = None,
        generate_unique: bool = True
    ) -> Dict[str, str]:
        """
        Upload every catalog size and return the URL map.

        Args:
            source: Image bytes or a file path
            destination_prefix: Key prefix (default: config.prefix)
            file_name: Original file name, used when generate_unique is False
            generate_unique: Name the set with a fresh unique id

        Returns:
            Dict of width -> URL plus 'default' (largest) and 'thumbnail' (smallest)

        Raises:
            ConfigError: Missing bucket or bad catalog, before any upload
            DecodeError: The source cannot be decoded
            EncodeError: A variant failed to encode
            StorageError: A variant failed to upload
        """
        references = self.upload_references(source, destination_prefix, file_name, generate_unique)
        return self.assembler.assemble(references)

    def upload_references(
        self,
        source: ImageSource,
        destination_prefix: Optional[str] = None,
        file_name: Optional[str] = None,
        generate_unique: bool = True
    ) -> Dict[int, UploadedReference]:
        """Upload every catalog size and return width -> UploadedReference in catalog order."""
        bucket = self.config.require_bucket()
        specs = self.catalog.resolve()
        prefix = self.config.prefix if destination_prefix is None else destination_prefix

        if file_name is None:
            if isinstance(source, (bytes, bytearray)):
                if not generate_unique:
                    raise ValidationError("file_name is required for byte sources without generate_unique")
                file_name = 'image'
            else:
                file_name = os.path.basename(os.fspath(source))

        with self.encoder.load(source) as image:
            width, height = image.size

            names = self.naming.build_set_names(file_name, [spec.name for spec in specs], generate_unique)
            keys = {name: self.naming.build_key(prefix, file) for name, file in names.items()}

            self.logger.info(
                f"Uploading {len(specs)} variants of {file_name} ({width}x{height}) "
                f"to {bucket}/{prefix}"
            )

            if self.max_workers == 1:
                uploaded = [self._upload_variant(image, spec, bucket, keys[spec.name]) for spec in specs]
            else:
                uploaded = self._upload_concurrently(image, specs, bucket, keys)

        references: Dict[int, UploadedReference] = {}
        for ref in uploaded:
            if ref.width in references:
                self.logger.warning(
                    f"Sizes {references[ref.width].variant_name!r} and {ref.variant_name!r} "
                    f"share width {ref.width}; keeping {references[ref.width].variant_name!r}"
                )
                continue
            references[ref.width] = ref

        self.logger.info(f"Uploaded {len(uploaded)} variants of {file_name}")
        return references

    def _upload_concurrently(
        self,
        image: Image.Image,
        specs: List[SizeSpec],
        bucket: str,
        keys: Dict[str, str]
    ) -> List[UploadedReference]:
        """Run variants on a thread pool, failing fast on the first error."""
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='imageset') as pool:
            futures: List[Future] = [
                pool.submit(self._upload_variant, image, spec, bucket, keys[spec.name])
                for spec in specs
            ]
            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

            failed = [f for f in futures if f in done and f.exception() is not None]
            if failed:
                for future in not_done:
                    future.cancel()
                raise failed[0].exception()

        return [future.result() for future in futures]

    def _upload_variant(
        self,
        image: Image.Image,
        spec: SizeSpec,
        bucket: str,
        key: str
    ) -> UploadedReference:
        """Encode and upload one variant."""
        try:
            with self.encoder.encode(image, VariantPolicy.named_width(spec.width), spec.name) as result:
                self.logger.debug(f"Uploading {spec.name} ({result.size} bytes) to {key}")
                stored = self.storage.put(
                    bucket,
                    key,
                    result.path,
                    content_type=result.content_type,
                    cache_control=self.config.cache_control,
                )
        except ImageSetError as e:
            if e.variant is None:
                raise type(e)(str(e), variant=spec.name) from e
            raise

        return UploadedReference(
            variant_name=spec.name,
            width=spec.width,
            location=stored.build_url(self.config.asset_host),
        )
