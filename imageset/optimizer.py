"""
Optimizer - Writes resized, re-encoded copies of local images to disk.
"""

import io
import logging
import os
from typing import Dict, List, Optional, Sequence

from .exceptions import DecodeError, ImageSetError, ValidationError
from .local_client import LocalClient, LocalConfig
from .naming import NamingPolicy
from .optimization_progress import OptimizationProgress
from .optimization_stats import OptimizationStats
from .size_catalog import ORIGINAL, THUMBNAIL, SizeCatalog
from .variant_encoder import VariantEncoder, VariantPolicy


DEFAULT_SIZES = ('xs', 'sm', 'md', 'lg', 'xl', 'thumb')
DEFAULT_FORMATS = ('webp', 'avif', 'jpg')

THUMB_ALIASES = ('thumb', THUMBNAIL)


class Optimizer:
    """
    Optimizes a single image or a directory tree of images.

    Every image is written once per size and format as
    ``{base}_{size}.{format}``. A failed variant or image is logged and
    counted; processing continues with the rest.
    """

    EXTENSION_WHITELIST = {'.jpg', '.jpeg', '.gif', '.png', '.webp', '.avif'}

    def __init__(
        self,
        encoder: VariantEncoder,
        catalog: SizeCatalog,
        sizes: Sequence[str] = DEFAULT_SIZES,
        formats: Sequence[str] = DEFAULT_FORMATS,
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize optimizer.

        Args:
            encoder: Variant encoder with the quality/effort options to use
            catalog: Catalog used to look up size widths
            sizes: Size names; 'thumb' and 'original' are also accepted
            formats: Output formats (e.g. webp, avif, jpg)
            dry_run: If True, report what would be written without writing
            logger: Optional logger instance

        Raises:
            ConfigError: If a size name is not in the catalog
        """
        self.encoder = encoder
        self.formats = [fmt.lower().lstrip('.') for fmt in formats]
        self.dry_run = dry_run
        self.logger = logger or logging.getLogger(__name__)
        self.policies: Dict[str, VariantPolicy] = {
            size: self._policy_for(size, catalog) for size in sizes
        }
        self.stats = OptimizationStats()
        self._stop_requested = False

    @staticmethod
    def _policy_for(size: str, catalog: SizeCatalog) -> VariantPolicy:
        if size in THUMB_ALIASES:
            return VariantPolicy.thumbnail()
        if size == ORIGINAL:
            return VariantPolicy.original()
        return VariantPolicy.named_width(catalog.get_width(size))

    def stop(self) -> None:
        """Request the optimizer to stop after the current image."""
        self._stop_requested = True

    def is_supported(self, path: str) -> bool:
        return os.path.splitext(path)[1].lower() in self.EXTENSION_WHITELIST

    def find_images(self, input_dir: str) -> List[str]:
        """Recursively list supported images, skipping hidden files and directories."""
        found = []
        for dirpath, dirnames, filenames in os.walk(input_dir):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith('.'))
            for filename in sorted(filenames):
                if filename.startswith('.'):
                    continue
                path = os.path.join(dirpath, filename)
                if self.is_supported(path):
                    found.append(path)
        return found

    def optimize_path(
        self,
        input_path: str,
        output_dir: str,
        progress: Optional[OptimizationProgress] = None
    ) -> OptimizationStats:
        """
        Optimize a file or every supported image below a directory.

        Args:
            input_path: Image file or directory
            output_dir: Directory to write variants to
            progress: Optional progress tracker

        Returns:
            OptimizationStats with results

        Raises:
            ValidationError: If input_path does not exist
        """
        if not os.path.exists(input_path):
            raise ValidationError(f"Input path does not exist: {input_path}")

        if os.path.isdir(input_path):
            images = self.find_images(input_path)
            self.stats = OptimizationStats(total_images=len(images))
            if not images:
                self.logger.info(f"No image files found in directory: {input_path}")
                return self.stats

            self.logger.info(f"Found {len(images)} images to optimize...")
            for index, path in enumerate(images, 1):
                if self._stop_requested:
                    self.logger.info("Stop requested, halting optimization")
                    break
                if progress:
                    progress.on_image_started(path, index, len(images))
                relative_dir = os.path.dirname(os.path.relpath(path, input_path))
                self.optimize_image(path, os.path.join(output_dir, relative_dir), progress)
                if progress:
                    progress.on_progress_update(self.stats)
        else:
            self.stats = OptimizationStats(total_images=1)
            self.optimize_image(input_path, output_dir, progress)

        mode_str = " [DRY RUN]" if self.dry_run else ""
        self.logger.info(
            f"Optimization complete{mode_str}: {self.stats.processed} optimized, "
            f"{self.stats.skipped} skipped, {self.stats.errors} errors "
            f"({self.stats.variants_written} files, {self.stats.elapsed_seconds:.1f}s)"
        )
        return self.stats

    def optimize_image(
        self,
        path: str,
        output_dir: str,
        progress: Optional[OptimizationProgress] = None
    ) -> bool:
        """
        Write every size and format of one image.

        Returns:
            True if every variant was written
        """
        if not self.is_supported(path):
            self.logger.error(f"Skipping unsupported file: {path}")
            self.stats.skipped += 1
            if progress:
                progress.on_file_skipped(path, "unsupported file type")
            return False

        output_names = [
            NamingPolicy.build_optimized_name(path, size, fmt)
            for size in self.policies
            for fmt in self.formats
        ]

        if self.dry_run:
            if progress:
                progress.on_dry_run(path, output_names)
            else:
                self.logger.info(f"[DRY RUN] Would create {len(output_names)} files for {path}")
            self.stats.processed += 1
            return True

        storage = LocalClient(LocalConfig(root_path=output_dir), self.logger)
        failures = 0

        try:
            with self.encoder.load(path) as img:
                for size, policy in self.policies.items():
                    rendered = self.encoder.render(img, policy)
                    for fmt in self.formats:
                        if not self._write_variant(storage, rendered, path, size, fmt, progress):
                            failures += 1
        except DecodeError as e:
            self._record_error(f"Failed to process {path}: {e}")
            return False

        if failures:
            self._record_error(f"{failures} variants of {path} failed")
            return False

        self.stats.processed += 1
        return True

    def _write_variant(self, storage, rendered, path, size, fmt, progress) -> bool:
        output_name = NamingPolicy.build_optimized_name(path, size, fmt)
        buffer = io.BytesIO()
        try:
            self.encoder.save(rendered, buffer, fmt)
            data = buffer.getvalue()
            storage.put('', output_name, data, self.encoder.content_type(fmt), cache_control='')
        except ImageSetError as e:
            self.logger.error(f"  Failed to create {output_name}: {e}")
            self.stats.variant_errors += 1
            if progress:
                progress.on_variant_failed(output_name, str(e))
            return False

        self.stats.variants_written += 1
        self.stats.bytes_written += len(data)
        self.logger.debug(f"  Created {output_name}")
        if progress:
            progress.on_variant_written(output_name, len(data))
        return True

    def _record_error(self, message: str) -> None:
        self.logger.error(message)
        self.stats.errors += 1
        self.stats.error_details.append(message)
