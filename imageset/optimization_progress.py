"""
OptimizationProgress - Prints per-file and overall optimize progress.
"""

import logging
import os
from typing import List, Optional

from .optimization_stats import OptimizationStats


class OptimizationProgress:
    """
    Tracks and displays optimize progress with optional per-variant output.
    """

    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 25,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.

        Args:
            show_files: If True, print each variant as it is written
            log_interval: Log summary progress every N images (when not show_files)
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_image_started(self, path: str, index: int, total: int) -> None:
        if self.show_files:
            print(f"[{index}/{total}] Processing {os.path.basename(path)}...")

    def on_variant_written(self, output_name: str, size: int) -> None:
        if self.show_files:
            print(f"  [OK] Created {output_name} ({self._format_bytes(size)})")

    def on_variant_failed(self, output_name: str, error: str) -> None:
        if self.show_files:
            print(f"  [ERROR] Failed to create {output_name}: {error}")

    def on_file_skipped(self, path: str, reason: str) -> None:
        if self.show_files:
            print(f"  [SKIP] {path} -> {reason}")

    def on_dry_run(self, path: str, output_names: List[str]) -> None:
        if self.show_files:
            for name in output_names:
                print(f"  [DRY RUN] {os.path.basename(path)} -> would create {name}")

    def on_progress_update(self, stats: OptimizationStats) -> None:
        """
        Called after each image to report overall progress.

        Args:
            stats: Current optimize statistics
        """
        total_done = stats.completed_count

        if not self.show_files and total_done - self.last_logged >= self.log_interval:
            self.last_logged = total_done
            self.logger.info(
                f"Progress: {stats.processed} optimized, {stats.errors} errors, "
                f"{stats.skipped} skipped ({stats.rate_per_minute:.1f}/min, "
                f"{stats.remaining_count} left)"
            )

    @staticmethod
    def _format_bytes(bytes_val: Optional[int]) -> str:
        """Format bytes as human-readable string."""
        if bytes_val is None:
            return "unknown"
        for unit in ['B', 'KB', 'MB', 'GB']:
            if bytes_val < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} TB"
