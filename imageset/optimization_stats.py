"""
OptimizationStats - Statistics for an optimize run.
"""

import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class OptimizationStats:
    """
    Statistics for an optimize run.

    Attributes:
        total_images: Images found for processing
        processed: Images with every variant written
        skipped: Inputs skipped (unsupported extension)
        errors: Images that failed to decode or had a failed variant
        variants_written: Variant files written
        variant_errors: Variant files that failed
        bytes_written: Total bytes of variants written
        start_time: Start timestamp
        error_details: List of error messages
    """
    total_images: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    variants_written: int = 0
    variant_errors: int = 0
    bytes_written: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def rate_per_minute(self) -> float:
        """Processing rate in images per minute."""
        if self.elapsed_seconds > 0:
            return self.processed / self.elapsed_seconds * 60
        return 0.0

    @property
    def completed_count(self) -> int:
        """Total completed (processed + skipped + errors)."""
        return self.processed + self.skipped + self.errors

    @property
    def remaining_count(self) -> int:
        """Remaining to process."""
        return max(0, self.total_images - self.completed_count)
