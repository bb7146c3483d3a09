"""
imageset - Responsive image variants for web applications.

Derives a catalog of named widths from configuration, re-encodes an image
once per width and uploads every variant, returning a width -> URL map with
'default' (largest) and 'thumbnail' (smallest) aliases.

Supports both S3 and local filesystem storage.
"""

__version__ = "0.1.0"
__author__ = "California Academy of Sciences"

from .exceptions import (
    ImageSetError,
    ConfigError,
    DecodeError,
    EncodeError,
    StorageError,
    ValidationError,
)
from .config import ImageConfig, EncodeOptions
from .s3_config import S3Config
from .size_catalog import SizeCatalog, SizeSpec
from .variant_encoder import VariantEncoder, VariantPolicy, VariantResult
from .naming import NamingPolicy
from .storage import StorageBackend, StoredReference
from .s3_client import S3Client
from .local_client import LocalConfig, LocalClient
from .assembler import ResultAssembler, UploadedReference
from .orchestrator import UploadOrchestrator
from .uploader import Uploader
from .optimization_stats import OptimizationStats
from .optimization_progress import OptimizationProgress
from .optimizer import Optimizer

__all__ = [
    "ImageSetError",
    "ConfigError",
    "DecodeError",
    "EncodeError",
    "StorageError",
    "ValidationError",
    "ImageConfig",
    "EncodeOptions",
    "S3Config",
    "SizeCatalog",
    "SizeSpec",
    "VariantEncoder",
    "VariantPolicy",
    "VariantResult",
    "NamingPolicy",
    "StorageBackend",
    "StoredReference",
    "S3Client",
    "LocalConfig",
    "LocalClient",
    "ResultAssembler",
    "UploadedReference",
    "UploadOrchestrator",
    "Uploader",
    "OptimizationStats",
    "OptimizationProgress",
    "Optimizer",
]
