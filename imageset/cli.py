"""
Command Line Interface for image variant optimization and upload.
"""

import argparse
import json
import logging
import os
from typing import List, Optional

import urllib3

from .config import EncodeOptions, ImageConfig, parse_sizes
from .exceptions import ImageSetError
from .optimization_progress import OptimizationProgress
from .optimizer import DEFAULT_FORMATS, DEFAULT_SIZES, Optimizer
from .orchestrator import UploadOrchestrator
from .s3_client import S3Client
from .s3_config import S3Config
from .size_catalog import SizeCatalog
from .variant_encoder import VariantEncoder


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('imageset')


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated option value."""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def get_image_config(args: argparse.Namespace) -> ImageConfig:
    """Get image configuration from environment and CLI overrides."""
    config = ImageConfig.from_env()

    if getattr(args, 'catalog', None):
        config.sizes = parse_sizes(args.catalog)
    if getattr(args, 'bucket', None):
        config.bucket = args.bucket
    if getattr(args, 'prefix', None) is not None:
        config.prefix = args.prefix
    if getattr(args, 'asset_host', None):
        config.asset_host = args.asset_host

    encode = config.encode
    config.encode = EncodeOptions(
        quality=args.quality if getattr(args, 'quality', None) is not None else encode.quality,
        effort=args.effort if getattr(args, 'effort', None) is not None else encode.effort,
        minimize_file_size=encode.minimize_file_size,
        strip_metadata=encode.strip_metadata,
        output_format=getattr(args, 'format', None) or encode.output_format,
    )
    return config


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration from environment and CLI overrides."""
    config = S3Config.from_env()

    if getattr(args, 's3_endpoint', None):
        config.endpoint = args.s3_endpoint
    if getattr(args, 's3_access_key', None):
        config.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.secret_key = args.s3_secret_key
    if getattr(args, 's3_region', None):
        config.region = args.s3_region
    if getattr(args, 'no_verify_ssl', False):
        config.verify_ssl = False

    return config


def add_s3_arguments(parser: argparse.ArgumentParser) -> None:
    """Add S3 connection arguments to a parser."""
    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')
    s3_group.add_argument('--s3-region', help='Override S3_REGION')
    s3_group.add_argument('--no-verify-ssl', action='store_true', help='Skip TLS certificate checks')


def cmd_optimize(args: argparse.Namespace) -> int:
    """Execute optimize command."""
    logger = setup_logging(args.verbose)

    try:
        config = get_image_config(args)
        sizes = split_list(args.sizes) or list(DEFAULT_SIZES)
        formats = split_list(args.formats) or list(DEFAULT_FORMATS)
        encode = config.encode
        encoder = VariantEncoder(
            EncodeOptions(
                quality=encode.quality,
                effort=encode.effort,
                minimize_file_size=True,
                strip_metadata=True,
                output_format=formats[0],
            ),
            logger=logger,
        )
        optimizer = Optimizer(
            encoder=encoder,
            catalog=SizeCatalog(config),
            sizes=sizes,
            formats=formats,
            dry_run=args.dry_run,
            logger=logger,
        )
    except (ImageSetError, ValueError) as e:
        logger.error(str(e))
        return 1

    if not os.path.exists(args.input):
        logger.error(f"Input path does not exist: {args.input}")
        return 1

    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output}")
    logger.info(f"Sizes: {', '.join(sizes)}")
    logger.info(f"Formats: {', '.join(formats)}")

    progress = None
    if not args.quiet:
        progress = OptimizationProgress(show_files=args.show_files, logger=logger)

    try:
        if not args.dry_run:
            os.makedirs(args.output, exist_ok=True)
        stats = optimizer.optimize_path(args.input, args.output, progress=progress)
    except (ImageSetError, OSError) as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    if not args.quiet:
        print()
        print(f"Optimized: {stats.processed}")
        print(f"Files written: {stats.variants_written}")
        print(f"Skipped: {stats.skipped}")
        print(f"Errors: {stats.errors}")
        print(f"Time: {stats.elapsed_seconds:.1f}s")

    single_file_skipped = not os.path.isdir(args.input) and stats.skipped > 0
    return 0 if stats.errors == 0 and not single_file_skipped else 1


def cmd_upload(args: argparse.Namespace) -> int:
    """Execute upload command."""
    logger = setup_logging(args.verbose)

    try:
        config = get_image_config(args)
        s3_config = get_s3_config(args)
    except (ImageSetError, ValueError) as e:
        logger.error(str(e))
        return 1

    errors = config.validate() + s3_config.validate()
    if not config.bucket:
        errors.append("No bucket configured (set S3_BUCKET or use --bucket)")
    if args.workers is not None and args.workers < 1:
        errors.append(f"--workers must be at least 1, got {args.workers}")
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    if not s3_config.verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    logger.info(f"Endpoint: {s3_config.endpoint or 'AWS'}")
    logger.info(f"Bucket: {config.bucket}/{config.prefix}")

    try:
        orchestrator = UploadOrchestrator(
            config=config,
            storage=S3Client(s3_config, logger),
            max_workers=args.workers,
            logger=logger,
        )
        url_map = orchestrator.upload_complete_set(
            args.image,
            file_name=os.path.basename(args.image),
            generate_unique=not args.keep_name,
        )
    except ImageSetError as e:
        logger.error(f"Upload failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    print(json.dumps(url_map, indent=2))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='imageset',
        description='Responsive image variants: optimize locally or upload to S3',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  imageset optimize photo.jpg -o optimized_images
  imageset optimize images/ -o output --sizes sm,md,lg --formats webp,jpg
  imageset optimize photo.jpg -o output --quality 85 --effort 8
  imageset upload photo.jpg --bucket media --prefix articles

Configuration:
  IMAGESET_* and S3_* environment variables supply defaults; flags override them.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Optimize command
    opt_parser = subparsers.add_parser('optimize', help='Write resized copies of images to disk')
    opt_parser.add_argument('input', help='Image file or directory')
    opt_parser.add_argument('-o', '--output', required=True, help='Output directory')
    opt_parser.add_argument('--sizes', help=f"Comma-separated sizes (default: {','.join(DEFAULT_SIZES)})")
    opt_parser.add_argument('--formats', help=f"Comma-separated formats (default: {','.join(DEFAULT_FORMATS)})")
    opt_parser.add_argument('--quality', type=int, help='Image quality 1-100 (default: 75)')
    opt_parser.add_argument('--effort', type=int, help='Compression effort 1-10 (default: 10)')
    opt_parser.add_argument('--catalog', metavar='NAME:WIDTH,...', help='Override IMAGESET_SIZES')
    opt_parser.add_argument('-n', '--dry-run', action='store_true', help='Show what would be done')
    opt_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    opt_parser.add_argument('--show-files', action='store_true', help='Print each file as it is written')
    opt_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Upload command
    up_parser = subparsers.add_parser('upload', help='Upload every catalog size of an image to S3')
    up_parser.add_argument('image', help='Image file to upload')
    up_parser.add_argument('--bucket', help='Override S3_BUCKET')
    up_parser.add_argument('--prefix', help='Key prefix (default: IMAGESET_PREFIX or uploads)')
    up_parser.add_argument('--asset-host', help='Public host for URLs (overrides IMAGESET_ASSET_HOST)')
    up_parser.add_argument('--format', help='Output format (default: IMAGESET_OUTPUT_FORMAT or webp)')
    up_parser.add_argument('--quality', type=int, help='Image quality 1-100')
    up_parser.add_argument('--effort', type=int, help='Compression effort 1-10')
    up_parser.add_argument('--catalog', metavar='NAME:WIDTH,...', help='Override IMAGESET_SIZES')
    up_parser.add_argument('--keep-name', action='store_true',
                           help='Name variants after the file instead of a unique id')
    up_parser.add_argument('--workers', type=int, help='Concurrent variant uploads (1 = sequential)')
    up_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_s3_arguments(up_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'optimize':
        return cmd_optimize(parsed_args)
    elif parsed_args.command == 'upload':
        return cmd_upload(parsed_args)

    return 1
