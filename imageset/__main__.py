"""
Main entry point for running the package as a module.

Usage:
    python -m imageset optimize photo.jpg -o optimized_images
    python -m imageset upload photo.jpg --bucket media
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
