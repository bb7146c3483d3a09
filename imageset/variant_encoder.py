"""
VariantEncoder - Decodes, resizes and re-encodes image variants with Pillow.
"""

import io
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from .config import EncodeOptions
from .exceptions import DecodeError, EncodeError
from .size_catalog import ORIGINAL, THUMBNAIL, THUMBNAIL_WIDTH


ImageSource = Union[bytes, str, os.PathLike]


@dataclass(frozen=True)
class VariantPolicy:
    """
    How the source is resized before encoding.

    Attributes:
        kind: 'original', 'thumbnail' or 'width'
        width: Target width for kind 'width'
    """
    kind: str
    width: Optional[int] = None

    @classmethod
    def original(cls) -> 'VariantPolicy':
        return cls(ORIGINAL)

    @classmethod
    def thumbnail(cls) -> 'VariantPolicy':
        return cls(THUMBNAIL, THUMBNAIL_WIDTH)

    @classmethod
    def named_width(cls, width: int) -> 'VariantPolicy':
        if width <= 0:
            raise ValueError(f"width must be positive, got {width}")
        return cls('width', width)


@dataclass
class VariantResult:
    """
    One encoded variant, backed by a temporary file.

    Attributes:
        variant_name: Variant name (e.g. 'xs')
        width: Actual pixel width of the encoded image
        path: Path of the temporary encoded file
        content_type: MIME type of the encoded file
        size: Encoded size in bytes
    """
    variant_name: str
    width: int
    path: str
    content_type: str
    size: int


class VariantEncoder:
    """
    Produces resized re-encodings of a source image.
    """

    PIL_FORMATS = {
        'webp': 'WEBP',
        'avif': 'AVIF',
        'jpg': 'JPEG',
        'jpeg': 'JPEG',
        'png': 'PNG',
        'gif': 'GIF',
    }

    CONTENT_TYPES = {
        'webp': 'image/webp',
        'avif': 'image/avif',
        'jpg': 'image/jpeg',
        'jpeg': 'image/jpeg',
        'png': 'image/png',
        'gif': 'image/gif',
    }

    METADATA_KEYS = ('exif', 'icc_profile', 'xmp', 'XML:com.adobe.xmp')

    def __init__(
        self,
        options: Optional[EncodeOptions] = None,
        tmp_dir: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize encoder.

        Args:
            options: Encoder options (default: EncodeOptions())
            tmp_dir: Directory for temporary encoded files (default: system temp)
            logger: Optional logger instance
        """
        self.options = options or EncodeOptions()
        self.tmp_dir = tmp_dir
        self.logger = logger or logging.getLogger(__name__)

    def load(self, source: ImageSource) -> Image.Image:
        """
        Decode a source image and apply its EXIF orientation.

        Args:
            source: Image bytes or a file path

        Raises:
            DecodeError: If the source cannot be read or decoded
        """
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        try:
            with Image.open(source) as img:
                img.load()
                return ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            self.logger.error(f"Error decoding image: {e}")
            raise DecodeError(f"Cannot decode image: {e}") from e

    def render(self, img: Image.Image, policy: VariantPolicy) -> Image.Image:
        """
        Resize an image according to a policy.

        Original keeps the native resolution, thumbnail scales the longer
        edge to THUMBNAIL_WIDTH (up or down), and a named width scales to
        exactly that width keeping the aspect ratio.
        """
        img = self._normalize_mode(img)

        if policy.kind == ORIGINAL:
            return img

        src_width, src_height = img.size

        if policy.kind == THUMBNAIL:
            scale = policy.width / max(src_width, src_height)
            size = (max(1, round(src_width * scale)), max(1, round(src_height * scale)))
            return img.resize(size, Image.Resampling.LANCZOS)

        height = max(1, round(src_height * policy.width / src_width))
        return img.resize((policy.width, height), Image.Resampling.LANCZOS)

    def save(
        self,
        img: Image.Image,
        destination: Union[str, os.PathLike, io.BytesIO],
        output_format: Optional[str] = None
    ) -> None:
        """
        Encode an image to a path or buffer.

        Args:
            img: Image to encode
            destination: File path or writable binary buffer
            output_format: Format override (default: the configured format)

        Raises:
            EncodeError: If the format is unsupported or encoding fails
        """
        fmt = (output_format or self.options.output_format).lower().lstrip('.')
        pil_format = self.PIL_FORMATS.get(fmt)
        if pil_format is None:
            raise EncodeError(f"Unsupported output format: {fmt}")

        if pil_format == 'JPEG':
            img = self._flatten_alpha(img)

        save_options = self._save_options(img, fmt)
        if self.options.strip_metadata:
            img = self._strip_metadata(img)

        try:
            img.save(destination, format=pil_format, **save_options)
        except (OSError, ValueError, KeyError) as e:
            self.logger.error(f"Error encoding {fmt}: {e}")
            raise EncodeError(f"Cannot encode {fmt}: {e}") from e

    @contextmanager
    def encode(
        self,
        source: Union[ImageSource, Image.Image],
        policy: VariantPolicy,
        variant_name: str
    ) -> Iterator[VariantResult]:
        """
        Encode one variant into a temporary file.

        The temporary file is removed when the context exits, whether the
        caller succeeded or not.

        Args:
            source: Image bytes, a file path, or an image from load().
                A decoded image is only read, so one can be shared
                between threads.
            policy: Resize policy
            variant_name: Name carried into the result

        Yields:
            VariantResult for the encoded file
        """
        fmt = self.options.extension
        fd, tmp_path = tempfile.mkstemp(dir=self.tmp_dir, prefix=f"{variant_name}_", suffix=f".{fmt}")
        os.close(fd)
        try:
            img = source if isinstance(source, Image.Image) else self.load(source)
            try:
                rendered = self.render(img, policy)
                self.save(rendered, tmp_path)
                width = rendered.size[0]
            finally:
                if img is not source:
                    img.close()
            yield VariantResult(
                variant_name=variant_name,
                width=width,
                path=tmp_path,
                content_type=self.content_type(fmt),
                size=os.path.getsize(tmp_path),
            )
        finally:
            self.remove_tempfile(tmp_path)

    def remove_tempfile(self, tmp_path: str) -> None:
        """Remove a temporary file, logging instead of raising on failure."""
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError as e:
                self.logger.warning(f"Could not delete {tmp_path}: {e}")

    def content_type(self, output_format: Optional[str] = None) -> str:
        """Get content type for an output format."""
        fmt = (output_format or self.options.output_format).lower().lstrip('.')
        return self.CONTENT_TYPES.get(fmt, f"image/{fmt}")

    def _save_options(self, img: Image.Image, fmt: str) -> dict:
        """Pillow save() keyword arguments for a format."""
        opts = self.options
        if fmt == 'webp':
            kwargs = {
                'quality': opts.quality,
                'method': min(6, max(0, round((opts.effort - 1) * 6 / 9))),
            }
        elif fmt == 'avif':
            kwargs = {
                'quality': opts.quality,
                'speed': min(10, max(0, 10 - opts.effort)),
            }
        elif fmt in ('jpg', 'jpeg'):
            kwargs = {
                'quality': opts.quality,
                'optimize': opts.minimize_file_size,
                'progressive': opts.minimize_file_size,
            }
        elif fmt == 'png':
            kwargs = {
                'optimize': opts.minimize_file_size,
                'compress_level': min(9, max(0, opts.effort)),
            }
        else:
            kwargs = {'optimize': opts.minimize_file_size}

        if not opts.strip_metadata:
            for key in ('exif', 'icc_profile'):
                if img.info.get(key):
                    kwargs[key] = img.info[key]
        return kwargs

    @classmethod
    def _strip_metadata(cls, img: Image.Image) -> Image.Image:
        """
        Return the image without metadata in its info dict.

        PNG and AVIF writers fall back to img.info for the ICC profile and
        EXIF, so leaving those keys out of save() is not enough.
        """
        if not any(key in img.info for key in cls.METADATA_KEYS):
            return img
        stripped = img.copy()
        stripped.info = {k: v for k, v in img.info.items() if k not in cls.METADATA_KEYS}
        return stripped

    @staticmethod
    def _normalize_mode(img: Image.Image) -> Image.Image:
        """Convert palette and exotic modes to RGB or RGBA before resampling."""
        if img.mode in ('RGB', 'RGBA'):
            return img
        if img.mode == 'LA' or (img.mode == 'P' and 'transparency' in img.info):
            return img.convert('RGBA')
        return img.convert('RGB')

    @staticmethod
    def _flatten_alpha(img: Image.Image) -> Image.Image:
        """Composite transparent images onto white for formats without alpha."""
        if img.mode == 'RGBA':
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            background.info = dict(img.info)
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img
