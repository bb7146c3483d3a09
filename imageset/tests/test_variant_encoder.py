"""Tests for VariantEncoder class."""

import io
import os

import pytest
from PIL import Image, ImageCms, features

from imageset.config import EncodeOptions
from imageset.exceptions import DecodeError, EncodeError
from imageset.variant_encoder import VariantEncoder, VariantPolicy


def decode(data):
    return Image.open(io.BytesIO(data))


class TestVariantPolicy:
    """Tests for VariantPolicy."""

    def test_thumbnail_is_fixed(self):
        """Test thumbnail policy has the fixed width."""
        assert VariantPolicy.thumbnail().width == 320

    def test_named_width_positive(self):
        """Test non-positive widths are rejected."""
        with pytest.raises(ValueError):
            VariantPolicy.named_width(0)


class TestVariantEncoder:
    """Tests for VariantEncoder class."""

    def test_init_defaults(self):
        """Test default initialization."""
        encoder = VariantEncoder()

        assert encoder.options == EncodeOptions()
        assert encoder.tmp_dir is None

    def test_load_bytes(self, sample_image_bytes):
        """Test decoding from bytes."""
        img = VariantEncoder().load(sample_image_bytes)

        assert img.size == (1600, 800)

    def test_load_path(self, sample_image_file):
        """Test decoding from a file path."""
        with VariantEncoder().load(sample_image_file) as img:
            assert img.size == (1600, 800)

    def test_load_invalid_image(self):
        """Test handling of invalid image data."""
        with pytest.raises(DecodeError):
            VariantEncoder().load(b'not an image')

    def test_load_missing_file(self, tmp_path):
        """Test a missing path raises DecodeError."""
        with pytest.raises(DecodeError):
            VariantEncoder().load(str(tmp_path / 'missing.jpg'))

    def test_render_named_width_keeps_aspect(self, sample_image_bytes):
        """Test resizing to a width preserves the aspect ratio."""
        encoder = VariantEncoder()
        img = encoder.load(sample_image_bytes)

        result = encoder.render(img, VariantPolicy.named_width(768))

        assert result.size == (768, 384)

    def test_render_named_width_upscales(self, image_bytes_factory):
        """Test named widths are exact even above the source width."""
        encoder = VariantEncoder()
        img = encoder.load(image_bytes_factory(size=(200, 100)))

        result = encoder.render(img, VariantPolicy.named_width(320))

        assert result.size == (320, 160)

    def test_render_thumbnail_fits_longer_edge(self, image_bytes_factory):
        """Test thumbnail fits the longer edge into 320."""
        encoder = VariantEncoder()
        img = encoder.load(image_bytes_factory(size=(600, 1200)))

        result = encoder.render(img, VariantPolicy.thumbnail())

        assert result.size == (160, 320)

    def test_render_thumbnail_upscales_small_source(self, image_bytes_factory):
        """Test a source smaller than 320 is enlarged to the thumbnail edge."""
        encoder = VariantEncoder()
        img = encoder.load(image_bytes_factory(size=(200, 100), fmt='PNG'))

        assert encoder.render(img, VariantPolicy.thumbnail()).size == (320, 160)

    def test_encode_thumbnail_longer_edge(self, image_bytes_factory):
        """Test an encoded thumbnail has its longer edge at 320."""
        encoder = VariantEncoder(EncodeOptions(output_format='webp'))

        with encoder.encode(image_bytes_factory(size=(200, 100), fmt='PNG'),
                            VariantPolicy.thumbnail(), 'thumbnail') as result:
            with Image.open(result.path) as img:
                assert max(img.size) == 320
                assert img.size == (320, 160)
        assert result.width == 320

    def test_encode_shared_image(self, sample_image_bytes):
        """Test a decoded image is used as is and left open."""
        encoder = VariantEncoder()
        img = encoder.load(sample_image_bytes)

        with encoder.encode(img, VariantPolicy.named_width(320), 'xs') as result:
            assert result.width == 320

        assert img.size == (1600, 800)
        assert img.getpixel((0, 0)) is not None

    def test_render_original(self, sample_image_bytes):
        """Test original keeps the native resolution."""
        encoder = VariantEncoder()
        img = encoder.load(sample_image_bytes)

        assert encoder.render(img, VariantPolicy.original()).size == (1600, 800)

    def test_render_palette_image(self, image_bytes_factory):
        """Test palette images are converted before resampling."""
        encoder = VariantEncoder()
        img = encoder.load(image_bytes_factory(size=(100, 100), mode='P', color=1, fmt='GIF'))

        result = encoder.render(img, VariantPolicy.named_width(50))

        assert result.mode in ('RGB', 'RGBA')
        assert result.size == (50, 50)

    def test_encode_round_trip(self, sample_image_bytes):
        """Test an encoded variant decodes to the requested width."""
        encoder = VariantEncoder(EncodeOptions(output_format='webp'))

        with encoder.encode(sample_image_bytes, VariantPolicy.named_width(320), 'xs') as result:
            with open(result.path, 'rb') as f:
                data = f.read()

        img = decode(data)
        assert img.format == 'WEBP'
        assert img.size == (320, 160)
        assert result.variant_name == 'xs'
        assert result.width == 320
        assert result.content_type == 'image/webp'
        assert result.size == len(data)

    def test_encode_removes_tempfile(self, sample_image_bytes, tmp_path):
        """Test the temporary file is removed after use."""
        encoder = VariantEncoder(tmp_dir=str(tmp_path))

        with encoder.encode(sample_image_bytes, VariantPolicy.thumbnail(), 'thumbnail') as result:
            assert os.path.exists(result.path)
            assert os.path.dirname(result.path) == str(tmp_path)

        assert not os.path.exists(result.path)
        assert os.listdir(tmp_path) == []

    def test_encode_removes_tempfile_on_error(self, sample_image_bytes, tmp_path):
        """Test the temporary file is removed when the caller fails."""
        encoder = VariantEncoder(tmp_dir=str(tmp_path))

        with pytest.raises(RuntimeError):
            with encoder.encode(sample_image_bytes, VariantPolicy.thumbnail(), 'thumbnail'):
                raise RuntimeError("upload failed")

        assert os.listdir(tmp_path) == []

    def test_encode_decode_error_cleans_up(self, tmp_path):
        """Test decode failures raise DecodeError and leave no temp file."""
        encoder = VariantEncoder(tmp_dir=str(tmp_path))

        with pytest.raises(DecodeError):
            with encoder.encode(b'garbage', VariantPolicy.thumbnail(), 'thumbnail'):
                pass

        assert os.listdir(tmp_path) == []

    def test_save_jpeg_flattens_alpha(self, sample_png_bytes):
        """Test JPEG output of a transparent image."""
        encoder = VariantEncoder()
        img = encoder.load(sample_png_bytes)
        buffer = io.BytesIO()

        encoder.save(img, buffer, 'jpg')

        result = decode(buffer.getvalue())
        assert result.format == 'JPEG'
        assert result.mode == 'RGB'

    def test_save_png_keeps_alpha(self, sample_png_bytes):
        """Test PNG output keeps transparency."""
        encoder = VariantEncoder()
        img = encoder.load(sample_png_bytes)
        buffer = io.BytesIO()

        encoder.save(img, buffer, 'png')

        assert decode(buffer.getvalue()).mode == 'RGBA'

    def test_save_unsupported_format(self, sample_image_bytes):
        """Test unknown output formats raise EncodeError."""
        encoder = VariantEncoder()
        img = encoder.load(sample_image_bytes)

        with pytest.raises(EncodeError):
            encoder.save(img, io.BytesIO(), 'bmp2')

    def test_strip_metadata(self, image_bytes_factory):
        """Test EXIF is dropped or kept according to strip_metadata."""
        exif = Image.Exif()
        exif[0x010F] = 'TestCamera'
        buffer = io.BytesIO()
        Image.new('RGB', (100, 50), 'blue').save(buffer, format='JPEG', exif=exif.tobytes())
        source = buffer.getvalue()

        for strip, expected in ((True, False), (False, True)):
            encoder = VariantEncoder(EncodeOptions(output_format='jpeg', strip_metadata=strip))
            with encoder.encode(source, VariantPolicy.named_width(50), 'xs') as result:
                with Image.open(result.path) as img:
                    assert ('exif' in img.info) is expected

    @pytest.mark.parametrize('fmt', ['webp', 'jpeg', 'png', 'avif'])
    def test_strip_metadata_drops_icc_profile(self, fmt):
        """Test strip_metadata removes EXIF and ICC profiles for every format."""
        if fmt == 'avif' and not features.check('avif'):
            pytest.skip("Pillow built without AVIF support")

        icc = ImageCms.ImageCmsProfile(ImageCms.createProfile('sRGB')).tobytes()
        exif = Image.Exif()
        exif[0x010F] = 'TestCamera'
        buffer = io.BytesIO()
        Image.new('RGB', (400, 200), 'blue').save(
            buffer, format='JPEG', exif=exif.tobytes(), icc_profile=icc
        )
        source = buffer.getvalue()

        encoder = VariantEncoder(EncodeOptions(output_format=fmt, strip_metadata=True))
        with encoder.encode(source, VariantPolicy.named_width(320), 'xs') as result:
            with Image.open(result.path) as img:
                assert not img.info.get('icc_profile')
                assert not img.info.get('exif')

        encoder = VariantEncoder(EncodeOptions(output_format=fmt, strip_metadata=False))
        with encoder.encode(source, VariantPolicy.named_width(320), 'xs') as result:
            with Image.open(result.path) as img:
                assert img.info.get('icc_profile')

    def test_strip_metadata_leaves_input_untouched(self):
        """Test stripping works on a copy of the image."""
        img = Image.new('RGB', (10, 10))
        img.info['icc_profile'] = b'profile'

        VariantEncoder().save(img, io.BytesIO(), 'png')

        assert img.info['icc_profile'] == b'profile'

    def test_webp_method_from_effort(self):
        """Test effort maps onto the WebP method range."""
        img = Image.new('RGB', (10, 10))

        low = VariantEncoder(EncodeOptions(effort=1))._save_options(img, 'webp')
        high = VariantEncoder(EncodeOptions(effort=10))._save_options(img, 'webp')

        assert low['method'] == 0
        assert high['method'] == 6
        assert high['quality'] == 75

    def test_jpeg_options_ignore_effort(self):
        """Test JPEG options carry no effort setting."""
        img = Image.new('RGB', (10, 10))

        opts = VariantEncoder(EncodeOptions(quality=85))._save_options(img, 'jpeg')

        assert opts == {'quality': 85, 'optimize': True, 'progressive': True}

    def test_get_content_type(self):
        """Test getting content type for formats."""
        encoder = VariantEncoder()

        assert encoder.content_type() == 'image/webp'
        assert encoder.content_type('jpg') == 'image/jpeg'
        assert encoder.content_type('.PNG') == 'image/png'
        assert encoder.content_type('avif') == 'image/avif'
