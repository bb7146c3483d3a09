"""
Pytest fixtures for imageset tests.
"""

import io
import os

import pytest
from PIL import Image


def make_image_bytes(size=(1600, 800), mode='RGB', color='red', fmt='JPEG'):
    """Encode a solid test image."""
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_config():
    """Fixture providing image configuration with a bucket."""
    from imageset.config import ImageConfig

    return ImageConfig(bucket='test-bucket')


@pytest.fixture
def two_size_config():
    """Fixture providing a two-entry catalog {xs: 320, sm: 768}."""
    from imageset.config import ImageConfig

    return ImageConfig(sizes={'xs': 320, 'sm': 768}, bucket='test-bucket')


@pytest.fixture
def s3_config():
    """Fixture providing S3 configuration."""
    from imageset.s3_config import S3Config

    return S3Config(
        endpoint='https://test-endpoint.example.com:9000',
        access_key='test-access-key',
        secret_key='test-secret-key',
        region='us-east-1',
    )


@pytest.fixture
def mock_storage(mocker):
    """
    Fixture providing a storage backend that records what it was given.

    Each call checks the content file exists at upload time and records
    (bucket, key, content, content_type, cache_control) in ``mock.calls_made``.
    """
    from imageset.storage import StorageBackend, StoredReference

    mock = mocker.MagicMock(spec=StorageBackend)
    mock.calls_made = []

    def fake_put(bucket, key, content, content_type, cache_control):
        assert os.path.exists(content)
        mock.calls_made.append((bucket, key, content, content_type, cache_control))
        return StoredReference(key=key, bucket=bucket, scheme='https://', host='s3.example.com')

    mock.put.side_effect = fake_put
    return mock


@pytest.fixture
def image_bytes_factory():
    """Fixture providing the make_image_bytes helper."""
    return make_image_bytes


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample 1600x800 JPEG image bytes."""
    return make_image_bytes()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    return make_image_bytes(size=(100, 100), mode='RGBA', color=(255, 0, 0, 128), fmt='PNG')


@pytest.fixture
def sample_image_file(tmp_path, sample_image_bytes):
    """Fixture providing a JPEG file on disk."""
    path = tmp_path / "photo.jpg"
    path.write_bytes(sample_image_bytes)
    return str(path)


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
