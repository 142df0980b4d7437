"""
Pytest configuration and shared fixtures for test suite.
"""

import pytest
import tempfile
import shutil
from pathlib import Path

import numpy as np
from PIL import Image

from burstcull.database import PhotoStore
from burstcull.models import ImageRecord, RasterImage


def pattern_array(width: int, height: int, invert: bool = False) -> np.ndarray:
    """Smooth, asymmetric RGB test pattern as a uint8 array."""
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    xs /= width
    ys /= height
    luma = 128 + 60 * np.sin(2 * np.pi * xs * 1.3) * np.cos(2 * np.pi * ys * 0.7) + 50 * xs * ys
    luma = np.clip(luma, 0, 255)
    if invert:
        luma = 255 - luma
    rgb = np.stack([luma, luma * 0.9, luma * 0.8], axis=-1)
    return rgb.astype(np.uint8)


def make_raster(width: int, height: int, invert: bool = False) -> RasterImage:
    """RasterImage holding the test pattern."""
    return RasterImage.from_pil(Image.fromarray(pattern_array(width, height, invert), 'RGB'))


def make_record(name: str, phash=None, **fields) -> ImageRecord:
    """ImageRecord for a file under /photos."""
    path = f"/photos/{name}"
    fields.setdefault('preview_ref', path)
    return ImageRecord(file_path=path, phash=phash, **fields)


class FakeDecoder:
    """Decoder returning a fixed raster and counting calls."""

    def __init__(self, raster: RasterImage = None, fail_on=()):
        self.raster = raster or make_raster(32, 32)
        self.fail_on = set(fail_on)
        self.calls = []

    def __call__(self, ref):
        self.calls.append(ref)
        if ref in self.fail_on:
            from burstcull.similarity import PreviewDecodeError
            raise PreviewDecodeError(f"Cannot decode {ref}")
        return self.raster


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def temp_db(temp_dir):
    """Path for a temporary library database."""
    return str(temp_dir / "library.db")


@pytest.fixture
def temp_store(temp_db):
    """Empty PhotoStore backed by a temporary file."""
    return PhotoStore(db_path=temp_db)


@pytest.fixture
def fake_decoder():
    return FakeDecoder()


@pytest.fixture
def sample_images(temp_dir):
    """
    Create a set of sample images for testing.

    Returns:
        dict with paths to:
        - pattern.png: 256x192 test pattern
        - pattern_half.png: the same pattern at 50% scale
        - inverted.png: the inverted pattern
        - nested/deep.jpg: pattern in a subdirectory
        - corrupted.jpg: not an image
        - notes.txt: not an image extension
    """
    images = {}

    base = Image.fromarray(pattern_array(256, 192), 'RGB')
    path = temp_dir / "pattern.png"
    base.save(path, 'PNG')
    images['pattern'] = str(path)

    path = temp_dir / "pattern_half.png"
    base.resize((128, 96), Image.BILINEAR).save(path, 'PNG')
    images['pattern_half'] = str(path)

    path = temp_dir / "inverted.png"
    Image.fromarray(pattern_array(256, 192, invert=True), 'RGB').save(path, 'PNG')
    images['inverted'] = str(path)

    nested = temp_dir / "nested"
    nested.mkdir()
    path = nested / "deep.jpg"
    base.save(path, 'JPEG', quality=90)
    images['deep'] = str(path)

    path = temp_dir / "corrupted.jpg"
    path.write_text("not an image")
    images['corrupted'] = str(path)

    path = temp_dir / "notes.txt"
    path.write_text("shoot notes")
    images['notes'] = str(path)

    return images
