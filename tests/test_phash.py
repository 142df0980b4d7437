"""
Unit tests for perceptual hashing.
"""

import pytest
import numpy as np

from burstcull.models import RasterImage
from burstcull.similarity import (
    PreviewDecodeError,
    bits_to_hex,
    compute_phash,
    compute_phash_from_file,
    hamming_distance,
)
from conftest import make_raster


class TestBitsToHex:
    """Test binary string packing."""

    def test_full_nibbles(self):
        assert bits_to_hex("00011010") == "1a"

    def test_partial_nibble_padded_right(self):
        """A trailing '1' becomes '8' (binary 1000)."""
        assert bits_to_hex("11111") == "f8"

    def test_63_bits_give_16_digits(self):
        assert bits_to_hex("1" * 63) == "f" * 15 + "e"


class TestComputePhash:
    """Test compute_phash on synthetic rasters."""

    def test_length_and_alphabet(self):
        """Hash is always 16 lowercase hex characters."""
        phash = compute_phash(make_raster(200, 150))
        assert len(phash) == 16
        assert all(c in "0123456789abcdef" for c in phash)

    def test_deterministic(self):
        """Same pixels give the same hash."""
        raster = make_raster(120, 90)
        assert compute_phash(raster) == compute_phash(raster)
        assert compute_phash(raster) == compute_phash(make_raster(120, 90))

    def test_resize_robustness(self):
        """A 50% scaled copy stays within the default threshold."""
        full = compute_phash(make_raster(256, 192))
        half = compute_phash(make_raster(128, 96))
        assert hamming_distance(full, half) < 15

    def test_inverted_image_differs(self):
        """Inverting luminance flips almost every bit."""
        normal = compute_phash(make_raster(256, 192))
        inverted = compute_phash(make_raster(256, 192, invert=True))
        assert hamming_distance(normal, inverted) > 8

    def test_small_image_is_upsampled(self):
        """Images smaller than the 32x32 grid still hash."""
        assert len(compute_phash(make_raster(8, 8))) == 16

    def test_empty_raster_rejected(self):
        empty = RasterImage(0, 0, np.zeros((0, 0, 4), dtype=np.uint8))
        with pytest.raises(ValueError):
            compute_phash(empty)


class TestComputePhashFromFile:
    """Test hashing image files through the preview decoder."""

    def test_png_and_scaled_copy(self, sample_images):
        full = compute_phash_from_file(sample_images['pattern'])
        half = compute_phash_from_file(sample_images['pattern_half'])
        assert len(full) == 16
        assert hamming_distance(full, half) < 15

    def test_corrupted_file(self, sample_images):
        with pytest.raises(PreviewDecodeError):
            compute_phash_from_file(sample_images['corrupted'])

    def test_missing_file(self, temp_dir):
        with pytest.raises(PreviewDecodeError):
            compute_phash_from_file(str(temp_dir / "missing.jpg"))
