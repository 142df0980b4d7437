"""
Perceptual hashing for the similarity package.

The hash is built from the low-frequency DCT coefficients of a 32x32
luminance field, which makes it robust to resizing, mild recompression
and small colour shifts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..config import HASH_BLOCK_SIZE, HASH_GRID_SIZE
from ..models import RasterImage
from .dependencies import dct, np
from .raster import PreviewDecoder, to_luminance


def _resize_nearest(raster: RasterImage, size: int) -> RasterImage:
    """Nearest-neighbour downsample to ``size`` x ``size``."""
    ys = np.floor(np.arange(size) * (raster.height / size)).astype(np.intp)
    xs = np.floor(np.arange(size) * (raster.width / size)).astype(np.intp)
    pixels = raster.pixels[ys[:, None], xs[None, :]]
    return RasterImage(width=size, height=size, pixels=pixels)


def _dct2(field: np.ndarray) -> np.ndarray:
    """Orthonormal 2D DCT-II."""
    return dct(dct(field, axis=0, norm='ortho'), axis=1, norm='ortho')


def bits_to_hex(bits: str) -> str:
    """
    Pack a binary string into hex nibbles.

    The final partial nibble is right-padded with zeros, so 63 bits give
    16 hex characters.
    """
    hex_digits = []
    for i in range(0, len(bits), 4):
        chunk = bits[i:i + 4].ljust(4, '0')
        hex_digits.append(format(int(chunk, 2), 'x'))
    return ''.join(hex_digits)


def compute_phash(raster: RasterImage) -> str:
    """
    Calculate the perceptual hash of a raster.

    Args:
        raster: Decoded RGBA image of any size

    Returns:
        16-character lowercase hex fingerprint

    Raises:
        ValueError: If the raster has no pixels
    """
    if raster.width <= 0 or raster.height <= 0:
        raise ValueError("Cannot hash an empty image")

    small = _resize_nearest(raster, HASH_GRID_SIZE)
    coefficients = _dct2(to_luminance(small))

    # Row-major low-frequency block without the DC term
    block = coefficients[:HASH_BLOCK_SIZE, :HASH_BLOCK_SIZE].flatten()[1:]
    median = np.median(block)

    bits = ''.join('1' if value > median else '0' for value in block)
    return bits_to_hex(bits)


def compute_phash_from_file(
    filepath: str | Path,
    decoder: Optional[PreviewDecoder] = None,
) -> str:
    """
    Decode an image file and calculate its perceptual hash.

    Raises:
        PreviewDecodeError: If the file cannot be decoded
    """
    decoder = decoder or PreviewDecoder()
    return compute_phash(decoder.decode(filepath))


__all__ = [
    'bits_to_hex',
    'compute_phash',
    'compute_phash_from_file',
]
