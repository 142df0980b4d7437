"""
Similarity package for burstcull.

Provides the building blocks used by the auto-grouper to detect
near-duplicate frames.

Public API:
- compute_phash: Perceptual hash of a decoded raster
- compute_phash_from_file: Decode a file and hash it
- hamming_distance / are_similar: Hex-digit hash comparison
- bit_distance: Bit-level hash distance (diagnostics)
- calculate_ssim: Windowed structural similarity of two rasters
- ssim_from_files: Decode two files and compare them
- PreviewDecoder: Decodes preview references into rasters
- LuminanceCache: Per-image cache of decoded luminance buffers
"""

from __future__ import annotations

from .phash import bits_to_hex, compute_phash, compute_phash_from_file
from .comparator import HashLengthError, hamming_distance, are_similar, bit_distance
from .ssim import (
    DimensionMismatchError,
    SSIMResult,
    calculate_ssim,
    calculate_ssim_luminance,
    ssim_from_files,
    is_similar_by_ssim,
)
from .raster import PreviewDecodeError, PreviewDecoder, LuminanceCache, to_luminance
from .dependencies import HAS_HEIF_SUPPORT


def has_heif_support() -> bool:
    """Check if HEIC/HEIF support is available."""
    return HAS_HEIF_SUPPORT


__all__ = [
    # Hashing
    'bits_to_hex',
    'compute_phash',
    'compute_phash_from_file',
    # Comparison
    'HashLengthError',
    'hamming_distance',
    'are_similar',
    'bit_distance',
    # SSIM
    'DimensionMismatchError',
    'SSIMResult',
    'calculate_ssim',
    'calculate_ssim_luminance',
    'ssim_from_files',
    'is_similar_by_ssim',
    # Decoding
    'PreviewDecodeError',
    'PreviewDecoder',
    'LuminanceCache',
    'to_luminance',
    'has_heif_support',
]
