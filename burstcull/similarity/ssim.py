"""
Structural similarity (SSIM) for the similarity package.

Compares the luminance structure of two equally sized rasters with a
sliding square window using scikit-image. Decoding previews makes this
far more expensive than a hash comparison. Only run it on pairs that
already passed the pHash filter.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_SSIM_THRESHOLD, DEFAULT_SSIM_WINDOW
from ..models import RasterImage
from .dependencies import np, structural_similarity
from .raster import PreviewDecoder, to_luminance

# Stabilising constants for 8-bit data
C1 = (0.01 * 255) ** 2
C2 = (0.03 * 255) ** 2


class DimensionMismatchError(ValueError):
    """Raised when SSIM is requested for rasters of different sizes."""


@dataclass(frozen=True)
class SSIMResult:
    """Mean SSIM over all window positions (``mssim`` mirrors ``ssim``)."""
    ssim: float
    mssim: float


def ssim_map(
    luma1: np.ndarray,
    luma2: np.ndarray,
    window_size: int = DEFAULT_SSIM_WINDOW,
) -> np.ndarray:
    """
    Per-window SSIM values for two luminance fields.

    The window spans ``window_size // 2`` pixels either side of its centre,
    so only centres at least that far from every border are scored.

    Raises:
        DimensionMismatchError: If the fields differ in shape
        ValueError: If the window is degenerate or larger than the image
    """
    if luma1.shape != luma2.shape:
        raise DimensionMismatchError(
            f"Images must have the same dimensions ({luma1.shape[1]}x{luma1.shape[0]} "
            f"vs {luma2.shape[1]}x{luma2.shape[0]})"
        )

    half = window_size // 2
    span = 2 * half + 1
    if half < 1:
        raise ValueError(f"Window size must be at least 2, got {window_size}")

    height, width = luma1.shape
    if height < span or width < span:
        raise ValueError(
            f"Image {width}x{height} is smaller than the {span}x{span} SSIM window"
        )

    # Uniform (not Gaussian) windows with the sample covariance reproduce the
    # N-1 estimator; the map is cropped to the fully covered centres.
    _, full_map = structural_similarity(
        luma1.astype(np.float64),
        luma2.astype(np.float64),
        win_size=span,
        data_range=255,
        gaussian_weights=False,
        use_sample_covariance=True,
        K1=0.01,
        K2=0.03,
        full=True,
    )
    return full_map[half:height - half, half:width - half]


def calculate_ssim(
    image1: RasterImage,
    image2: RasterImage,
    window_size: int = DEFAULT_SSIM_WINDOW,
) -> SSIMResult:
    """
    Calculate mean SSIM between two rasters.

    Args:
        image1: First raster
        image2: Second raster, same width and height as the first
        window_size: Sliding window edge length (default 11)

    Returns:
        SSIMResult with the mean of all window scores (about 0-1)

    Raises:
        DimensionMismatchError: If the rasters differ in size
    """
    if image1.width != image2.width or image1.height != image2.height:
        raise DimensionMismatchError(
            f"Images must have the same dimensions ({image1.width}x{image1.height} "
            f"vs {image2.width}x{image2.height})"
        )
    return calculate_ssim_luminance(to_luminance(image1), to_luminance(image2), window_size)


def calculate_ssim_luminance(
    luma1: np.ndarray,
    luma2: np.ndarray,
    window_size: int = DEFAULT_SSIM_WINDOW,
) -> SSIMResult:
    """Mean SSIM for two precomputed luminance fields."""
    score = float(ssim_map(luma1, luma2, window_size).mean())
    return SSIMResult(ssim=score, mssim=score)


def ssim_from_files(
    path1: str | Path,
    path2: str | Path,
    window_size: int = DEFAULT_SSIM_WINDOW,
    decoder: Optional[PreviewDecoder] = None,
) -> SSIMResult:
    """
    Decode two image files and calculate their SSIM.

    Raises:
        PreviewDecodeError: If either file cannot be decoded
        DimensionMismatchError: If the decoded sizes differ
    """
    decoder = decoder or PreviewDecoder()
    return calculate_ssim(decoder.decode(path1), decoder.decode(path2), window_size)


def is_similar_by_ssim(score: float, threshold: float = DEFAULT_SSIM_THRESHOLD) -> bool:
    """Return True when ``score`` meets the SSIM threshold."""
    return score >= threshold


__all__ = [
    'C1',
    'C2',
    'DimensionMismatchError',
    'SSIMResult',
    'ssim_map',
    'calculate_ssim',
    'calculate_ssim_luminance',
    'ssim_from_files',
    'is_similar_by_ssim',
]
