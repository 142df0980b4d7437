"""
Raster decoding and luminance helpers for the similarity package.

Provides the preview decoder used before SSIM, luminance conversion shared
by the hasher and the SSIM scorer, and a small LRU cache of decoded
luminance buffers keyed by image id.
"""

from __future__ import annotations

from collections import OrderedDict
from pathlib import Path
from typing import Callable, Optional

from ..config import LUMA_WEIGHTS, LUMINANCE_CACHE_SIZE, PREVIEW_MAX_SIZE
from ..models import RasterImage
from .dependencies import Image, np, _logger


class PreviewDecodeError(RuntimeError):
    """Raised when a preview reference cannot be turned into pixels."""


def to_luminance(raster: RasterImage) -> np.ndarray:
    """
    Convert an RGBA raster to a float64 luminance field.

    Args:
        raster: Decoded image

    Returns:
        Array of shape (height, width) with 0.299R + 0.587G + 0.114B
    """
    rgb = raster.pixels[..., :3].astype(np.float64)
    r_w, g_w, b_w = LUMA_WEIGHTS
    return rgb[..., 0] * r_w + rgb[..., 1] * g_w + rgb[..., 2] * b_w


class PreviewDecoder:
    """
    Decodes displayable image references into RGBA rasters.

    References are file paths. The image is fully loaded (so truncated
    files fail here rather than later), fitted inside ``max_size`` keeping
    its aspect ratio, and converted to RGBA.
    """

    def __init__(self, max_size: tuple[int, int] = PREVIEW_MAX_SIZE):
        self.max_size = max_size

    def decode(self, ref: str | Path) -> RasterImage:
        """
        Decode a reference.

        Raises:
            PreviewDecodeError: If the reference is missing or not a readable image
        """
        if not ref:
            raise PreviewDecodeError("No preview reference")

        try:
            with Image.open(ref) as img:
                img.load()
                if self.max_size:
                    img.thumbnail(self.max_size)
                return RasterImage.from_pil(img)
        except FileNotFoundError as e:
            raise PreviewDecodeError(f"Preview not found: {ref}") from e
        except Image.UnidentifiedImageError as e:
            raise PreviewDecodeError(f"Not a valid image: {ref}") from e
        except (OSError, ValueError) as e:
            raise PreviewDecodeError(f"Failed to decode {ref}: {e}") from e

    __call__ = decode


class LuminanceCache:
    """
    Least-recently-used cache of luminance buffers keyed by image id.

    Lets a grouping run decode each preview once instead of once per
    compared pair.
    """

    def __init__(self, max_size: int = LUMINANCE_CACHE_SIZE):
        self.max_size = max_size
        self._entries: OrderedDict[str, np.ndarray] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[np.ndarray]:
        value = self._entries.get(key)
        if value is not None:
            self._entries.move_to_end(key)
        return value

    def put(self, key: str, value: np.ndarray) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        elif self.max_size and len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[key] = value

    def get_or_decode(
        self,
        key: str,
        ref: str,
        decoder: Callable[[str], RasterImage],
    ) -> np.ndarray:
        """Return the cached luminance for ``key``, decoding ``ref`` on a miss."""
        cached = self.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        luminance = to_luminance(decoder(ref))
        self.put(key, luminance)
        _logger.debug(f"Decoded preview for {key} ({luminance.shape[1]}x{luminance.shape[0]})")
        return luminance

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0


__all__ = [
    'PreviewDecodeError',
    'PreviewDecoder',
    'LuminanceCache',
    'to_luminance',
]
