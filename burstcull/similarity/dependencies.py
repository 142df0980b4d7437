"""
Dependency initialization for the similarity package.

Handles PIL, numpy, scipy, scikit-image, imagehash, HEIC/HEIF support and tqdm imports with proper
error handling and configuration.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, Optional

# Module-level logger
_logger = logging.getLogger(__name__)

# Check for required dependencies
try:
    from PIL import Image
    import imagehash
    import numpy as np
    from scipy.fftpack import dct
    from skimage.metrics import structural_similarity
except ImportError:
    raise ImportError(
        "Required packages not found!\n"
        "Install with: pip install Pillow imagehash numpy scipy scikit-image"
    )

# Register HEIC/HEIF support via pillow-heif
# This must be done before opening any HEIC previews
HAS_HEIF_SUPPORT = False
try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
    HAS_HEIF_SUPPORT = True
    _logger.debug("HEIC/HEIF support enabled via pillow-heif")
except ImportError:
    _logger.warning(
        "pillow-heif not installed - HEIC/HEIF previews will not be decoded. "
        "Install with: pip install pillow-heif"
    )

# Camera files routinely exceed Pillow's ~89MP decompression bomb default
Image.MAX_IMAGE_PIXELS = 500_000_000
warnings.filterwarnings("ignore", category=Image.DecompressionBombWarning)

# Optional: tqdm for progress bars
# Store as Optional[Any] to satisfy type checkers when tqdm is not installed
HAS_TQDM = False
_tqdm_class: Optional[Any] = None

try:
    from tqdm import tqdm as _tqdm_import
    HAS_TQDM = True
    _tqdm_class = _tqdm_import
except ImportError:
    pass


__all__ = [
    'Image',
    'imagehash',
    'np',
    'dct',
    'structural_similarity',
    'HAS_HEIF_SUPPORT',
    'HAS_TQDM',
    '_tqdm_class',
    '_logger',
]
