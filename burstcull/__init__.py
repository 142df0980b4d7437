"""
burstcull
=========
Similarity grouping and best-frame selection for photo bursts.

Features:
- 64-bit DCT perceptual hash per image
- Hex-digit Hamming distance with optional SSIM confirmation
- Greedy, cancellable grouping with progress reporting
- Quality-based auto-pick from focus, eyes, face size, exposure and rating
- SQLite library with atomic group creation and disbanding
- CLI and JSON HTTP API

Author: Zach
"""

__version__ = "1.0.0"
__author__ = "Zedidence"

from .models import (
    ImageRecord,
    FaceDetection,
    BoundingBox,
    EyeState,
    Group,
    GroupingOptions,
    ProjectStats,
    RasterImage,
)
from .config import (
    IMAGE_EXTENSIONS,
    DEFAULT_SIMILARITY_THRESHOLD,
    DEFAULT_SSIM_THRESHOLD,
    DEFAULT_MAX_GROUP_SIZE,
)
from .similarity import (
    compute_phash,
    compute_phash_from_file,
    hamming_distance,
    are_similar,
    calculate_ssim,
    is_similar_by_ssim,
    HashLengthError,
    DimensionMismatchError,
    PreviewDecoder,
    PreviewDecodeError,
)
from .grouping import (
    AutoGrouper,
    GroupingState,
    CancellationToken,
    calculate_image_score,
    pick_representative,
)
from .database import PhotoStore, get_store
from .importer import import_directory, find_image_files
from .signals import load_signals, apply_signals

__all__ = [
    "ImageRecord",
    "FaceDetection",
    "BoundingBox",
    "EyeState",
    "Group",
    "GroupingOptions",
    "ProjectStats",
    "RasterImage",
    "IMAGE_EXTENSIONS",
    "DEFAULT_SIMILARITY_THRESHOLD",
    "DEFAULT_SSIM_THRESHOLD",
    "DEFAULT_MAX_GROUP_SIZE",
    "compute_phash",
    "compute_phash_from_file",
    "hamming_distance",
    "are_similar",
    "calculate_ssim",
    "is_similar_by_ssim",
    "HashLengthError",
    "DimensionMismatchError",
    "PreviewDecoder",
    "PreviewDecodeError",
    "AutoGrouper",
    "GroupingState",
    "CancellationToken",
    "calculate_image_score",
    "pick_representative",
    "PhotoStore",
    "get_store",
    "import_directory",
    "find_image_files",
    "load_signals",
    "apply_signals",
]
