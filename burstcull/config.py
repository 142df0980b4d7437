"""
Configuration constants for burstcull.

This module contains all configurable settings including:
- Grouping defaults (pHash / SSIM thresholds, group size)
- Hashing and SSIM geometry
- Representative-selection weights
- Supported image extensions and file locations
"""

import os

# Supported image extensions for import
# RAW containers are listed so they are discovered; decoding relies on
# whatever Pillow plugins are installed
IMAGE_EXTENSIONS = {
    # Common formats
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp', '.tiff', '.tif',
    # RAW formats
    '.cr2', '.cr3', '.nef', '.arw', '.dng', '.orf', '.rw2', '.raf',
    # Modern formats
    '.heic', '.heif', '.avif',
}

# Maximum Hamming distance (in hex digits, 0-16) for two hashes to be
# considered similar
DEFAULT_SIMILARITY_THRESHOLD = 15

# Minimum SSIM score for a pHash candidate to be confirmed
DEFAULT_SSIM_THRESHOLD = 0.8

# Largest group the auto-grouper will build (0 = unbounded)
DEFAULT_MAX_GROUP_SIZE = 10

# SSIM sliding window edge length
DEFAULT_SSIM_WINDOW = 11

# pHash geometry: 32x32 luminance field, 8x8 low-frequency block
HASH_GRID_SIZE = 32
HASH_BLOCK_SIZE = 8
# 63 bits (8x8 block minus DC) packed into nibbles
HASH_HEX_LENGTH = 16

# Luminance weights (ITU-R BT.601)
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

# Previews are decoded to fit inside this box before SSIM
PREVIEW_MAX_SIZE = (1920, 1080)

# Decoded luminance buffers kept per grouping run
LUMINANCE_CACHE_SIZE = 64

# Representative-selection weights. They intentionally do not sum to 1;
# scores are only compared within a group
QUALITY_WEIGHTS = {
    'focus': 0.4,
    'eyes_open': 0.3,
    'face_size': 0.2,
    'exposure': 0.1,
    'rating': 0.1,
}

# Default number of parallel workers for import hashing
DEFAULT_WORKERS = 4

# SQLite store location
STORE_DB_FILE = os.path.join(os.path.expanduser('~'), '.burstcull', 'library.db')
