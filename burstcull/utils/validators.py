"""
Input validation for burstcull.

Validators return ``(is_valid, error_message)`` tuples so the CLI and the
HTTP API can report problems without raising.
"""

from __future__ import annotations

import os
from typing import Any, Optional

from ..config import HASH_HEX_LENGTH


def validate_directory(directory: str) -> tuple[bool, str]:
    """
    Validate that a directory exists and is accessible.

    Examples:
        >>> validate_directory('/nonexistent/directory')
        (False, 'Directory not found: /nonexistent/directory')
    """
    if not directory:
        return False, "Directory path is required"

    if not os.path.exists(directory):
        return False, f"Directory not found: {directory}"

    if not os.path.isdir(directory):
        return False, f"Path is not a directory: {directory}"

    if not os.access(directory, os.R_OK):
        return False, f"Cannot read directory (permission denied): {directory}"

    return True, ""


def validate_threshold(threshold: Any) -> tuple[bool, str]:
    """
    Validate a pHash similarity threshold.

    The distance is counted in differing hex digits, so the range is 0-16.

    Examples:
        >>> validate_threshold(15)
        (True, '')
        >>> validate_threshold(20)
        (False, 'Threshold must be between 0 and 16')
    """
    if isinstance(threshold, bool):
        return False, "Threshold must be an integer"
    try:
        threshold = int(threshold)
    except (ValueError, TypeError):
        return False, "Threshold must be an integer"
    if not 0 <= threshold <= HASH_HEX_LENGTH:
        return False, f"Threshold must be between 0 and {HASH_HEX_LENGTH}"
    return True, ""


def validate_ssim_threshold(threshold: Any) -> tuple[bool, str]:
    """
    Validate an SSIM confirmation threshold (0-1).

    Examples:
        >>> validate_ssim_threshold(0.8)
        (True, '')
        >>> validate_ssim_threshold(1.5)
        (False, 'SSIM threshold must be between 0 and 1')
    """
    if isinstance(threshold, bool):
        return False, "SSIM threshold must be a number"
    try:
        threshold = float(threshold)
    except (ValueError, TypeError):
        return False, "SSIM threshold must be a number"
    if not 0.0 <= threshold <= 1.0:
        return False, "SSIM threshold must be between 0 and 1"
    return True, ""


def validate_max_group_size(size: Any) -> tuple[bool, str]:
    """
    Validate a maximum group size. 0 means unbounded; 1 cannot form a group.

    Examples:
        >>> validate_max_group_size(10)
        (True, '')
        >>> validate_max_group_size(1)
        (False, 'Max group size must be 0 (unbounded) or at least 2')
    """
    if isinstance(size, bool):
        return False, "Max group size must be an integer"
    try:
        size = int(size)
    except (ValueError, TypeError):
        return False, "Max group size must be an integer"
    if size < 0 or size == 1:
        return False, "Max group size must be 0 (unbounded) or at least 2"
    return True, ""


def validate_grouping_params(
    threshold: Optional[Any] = None,
    ssim_threshold: Optional[Any] = None,
    max_group_size: Optional[Any] = None,
) -> tuple[bool, str]:
    """
    Validate all grouping parameters. Parameters left as None are skipped.

    Examples:
        >>> validate_grouping_params(threshold=12, ssim_threshold=0.9)
        (True, '')
    """
    if threshold is not None:
        is_valid, error = validate_threshold(threshold)
        if not is_valid:
            return False, error

    if ssim_threshold is not None:
        is_valid, error = validate_ssim_threshold(ssim_threshold)
        if not is_valid:
            return False, error

    if max_group_size is not None:
        is_valid, error = validate_max_group_size(max_group_size)
        if not is_valid:
            return False, error

    return True, ""


__all__ = [
    'validate_directory',
    'validate_threshold',
    'validate_ssim_threshold',
    'validate_max_group_size',
    'validate_grouping_params',
]
