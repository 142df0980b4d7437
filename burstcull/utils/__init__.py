"""
Utilities package for burstcull.

Provides:
- formatters: Human-readable formatting for numbers, time and scores
- validators: Input validation for grouping parameters and paths
"""

from __future__ import annotations

from . import formatters
from . import validators

from .formatters import format_number, format_time_estimate, format_score
from .validators import (
    validate_directory,
    validate_threshold,
    validate_ssim_threshold,
    validate_max_group_size,
    validate_grouping_params,
)

__all__ = [
    # Submodules
    'formatters',
    'validators',
    # Formatters
    'format_number',
    'format_time_estimate',
    'format_score',
    # Validators
    'validate_directory',
    'validate_threshold',
    'validate_ssim_threshold',
    'validate_max_group_size',
    'validate_grouping_params',
]
