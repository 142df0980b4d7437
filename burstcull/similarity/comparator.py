"""
Hash comparison for the similarity package.

Distances are counted per hex digit, which slightly under-counts the true
bit distance but is what the grouping thresholds are calibrated against.
"""

from __future__ import annotations

from ..config import DEFAULT_SIMILARITY_THRESHOLD
from .dependencies import imagehash


class HashLengthError(ValueError):
    """Raised when two hashes of different lengths are compared."""


def _check_lengths(hash1: str, hash2: str) -> None:
    if len(hash1) != len(hash2):
        raise HashLengthError(
            f"Hashes must be of equal length ({len(hash1)} != {len(hash2)})"
        )


def hamming_distance(hash1: str, hash2: str) -> int:
    """
    Count differing hex-digit positions between two hashes.

    Raises:
        HashLengthError: If the hashes differ in length
    """
    _check_lengths(hash1, hash2)
    return sum(1 for a, b in zip(hash1, hash2) if a != b)


def are_similar(hash1: str, hash2: str, threshold: int = DEFAULT_SIMILARITY_THRESHOLD) -> bool:
    """Return True when the hex-digit distance is within ``threshold``."""
    return hamming_distance(hash1, hash2) <= threshold


def bit_distance(hash1: str, hash2: str) -> int:
    """
    Count differing bits between two hashes.

    Only used for diagnostics; grouping decisions use hamming_distance.

    Raises:
        HashLengthError: If the hashes differ in length
    """
    _check_lengths(hash1, hash2)
    return int(imagehash.hex_to_hash(hash1) - imagehash.hex_to_hash(hash2))


__all__ = [
    'HashLengthError',
    'hamming_distance',
    'are_similar',
    'bit_distance',
]
