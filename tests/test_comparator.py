"""
Unit tests for hash comparison.
"""

import pytest

from burstcull.similarity import HashLengthError, are_similar, bit_distance, hamming_distance


class TestHammingDistance:
    """Test hex-digit Hamming distance."""

    def test_identical(self):
        assert hamming_distance("0123456789abcdef", "0123456789abcdef") == 0

    def test_counts_positions_not_bits(self):
        """'0' vs 'f' differs in four bits but counts once."""
        assert hamming_distance("0000", "000f") == 1
        assert hamming_distance("0000", "ffff") == 4

    def test_symmetric(self):
        a, b = "0f0f0f0f00000000", "00ff00ff0000abcd"
        assert hamming_distance(a, b) == hamming_distance(b, a)

    def test_length_mismatch(self):
        with pytest.raises(HashLengthError):
            hamming_distance("abc", "abcd")

    def test_length_error_is_value_error(self):
        with pytest.raises(ValueError):
            hamming_distance("", "0")


class TestAreSimilar:
    """Test threshold comparisons."""

    def test_boundary_inclusive(self):
        """Distance equal to the threshold is similar; one more is not."""
        base = "0" * 16
        assert are_similar(base, "f" * 3 + "0" * 13, threshold=3)
        assert not are_similar(base, "f" * 4 + "0" * 12, threshold=3)

    def test_default_threshold(self):
        """The default threshold of 15 only rejects hashes differing everywhere."""
        base = "0" * 16
        assert are_similar(base, "1" * 15 + "0")
        assert not are_similar(base, "1" * 16)


class TestBitDistance:
    """Test bit-level distance used for diagnostics."""

    def test_bit_count(self):
        assert bit_distance("0" * 16, "0" * 15 + "f") == 4
        assert bit_distance("0" * 16, "0" * 15 + "1") == 1

    def test_identical(self):
        assert bit_distance("89abcdef01234567", "89abcdef01234567") == 0

    def test_length_mismatch(self):
        with pytest.raises(HashLengthError):
            bit_distance("0" * 16, "0" * 8)
