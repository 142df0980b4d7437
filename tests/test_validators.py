"""
Unit tests for input validators and formatters.
"""

import pytest

from burstcull.utils import (
    format_number,
    format_score,
    format_time_estimate,
    validate_directory,
    validate_grouping_params,
    validate_max_group_size,
    validate_ssim_threshold,
    validate_threshold,
)


class TestValidateThreshold:

    @pytest.mark.parametrize("value", [0, 15, 16, "12"])
    def test_valid(self, value):
        assert validate_threshold(value) == (True, "")

    @pytest.mark.parametrize("value", [-1, 17, 64])
    def test_out_of_range(self, value):
        is_valid, error = validate_threshold(value)
        assert not is_valid
        assert "between 0 and 16" in error

    @pytest.mark.parametrize("value", ["abc", None, True])
    def test_not_integer(self, value):
        assert validate_threshold(value)[0] is False


class TestValidateSSIMThreshold:

    @pytest.mark.parametrize("value", [0, 0.8, 1, "0.5"])
    def test_valid(self, value):
        assert validate_ssim_threshold(value) == (True, "")

    @pytest.mark.parametrize("value", [-0.1, 1.01, "high", None])
    def test_invalid(self, value):
        assert validate_ssim_threshold(value)[0] is False


class TestValidateMaxGroupSize:

    @pytest.mark.parametrize("value", [0, 2, 10, 500])
    def test_valid(self, value):
        assert validate_max_group_size(value) == (True, "")

    @pytest.mark.parametrize("value", [-1, 1, "many"])
    def test_invalid(self, value):
        assert validate_max_group_size(value)[0] is False


class TestValidateGroupingParams:

    def test_all_valid(self):
        assert validate_grouping_params(12, 0.9, 5) == (True, "")

    def test_none_skipped(self):
        assert validate_grouping_params() == (True, "")

    def test_first_error_reported(self):
        is_valid, error = validate_grouping_params(threshold=99, ssim_threshold=5)
        assert not is_valid
        assert "Threshold" in error


class TestValidateDirectory:

    def test_existing(self, temp_dir):
        assert validate_directory(str(temp_dir)) == (True, "")

    def test_missing(self, temp_dir):
        assert validate_directory(str(temp_dir / "missing"))[0] is False

    def test_file(self, temp_dir):
        path = temp_dir / "file.txt"
        path.write_text("x")
        assert validate_directory(str(path))[0] is False

    def test_empty(self):
        assert validate_directory("") == (False, "Directory path is required")


class TestFormatters:

    def test_format_number(self):
        assert format_number(1234567) == "1,234,567"

    def test_format_time_estimate(self):
        assert format_time_estimate(45) == "45s"
        assert format_time_estimate(150) == "2m 30s"
        assert format_time_estimate(3665) == "1h 1m"

    def test_format_score(self):
        assert format_score(None) == "-"
        assert format_score(0.456) == "0.46"
