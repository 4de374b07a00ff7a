"""Tests for the bench-sheet input adapter."""

import pytest

from legionella_src.inputs import (
    build_sample_input,
    build_sample_set,
    parse_channels,
    parse_count,
)
from legionella_src.rules.schemas import INTERFERED, Channel, Measured, ValidationError


class TestParseCount:
    """Test reading counts from form values."""

    @pytest.mark.parametrize("raw,expected", [
        ("", 0.0),
        ("   ", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("12", 12.0),
        (" 12 ", 12.0),
        ("12 colonies", 12.0),
        ("3.5", 3.5),
        ("3,5", 3.5),
        (".5", 0.5),
        ("1e2", 100.0),
        (7, 7.0),
        (2.5, 2.5),
    ])
    def test_parse(self, raw, expected):
        """Test leading numbers are read the way the form reads them."""
        assert parse_count(raw) == expected

    def test_negative_values_kept(self):
        """Test negatives are passed through for validation to reject."""
        assert parse_count("-3") == -3.0


class TestParseChannels:
    """Test channel name normalization."""

    def test_known_channels(self):
        """Test channel names map to Channel values."""
        assert parse_channels(["d", "n_2"]) == {Channel.DIRECT, Channel.FILTRATE_100ML}
        assert parse_channels([Channel.FILTRATE_10ML]) == {Channel.FILTRATE_10ML}

    def test_unknown_channel(self):
        """Test an unknown channel name is rejected."""
        with pytest.raises(ValidationError, match="Unknown channel"):
            parse_channels(["n_3"])


class TestBuildSampleInput:
    """Test building one sample type."""

    def test_measured_channels(self):
        """Test untoggled channels become measured readings."""
        sample = build_sample_input("0", "", "50")
        assert sample.direct == Measured(0)
        assert sample.filtrate_10ml == Measured(0)
        assert sample.filtrate_100ml == Measured(50)

    def test_interfered_channel_ignores_raw_value(self):
        """Test a toggled channel is interfered whatever was typed."""
        sample = build_sample_input("12", "3", "4", interfered=["d"])
        assert sample.direct is INTERFERED
        assert sample.filtrate_10ml == Measured(3)

    def test_negative_count_rejected(self):
        """Test a typed -1 is a negative count, not interference."""
        with pytest.raises(ValidationError):
            build_sample_input("-1", "0", "0")


class TestBuildSampleSet:
    """Test building a whole bench sheet."""

    def test_order_preserved(self):
        """Test sample types keep the sheet order."""
        rows = {
            "C": {"d": "1"},
            "A": {"n_2": "5"},
            "B": {},
        }
        samples = build_sample_set(rows)
        assert list(samples) == ["C", "A", "B"]
        assert samples["B"].to_counts() == (0, 0, 0)

    def test_interfered_channels_apply_to_every_type(self):
        """Test toggles are shared by all sample types."""
        rows = {"A": {"d": "0", "n_1": "0", "n_2": "50"}, "B": {"d": "2"}}
        samples = build_sample_set(rows, interfered=["n_1"])
        assert samples["A"].filtrate_10ml is INTERFERED
        assert samples["B"].filtrate_10ml is INTERFERED

    def test_error_names_sample_type(self):
        """Test errors are prefixed with the sample type."""
        with pytest.raises(ValidationError, match="Type B"):
            build_sample_set({"A": {"d": "1"}, "B": {"n_2": "-5"}})
