"""
Unit tests for time formatting
"""
import pytest

from tracetimeline.models import TimeUnit
from tracetimeline.utils.time_format import (
    convert,
    fixed_precision,
    format_duration,
    format_fixed,
    parse_duration,
    select_unit,
)


@pytest.mark.unit
class TestAdaptiveFormatter:
    """Test largest-readable-unit formatting."""

    @pytest.mark.parametrize("value,expected", [
        (1_500_000, "1.500 ms"),
        (59_999_999_999, "59.999 s"),
        (60_000_000_000, "1.000 min"),
        (90_000_000_000, "1.500 min"),
        (2_500_000_000, "2.500 s"),
        (1_000, "1.000 µs"),
        (999, "999 ns"),
        (42, "42 ns"),
        (0, "0 ns"),
    ])
    def test_format_duration(self, value, expected):
        assert format_duration(value) == expected

    def test_microsecond_base(self):
        """Values in microseconds are scaled before picking a unit."""
        assert format_duration(1500, TimeUnit.US) == "1.500 ms"
        assert format_duration(1500, "us") == "1.500 ms"

    def test_truncates_instead_of_rounding(self):
        """Just under a boundary stays in the smaller unit."""
        assert format_duration(999_999) == "999.999 µs"
        assert select_unit(999_999) is TimeUnit.US

    @pytest.mark.parametrize("value", [1, 999, 1_000, 1_500_000, 59_999_999_999, 60_000_000_000, 3_600_000_000_000])
    def test_reparse_keeps_unit(self, value):
        """Formatting then parsing never changes the chosen unit."""
        assert select_unit(parse_duration(format_duration(value))) is select_unit(value)

    def test_negative_values_keep_sign(self):
        assert format_duration(-1_500_000) == "-1.500 ms"


@pytest.mark.unit
class TestFixedFormatter:
    """Test fixed-unit axis formatting."""

    @pytest.mark.parametrize("span,expected", [
        (1, 8),                    # far below 1e-6 min
        (0, 8),
        (60_000, 7),               # exactly 1e-6 min
        (6_000_000, 5),            # exactly 1e-4 min
        (600_000_000, 3),          # 1e-2 min
        (60_000_000_000, 2),       # 1 min
        (None, 2),
    ])
    def test_precision_scales_with_span(self, span, expected):
        assert fixed_precision(span) == expected

    def test_short_trace_ticks_are_distinct(self):
        """Neighbouring ticks of a tiny trace do not collapse to one value."""
        ticks = [format_fixed(v, span=60_000) for v in (0, 30_000, 60_000)]
        assert ticks == ["0.0000000", "0.0000005", "0.0000010"]
        assert len(set(ticks)) == 3

    def test_wide_range(self):
        assert format_fixed(90_000_000_000, span=120_000_000_000) == "1.50"
        assert format_fixed(90_000_000_000, span=120_000_000_000, with_unit=True) == "1.50 min"

    def test_other_target_unit(self):
        assert format_fixed(1_500_000, target=TimeUnit.MS, span=10_000_000) == "1.50"


@pytest.mark.unit
class TestConversions:
    """Test unit conversion and parsing."""

    def test_convert(self):
        assert convert(90_000_000_000, "ns", "min") == pytest.approx(1.5)
        assert convert(2, TimeUnit.MS, TimeUnit.US) == pytest.approx(2000)

    @pytest.mark.parametrize("text,expected", [
        ("1.500 ms", 1_500_000),
        ("59.999 s", 59_999_000_000),
        ("1.000 min", 60_000_000_000),
        ("42 ns", 42),
        ("2 µs", 2_000),
    ])
    def test_parse_duration(self, text, expected):
        assert parse_duration(text) == expected

    def test_parse_into_other_unit(self):
        assert parse_duration("1.5 ms", TimeUnit.US) == 1500

    @pytest.mark.parametrize("text", ["", "fast", "1.5 fortnights"])
    def test_parse_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_time_unit_coerce(self):
        assert TimeUnit.coerce("µs") is TimeUnit.US
        assert TimeUnit.MIN.nanoseconds == 60_000_000_000
        with pytest.raises(ValueError):
            TimeUnit.coerce("hours")
