"""Tests for formatter resolution and value formatting."""

from __future__ import annotations

import math
from datetime import timedelta

import pytest
from django.utils import timezone

from core.charting.formatters import (
    FormatterSpec,
    build_formatter,
    build_x_axis_formatter,
    format_bytes,
    format_currency,
    format_custom,
    format_date,
    format_duration,
    format_number,
    format_ordinal,
    format_value,
    group_digits,
    resolve_axis_formatters,
    resolve_series_formatter,
    resolve_value_formatter,
    validate_custom_format,
)
from core.charting.schema import (
    AxisFormatterConfig,
    FormatterConfig,
    PieDonutFormatterConfig,
    SeriesConfig,
)

pytestmark = pytest.mark.unit


def _epoch_ms(moment) -> float:
    return moment.timestamp() * 1000


def test_x_axis_date_formatter_parses_date_strings() -> None:
    """Date strings are formatted; other strings pass through unchanged."""

    formatter = build_x_axis_formatter(FormatterSpec(formatter_type="date"))

    assert formatter("2023-12-31") == "Dec 31"
    assert formatter("hello") == "hello"


def test_x_axis_date_strings_near_the_epoch_keep_their_date() -> None:
    """Parsed dates are never re-read as millisecond counts or bare years."""

    formatter = build_x_axis_formatter(FormatterSpec(formatter_type="date", date_format="iso"))

    assert formatter("1970-01-01T00:00:02Z") == "1970-01-01"
    assert formatter("1970-01-01T00:00:02.024Z") == "1970-01-01"
    assert formatter("0001-01-01T00:00:00+05:00") == "0001-01-01"
    assert formatter(2024) == "2024-01-01"


@pytest.mark.parametrize("formatter_type", ["number", "currency", "date", "duration", "custom", "bytes"])
@pytest.mark.parametrize("value", [None, "", "   ", float("nan")])
def test_x_axis_formatter_blank_inputs_render_empty(formatter_type, value) -> None:
    """None, blank strings and NaN never raise and render as the empty string."""

    formatter = build_x_axis_formatter(FormatterSpec(formatter_type=formatter_type))

    assert formatter(value) == ""


def test_x_axis_formatter_coerces_numeric_strings() -> None:
    """Numeric strings are formatted as numbers, anything else is left alone."""

    formatter = build_x_axis_formatter(FormatterSpec(formatter_type="number"))

    assert formatter("1234") == "1,234"
    assert formatter(1234) == "1,234"
    assert formatter("Q1") == "Q1"
    assert formatter("inf") == "inf"


def test_resolve_axis_formatters_is_opt_in() -> None:
    """Disabled axes and the `none` type resolve to no formatter."""

    assert resolve_axis_formatters(None).y_axis is None
    assert resolve_axis_formatters(FormatterConfig()).x_axis is None
    assert resolve_axis_formatters(PieDonutFormatterConfig()).y_axis is None

    formatters = FormatterConfig(
        x=AxisFormatterConfig(use_formatter=True, formatter_type="none"),
        y=AxisFormatterConfig(use_formatter=True, formatter_type="currency"),
    )
    resolved = resolve_axis_formatters(formatters)

    assert resolved.x_axis is None
    assert resolved.y_axis is not None
    assert resolved.y_axis(12.5) == "$12.50"


def test_build_formatter_is_memoised_on_spec_value() -> None:
    """Equal specs share a formatter; a changed field builds a new one."""

    first = build_formatter(FormatterSpec(formatter_type="number"))
    second = build_formatter(FormatterSpec(formatter_type="number"))
    other = build_formatter(FormatterSpec(formatter_type="number", use_grouping=False))

    assert first is second
    assert first is not other


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1234, "1,234"),
        (1234.5, "1,235"),
        (-1234, "-1,234"),
        (12_345, "12.3K"),
        (2_500_000, "2.50M"),
        (3_000_000_000, "3.00B"),
        (0, "0"),
    ],
)
def test_format_number_standard(value, expected) -> None:
    """Standard notation groups thousands and abbreviates large values."""

    assert format_number(value) == expected


def test_format_number_without_grouping_keeps_years_plain() -> None:
    """Grouping off renders plain integers, useful for year columns."""

    assert format_number(2024, use_grouping=False) == "2024"
    assert format_number(123_456, use_grouping=False) == "123456"


def test_format_number_alternate_notations() -> None:
    """Compact and scientific notations."""

    assert format_number(1234, notation="compact") == "1.23K"
    assert format_number(1_500_000, notation="compact") == "1.5M"
    assert format_number(12, notation="compact") == "12"
    assert format_number(1500, notation="scientific") == "1.5E3"
    assert format_number(0, notation="scientific") == "0E0"


def test_format_currency_styles() -> None:
    """Small amounts honour the currency style; large ones are abbreviated."""

    assert format_currency(12.5) == "$12.50"
    assert format_currency(-5) == "-$5.00"
    assert format_currency(12.5, style="code") == "USD 12.50"
    assert format_currency(12.5, style="name") == "12.50 US dollars"
    assert format_currency(12.5, symbol="€", style="code") == "EUR 12.50"
    assert format_currency(1500) == "$1.50K"
    assert format_currency(2_000_000, symbol="£") == "£2.00M"


def test_group_digits_uses_configured_separators(settings) -> None:
    """Separators come from Django's number formatting settings."""

    settings.DECIMAL_SEPARATOR = ","
    settings.THOUSAND_SEPARATOR = "."

    assert group_digits(1234.5, 2) == "1.234,50"


def test_format_value_dispatches_by_type() -> None:
    """Spot-check each formatter family through format_value."""

    assert format_value(45.678, FormatterSpec(formatter_type="percentage", decimal_places=1)) == "45.7%"
    assert format_value(3.14159, FormatterSpec(formatter_type="decimal", decimal_places=3)) == "3.142"
    assert format_value(12345, FormatterSpec(formatter_type="scientific")) == "1.23e+4"
    assert format_value(1500, FormatterSpec(formatter_type="compact", decimal_places=1)) == "1.5K"
    assert format_value(5.0, FormatterSpec(formatter_type="string")) == "5"
    assert format_value(5.5, FormatterSpec(formatter_type="none")) == "5.5"
    assert format_value("1234", FormatterSpec(formatter_type="number")) == "1,234"
    assert format_value("n/a", FormatterSpec(formatter_type="number")) == "n/a"
    assert format_value(float("nan"), FormatterSpec(formatter_type="number")) == ""
    assert format_value(math.inf, FormatterSpec(formatter_type="number")) == "Infinity"


def test_format_bytes() -> None:
    """Binary units with two decimals; zero is special-cased."""

    assert format_bytes(0) == "0 B"
    assert format_bytes(512) == "512.00 B"
    assert format_bytes(1536) == "1.50 KB"
    assert format_bytes(3 * 1024**3) == "3.00 GB"


@pytest.mark.parametrize(
    ("seconds", "duration_format", "expected"),
    [
        (45, "short", "45s"),
        (90, "short", "1m 30s"),
        (3723, "short", "1h 2m"),
        (7200, "short", "2h"),
        (90_000, "short", "1d 1h"),
        (3723, "narrow", "1h2m3s"),
        (0, "narrow", "0s"),
        (3723, "long", "1 hour 2 minutes"),
        (61, "long", "1 minute 1 second"),
        (0, "long", "0 seconds"),
    ],
)
def test_format_duration(seconds, duration_format, expected) -> None:
    """Durations are rendered from seconds."""

    assert format_duration(seconds, duration_format) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1, "1st"),
        (2, "2nd"),
        (3, "3rd"),
        (4, "4th"),
        (11, "11th"),
        (12, "12th"),
        (13, "13th"),
        (21, "21st"),
        (101, "101st"),
        (112, "112th"),
    ],
)
def test_format_ordinal(value, expected) -> None:
    """English ordinal suffixes with the teens exception."""

    assert format_ordinal(value) == expected


def test_format_custom_placeholders() -> None:
    """Placeholders are substituted from the numeric value."""

    assert format_custom(5, "{value} units") == "5 units"
    assert format_custom(-3.5, "{sign}{abs}") == "-3.5"
    assert format_custom(2.5, "~{round}") == "~3"
    assert format_custom(1 / 3, "{fixed2}") == "0.33"


def test_values_rounding_to_zero_are_unsigned() -> None:
    """Negative zero renders without a sign, as group_digits already does."""

    assert format_value(-0.0, FormatterSpec(formatter_type="decimal", decimal_places=2)) == "0.00"
    assert format_value(-0.001, FormatterSpec(formatter_type="decimal", decimal_places=2)) == "0.00"
    assert format_value(-0.0, FormatterSpec(formatter_type="percentage", decimal_places=2)) == "0.00%"
    assert format_value(-0.0, FormatterSpec(formatter_type="scientific")) == "0.00e+0"
    assert format_custom(-0.0004, "{fixed3}") == "0.000"
    assert format_value(-0.5, FormatterSpec(formatter_type="decimal", decimal_places=2)) == "-0.50"


def test_custom_pattern_without_placeholder_degrades_to_value() -> None:
    """A malformed custom pattern falls back to `{value}` instead of raising."""

    formatter = build_formatter(FormatterSpec(formatter_type="custom", custom_format="no placeholders"))

    assert formatter(5) == "5"


def test_invalid_options_degrade_to_defaults() -> None:
    """Unknown option values never raise."""

    assert build_formatter(FormatterSpec(formatter_type="sparkles"))(5) == "5"
    assert build_formatter(FormatterSpec(formatter_type="percentage", decimal_places=-1))(12.5) == "12.50%"
    assert build_formatter(FormatterSpec(formatter_type="date", date_format="lunar"))(2024) == "Jan 1"


def test_validate_custom_format() -> None:
    """Empty patterns and patterns without placeholders are reported."""

    assert validate_custom_format("{value}%") is None
    assert validate_custom_format("") == "Format string cannot be empty."
    assert "placeholder" in validate_custom_format("plain text")


def test_format_date_patterns() -> None:
    """Epoch milliseconds and year integers render through named patterns."""

    new_year = 1_704_067_200_000  # 2024-01-01T00:00:00Z

    assert format_date(new_year, "iso") == "2024-01-01"
    assert format_date(new_year, "long") == "Jan 1, 2024"
    assert format_date(new_year, "full") == "Monday, January 1, 2024"
    assert format_date(new_year, "auto") == "1/1"
    assert format_date(2024, "year-only") == "2024"
    assert format_date(2024, "month-year") == "Jan '24"


def test_format_date_relative() -> None:
    """Relative dates are described against the current time."""

    now = timezone.now()

    assert format_date(_epoch_ms(now - timedelta(days=2)), "relative") == "2 days ago"
    assert format_date(_epoch_ms(now + timedelta(hours=3, minutes=30)), "relative") == "in 3 hours"
    assert format_date(_epoch_ms(now), "relative") == "just now"


def test_resolve_value_formatter_for_pie_charts() -> None:
    """Pie/donut slices use a single value formatter."""

    formatter = resolve_value_formatter(PieDonutFormatterConfig())

    assert formatter is not None
    assert formatter(12_345) == "12.3K"
    assert resolve_value_formatter(PieDonutFormatterConfig(use_value_formatter=False)) is None
    assert resolve_value_formatter(None) is None

    custom = resolve_value_formatter(
        PieDonutFormatterConfig(value_formatter_type="custom", custom_value_formatter="{value} pts")
    )
    assert custom(7) == "7 pts"


def test_resolve_series_formatter_prefers_custom_pattern() -> None:
    """A series with a custom pattern overrides the axis formatter."""

    axis_formatter = build_formatter(FormatterSpec(formatter_type="number"))
    custom_series = SeriesConfig(id="s1", formatter="custom", custom_formatter="{fixed1} kg")
    inherited_series = SeriesConfig(id="s2")

    assert resolve_series_formatter(custom_series, axis_formatter)(3.14) == "3.1 kg"
    assert resolve_series_formatter(inherited_series, axis_formatter) is axis_formatter
    assert resolve_series_formatter(inherited_series, None) is None
