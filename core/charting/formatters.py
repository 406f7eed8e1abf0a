"""Value formatting for chart axes, legends and tooltips.

A chart's formatter settings are declarative (`AxisFormatterConfig`,
`PieDonutFormatterConfig`). This module turns them into plain
`value -> str` callables for the rendering layer.

Formatting is opt-in: when an axis has no formatter enabled, no callable is
produced and the renderer falls back to its own tick formatting.

Every formatter produced here is:
- pure (output depends only on the value and the formatter spec),
- defensive (never raises; malformed patterns degrade to the type default),
- memoised on the immutable `FormatterSpec` value.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Final

from django.conf import settings
from django.utils import dateformat, formats, numberformat, timezone
from django.utils.dateparse import parse_date, parse_datetime
from django.utils.timesince import timesince, timeuntil

from .schema import (
    AxisFormatterConfig,
    FormatterConfig,
    PieDonutFormatterConfig,
    SeriesConfig,
)

logger = logging.getLogger(__name__)

NumberFormatter = Callable[[float], str]
AxisValueFormatter = Callable[[float | str | None], str]

FORMATTER_TYPES: Final[frozenset[str]] = frozenset(
    {
        "none",
        "number",
        "currency",
        "date",
        "duration",
        "string",
        "percentage",
        "decimal",
        "scientific",
        "bytes",
        "compact",
        "ordinal",
        "custom",
    }
)

CUSTOM_PLACEHOLDERS: Final[tuple[str, ...]] = (
    "{value}",
    "{round}",
    "{abs}",
    "{sign}",
    "{fixed1}",
    "{fixed2}",
    "{fixed3}",
)

# Django `dateformat` patterns for each named date format.
DATE_PATTERNS: Final[dict[str, str]] = {
    "numeric": "n/j",
    "short": "M j",
    "medium": "M j, 'y",
    "long": "M j, Y",
    "full": "l, F j, Y",
    "year-only": "Y",
    "month-year": "M 'y",
    "iso": "Y-m-d",
}

_CURRENCY_NAMES: Final[dict[str, tuple[str, str]]] = {
    "$": ("USD", "US dollars"),
    "€": ("EUR", "euros"),
    "£": ("GBP", "British pounds"),
    "¥": ("JPY", "Japanese yen"),
    "₩": ("KRW", "South Korean won"),
    "₫": ("VND", "Vietnamese dong"),
    "₹": ("INR", "Indian rupees"),
}

_NUMBER_NOTATIONS: Final[frozenset[str]] = frozenset({"standard", "compact", "scientific", "engineering"})
_CURRENCY_STYLES: Final[frozenset[str]] = frozenset({"symbol", "code", "name"})
_DURATION_FORMATS: Final[frozenset[str]] = frozenset({"short", "narrow", "long"})
_BYTE_UNITS: Final[tuple[str, ...]] = ("B", "KB", "MB", "GB", "TB", "PB")
_YEAR_RANGE: Final[range] = range(1900, 2101)
_MAX_DECIMAL_PLACES: Final[int] = 20
_FOUR_DIGIT_YEAR = re.compile(r"^\d{4}$")


@dataclass(frozen=True, slots=True)
class FormatterSpec:
    """Immutable description of one formatter; equal specs share one callable."""

    formatter_type: str = "none"
    custom_format: str = "{value}"
    currency_symbol: str = "$"
    currency_style: str = "symbol"
    decimal_places: int = 2
    number_notation: str = "standard"
    date_format: str | None = None
    duration_format: str = "short"
    use_grouping: bool = True

    @classmethod
    def from_axis(cls, axis: AxisFormatterConfig) -> FormatterSpec:
        """Build a spec from an axis formatter configuration."""

        return cls(
            formatter_type=axis.formatter_type,
            custom_format=axis.custom_format,
            currency_symbol=axis.currency_symbol,
            currency_style=axis.currency_style,
            decimal_places=axis.decimal_places,
            number_notation=axis.number_notation,
            date_format=axis.date_format,
            duration_format=axis.duration_format,
            use_grouping=axis.use_grouping,
        )


@dataclass(frozen=True, slots=True)
class AxisFormatters:
    """Resolved per-axis formatters; None means "use the renderer default"."""

    y_axis: NumberFormatter | None = None
    x_axis: AxisValueFormatter | None = None


def resolve_axis_formatters(formatters: FormatterConfig | PieDonutFormatterConfig | None) -> AxisFormatters:
    """Resolve the x/y axis formatter callables of a chart.

    Args:
        formatters: The chart's formatter settings. Pie/donut settings carry no
            axis formatters and resolve to an empty result.

    Returns:
        AxisFormatters with a callable for each axis that opted in.
    """

    if not isinstance(formatters, FormatterConfig):
        return AxisFormatters()
    y_axis = build_formatter(FormatterSpec.from_axis(formatters.y)) if _enabled(formatters.y) else None
    x_axis = build_x_axis_formatter(FormatterSpec.from_axis(formatters.x)) if _enabled(formatters.x) else None
    return AxisFormatters(y_axis=y_axis, x_axis=x_axis)


def resolve_value_formatter(formatters: PieDonutFormatterConfig | None) -> NumberFormatter | None:
    """Resolve the slice value formatter of a pie or donut chart."""

    if formatters is None or not formatters.use_value_formatter:
        return None
    if formatters.value_formatter_type == "none":
        return None
    return build_formatter(
        FormatterSpec(
            formatter_type=formatters.value_formatter_type,
            custom_format=formatters.custom_value_formatter or "{value}",
        )
    )


def resolve_series_formatter(
    series: SeriesConfig,
    axis_formatter: NumberFormatter | None,
) -> NumberFormatter | None:
    """Return the formatter for a series, honouring a per-series custom pattern."""

    if series.formatter == "custom" and series.custom_formatter:
        return build_formatter(FormatterSpec(formatter_type="custom", custom_format=series.custom_formatter))
    return axis_formatter


@lru_cache(maxsize=256)
def build_formatter(spec: FormatterSpec) -> NumberFormatter:
    """Build a numeric formatter for a spec.

    Args:
        spec: Formatter description. Invalid option values are replaced by the
            type defaults before the callable is built.

    Returns:
        Callable mapping a number to its display string.
    """

    normalized = _normalize(spec)

    def formatter(value: float) -> str:
        return format_value(value, normalized)

    return formatter


@lru_cache(maxsize=256)
def build_x_axis_formatter(spec: FormatterSpec) -> AxisValueFormatter:
    """Build a horizontal-axis formatter that accepts numbers or strings.

    Coercion rules:
        - None and blank strings format as "".
        - For date formatters, strings that parse as a calendar date are
          formatted as that date.
        - Strings that parse as a finite number are formatted as numbers.
        - Any other string is returned unchanged.
        - NaN formats as "".
    """

    numeric = build_formatter(spec)
    normalized = _normalize(spec)
    is_date = normalized.formatter_type == "date"

    def formatter(value: float | str | None) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return ""
            if is_date:
                parsed = parse_calendar_date(text)
                if parsed is not None:
                    try:
                        return format_date(parsed, normalized.date_format or default_date_format())
                    except (ValueError, OverflowError):
                        return value
            number = _parse_finite_number(text)
            if number is None:
                return value
            return numeric(number)
        return numeric(value)

    return formatter


def format_value(value: float | str | None, spec: FormatterSpec) -> str:
    """Format a single value according to a spec.

    Strings are parsed as numbers first; unparseable strings are returned
    unchanged. None, blank strings and NaN format as "".
    """

    if value is None:
        return ""
    if isinstance(value, str):
        if not value.strip():
            return ""
        number = _parse_number(value)
        if number is None:
            return value
        value = number
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, float) and math.isnan(value):
        return ""
    if isinstance(value, float) and math.isinf(value):
        return number_text(value)

    try:
        return _dispatch(float(value), spec)
    except (ArithmeticError, ValueError, TypeError, OverflowError):
        return number_text(value)


def _dispatch(value: float, spec: FormatterSpec) -> str:
    match spec.formatter_type:
        case "number":
            return format_number(value, notation=spec.number_notation, use_grouping=spec.use_grouping)
        case "currency":
            return format_currency(
                value,
                symbol=spec.currency_symbol,
                style=spec.currency_style,
                decimal_places=spec.decimal_places,
            )
        case "percentage":
            return format_percentage(value, spec.decimal_places)
        case "decimal":
            return fixed_point(value, spec.decimal_places)
        case "scientific":
            return format_scientific(value, spec.decimal_places)
        case "bytes":
            return format_bytes(value)
        case "duration":
            return format_duration(value, spec.duration_format)
        case "date":
            return format_date(value, spec.date_format or default_date_format())
        case "compact":
            return format_compact(value, spec.decimal_places)
        case "ordinal":
            return format_ordinal(value)
        case "custom":
            return format_custom(value, spec.custom_format)
        case _:
            return number_text(value)


def format_number(value: float, *, notation: str = "standard", use_grouping: bool = True) -> str:
    """Format a number with K/M/B shorthand and thousands grouping.

    With standard notation and grouping enabled, values of 10,000 and above are
    abbreviated (`12.3K`, `4.56M`, `7.89B`); smaller values are rounded to an
    integer and grouped. Disable grouping for year-like values.
    """

    if notation == "compact":
        return _compact_notation(value)
    if notation in ("scientific", "engineering"):
        return _exponent_notation(value, engineering=notation == "engineering")

    if use_grouping:
        magnitude = abs(value)
        if magnitude >= 1_000_000_000:
            return f"{value / 1_000_000_000:.2f}B"
        if magnitude >= 1_000_000:
            return f"{value / 1_000_000:.2f}M"
        if magnitude >= 10_000:
            return f"{value / 1_000:.1f}K"
    return group_digits(value, 0, use_grouping=use_grouping)


def format_currency(value: float, *, symbol: str = "$", style: str = "symbol", decimal_places: int = 2) -> str:
    """Format a currency amount; amounts of 1,000 and above are abbreviated."""

    magnitude = abs(value)
    if magnitude >= 1_000_000_000:
        return f"{symbol}{value / 1_000_000_000:.2f}B"
    if magnitude >= 1_000_000:
        return f"{symbol}{value / 1_000_000:.2f}M"
    if magnitude >= 1_000:
        return f"{symbol}{value / 1_000:.2f}K"

    code, name = _CURRENCY_NAMES.get(symbol, (symbol, symbol))
    if style == "code":
        return f"{code} {group_digits(value, decimal_places)}"
    if style == "name":
        return f"{group_digits(value, decimal_places)} {name}"
    amount = group_digits(magnitude, decimal_places)
    sign = "-" if value < 0 and amount != group_digits(0, decimal_places) else ""
    return f"{sign}{symbol}{amount}"


def format_percentage(value: float, decimal_places: int = 1) -> str:
    return f"{fixed_point(value, decimal_places)}%"


def format_scientific(value: float, decimal_places: int = 2) -> str:
    """Format in exponential notation, e.g. `1.23e+4`."""

    mantissa, exponent = f"{value or 0.0:.{decimal_places}e}".split("e")
    return f"{mantissa}e{int(exponent):+d}"


def format_bytes(value: float) -> str:
    """Format a byte count with binary units, e.g. `1.21 KB`."""

    if value == 0:
        return "0 B"
    index = int(math.floor(math.log(abs(value)) / math.log(1024)))
    index = max(0, min(index, len(_BYTE_UNITS) - 1))
    return f"{value / 1024**index:.2f} {_BYTE_UNITS[index]}"


def format_duration(value: float, duration_format: str = "short") -> str:
    """Format a number of seconds as a human-readable duration.

    Formats:
        short: `1h 23m` (two most significant units).
        narrow: `1h23m4s` (no spaces).
        long: `1 hour 23 minutes`.
    """

    magnitude = abs(value)
    sign = "-" if value < 0 else ""
    days = int(magnitude // 86_400)
    hours = int((magnitude % 86_400) // 3_600)
    minutes = int((magnitude % 3_600) // 60)
    seconds = int(magnitude % 60)

    if duration_format == "long":
        parts: list[str] = []
        for amount, unit in ((days, "day"), (hours, "hour"), (minutes, "minute")):
            if amount > 0:
                parts.append(f"{amount} {unit}{'' if amount == 1 else 's'}")
        if seconds > 0 and len(parts) < 2:
            parts.append(f"{seconds} second{'' if seconds == 1 else 's'}")
        return sign + (" ".join(parts) if parts else "0 seconds")

    if duration_format == "narrow":
        parts = [f"{amount}{unit}" for amount, unit in ((days, "d"), (hours, "h"), (minutes, "m")) if amount > 0]
        if seconds > 0 and len(parts) < 3:
            parts.append(f"{seconds}s")
        return sign + ("".join(parts) if parts else "0s")

    if magnitude < 60:
        return f"{sign}{seconds}s"
    if magnitude < 3_600:
        return f"{sign}{minutes}m {seconds}s" if seconds > 0 else f"{sign}{minutes}m"
    if magnitude < 86_400:
        return f"{sign}{hours}h {minutes}m" if minutes > 0 else f"{sign}{hours}h"
    return f"{sign}{days}d {hours}h" if hours > 0 else f"{sign}{days}d"


def format_date(value: float | datetime | date, date_format: str = "short") -> str:
    """Format a date.

    Args:
        value: A date/datetime, epoch milliseconds, or an integer year in
            1900..2100.
        date_format: Named pattern (see `DATE_PATTERNS`), `auto` or `relative`.

    Returns:
        Formatted date, or the value as text when it is not a representable date.
    """

    moment = _to_datetime(value)
    if moment is None:
        return number_text(value) if isinstance(value, (int, float)) else str(value)
    if date_format == "relative":
        return _relative(moment)
    if date_format == "auto":
        date_format = "numeric"
    pattern = DATE_PATTERNS.get(date_format, DATE_PATTERNS["short"])
    return dateformat.format(moment, pattern)


def format_compact(value: float, decimal_places: int = 1) -> str:
    """Format with K/M/B suffixes at a fixed precision, e.g. `1.2K`."""

    magnitude = abs(value)
    sign = "-" if value < 0 else ""
    if magnitude >= 1_000_000_000:
        return f"{sign}{magnitude / 1_000_000_000:.{decimal_places}f}B"
    if magnitude >= 1_000_000:
        return f"{sign}{magnitude / 1_000_000:.{decimal_places}f}M"
    if magnitude >= 1_000:
        return f"{sign}{magnitude / 1_000:.{decimal_places}f}K"
    return number_text(value)


def format_ordinal(value: float) -> str:
    """Format as an English ordinal: 1st, 2nd, 3rd, 11th, 21st."""

    number = math.floor(value + 0.5)
    last_two = abs(number) % 100
    if 11 <= last_two <= 13:
        return f"{number}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(abs(number) % 10, "th")
    return f"{number}{suffix}"


def format_custom(value: float, pattern: str) -> str:
    """Substitute the first occurrence of each placeholder in `pattern`."""

    substitutions = (
        ("{value}", number_text(value)),
        ("{round}", number_text(math.floor(value + 0.5))),
        ("{abs}", number_text(abs(value))),
        ("{sign}", "+" if value >= 0 else "-"),
        ("{fixed1}", fixed_point(value, 1)),
        ("{fixed2}", fixed_point(value, 2)),
        ("{fixed3}", fixed_point(value, 3)),
    )
    result = pattern
    for placeholder, replacement in substitutions:
        result = result.replace(placeholder, replacement, 1)
    return result


def validate_custom_format(pattern: str | None) -> str | None:
    """Check a custom placeholder pattern.

    Returns:
        An error message, or None when the pattern is usable.
    """

    if not pattern or not pattern.strip():
        return "Format string cannot be empty."
    if not any(placeholder in pattern for placeholder in CUSTOM_PLACEHOLDERS):
        return f"Format string must contain at least one placeholder: {', '.join(CUSTOM_PLACEHOLDERS)}."
    return None


def group_digits(value: float, decimal_places: int, *, use_grouping: bool = True) -> str:
    """Round half-up and render with the configured decimal/thousand separators."""

    quantized = Decimal(str(value)).quantize(Decimal(1).scaleb(-decimal_places), rounding=ROUND_HALF_UP)
    if quantized == 0:
        quantized = abs(quantized)
    return numberformat.format(
        quantized,
        settings.DECIMAL_SEPARATOR,
        decimal_pos=decimal_places,
        grouping=settings.NUMBER_GROUPING if use_grouping else 0,
        thousand_sep=settings.THOUSAND_SEPARATOR,
        force_grouping=use_grouping,
        use_l10n=False,
    )


def fixed_point(value: float, decimal_places: int) -> str:
    """Fixed-point text; values that round to zero carry no sign."""

    text = f"{value:.{decimal_places}f}"
    if text.startswith("-") and not text.strip("-0."):
        return text[1:]
    return text


def number_text(value: object) -> str:
    """Render a number the way chart tooltips expect: `5` rather than `5.0`."""

    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
    return str(value)


def parse_calendar_date(text: str) -> datetime | None:
    """Parse an axis label as a calendar date (UTC), or return None.

    Accepts ISO datetimes, ISO dates, Django's `DATE_INPUT_FORMATS` and bare
    four-digit years.
    """

    try:
        parsed_datetime = parse_datetime(text)
        if parsed_datetime is not None:
            if timezone.is_naive(parsed_datetime):
                return parsed_datetime.replace(tzinfo=UTC)
            return parsed_datetime
        parsed_date = parse_date(text)
    except ValueError:
        return None
    if parsed_date is not None:
        return datetime(parsed_date.year, parsed_date.month, parsed_date.day, tzinfo=UTC)

    for input_format in formats.get_format("DATE_INPUT_FORMATS"):
        try:
            parsed = datetime.strptime(text, input_format)
        except ValueError:
            continue
        return parsed.replace(tzinfo=UTC)

    if _FOUR_DIGIT_YEAR.match(text):
        return datetime(int(text), 1, 1, tzinfo=UTC)
    return None


def default_date_format() -> str:
    """Return the configured default date pattern name."""

    configured = getattr(settings, "CHART_DEFAULT_DATE_FORMAT", "short")
    return configured if configured in DATE_PATTERNS or configured in ("auto", "relative") else "short"


def _enabled(axis: AxisFormatterConfig) -> bool:
    return axis.use_formatter and axis.formatter_type != "none"


def _normalize(spec: FormatterSpec) -> FormatterSpec:
    """Replace invalid option values with the defaults for the spec's type."""

    changes: dict[str, object] = {}
    if spec.formatter_type not in FORMATTER_TYPES:
        logger.debug("Unknown formatter type %r; values render unformatted.", spec.formatter_type)
        changes["formatter_type"] = "none"
    if spec.formatter_type == "custom" and validate_custom_format(spec.custom_format) is not None:
        logger.debug("Invalid custom format %r; using '{value}'.", spec.custom_format)
        changes["custom_format"] = "{value}"
    if not isinstance(spec.decimal_places, int) or not 0 <= spec.decimal_places <= _MAX_DECIMAL_PLACES:
        changes["decimal_places"] = 2
    if spec.number_notation not in _NUMBER_NOTATIONS:
        changes["number_notation"] = "standard"
    if spec.currency_style not in _CURRENCY_STYLES:
        changes["currency_style"] = "symbol"
    if spec.duration_format not in _DURATION_FORMATS:
        changes["duration_format"] = "short"
    if spec.date_format is not None and spec.date_format not in DATE_PATTERNS and spec.date_format not in (
        "auto",
        "relative",
    ):
        logger.debug("Unknown date format %r; using the default pattern.", spec.date_format)
        changes["date_format"] = None
    if not changes:
        return spec
    return replace(spec, **changes)


def _parse_number(text: str) -> float | None:
    """Parse a numeric string; returns None for anything that is not a number."""

    try:
        return float(text.strip())
    except ValueError:
        return None


def _parse_finite_number(text: str) -> float | None:
    number = _parse_number(text)
    if number is None or not math.isfinite(number):
        return None
    return number


def _to_datetime(value: float | datetime | date) -> datetime | None:
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if not math.isfinite(value):
        return None
    if float(value).is_integer() and int(value) in _YEAR_RANGE:
        return datetime(int(value), 1, 1, tzinfo=UTC)
    try:
        return datetime(1970, 1, 1, tzinfo=UTC) + timedelta(milliseconds=value)
    except OverflowError:
        return None


def _relative(moment: datetime) -> str:
    now = timezone.now()
    if abs(moment - now) < timedelta(minutes=1):
        return "just now"
    if moment < now:
        return f"{timesince(moment, now, depth=1)} ago".replace("\xa0", " ")
    return f"in {timeuntil(moment, now, depth=1)}".replace("\xa0", " ")


def _compact_notation(value: float) -> str:
    """Compact notation with up to two fraction digits, e.g. `1.23K`."""

    magnitude = abs(value)
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            return f"{_trim_zeros(f'{value / threshold:.2f}')}{suffix}"
    return _trim_zeros(f"{value:.2f}")


def _exponent_notation(value: float, *, engineering: bool) -> str:
    """Scientific (`1.23E3`) or engineering (`12.35E3`) notation."""

    if value == 0:
        return "0E0"
    exponent = math.floor(math.log10(abs(value)))
    if engineering:
        exponent -= exponent % 3
    mantissa = round(value / 10**exponent, 2)
    if not engineering and abs(mantissa) >= 10:
        mantissa /= 10
        exponent += 1
    return f"{_trim_zeros(f'{mantissa:.2f}')}E{exponent}"


def _trim_zeros(text: str) -> str:
    if "." not in text:
        return text
    return text.rstrip("0").rstrip(".")
