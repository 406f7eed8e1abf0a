"""Validation for ChartConfiguration values.

Validation reports problems without repairing them: use
`cleanup_chart_config` to drop dangling column references. Checks cover the
variant shape, column-reference integrity, series column exclusivity and
formatter correctness.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from .bindings import resolve_column
from .formatters import DATE_PATTERNS, FORMATTER_TYPES, validate_custom_format
from .schema import (
    CHART_TYPES,
    AreaChartOptions,
    AxisConfig,
    AxisFormatterConfig,
    BarChartOptions,
    ChartConfiguration,
    CyclePlotAxisConfig,
    CyclePlotChartOptions,
    DataHeader,
    FormatterConfig,
    HeatmapAxisConfig,
    HeatmapChartOptions,
    LineChartOptions,
    PieDonutChartOptions,
    PieDonutFormatterConfig,
    ScatterChartOptions,
)

_EXPECTED_SHAPES: Final[dict[str, tuple[type, type, type | None]]] = {
    "line": (LineChartOptions, FormatterConfig, AxisConfig),
    "bar": (BarChartOptions, FormatterConfig, AxisConfig),
    "area": (AreaChartOptions, FormatterConfig, AxisConfig),
    "scatter": (ScatterChartOptions, FormatterConfig, AxisConfig),
    "pie": (PieDonutChartOptions, PieDonutFormatterConfig, None),
    "donut": (PieDonutChartOptions, PieDonutFormatterConfig, None),
    "heatmap": (HeatmapChartOptions, FormatterConfig, HeatmapAxisConfig),
    "cycleplot": (CyclePlotChartOptions, FormatterConfig, CyclePlotAxisConfig),
}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of validating a chart configuration."""

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def validate_chart_config(
    config: ChartConfiguration,
    *,
    headers: Sequence[DataHeader] | None = None,
) -> ValidationResult:
    """Validate a ChartConfiguration, optionally against the dataset headers.

    Args:
        config: Configuration to validate.
        headers: Current dataset headers. When empty or None, column
            references are not resolved and a warning is reported instead.

    Returns:
        ValidationResult containing errors and warnings.
    """

    errors: list[str] = []
    warnings: list[str] = []

    if config.chart_type not in CHART_TYPES:
        errors.append(f"chart_type is not a supported value: {config.chart_type!r}.")
        return ValidationResult(is_valid=False, errors=tuple(errors))

    options_type, formatters_type, axes_type = _EXPECTED_SHAPES[config.chart_type]
    if type(config.options) is not options_type:
        errors.append(f"options must be {options_type.__name__} for {config.chart_type} charts.")
    if not isinstance(config.formatters, formatters_type):
        errors.append(f"formatters must be {formatters_type.__name__} for {config.chart_type} charts.")
    if axes_type is None:
        if config.axis_configs is not None:
            errors.append(f"axis_configs must be None for {config.chart_type} charts.")
    elif type(config.axis_configs) is not axes_type:
        errors.append(f"axis_configs must be {axes_type.__name__} for {config.chart_type} charts.")
    if errors:
        return ValidationResult(is_valid=False, errors=tuple(errors))

    references = _column_references(config)
    for path, reference in references:
        if not reference:
            warnings.append(f"{path} is not bound to a column.")

    if headers:
        for path, reference in references:
            if reference and resolve_column(reference, headers) is None:
                errors.append(f"{path} references an unknown column: {reference!r}.")
    else:
        warnings.append("No dataset headers supplied; column references were not checked.")

    axes = config.axis_configs
    if isinstance(axes, AxisConfig):
        errors.extend(_series_errors(axes))

    if isinstance(config.formatters, FormatterConfig):
        errors.extend(_axis_formatter_errors("formatters.x", config.formatters.x))
        errors.extend(_axis_formatter_errors("formatters.y", config.formatters.y))
        if isinstance(axes, AxisConfig) and headers:
            warnings.extend(_date_axis_warnings(config.formatters.x, axes, headers))
    elif isinstance(config.formatters, PieDonutFormatterConfig):
        errors.extend(_value_formatter_errors(config.formatters))

    return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def _column_references(config: ChartConfiguration) -> list[tuple[str, str | None]]:
    """List (path, reference) pairs for every required column binding."""

    axes = config.axis_configs
    options = config.options
    references: list[tuple[str, str | None]] = []
    if isinstance(options, PieDonutChartOptions):
        references.append(("options.label_key", options.label_key))
        references.append(("options.value_key", options.value_key))
    if isinstance(axes, HeatmapAxisConfig):
        references.append(("axis_configs.x_axis_key", axes.x_axis_key))
        references.append(("axis_configs.y_axis_key", axes.y_axis_key))
        references.append(("axis_configs.value_key", axes.value_key))
    if isinstance(axes, AxisConfig):
        references.append(("axis_configs.x_axis_key", axes.x_axis_key))
        for series in axes.series_configs:
            references.append((f"series[{series.id}].data_column", series.data_column))
    if isinstance(axes, CyclePlotAxisConfig):
        references.append(("axis_configs.cycle_key", axes.cycle_key))
        references.append(("axis_configs.period_key", axes.period_key))
        references.append(("axis_configs.value_key", axes.value_key))
    return references


def _series_errors(axes: AxisConfig) -> list[str]:
    errors: list[str] = []
    id_counts = Counter(series.id for series in axes.series_configs)
    for series_id, count in sorted(id_counts.items()):
        if count > 1:
            errors.append(f"series id {series_id!r} is used by {count} series.")

    column_counts = Counter(series.data_column for series in axes.series_configs if series.data_column)
    for column, count in sorted(column_counts.items()):
        if count > 1:
            errors.append(f"column {column!r} is bound to {count} series.")
        if axes.x_axis_key and column == axes.x_axis_key:
            errors.append(f"column {column!r} is bound both to the x axis and to a series.")

    for series in axes.series_configs:
        if series.formatter != "custom":
            continue
        problem = validate_custom_format(series.custom_formatter)
        if problem is not None:
            errors.append(f"series[{series.id}].custom_formatter: {problem}")
    return errors


def _axis_formatter_errors(path: str, axis: AxisFormatterConfig) -> list[str]:
    if not axis.use_formatter:
        return []
    errors: list[str] = []
    if axis.formatter_type not in FORMATTER_TYPES:
        errors.append(f"{path}.formatter_type is not a supported value: {axis.formatter_type!r}.")
    if axis.formatter_type == "custom":
        problem = validate_custom_format(axis.custom_format)
        if problem is not None:
            errors.append(f"{path}.custom_format: {problem}")
    if not 0 <= axis.decimal_places <= 20:
        errors.append(f"{path}.decimal_places must be between 0 and 20.")
    if axis.date_format is not None and axis.date_format not in {*DATE_PATTERNS, "auto", "relative"}:
        errors.append(f"{path}.date_format is not a supported value: {axis.date_format!r}.")
    return errors


def _value_formatter_errors(formatters: PieDonutFormatterConfig) -> list[str]:
    if not formatters.use_value_formatter:
        return []
    errors: list[str] = []
    if formatters.value_formatter_type not in FORMATTER_TYPES:
        errors.append(f"formatters.value_formatter_type is not a supported value: {formatters.value_formatter_type!r}.")
    if formatters.value_formatter_type == "custom":
        problem = validate_custom_format(formatters.custom_value_formatter)
        if problem is not None:
            errors.append(f"formatters.custom_value_formatter: {problem}")
    return errors


def _date_axis_warnings(axis: AxisFormatterConfig, axes: AxisConfig, headers: Sequence[DataHeader]) -> list[str]:
    if not axis.use_formatter or axis.formatter_type != "date":
        return []
    header = resolve_column(axes.x_axis_key, headers)
    if header is None or header.type in ("date", "number"):
        return []
    return [f"formatters.x uses a date formatter but column {header.name!r} is of type {header.type!r}."]
