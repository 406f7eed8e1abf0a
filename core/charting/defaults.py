"""Default ChartConfiguration instances per chart type.

Every call builds a brand new object graph: nested dataclasses, dicts and
tuples are never shared between two default instances, so a caller may edit
one chart's configuration without touching another's.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, assert_never

from .errors import ChartConfigError, ConfigKindError
from .schema import (
    CHART_TYPES,
    AreaChartOptions,
    AxisConfig,
    AxisFormatterConfig,
    BarChartOptions,
    ChartConfiguration,
    ChartType,
    CyclePlotAxisConfig,
    CyclePlotChartOptions,
    FormatterConfig,
    HeatmapAxisConfig,
    HeatmapChartOptions,
    LineChartOptions,
    Margin,
    PieDonutChartOptions,
    PieDonutFormatterConfig,
    ScatterChartOptions,
)


def get_default_chart_config(chart_type: ChartType) -> ChartConfiguration:
    """Return a fresh default configuration for a chart type.

    Args:
        chart_type: One of `CHART_TYPES`.

    Returns:
        A new ChartConfiguration sharing no sub-object with any other instance.

    Raises:
        ConfigKindError: When `chart_type` is not a supported chart type.
    """

    if chart_type not in CHART_TYPES:
        raise ConfigKindError(chart_type)

    match chart_type:
        case "line":
            return ChartConfiguration(
                chart_type="line",
                options=LineChartOptions(),
                formatters=_axis_formatters(),
                axis_configs=AxisConfig(),
            )
        case "bar":
            return ChartConfiguration(
                chart_type="bar",
                options=BarChartOptions(),
                formatters=_axis_formatters(),
                axis_configs=AxisConfig(),
            )
        case "area":
            return ChartConfiguration(
                chart_type="area",
                options=AreaChartOptions(),
                formatters=_axis_formatters(),
                axis_configs=AxisConfig(),
            )
        case "scatter":
            return ChartConfiguration(
                chart_type="scatter",
                options=ScatterChartOptions(show_legend=False),
                formatters=_axis_formatters(),
                axis_configs=AxisConfig(),
            )
        case "pie":
            return ChartConfiguration(
                chart_type="pie",
                options=PieDonutChartOptions(inner_radius=0.0),
                formatters=PieDonutFormatterConfig(),
            )
        case "donut":
            return ChartConfiguration(
                chart_type="donut",
                options=PieDonutChartOptions(inner_radius=0.45),
                formatters=PieDonutFormatterConfig(),
            )
        case "heatmap":
            return ChartConfiguration(
                chart_type="heatmap",
                options=HeatmapChartOptions(
                    width=1024,
                    height=768,
                    margin=Margin(top=80, right=150, bottom=100, left=100),
                ),
                formatters=_axis_formatters(),
                axis_configs=HeatmapAxisConfig(),
            )
        case "cycleplot":
            return ChartConfiguration(
                chart_type="cycleplot",
                options=CyclePlotChartOptions(show_points=True),
                formatters=_axis_formatters(),
                axis_configs=CyclePlotAxisConfig(),
            )
        case _:
            assert_never(chart_type)


def switch_chart_type(config: ChartConfiguration, chart_type: ChartType) -> ChartConfiguration:
    """Return the configuration to use after the user picks a chart type.

    Changing the type discards the previous configuration in favour of a fresh
    default; re-selecting the current type keeps the configuration as-is.
    """

    if config.chart_type == chart_type:
        return config
    return get_default_chart_config(chart_type)


def apply_config_patch(config: ChartConfiguration, patch: dict[str, Any]) -> ChartConfiguration:
    """Merge a field patch into a configuration without mutating it.

    Args:
        config: Current configuration.
        patch: Mapping of ChartConfiguration field names to replacement values.

    Returns:
        The same configuration when the patch is empty, otherwise a new one.

    Raises:
        ChartConfigError: When the patch changes `chart_type`; use `switch_chart_type`.
    """

    if not patch:
        return config
    new_type = patch.get("chart_type", config.chart_type)
    if new_type != config.chart_type:
        raise ChartConfigError(
            f"Cannot patch chart_type {config.chart_type!r} -> {new_type!r}; use switch_chart_type()."
        )
    return replace(config, **patch)


def _axis_formatters() -> FormatterConfig:
    """Build the default per-axis formatter settings."""

    return FormatterConfig(x=AxisFormatterConfig(), y=AxisFormatterConfig())
