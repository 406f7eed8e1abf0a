"""Column binding consistency for chart configurations.

The dataset layer owns the column set (`DataHeader` list) and may rename,
delete or derive columns at any time. This module keeps the column references
inside a ChartConfiguration valid against that set:

- `is_column_available_for_series` is the single-column legality check used
  by column pickers.
- `cleanup_chart_config` repairs references to columns that disappeared.
- `build_reset_bindings_patch` clears every binding for the chart type.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any, Protocol, assert_never

from .errors import ConfigKindError
from .schema import (
    CHART_TYPES,
    AxisConfig,
    ChartConfiguration,
    CyclePlotAxisConfig,
    DataHeader,
    HeatmapAxisConfig,
    PieDonutChartOptions,
    SeriesConfig,
)

logger = logging.getLogger(__name__)


class _HasXAxisKey(Protocol):
    x_axis_key: str | None


def resolve_column(reference: str | None, headers: Iterable[DataHeader]) -> DataHeader | None:
    """Resolve a column reference against the current headers.

    Matching precedence is id, then legacy `header_id`, then display name,
    then pivot `value_id`.

    Args:
        reference: Column reference stored in a configuration.
        headers: Current dataset headers.

    Returns:
        The matching header, or None when the reference is empty or unknown.
    """

    if not reference:
        return None
    header_list = list(headers)
    for attribute in ("id", "header_id", "name", "value_id"):
        for header in header_list:
            if getattr(header, attribute) == reference:
                return header
    return None


def is_column_available_for_series(
    series_list: Sequence[SeriesConfig],
    axis_config: _HasXAxisKey,
    column: str,
    series_id: str,
) -> bool:
    """Return True when `column` may be bound to the series `series_id`.

    A column is available when it is not the x-axis column and it is either
    already bound to this series or not bound to any other series.

    Args:
        series_list: Series of the configuration being edited.
        axis_config: Axis configuration holding `x_axis_key`.
        column: Candidate column reference.
        series_id: Series the picker is editing.

    Returns:
        Whether the column can be offered for this series.
    """

    if column == axis_config.x_axis_key:
        return False
    for series in series_list:
        if series.data_column != column:
            continue
        if series.id != series_id:
            return False
    return True


def available_columns_for_series(
    headers: Iterable[DataHeader],
    series_list: Sequence[SeriesConfig],
    axis_config: _HasXAxisKey,
    series_id: str,
) -> list[DataHeader]:
    """Return the headers a column picker may offer for a series.

    Headers are matched by id when present, otherwise by name, mirroring the
    reference the picker would store.
    """

    return [
        header
        for header in headers
        if is_column_available_for_series(series_list, axis_config, header.id or header.name, series_id)
    ]


def bind_series_column(config: ChartConfiguration, series_id: str, column: str) -> ChartConfiguration:
    """Bind `column` to the series `series_id` if the column is available.

    Rejected edits (unknown series, column already taken, column used as the
    x axis) return the input configuration unchanged.
    """

    axes = config.axis_configs
    if not isinstance(axes, AxisConfig):
        return config
    if not any(series.id == series_id for series in axes.series_configs):
        return config
    if not is_column_available_for_series(axes.series_configs, axes, column, series_id):
        logger.debug("Rejected binding column=%r to series id=%r.", column, series_id)
        return config

    series_configs = tuple(
        replace(series, data_column=column) if series.id == series_id else series for series in axes.series_configs
    )
    return replace(config, axis_configs=replace(axes, series_configs=series_configs))


def cleanup_chart_config(
    config: ChartConfiguration | None,
    headers: Sequence[DataHeader] | None,
) -> ChartConfiguration | None:
    """Clear column references that no longer resolve against `headers`.

    An empty or missing header list is treated as "schema not loaded yet" and
    leaves the configuration untouched. When nothing needs repair the input
    object is returned, so callers can skip downstream updates with an `is`
    check.

    Args:
        config: Configuration to repair.
        headers: Authoritative dataset headers.

    Returns:
        The input configuration when unchanged, otherwise a repaired copy.
        None when `config` is None.
    """

    if config is None:
        return None
    if not headers:
        return config

    repair = _BindingRepair(headers)
    axis_configs = config.axis_configs
    options = config.options

    if isinstance(axis_configs, CyclePlotAxisConfig):
        axis_configs = repair.cartesian_axes(axis_configs)
        axis_configs = repair.keys(axis_configs, ("cycle_key", "period_key", "value_key"), cleared=None)
    elif isinstance(axis_configs, AxisConfig):
        axis_configs = repair.cartesian_axes(axis_configs)
    elif isinstance(axis_configs, HeatmapAxisConfig):
        axis_configs = repair.keys(axis_configs, ("x_axis_key", "y_axis_key", "value_key"), cleared=None)

    if isinstance(options, PieDonutChartOptions):
        options = repair.keys(options, ("label_key", "value_key"), cleared="")

    if not repair.changed:
        return config
    return replace(config, options=options, axis_configs=axis_configs)


def build_reset_bindings_patch(config: ChartConfiguration) -> dict[str, Any]:
    """Build the minimal patch that clears every column binding of a chart.

    Args:
        config: Configuration whose bindings should be cleared.

    Returns:
        Mapping of ChartConfiguration field names to replacement values.

    Raises:
        ConfigKindError: When the chart type is not supported.
    """

    chart_type = config.chart_type
    if chart_type not in CHART_TYPES:
        raise ConfigKindError(chart_type)

    match chart_type:
        case "line" | "bar" | "area" | "scatter":
            axis_configs = config.axis_configs if isinstance(config.axis_configs, AxisConfig) else AxisConfig()
            return {"axis_configs": replace(axis_configs, x_axis_key=None, series_configs=())}
        case "pie" | "donut":
            return {"options": replace(config.options, label_key="", value_key="")}
        case "heatmap":
            heatmap_axes = (
                config.axis_configs if isinstance(config.axis_configs, HeatmapAxisConfig) else HeatmapAxisConfig()
            )
            return {"axis_configs": replace(heatmap_axes, x_axis_key=None, y_axis_key=None, value_key=None)}
        case "cycleplot":
            cycle_axes = (
                config.axis_configs
                if isinstance(config.axis_configs, CyclePlotAxisConfig)
                else CyclePlotAxisConfig()
            )
            return {
                "axis_configs": replace(
                    cycle_axes,
                    x_axis_key=None,
                    series_configs=(),
                    cycle_key=None,
                    period_key=None,
                    value_key=None,
                )
            }
        case _:
            assert_never(chart_type)


def reset_bindings(config: ChartConfiguration) -> ChartConfiguration:
    """Return a copy of `config` with every column binding cleared."""

    return replace(config, **build_reset_bindings_patch(config))


class _BindingRepair:
    """Repair pass state; `changed` flips when any binding is cleared."""

    def __init__(self, headers: Sequence[DataHeader]) -> None:
        self._headers = tuple(headers)
        self.changed = False

    def exists(self, reference: str | None) -> bool:
        return resolve_column(reference, self._headers) is not None

    def cartesian_axes(self, axes: AxisConfig) -> AxisConfig:
        changes: dict[str, Any] = {}
        if axes.x_axis_key and not self.exists(axes.x_axis_key):
            logger.debug("Clearing x_axis_key=%r: column no longer exists.", axes.x_axis_key)
            changes["x_axis_key"] = None

        kept = tuple(series for series in axes.series_configs if self._keep_series(series))
        if len(kept) != len(axes.series_configs):
            changes["series_configs"] = kept

        if not changes:
            return axes
        self.changed = True
        return replace(axes, **changes)

    def keys(self, target: Any, names: tuple[str, ...], *, cleared: str | None) -> Any:
        changes = {
            name: cleared
            for name in names
            if getattr(target, name) and not self.exists(getattr(target, name))
        }
        if not changes:
            return target
        for name in changes:
            logger.debug("Clearing %s=%r: column no longer exists.", name, getattr(target, name))
        self.changed = True
        return replace(target, **changes)

    def _keep_series(self, series: SeriesConfig) -> bool:
        if self.exists(series.data_column):
            return True
        if not series.data_column:
            logger.debug("Removing series id=%r: not bound to a column.", series.id)
        else:
            logger.debug("Removing series id=%r: column %r no longer exists.", series.id, series.data_column)
        return False
