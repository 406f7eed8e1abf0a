"""Schema types for declarative chart configuration.

A chart is described by a `ChartConfiguration` value: a tagged union keyed by
`chart_type` whose `options`, `formatters` and `axis_configs` shapes depend on
the chart type. All types are frozen; edits produce new values through
`dataclasses.replace` so a configuration can be shared freely between the
editor, the binding resolver and the renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, Literal

ChartType = Literal["line", "bar", "area", "scatter", "pie", "donut", "heatmap", "cycleplot"]

CHART_TYPES: Final[tuple[ChartType, ...]] = (
    "line",
    "bar",
    "area",
    "scatter",
    "pie",
    "donut",
    "heatmap",
    "cycleplot",
)

Theme = Literal["light", "dark", "auto"]
LegendPosition = Literal["top", "bottom", "left", "right"]
AxisStart = Literal["auto", "zero"] | float
CurveType = Literal[
    "curveLinear",
    "curveMonotoneX",
    "curveMonotoneY",
    "curveBasis",
    "curveCardinal",
    "curveCatmullRom",
    "curveStep",
    "curveStepBefore",
    "curveStepAfter",
]
BarType = Literal["grouped", "stacked", "diverging"]
LineStyle = Literal["solid", "dashed", "dotted"]
PointStyle = Literal["circle", "square", "triangle", "diamond"]
SeriesFormatterMode = Literal["inherit", "custom"]
ColumnType = Literal["text", "number", "date", "boolean"]

FormatterType = Literal[
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
]
CurrencyStyle = Literal["symbol", "code", "name"]
NumberNotation = Literal["standard", "compact", "scientific", "engineering"]
DateFormat = Literal[
    "auto",
    "numeric",
    "short",
    "medium",
    "long",
    "full",
    "relative",
    "year-only",
    "month-year",
    "iso",
]
DurationFormat = Literal["short", "narrow", "long"]


@dataclass(frozen=True, slots=True)
class Margin:
    """Canvas margins in pixels."""

    top: int = 40
    right: int = 40
    bottom: int = 40
    left: int = 80


@dataclass(frozen=True, slots=True)
class ColorPair:
    """Theme-dependent color for a single series."""

    light: str
    dark: str


@dataclass(frozen=True, slots=True)
class ChartOptions:
    """Visual options shared by every chart type.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        margin: Canvas margins.
        title: Chart title.
        show_legend: Whether the legend is drawn.
        show_grid: Whether grid lines are drawn.
        show_tooltip: Whether hover tooltips are enabled.
        show_points: Whether data points are drawn.
        show_point_values: Whether values are printed next to points.
        animation_duration: Transition duration in milliseconds.
        grid_opacity: Grid line opacity in [0, 1].
        legend_position: Legend placement.
        enable_zoom: Whether zooming is enabled.
        enable_pan: Whether panning is enabled.
        zoom_extent: Maximum zoom factor in percent.
        theme: Color theme.
        background_color: Canvas background color.
        title_font_size: Title font size in pixels.
        label_font_size: Axis label font size in pixels.
        legend_font_size: Legend font size in pixels.
        colors: Series name to theme colors.
    """

    width: int = 800
    height: int = 400
    margin: Margin = field(default_factory=Margin)
    title: str = ""
    show_legend: bool = True
    show_grid: bool = True
    show_tooltip: bool = True
    show_points: bool = False
    show_point_values: bool = False
    animation_duration: int = 400
    grid_opacity: float = 0.2
    legend_position: LegendPosition = "top"
    enable_zoom: bool = False
    enable_pan: bool = False
    zoom_extent: int = 100
    theme: Theme = "dark"
    background_color: str = "#000000"
    title_font_size: int = 18
    label_font_size: int = 12
    legend_font_size: int = 12
    colors: dict[str, ColorPair] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LineChartOptions(ChartOptions):
    """Line chart options."""

    curve: CurveType = "curveLinear"
    line_width: int = 2
    point_radius: int = 2
    disabled_lines: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AreaChartOptions(ChartOptions):
    """Area chart options."""

    show_stroke: bool = False
    curve: CurveType = "curveLinear"
    line_width: int = 2
    opacity: float = 0.7


@dataclass(frozen=True, slots=True)
class BarChartOptions(ChartOptions):
    """Bar chart options."""

    bar_type: BarType = "grouped"
    bar_width: int = 24
    bar_spacing: int = 8
    disabled_bars: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ScatterChartOptions(ChartOptions):
    """Scatter chart options."""

    point_radius: int = 5


@dataclass(frozen=True, slots=True)
class PieDonutChartOptions(ChartOptions):
    """Pie and donut chart options.

    `label_key` and `value_key` are required bindings; an unbound key is the
    empty string rather than None.
    """

    label_key: str = ""
    value_key: str = ""
    show_labels: bool = True
    show_percentage: bool = True
    show_slice_values: bool = True
    show_title: bool = True
    enable_animation: bool = True
    inner_radius: float = 0.0
    corner_radius: float = 0.0
    pad_angle: float = 0.0
    start_angle: float = 0.0
    end_angle: float = 360.0
    sort_slices: Literal["ascending", "descending", "none"] = "descending"
    slice_opacity: float = 1.0
    legend_max_items: int = 10
    stroke_width: int = 2
    stroke_color: str = "#ffffff"
    hover_scale: float = 1.05
    enable_hover_effect: bool = True


@dataclass(frozen=True, slots=True)
class HeatmapChartOptions(ChartOptions):
    """Heatmap options."""

    color_scheme: str = "viridis"
    show_values: bool = False
    cell_border_width: int = 1
    cell_border_color: str = "#ffffff"
    value_position: Literal["center", "top", "bottom"] = "center"
    min_value: Literal["auto"] | float = "auto"
    max_value: Literal["auto"] | float = "auto"
    null_color: str = "#cccccc"
    legend_steps: int = 5


@dataclass(frozen=True, slots=True)
class CyclePlotChartOptions(ChartOptions):
    """Cycle plot options."""

    curve: CurveType = "curveMonotoneX"
    line_width: int = 2
    point_radius: int = 4


@dataclass(frozen=True, slots=True)
class SeriesConfig:
    """A single data series bound to a dataset column.

    Args:
        id: Stable series identifier.
        name: Display name shown in legends.
        data_column: Bound column reference (header id or name); empty when unbound.
        color: Series color.
        visible: Whether the series is drawn.
        line_width: Optional per-series stroke width.
        point_radius: Optional per-series point radius.
        line_style: Stroke dash style.
        point_style: Point marker shape.
        opacity: Series opacity in [0, 1].
        formatter: `inherit` uses the axis formatter, `custom` uses `custom_formatter`.
        custom_formatter: Placeholder pattern used when `formatter == "custom"`.
        column_index: Legacy positional column reference kept for old payloads.
    """

    id: str
    name: str = ""
    data_column: str = ""
    color: str = "#3b82f6"
    visible: bool = True
    line_width: int | None = None
    point_radius: int | None = None
    line_style: LineStyle = "solid"
    point_style: PointStyle = "circle"
    opacity: float = 1.0
    formatter: SeriesFormatterMode = "inherit"
    custom_formatter: str | None = None
    column_index: int | None = None


@dataclass(frozen=True, slots=True)
class AxisConfig:
    """Axis bindings and axis presentation for cartesian charts."""

    x_axis_key: str | None = None
    x_axis_label: str = ""
    y_axis_label: str = ""
    x_axis_start: AxisStart = "auto"
    y_axis_start: AxisStart = "auto"
    x_axis_rotation: int = 0
    y_axis_rotation: int = 0
    show_axis_labels: bool = True
    show_axis_ticks: bool = True
    series_configs: tuple[SeriesConfig, ...] = ()


@dataclass(frozen=True, slots=True)
class CyclePlotAxisConfig(AxisConfig):
    """Cycle plot bindings: one value column split by cycle and period columns."""

    cycle_key: str | None = None
    period_key: str | None = None
    value_key: str | None = None
    cycle_colors: dict[str, str] = field(default_factory=dict)
    show_average_line: bool = False
    emphasize_latest_cycle: bool = False
    show_range_band: bool = False
    period_ordering: Literal["auto", "natural", "alphabetical"] = "auto"
    show_tooltip_delta: bool = False


@dataclass(frozen=True, slots=True)
class HeatmapAxisConfig:
    """Heatmap bindings: categorical x/y columns and a numeric value column."""

    x_axis_key: str | None = None
    y_axis_key: str | None = None
    value_key: str | None = None
    x_axis_label: str = ""
    y_axis_label: str = ""
    x_axis_rotation: int = -45
    y_axis_rotation: int = 0
    show_axis_labels: bool = True


@dataclass(frozen=True, slots=True)
class AxisFormatterConfig:
    """Formatting rules for a single axis.

    Args:
        use_formatter: Opt-in switch; when False the renderer's default is used.
        formatter_type: Formatter family.
        custom_format: Placeholder pattern for the `custom` type.
        currency_symbol: Currency symbol for the `currency` type.
        currency_style: Currency display style.
        decimal_places: Precision for currency/percentage/decimal/scientific/compact.
        number_notation: Notation for the `number` type.
        date_format: Named date pattern; None uses the configured default.
        duration_format: Named duration pattern.
        use_grouping: Whether thousands separators/abbreviations are applied.
    """

    use_formatter: bool = False
    formatter_type: FormatterType = "none"
    custom_format: str = "{value}"
    currency_symbol: str = "$"
    currency_style: CurrencyStyle = "symbol"
    decimal_places: int = 2
    number_notation: NumberNotation = "standard"
    date_format: DateFormat | None = None
    duration_format: DurationFormat = "short"
    use_grouping: bool = True


@dataclass(frozen=True, slots=True)
class FormatterConfig:
    """Independent formatter settings for the x and y axes."""

    x: AxisFormatterConfig = field(default_factory=AxisFormatterConfig)
    y: AxisFormatterConfig = field(default_factory=AxisFormatterConfig)


@dataclass(frozen=True, slots=True)
class PieDonutFormatterConfig:
    """Slice value formatting for pie and donut charts."""

    use_value_formatter: bool = True
    value_formatter_type: FormatterType = "number"
    custom_value_formatter: str = ""


ChartOptionsVariant = (
    LineChartOptions
    | AreaChartOptions
    | BarChartOptions
    | ScatterChartOptions
    | PieDonutChartOptions
    | HeatmapChartOptions
    | CyclePlotChartOptions
)
AxisConfigVariant = AxisConfig | CyclePlotAxisConfig | HeatmapAxisConfig


@dataclass(frozen=True, slots=True)
class ChartConfiguration:
    """Declarative chart definition.

    Args:
        chart_type: Variant tag; determines the shapes of the remaining fields.
        options: Visual options for the chart type.
        formatters: Axis formatters, or the slice value formatter for pie/donut.
        axis_configs: Column bindings and axis presentation; None for pie/donut
            whose bindings live in `options`.
        dataset_config: Opaque dataset operation settings owned by the dataset layer.
    """

    chart_type: ChartType
    options: ChartOptionsVariant
    formatters: FormatterConfig | PieDonutFormatterConfig = field(default_factory=FormatterConfig)
    axis_configs: AxisConfigVariant | None = None
    dataset_config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DataHeader:
    """A dataset column descriptor supplied by the dataset layer.

    Args:
        name: Display name.
        id: Stable identifier.
        type: Declared column type.
        date_format: Optional date pattern for date columns.
        header_id: Legacy alternate identifier.
        value_id: Pivot value identifier for pivot-derived columns.
        index: Optional positional index.
    """

    name: str
    id: str | None = None
    type: ColumnType = "text"
    date_format: str | None = None
    header_id: str | None = None
    value_id: str | None = None
    index: int | None = None


@dataclass(frozen=True, slots=True)
class VersionSnapshot:
    """One side of a chart version comparison.

    Args:
        name: Chart name.
        type: Chart type tag.
        dataset_id: Identifier of the dataset the chart is built on.
        config: Persisted configuration tree or a ChartConfiguration.
        timestamp: ISO timestamp (`updatedAt` for the live chart, `createdAt` for a version).
        description: Optional chart description.
        image_url: Optional preview image stored with historical versions.
    """

    name: str
    type: str
    dataset_id: str
    config: Any
    timestamp: str | None = None
    description: str | None = None
    image_url: str | None = None
