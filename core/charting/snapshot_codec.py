"""Snapshot encoding/decoding helpers for persisted chart configurations.

The persisted form is the camelCase JSON tree stored by the chart API:

    {"chartType": ..., "config": {...}, "formatters": {...},
     "axisConfigs": {...}, "datasetConfig": {...}}

Decoding is best-effort: the payload is overlaid onto the chart type's default
configuration, unknown keys are ignored and malformed scalars keep the default.
Only a missing or unsupported chart type is an error.
"""

from __future__ import annotations

import logging
import re
from dataclasses import fields, is_dataclass, replace
from typing import Any, Final, cast

from .defaults import get_default_chart_config
from .errors import ConfigKindError
from .schema import (
    CHART_TYPES,
    AxisFormatterConfig,
    ChartConfiguration,
    ColorPair,
    DataHeader,
    FormatterConfig,
    PieDonutFormatterConfig,
    SeriesConfig,
    VersionSnapshot,
)

logger = logging.getLogger(__name__)

_COLUMN_TYPES: Final[frozenset[str]] = frozenset({"text", "number", "date", "boolean"})
_AUTO_NUMBER_FIELDS: Final[frozenset[str]] = frozenset({"x_axis_start", "y_axis_start", "min_value", "max_value"})
_CAMEL_BOUNDARY = re.compile(r"_([a-z0-9])")


def encode_chart_config(config: ChartConfiguration) -> dict[str, Any]:
    """Encode a ChartConfiguration into its persisted JSON-serializable form.

    Args:
        config: Configuration to encode.

    Returns:
        Dict payload using the persisted camelCase field names.
    """

    return {
        "chartType": config.chart_type,
        "config": _encode_dataclass(config.options),
        "formatters": _encode_formatters(config.formatters),
        "axisConfigs": _encode_dataclass(config.axis_configs) if config.axis_configs is not None else None,
        "datasetConfig": encode_value(config.dataset_config),
    }


def encode_value(value: Any) -> Any:
    """Encode dataclasses, mappings and sequences into plain camelCase JSON-like values."""

    if isinstance(value, ChartConfiguration):
        return encode_chart_config(value)
    if is_dataclass(value) and not isinstance(value, type):
        return _encode_dataclass(value)
    if isinstance(value, dict):
        return {str(key): encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value


def decode_chart_config(payload: dict[str, Any]) -> ChartConfiguration:
    """Decode a ChartConfiguration from a persisted payload.

    Args:
        payload: Payload previously produced by `encode_chart_config` (or by the
            chart API, which uses the same shape).

    Returns:
        ChartConfiguration with every field not present in the payload taken
        from the chart type's defaults.

    Raises:
        ConfigKindError: When `chartType` is missing or unsupported.
    """

    chart_type = payload.get("chartType")
    if chart_type not in CHART_TYPES:
        raise ConfigKindError(chart_type)

    defaults = get_default_chart_config(chart_type)
    axis_configs = defaults.axis_configs
    if axis_configs is not None:
        axis_configs = _overlay(axis_configs, payload.get("axisConfigs"))
    dataset_raw = payload.get("datasetConfig")
    return replace(
        defaults,
        options=_overlay(defaults.options, payload.get("config")),
        formatters=_decode_formatters(defaults.formatters, payload.get("formatters")),
        axis_configs=axis_configs,
        dataset_config=dict(dataset_raw) if isinstance(dataset_raw, dict) else {},
    )


def decode_data_headers(payload: object) -> tuple[DataHeader, ...]:
    """Decode a dataset header list.

    Entries without a name or id are skipped; unknown column types decode as
    `text`.
    """

    if not isinstance(payload, list):
        return ()
    headers: list[DataHeader] = []
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        header_id = _parse_str(raw.get("id"))
        name = _parse_str(raw.get("name")) or header_id
        if not name:
            logger.debug("Skipping header without name or id: %r", raw)
            continue
        column_type = str(raw.get("type") or "text")
        headers.append(
            DataHeader(
                name=name,
                id=header_id,
                type=column_type if column_type in _COLUMN_TYPES else "text",  # type: ignore[arg-type]
                date_format=_parse_str(raw.get("dateFormat")),
                header_id=_parse_str(raw.get("headerId")),
                value_id=_parse_str(raw.get("valueId")),
                index=_parse_int(raw.get("index")),
            )
        )
    return tuple(headers)


def decode_version_snapshot(payload: dict[str, Any]) -> VersionSnapshot:
    """Decode one side of a version comparison.

    The live chart carries `updatedAt`, a stored version carries `createdAt`;
    whichever is present becomes the snapshot timestamp. `config` is kept as
    the raw persisted tree.
    """

    config = payload.get("config")
    return VersionSnapshot(
        name=str(payload.get("name") or ""),
        type=str(payload.get("type") or ""),
        dataset_id=str(payload.get("datasetId") or ""),
        config=cast(dict[str, Any], config) if isinstance(config, dict) else {},
        timestamp=_parse_str(payload.get("updatedAt") or payload.get("createdAt")),
        description=_parse_str(payload.get("description")),
        image_url=_parse_str(payload.get("imageUrl")),
    )


def camel_case(name: str) -> str:
    """Convert a snake_case field name into its persisted camelCase key."""

    return _CAMEL_BOUNDARY.sub(lambda match: match.group(1).upper(), name)


def axis_formatter_key(axis: str, field_name: str) -> str:
    """Return the flattened persisted key for one axis formatter field.

    `use_formatter` -> `useXFormatter`, `formatter_type` -> `xFormatterType`,
    `custom_format` -> `customXFormatter`, others -> `x<FieldName>`.
    """

    upper = axis.upper()
    if field_name == "use_formatter":
        return f"use{upper}Formatter"
    if field_name == "custom_format":
        return f"custom{upper}Formatter"
    camel = camel_case(field_name)
    return f"{axis}{camel[0].upper()}{camel[1:]}"


def _encode_formatters(formatters: FormatterConfig | PieDonutFormatterConfig) -> dict[str, Any]:
    if isinstance(formatters, PieDonutFormatterConfig):
        return _encode_dataclass(formatters)
    payload: dict[str, Any] = {}
    for axis, axis_config in (("x", formatters.x), ("y", formatters.y)):
        for field_info in fields(axis_config):
            payload[axis_formatter_key(axis, field_info.name)] = getattr(axis_config, field_info.name)
    return payload


def _decode_formatters(
    default: FormatterConfig | PieDonutFormatterConfig,
    raw: object,
) -> FormatterConfig | PieDonutFormatterConfig:
    if not isinstance(raw, dict):
        return default
    if isinstance(default, PieDonutFormatterConfig):
        return _overlay(default, raw)

    axes: dict[str, AxisFormatterConfig] = {}
    for axis, axis_default in (("x", default.x), ("y", default.y)):
        flattened = {
            camel_case(field_info.name): raw[axis_formatter_key(axis, field_info.name)]
            for field_info in fields(axis_default)
            if axis_formatter_key(axis, field_info.name) in raw
        }
        axes[axis] = _overlay(axis_default, flattened)
    return FormatterConfig(x=axes["x"], y=axes["y"])


def _encode_dataclass(value: Any) -> dict[str, Any]:
    return {camel_case(field_info.name): encode_value(getattr(value, field_info.name)) for field_info in fields(value)}


def _overlay(default: Any, raw: object) -> Any:
    """Overlay a persisted camelCase dict onto a default dataclass instance."""

    if not isinstance(raw, dict):
        return default
    changes: dict[str, Any] = {}
    for field_info in fields(default):
        key = camel_case(field_info.name)
        if key not in raw:
            continue
        current = getattr(default, field_info.name)
        changes[field_info.name] = _decode_field(field_info.name, str(field_info.type), raw[key], current)
    if not changes:
        return default
    return replace(default, **changes)


def _decode_field(name: str, annotation: str, raw: object, default: Any) -> Any:
    """Decode one persisted field using the default value as the type witness."""

    if name == "series_configs":
        return _decode_series_list(raw) if isinstance(raw, list) else default
    if name == "colors":
        return _decode_colors(raw) if isinstance(raw, dict) else default
    if name in _AUTO_NUMBER_FIELDS:
        return _parse_auto_number(raw, default)
    if is_dataclass(default):
        return _overlay(default, raw)
    if isinstance(default, bool):
        return _parse_bool(raw) if raw is not None else default
    if isinstance(default, int):
        parsed_int = _parse_int(raw)
        return default if parsed_int is None else parsed_int
    if isinstance(default, float):
        parsed_float = _parse_float(raw)
        return default if parsed_float is None else parsed_float
    if isinstance(default, tuple):
        return tuple(str(item) for item in raw) if isinstance(raw, list) else default
    if isinstance(default, dict):
        return dict(raw) if isinstance(raw, dict) else default
    if isinstance(default, str):
        return default if raw is None else str(raw)
    # Optional fields default to None; the annotation says which scalar they hold.
    if raw is None or raw == "":
        return None
    if annotation.startswith("int"):
        return _parse_int(raw)
    return str(raw)


def _decode_series_list(raw: list[object]) -> tuple[SeriesConfig, ...]:
    series: list[SeriesConfig] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        series_id = _parse_str(item.get("id"))
        if not series_id:
            logger.debug("Skipping series without id: %r", item)
            continue
        series.append(_overlay(SeriesConfig(id=series_id), item))
    return tuple(series)


def _decode_colors(raw: dict[object, object]) -> dict[str, ColorPair]:
    colors: dict[str, ColorPair] = {}
    for name, pair in raw.items():
        if isinstance(pair, dict):
            colors[str(name)] = ColorPair(light=str(pair.get("light") or ""), dark=str(pair.get("dark") or ""))
    return colors


def _parse_auto_number(value: object, default: Any) -> Any:
    """Parse an `auto`/`zero`/number field, keeping the default when invalid."""

    if value in ("auto", "zero"):
        return value
    parsed = _parse_float(value)
    return default if parsed is None else parsed


def _parse_str(value: object) -> str | None:
    """Best-effort optional string parsing for snapshot payloads."""

    if value is None or value == "":
        return None
    return str(value)


def _parse_int(value: object) -> int | None:
    """Best-effort int parsing for snapshot payloads."""

    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value))
    except ValueError:
        return None


def _parse_float(value: object) -> float | None:
    """Best-effort float parsing for snapshot payloads."""

    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(str(value))
    except ValueError:
        return None


def _parse_bool(value: object) -> bool:
    """Best-effort bool parsing for snapshot payloads."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    normalized = str(value).strip().casefold()
    return normalized in {"1", "true", "yes", "on"}
