"""Structural diff of two chart versions.

`deep_compare` is shape-agnostic: it walks any JSON-like tree (mappings,
sequences, scalars) and reports only the paths that differ. Equality is purely
structural, so two trees that differ only in key order compare equal.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, is_dataclass
from decimal import Decimal
from typing import Any, Literal, Union

from .schema import ChartConfiguration, VersionSnapshot
from .snapshot_codec import encode_chart_config, encode_value

_Kind = Literal["bool", "number", "string", "mapping", "sequence", "other"]


@dataclass(frozen=True, slots=True)
class DiffLeaf:
    """A differing value pair at one path of the tree."""

    current: Any
    historical: Any


DiffTree = dict[Union[str, int], Union[DiffLeaf, "DiffTree"]]


@dataclass(frozen=True, slots=True)
class VersionComparison:
    """Result of comparing the live chart with a stored version.

    Args:
        current: Projected view of the live chart, including `updatedAt`.
        historical: Projected view of the stored version, including `createdAt`.
        differences: Diff tree of the compared fields; empty when nothing differs.
    """

    current: dict[str, Any]
    historical: dict[str, Any]
    differences: DiffTree = field(default_factory=dict)

    @property
    def has_differences(self) -> bool:
        return bool(self.differences)


def deep_compare(current: Any, historical: Any) -> DiffTree | DiffLeaf | None:
    """Compare two JSON-like values.

    Dataclass instances are encoded into their persisted camelCase form first
    (a ChartConfiguration through `encode_chart_config`), so typed values diff
    field by field rather than as one opaque leaf.

    Rules:
        - Deep-equal values (NaN equals NaN; None equals a missing key or index)
          return None.
        - Values of different kinds, or exactly one None, return a DiffLeaf.
        - Differing scalars return a DiffLeaf.
        - Mappings recurse over the union of their keys, sequences over the
          union of their indices; a subtree with no differences is omitted.

    Args:
        current: Value from the current version.
        historical: Value from the historical version.

    Returns:
        None when equal, a DiffLeaf for a scalar or kind change, otherwise a
        DiffTree holding only the differing paths.
    """

    current = _as_tree(current)
    historical = _as_tree(historical)
    if current is None and historical is None:
        return None
    if current is None or historical is None:
        return DiffLeaf(current, historical)

    kind = _kind(current)
    if kind != _kind(historical):
        return DiffLeaf(current, historical)

    if kind == "mapping":
        keys = list(current) + [key for key in historical if key not in current]
        return _collect((key, current.get(key), historical.get(key)) for key in keys)
    if kind == "sequence":
        length = max(len(current), len(historical))
        return _collect(
            (
                index,
                current[index] if index < len(current) else None,
                historical[index] if index < len(historical) else None,
            )
            for index in range(length)
        )
    if kind == "number" and _is_nan(current) and _is_nan(historical):
        return None
    if current == historical:
        return None
    return DiffLeaf(current, historical)


def compare_chart_versions(current: VersionSnapshot, historical: VersionSnapshot) -> VersionComparison:
    """Compare the live chart with a stored version.

    Both sides are projected onto name, description, type, datasetId and
    config; the historical side also carries imageUrl. Timestamps are returned
    in the views but never compared.

    Args:
        current: Live chart snapshot.
        historical: Stored version snapshot.

    Returns:
        VersionComparison with `differences == {}` when nothing differs.
    """

    current_view = _project(current)
    historical_view = _project(historical)
    historical_view["imageUrl"] = historical.image_url

    differences = deep_compare(current_view, historical_view)
    return VersionComparison(
        current={**current_view, "updatedAt": current.timestamp},
        historical={**historical_view, "createdAt": historical.timestamp},
        differences=differences if isinstance(differences, dict) else {},
    )


def diff_to_payload(diff: DiffTree | DiffLeaf | None) -> dict[str, Any] | None:
    """Render a diff as a JSON-compatible dict.

    Leaves become `{"current": ..., "historical": ...}`; sequence indices
    become string keys.
    """

    if diff is None:
        return None
    if isinstance(diff, DiffLeaf):
        return {"current": diff.current, "historical": diff.historical}
    return {str(key): diff_to_payload(value) for key, value in diff.items()}


def _project(snapshot: VersionSnapshot) -> dict[str, Any]:
    config = snapshot.config
    if isinstance(config, ChartConfiguration):
        config = encode_chart_config(config)
    return {
        "name": snapshot.name,
        "description": snapshot.description,
        "type": snapshot.type,
        "datasetId": snapshot.dataset_id,
        "config": config,
    }


def _as_tree(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return encode_value(value)
    return value


def _collect(entries: Any) -> DiffTree | None:
    tree: DiffTree = {}
    for key, current_value, historical_value in entries:
        difference = deep_compare(current_value, historical_value)
        if difference is not None:
            tree[key] = difference
    return tree or None


def _kind(value: Any) -> _Kind:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return "sequence"
    return "other"


def _is_nan(value: Any) -> bool:
    if isinstance(value, Decimal):
        return value.is_nan()
    return isinstance(value, float) and math.isnan(value)
