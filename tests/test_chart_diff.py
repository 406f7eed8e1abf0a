"""Tests for the structural version diff comparator."""

from __future__ import annotations

from dataclasses import replace

import pytest

from core.charting.defaults import get_default_chart_config
from core.charting.diff import DiffLeaf, compare_chart_versions, deep_compare, diff_to_payload
from core.charting.schema import VersionSnapshot

pytestmark = pytest.mark.unit


def test_deep_compare_reports_nested_leaf() -> None:
    """Only the differing path appears in the tree."""

    diff = deep_compare({"a": 1, "b": {"c": 2}}, {"a": 1, "b": {"c": 3}})

    assert diff == {"b": {"c": DiffLeaf(current=2, historical=3)}}
    assert diff_to_payload(diff) == {"b": {"c": {"current": 2, "historical": 3}}}


def test_deep_compare_equal_values_return_none() -> None:
    """Structurally equal trees have no diff, regardless of key order."""

    current = {"a": 1, "b": {"x": [1, 2, {"k": "v"}], "y": None}}
    historical = {"b": {"y": None, "x": [1, 2, {"k": "v"}]}, "a": 1}

    assert deep_compare(current, historical) is None
    assert deep_compare(historical, current) is None
    assert deep_compare(current, current) is None


def test_deep_compare_treats_nan_as_equal() -> None:
    """NaN compares equal to NaN so unchanged numeric fields are not reported."""

    assert deep_compare({"v": float("nan")}, {"v": float("nan")}) is None


def test_deep_compare_missing_key_equals_none() -> None:
    """An absent key and an explicit None are the same."""

    assert deep_compare({"a": 1, "b": None}, {"a": 1}) is None


def test_deep_compare_kind_changes_are_leaves() -> None:
    """Different kinds (or one None side) are reported as a single leaf."""

    assert deep_compare({"a": 1}, {"a": "1"}) == {"a": DiffLeaf(1, "1")}
    assert deep_compare({"a": True}, {"a": 1}) == {"a": DiffLeaf(True, 1)}
    assert deep_compare({"a": {"b": 1}}, {"a": [1]}) == {"a": DiffLeaf({"b": 1}, [1])}
    assert deep_compare({"a": None}, {"a": {"b": 1}}) == {"a": DiffLeaf(None, {"b": 1})}
    assert deep_compare(1, 2) == DiffLeaf(1, 2)


def test_deep_compare_sequences_by_index() -> None:
    """Sequences recurse over the union of their indices."""

    diff = deep_compare([1, 2, 3], [1, 5])

    assert diff == {1: DiffLeaf(2, 5), 2: DiffLeaf(3, None)}
    assert diff_to_payload(diff) == {"1": {"current": 2, "historical": 5}, "2": {"current": 3, "historical": None}}


def test_deep_compare_int_and_float_are_the_same_kind() -> None:
    """Numbers compare by value across int and float."""

    assert deep_compare({"width": 800}, {"width": 800.0}) is None


def _snapshot(config, **overrides) -> VersionSnapshot:
    fields = {
        "name": "Revenue",
        "type": "line",
        "dataset_id": "ds-1",
        "config": config,
        "timestamp": "2025-01-02T10:00:00Z",
        "description": "Monthly revenue",
    }
    fields.update(overrides)
    return VersionSnapshot(**fields)


def test_compare_chart_versions_without_differences() -> None:
    """Identical versions produce an empty differences mapping."""

    config = {"chartType": "line", "config": {"title": "Revenue", "width": 800}}
    current = _snapshot(config)
    historical = _snapshot(
        {"config": {"width": 800, "title": "Revenue"}, "chartType": "line"},
        timestamp="2024-12-01T08:00:00Z",
    )

    comparison = compare_chart_versions(current, historical)

    assert comparison.differences == {}
    assert comparison.has_differences is False
    assert comparison.current["updatedAt"] == "2025-01-02T10:00:00Z"
    assert comparison.historical["createdAt"] == "2024-12-01T08:00:00Z"


def test_compare_chart_versions_reports_changed_fields() -> None:
    """Metadata and config changes show up; timestamps are never compared."""

    current = _snapshot({"config": {"title": "Revenue 2025"}}, name="Revenue (new)")
    historical = _snapshot(
        {"config": {"title": "Revenue"}},
        timestamp="2020-01-01T00:00:00Z",
        image_url="https://cdn.example.com/v1.png",
    )

    comparison = compare_chart_versions(current, historical)

    assert comparison.differences == {
        "name": DiffLeaf("Revenue (new)", "Revenue"),
        "config": {"config": {"title": DiffLeaf("Revenue 2025", "Revenue")}},
        "imageUrl": DiffLeaf(None, "https://cdn.example.com/v1.png"),
    }
    assert comparison.historical["imageUrl"] == "https://cdn.example.com/v1.png"
    assert "imageUrl" not in comparison.current


def test_compare_chart_versions_encodes_typed_configurations() -> None:
    """ChartConfiguration values are compared in their persisted form."""

    config = get_default_chart_config("bar")
    edited = replace(config, options=replace(config.options, bar_width=30))

    comparison = compare_chart_versions(_snapshot(edited, type="bar"), _snapshot(config, type="bar"))

    assert comparison.differences == {"config": {"config": {"barWidth": DiffLeaf(30, 24)}}}


def test_deep_compare_walks_dataclasses_field_by_field() -> None:
    """Typed values passed directly are diffed like their persisted payloads."""

    config = get_default_chart_config("bar")
    edited = replace(config, options=replace(config.options, bar_width=30))

    assert deep_compare(edited, config) == {"config": {"barWidth": DiffLeaf(30, 24)}}
    assert deep_compare(config, get_default_chart_config("bar")) is None
    assert deep_compare({"options": edited.options}, {"options": config.options}) == {
        "options": {"barWidth": DiffLeaf(30, 24)}
    }
