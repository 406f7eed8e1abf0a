"""Integration tests for the chart management commands."""

from __future__ import annotations

import json

import pytest
import yaml
from django.core.management import call_command
from django.core.management.base import CommandError

pytestmark = pytest.mark.integration


def _write_json(path, payload) -> str:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def _snapshot(**overrides) -> dict:
    payload = {
        "name": "Revenue",
        "description": "Monthly revenue",
        "type": "line",
        "datasetId": "ds-1",
        "config": {"chartType": "line", "config": {"title": "Revenue", "width": 800}},
    }
    payload.update(overrides)
    return payload


def test_compare_chart_versions_prints_json_diff(tmp_path, capsys) -> None:
    """Differences are printed as a JSON tree of current/historical leaves."""

    current = _write_json(
        tmp_path / "current.json",
        _snapshot(updatedAt="2025-01-02T10:00:00Z", config={"chartType": "line", "config": {"title": "Revenue 2025"}}),
    )
    historical = _write_json(
        tmp_path / "historical.json",
        _snapshot(createdAt="2024-12-01T08:00:00Z", config={"chartType": "line", "config": {"title": "Revenue"}}),
    )

    call_command("compare_chart_versions", current, historical)

    output = json.loads(capsys.readouterr().out)
    assert output == {"config": {"config": {"title": {"current": "Revenue 2025", "historical": "Revenue"}}}}


def test_compare_chart_versions_reads_yaml_and_reports_no_differences(tmp_path, capsys) -> None:
    """YAML snapshots are accepted; key order and timestamps do not matter."""

    current = tmp_path / "current.yaml"
    current.write_text(yaml.safe_dump(_snapshot(updatedAt="2025-01-02")), encoding="utf-8")
    reordered = dict(reversed(list(_snapshot(createdAt="2020-01-01").items())))
    historical = _write_json(tmp_path / "historical.json", reordered)

    call_command("compare_chart_versions", str(current), historical)

    assert capsys.readouterr().out.strip() == "No differences."


def test_compare_chart_versions_yaml_output(tmp_path, capsys) -> None:
    """`--format yaml` renders the same tree as YAML."""

    current = _write_json(tmp_path / "current.json", _snapshot(name="Revenue (new)"))
    historical = _write_json(tmp_path / "historical.json", _snapshot())

    call_command("compare_chart_versions", current, historical, "--format", "yaml")

    output = yaml.safe_load(capsys.readouterr().out)
    assert output == {"name": {"current": "Revenue (new)", "historical": "Revenue"}}


def test_compare_chart_versions_rejects_unreadable_files(tmp_path) -> None:
    """Missing files and non-mapping documents raise CommandError."""

    historical = _write_json(tmp_path / "historical.json", _snapshot())
    listing = _write_json(tmp_path / "list.json", [1, 2, 3])

    with pytest.raises(CommandError, match="Cannot read"):
        call_command("compare_chart_versions", str(tmp_path / "missing.json"), historical)
    with pytest.raises(CommandError, match="mapping"):
        call_command("compare_chart_versions", listing, historical)


def test_repair_chart_bindings_writes_repaired_config(tmp_path, capsys) -> None:
    """Dangling bindings are cleared and the repaired payload is written out."""

    config = _write_json(
        tmp_path / "config.json",
        {
            "chartType": "line",
            "axisConfigs": {
                "xAxisKey": "age",
                "seriesConfigs": [{"id": "s1", "dataColumn": "salary"}, {"id": "s2", "dataColumn": "bonus"}],
            },
        },
    )
    headers = _write_json(tmp_path / "headers.json", {"headers": [{"name": "age"}, {"name": "bonus"}]})
    output_path = tmp_path / "repaired.json"

    call_command("repair_chart_bindings", config, headers, "--output", str(output_path))

    out = capsys.readouterr().out
    assert "Cleared dangling column references." in out
    repaired = json.loads(output_path.read_text(encoding="utf-8"))
    assert repaired["chartType"] == "line"
    assert repaired["axisConfigs"]["xAxisKey"] == "age"
    assert [series["id"] for series in repaired["axisConfigs"]["seriesConfigs"]] == ["s2"]


def test_repair_chart_bindings_is_idempotent(tmp_path, capsys) -> None:
    """A configuration with valid bindings is reported as unchanged."""

    config = _write_json(
        tmp_path / "config.json",
        {"chartType": "pie", "config": {"labelKey": "Region", "valueKey": "Revenue"}},
    )
    headers = _write_json(tmp_path / "headers.json", [{"name": "Region"}, {"name": "Revenue", "type": "number"}])

    call_command("repair_chart_bindings", config, headers)

    out = capsys.readouterr().out
    assert out.startswith("No dangling column references.")
    printed = json.loads(out.split("\n", 1)[1])
    assert printed["config"]["labelKey"] == "Region"


def test_repair_chart_bindings_rejects_bad_input(tmp_path) -> None:
    """Unknown chart types and empty header lists raise CommandError."""

    bad_config = _write_json(tmp_path / "bad.json", {"chartType": "histogram"})
    good_config = _write_json(tmp_path / "good.json", {"chartType": "bar"})
    headers = _write_json(tmp_path / "headers.json", [{"name": "a"}])
    no_headers = _write_json(tmp_path / "empty.json", [])

    with pytest.raises(CommandError, match="Unsupported chart type"):
        call_command("repair_chart_bindings", bad_config, headers)
    with pytest.raises(CommandError, match="does not contain any dataset headers"):
        call_command("repair_chart_bindings", good_config, no_headers)


def test_repair_chart_bindings_drops_unbound_series(tmp_path, capsys) -> None:
    """A series with no column reference counts as dangling."""

    config = _write_json(
        tmp_path / "config.json",
        {
            "chartType": "bar",
            "axisConfigs": {"xAxisKey": "age", "seriesConfigs": [{"id": "s1", "dataColumn": ""}]},
        },
    )
    headers = _write_json(tmp_path / "headers.json", [{"name": "age"}])

    call_command("repair_chart_bindings", config, headers)

    out = capsys.readouterr().out
    assert "Cleared dangling column references." in out
    assert json.loads(out[out.index("{") :])["axisConfigs"]["seriesConfigs"] == []


def test_manage_py_dispatches_chart_commands(tmp_path, capsys) -> None:
    """The manage.py entry point runs the chart commands with the project settings."""

    import manage

    current = _write_json(tmp_path / "current.json", _snapshot(updatedAt="2025-01-02"))
    historical = _write_json(tmp_path / "historical.json", _snapshot(createdAt="2024-01-01", name="Costs"))

    manage.main(["manage.py", "compare_chart_versions", current, historical])

    output = json.loads(capsys.readouterr().out)
    assert output == {"name": {"current": "Revenue", "historical": "Costs"}}
