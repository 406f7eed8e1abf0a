"""Pytest fixtures shared across the chart engine tests."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from core.charting.schema import DataHeader


@pytest.fixture
def sales_headers() -> tuple[DataHeader, ...]:
    """Return the header set of a small monthly sales dataset."""

    return (
        DataHeader(id="c1", name="Month", type="date"),
        DataHeader(id="c2", name="Revenue", type="number"),
        DataHeader(id="c3", name="Cost", type="number"),
        DataHeader(id="c4", name="Region", type="text"),
    )


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests with no IO.
    - `integration`: tests driving management commands or touching files.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
