#!/usr/bin/env python
"""Command-line entry point for the chart configuration tools.

Runs Django management commands against `chartStudio.settings`, e.g.
`./manage.py repair_chart_bindings chart.json headers.yaml` or
`./manage.py compare_chart_versions live.json stored.json --format yaml`.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence


def main(argv: Sequence[str] | None = None) -> None:
    """Dispatch `argv` (default: `sys.argv`) to a chart management command."""

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "chartStudio.settings")
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError("chart-studio needs Django; install the project with `pip install -e .`.") from exc
    execute_from_command_line(list(argv) if argv is not None else sys.argv)


if __name__ == "__main__":
    main()
