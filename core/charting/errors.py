"""Exceptions raised by the chart configuration engine.

Data-shape problems (missing columns, malformed formatter patterns, unparseable
axis values) are repaired or degraded in place and never raise. These
exceptions are reserved for programmer errors.
"""

from __future__ import annotations


class ChartConfigError(ValueError):
    """Base class for chart configuration errors."""


class ConfigKindError(ChartConfigError):
    """Raised when an unrecognised chart type reaches a type-dispatched operation.

    Args:
        chart_type: The offending chart type tag.
    """

    def __init__(self, chart_type: object) -> None:
        self.chart_type = chart_type
        super().__init__(f"Unsupported chart type: {chart_type!r}.")
