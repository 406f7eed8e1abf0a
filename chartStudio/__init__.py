"""Django project package for the chart configuration engine."""
