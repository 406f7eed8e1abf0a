"""Chart configuration engine.

Charts are described by immutable `ChartConfiguration` values. This package
contains the configuration model and defaults, the column-binding resolver,
the value formatter engine, the version diff comparator, and the snapshot
codec and validator that sit around them.
"""
