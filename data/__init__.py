"""
data — tabular views over parsed SoC Watch profiles.

Quick start::

    from analyzer_socwatch.core.workspace import Workspace
    from data import overall_table, comparison_table

    df = overall_table(workspace.active)
    cmp = comparison_table(workspace.selection)

Layers
------
reporting   Groups / selection / profile → DataFrames for presentation.
"""

PACKAGE_NAME = "socwatch_data"

from .reporting import (
    COMPARISON_METRICS,
    CORE_COLUMNS,
    OVERALL_COLUMNS,
    comparison_table,
    core_table,
    heatmap_counts,
    overall_table,
)

__all__ = [
    "overall_table",
    "comparison_table",
    "core_table",
    "heatmap_counts",
    "OVERALL_COLUMNS",
    "COMPARISON_METRICS",
    "CORE_COLUMNS",
    "PACKAGE_NAME",
]
