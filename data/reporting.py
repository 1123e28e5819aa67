"""
Tables for the presentation layer.

Turns workspace groups, the comparison selection and single profiles into
plain DataFrames.  Display columns use the rounded insight strings; the
heatmap category is always derived from the raw ratio.

No plotting, no colour rendering, no file I/O.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

import pandas as pd

from analyzer_socwatch.core.selection import ComparisonSelection
from analyzer_socwatch.io.schema import Group, Insights, Profile
from analyzer_socwatch.policy.heatmap import classify_insights

log = logging.getLogger(__name__)


OVERALL_COLUMNS: List[str] = [
    "group",
    "profile",
    "p_core_activity",
    "e_core_activity",
    "threading_ratio",
    "threading_model",
    "p_core_avg_freq",
    "e_core_avg_freq",
    "heatmap",
    "heatmap_color",
]

# (row label, Insights.display() key) in comparison-table order
COMPARISON_METRICS: List[tuple] = [
    ("P-Core Activity %", "p_core_activity"),
    ("E-Core Activity %", "e_core_activity"),
    ("P/E Ratio", "threading_ratio"),
    ("Threading Model", "threading_model"),
    ("P-Core Avg Freq (MHz)", "p_core_avg_freq"),
    ("E-Core Avg Freq (MHz)", "e_core_avg_freq"),
]

CORE_COLUMNS: List[str] = ["core", "type", "active", "cc6", "cc7", "freq"]


def _insight_cells(insights: Insights) -> dict:
    category = classify_insights(insights)
    return {
        **insights.display(),
        "heatmap": category.value,
        "heatmap_color": category.color,
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════════

def overall_table(groups: Iterable[Group]) -> pd.DataFrame:
    """One row per profile with insights, grouped in workspace order."""
    rows = []
    for group in groups:
        for profile in group.profiles:
            if profile.insights is None:
                log.debug("Skipping %s/%s: no insights", group.name, profile.name)
                continue
            rows.append({
                "group": group.name,
                "profile": profile.name,
                **_insight_cells(profile.insights),
            })
    return pd.DataFrame(rows, columns=OVERALL_COLUMNS)


def comparison_table(selection: ComparisonSelection) -> pd.DataFrame:
    """Metric rows × one column per selected profile, in selection order.

    Columns are labelled ``"<group> / <profile>"``; a ``heatmap`` row holds
    the category used to colour the ratio-driven cells.
    """
    columns = {}
    for entry in selection:
        insights = entry.profile.insights
        label = f"{entry.group_name} / {entry.profile.name}"
        if insights is None:
            columns[label] = [None] * (len(COMPARISON_METRICS) + 1)
            continue
        shown = insights.display()
        columns[label] = [shown[key] for _, key in COMPARISON_METRICS] + [
            classify_insights(insights).value
        ]

    index = [label for label, _ in COMPARISON_METRICS] + ["Heatmap"]
    df = pd.DataFrame(columns, index=index)
    df.index.name = "metric"
    return df


def core_table(profile: Profile) -> pd.DataFrame:
    """Per-core residency / frequency rows in record order."""
    rows = [
        {
            "core": c.core_index,
            "type": c.type.value,
            "active": c.active_residency_percent,
            "cc6": c.cc6_residency_percent,
            "cc7": c.cc7_residency_percent,
            "freq": c.frequency_mhz,
        }
        for c in profile.core_records
    ]
    df = pd.DataFrame(rows, columns=CORE_COLUMNS)
    # nullable integer keeps "no frequency data" distinct from 0
    df["freq"] = df["freq"].astype("Int64")
    return df


def heatmap_counts(groups: Iterable[Group]) -> pd.DataFrame:
    """Per-group count of profiles in each heatmap category."""
    df = overall_table(groups)
    if df.empty:
        return pd.DataFrame(columns=["GREEN", "YELLOW", "RED"])
    counts = (
        df.groupby(["group", "heatmap"], sort=False)
        .size()
        .unstack(fill_value=0)
        .reindex(columns=["GREEN", "YELLOW", "RED"], fill_value=0)
    )
    counts.columns.name = None
    return counts
