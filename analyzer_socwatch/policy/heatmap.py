"""
Heatmap classifier — three-way colour category for a threading ratio.

    ratio <  0.95          → GREEN   (good E-core usage)
    0.95 <= ratio <= 1.05  → YELLOW  (balanced)
    ratio >  1.05          → RED     (P-core dominant)

Both boundaries belong to YELLOW.  A NaN ratio (a profile without P- or
E-cores) is YELLOW by convention: it is neither below nor above the band.
"""
from __future__ import annotations

import math
from enum import Enum, unique
from typing import List, Optional

from analyzer_socwatch.io.schema import Insights
from analyzer_socwatch.policy.thresholds import Thresholds


@unique
class HeatmapCategory(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"

    @property
    def color(self) -> str:
        return _COLORS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_COLORS = {
    HeatmapCategory.GREEN: "#10b981",
    HeatmapCategory.YELLOW: "#fbbf24",
    HeatmapCategory.RED: "#ef4444",
}

_DESCRIPTIONS = {
    HeatmapCategory.GREEN: "Good E-Core Usage",
    HeatmapCategory.YELLOW: "Balanced",
    HeatmapCategory.RED: "P-Core Dominant",
}

HEATMAP_ORDER: List[HeatmapCategory] = [
    HeatmapCategory.GREEN,
    HeatmapCategory.YELLOW,
    HeatmapCategory.RED,
]


def classify(ratio: float, thresholds: Optional[Thresholds] = None) -> HeatmapCategory:
    """Heatmap category for a P/E threading ratio."""
    if thresholds is None:
        thresholds = Thresholds.v1()
    if math.isnan(ratio):
        return HeatmapCategory.YELLOW
    if ratio < thresholds.heatmap_green_below:
        return HeatmapCategory.GREEN
    if ratio > thresholds.heatmap_red_above:
        return HeatmapCategory.RED
    return HeatmapCategory.YELLOW


def classify_insights(
    insights: Insights,
    thresholds: Optional[Thresholds] = None,
) -> HeatmapCategory:
    """Classify the raw (unrounded) ratio carried by *insights*."""
    return classify(insights.threading_ratio, thresholds)


def legend(thresholds: Optional[Thresholds] = None) -> List[dict]:
    """Legend rows for the heatmap, in display order."""
    if thresholds is None:
        thresholds = Thresholds.v1()
    lo, hi = thresholds.heatmap_green_below, thresholds.heatmap_red_above
    ranges = {
        HeatmapCategory.GREEN: f"< {lo}",
        HeatmapCategory.YELLOW: f"{lo}-{hi}",
        HeatmapCategory.RED: f"> {hi}",
    }
    return [
        {
            "category": c.value,
            "color": c.color,
            "range": ranges[c],
            "description": c.description,
        }
        for c in HEATMAP_ORDER
    ]
