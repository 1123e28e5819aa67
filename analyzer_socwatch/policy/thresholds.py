"""
Thresholds — policy knobs for parsing, classification and selection.

Core extraction logic reads every tunable from here so that changing a
threshold is a policy change, not a code change.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Thresholds:
    """Numeric policy for the analyzer."""

    policy_id: str

    # Report parser
    metadata_scan_lines: int = 50
    residency_header_lines: int = 2

    # Threading model: absolute activity difference, percentage points
    dominance_margin: float = 10.0

    # Heatmap: ratio < green_below → GREEN, ratio > red_above → RED
    heatmap_green_below: float = 0.95
    heatmap_red_above: float = 1.05

    # Comparison selection
    comparison_capacity: int = 4

    @classmethod
    def v1(cls) -> Thresholds:
        """The default policy matching SoC Watch PTAT monitor exports."""
        return cls(policy_id="socwatch-ptat-v1")
