"""
Test fixtures for analyzer_socwatch.

Provides a synthetic SoC Watch PTAT-monitor report (embedded, no
hardware required) and helper factories for profiles.
"""
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from analyzer_socwatch.core.insights import attach_insights
from analyzer_socwatch.io.schema import CoreRecord, CoreType, Profile, ProfileMetadata


# ── Synthetic report text ────────────────────────────────────────────

def make_report(
    core_types: Sequence[Optional[str]] = ("LNC", "LNC", "SKT", "SKT"),
    active: Sequence[float] = (60.0, 60.0, 40.0, 40.0),
    cc6: Optional[Sequence[float]] = None,
    cc7: Optional[Sequence[float]] = None,
    frequencies: Optional[Sequence[Optional[int]]] = (3400, 3300, 2500, 2400),
    total_cores: Optional[int] = -1,
    duration: str = "60.25",
    base_freq: str = "2200",
    include_residency: bool = True,
) -> str:
    """Build a report in the SoC Watch CSV export layout.

    ``total_cores=-1`` means "number of cores given"; ``None`` omits the
    line.  A ``None`` core type or frequency omits that core's line.
    """
    n = len(active)
    if total_cores == -1:
        total_cores = n
    cc6 = list(cc6) if cc6 is not None else [max(0.0, 100.0 - a - 10.0) for a in active]
    cc7 = list(cc7) if cc7 is not None else [10.0] * n

    lines: List[str] = [
        "Intel(R) SoC Watch for Windows* OS, Version 2024.1.0",
        "Collection start: 2024-05-01 10:00:00",
        f"Collection duration (sec): {duration}",
        f"CPU Base Operating Frequency (MHz): {base_freq}",
    ]
    if total_cores is not None:
        lines.append(f"Total # of cores: {total_cores}")
    lines.append("")
    lines.append("Core Topology:")
    for i, code in enumerate(core_types):
        if code is not None:
            lines.append(f"Package_0/Core_{i} = {code}")
    lines.append("")

    if include_residency:
        cols = ",".join(f"Core_{i} (%)" for i in range(n))
        lines += [
            "Core C-State Summary: Residency (Percentage and Time)",
            f"State,{cols}",
            "-----," + ",".join("-------" for _ in range(n)),
            "CC0," + ",".join(f"{v:.2f}" for v in active),
            "CC6," + ",".join(f"{v:.2f}" for v in cc6),
            "CC7," + ",".join(f"{v:.2f}" for v in cc7),
            "",
            "Core C-State Summary: Total Samples Received",
            "State," + cols,
            "",
        ]

    if frequencies is not None:
        lines += [
            "CPU P-State Average Frequency (excluding CPU idle time)",
            "Core,Average Frequency (MHz)",
        ]
        for i, freq in enumerate(frequencies):
            if freq is not None:
                code = core_types[i] if i < len(core_types) and core_types[i] else "UNK"
                lines.append(f"Core_{i} ({code}),{freq}")
        lines += ["", "CPU P-State/Frequency Summary: Residency (Percentage and Time)", ""]

    return "\n".join(lines)


# ── Profile factories ────────────────────────────────────────────────

def make_profile(
    name: str = "Game",
    p_active: Sequence[float] = (60.0, 60.0),
    e_active: Sequence[float] = (40.0, 40.0),
    with_insights: bool = True,
) -> Profile:
    """Profile built directly from activity values (P-cores first)."""
    records = [
        CoreRecord(core_index=i, type=CoreType.P_CORE, active_residency_percent=v)
        for i, v in enumerate(p_active)
    ]
    offset = len(records)
    records += [
        CoreRecord(core_index=offset + i, type=CoreType.E_CORE, active_residency_percent=v)
        for i, v in enumerate(e_active)
    ]
    profile = Profile(
        name=name,
        metadata=ProfileMetadata(total_cores=len(records)),
        core_type_map={r.core_index: r.type for r in records},
        core_records=records,
    )
    return attach_insights(profile) if with_insights else profile


def write_report(tmp_dir: Path, filename: str, text: Optional[str] = None) -> Path:
    """Write a report file and return its path."""
    out_path = tmp_dir / filename
    out_path.write_text(text if text is not None else make_report(), encoding="utf-8")
    return out_path


# ── Pytest fixtures ──────────────────────────────────────────────────

@pytest.fixture
def report_text() -> str:
    """Four cores: two P-cores at 60 %, two E-cores at 40 %."""
    return make_report()


@pytest.fixture
def sku_dir(tmp_path: Path) -> Path:
    """A folder named like a SKU holding two reports and a stray file."""
    d = tmp_path / "SKU_A"
    d.mkdir()
    write_report(d, "Alpha PTATMonitor_001.csv")
    write_report(d, "Beta PTATMonitor_002.csv", make_report(active=(50.0, 50.0, 45.0, 45.0)))
    (d / "notes.txt").write_text("not a report", encoding="utf-8")
    return d
