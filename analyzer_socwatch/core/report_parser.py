"""
Report parser — turn one SoC Watch PTAT-monitor CSV export into a Profile.

Responsibilities:
  - Derive the profile name from the source file name.
  - Scan the report header for duration, base frequency and core count.
  - Build the core-type table from ``Package_0/Core_N = LNC|SKT`` lines.
  - Read the C-state residency section into one record per core.
  - Read the average-frequency section and merge it into the records.

The parser never raises on malformed text.  Missing sections produce no
records, missing header values stay ``None`` and unparseable numbers read
as 0.  Every scan is last-match-wins; do not add early exits.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from analyzer_socwatch.io.schema import CoreRecord, CoreType, Profile, ProfileMetadata
from analyzer_socwatch.policy.thresholds import Thresholds

logger = logging.getLogger(__name__)


# ── Report vocabulary ────────────────────────────────────────────────

DURATION_LABEL = "Collection duration"
BASE_FREQ_LABEL = "CPU Base Operating Frequency"
TOTAL_CORES_LABEL = "Total # of cores:"

RESIDENCY_TITLE = "Core C-State Summary: Residency (Percentage and Time)"
RESIDENCY_TERMINATOR = "Core C-State Summary: Total Samples"
FREQUENCY_TITLE = "CPU P-State Average Frequency (excluding CPU idle time)"
FREQUENCY_TERMINATOR = "CPU P-State/Frequency Summary"

ROW_SEPARATOR = "---"
ACTIVE_STATE_CODES = ("CC0", "CC1")
CC6_STATE_CODE = "CC6"
CC7_STATE_CODE = "CC7"

# LNC = Lion Cove (performance), SKT = Skymont (efficiency)
CORE_TYPE_CODES: Dict[str, CoreType] = {
    "LNC": CoreType.P_CORE,
    "SKT": CoreType.E_CORE,
}

_EXTENSION = ".csv"
_COMPANION_SUFFIX_RE = re.compile(r"PTATMonitor.*")
_DECIMAL_RE = re.compile(r"(\d+\.?\d*)", re.ASCII)
_INTEGER_RE = re.compile(r"(\d+)", re.ASCII)
_CORE_TYPE_RE = re.compile(r"Package_0/Core_(\d+) = (LNC|SKT)", re.ASCII)
_FREQUENCY_RE = re.compile(r"Core_(\d+).*?,\s*(\d+)", re.ASCII)
_FLOAT_PREFIX_RE = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII
)


# ── Working containers ───────────────────────────────────────────────

@dataclass
class _CoreAccumulator:
    """Mutable per-core state while the residency rows are read."""
    core_index: int
    type: CoreType
    active: float = 0.0
    cc6: float = 0.0
    cc7: float = 0.0


@dataclass
class FrequencyEntry:
    """One ``(core, MHz)`` row of the average-frequency section."""
    core_index: int
    frequency_mhz: int


# ── Small helpers ────────────────────────────────────────────────────

def derive_profile_name(source_name: str) -> str:
    """``Game_A PTATMonitor_2024.csv`` → ``Game_A``."""
    name = source_name.replace(_EXTENSION, "", 1)
    name = _COMPANION_SUFFIX_RE.sub("", name, count=1)
    return name.strip()


def parse_float_or_zero(text: Optional[str]) -> float:
    """Leading-number float parse; anything unparseable reads as 0."""
    if text is None:
        return 0.0
    m = _FLOAT_PREFIX_RE.match(text.lstrip())
    if not m:
        return 0.0
    value = float(m.group(0))
    # overflowing exponents ("1e999") read as unparseable
    return value if math.isfinite(value) else 0.0


def _find_line(lines: List[str], marker: str) -> int:
    for i, line in enumerate(lines):
        if marker in line:
            return i
    return -1


def _collect_section(lines: List[str], title: str, terminator: str) -> Optional[List[str]]:
    """Lines after *title* up to a blank line or *terminator* (exclusive).

    Returns ``None`` when the section is absent.
    """
    title_idx = _find_line(lines, title)
    if title_idx < 0:
        return None

    body: List[str] = []
    for line in lines[title_idx + 1:]:
        if line.strip() == "" or terminator in line:
            break
        body.append(line)
    return body


# ── Scans ────────────────────────────────────────────────────────────

def scan_metadata(lines: List[str], window: int) -> ProfileMetadata:
    """Header values from the first *window* lines; later lines overwrite."""
    duration: Optional[float] = None
    base_freq: Optional[int] = None
    total_cores: Optional[int] = None

    for line in lines[:min(window, len(lines))]:
        if DURATION_LABEL in line:
            m = _DECIMAL_RE.search(line)
            if m:
                value = float(m.group(1))
                if math.isfinite(value):
                    duration = value
        if BASE_FREQ_LABEL in line:
            m = _INTEGER_RE.search(line)
            if m:
                base_freq = int(m.group(1))
        if TOTAL_CORES_LABEL in line:
            m = _INTEGER_RE.search(line)
            if m:
                total_cores = int(m.group(1))

    return ProfileMetadata(
        duration=duration,
        base_frequency_mhz=base_freq,
        total_cores=total_cores,
    )


def scan_core_types(lines: List[str]) -> Dict[int, CoreType]:
    """Core index → type over the whole report; the last mention wins."""
    core_types: Dict[int, CoreType] = {}
    for line in lines:
        m = _CORE_TYPE_RE.search(line)
        if m:
            core_types[int(m.group(1))] = CORE_TYPE_CODES[m.group(2)]
    return core_types


def _bucket_for(state: str) -> Optional[str]:
    if any(code in state for code in ACTIVE_STATE_CODES):
        return "active"
    if CC6_STATE_CODE in state:
        return "cc6"
    if CC7_STATE_CODE in state:
        return "cc7"
    return None


def parse_residency(
    lines: List[str],
    total_cores: Optional[int],
    core_types: Dict[int, CoreType],
    header_lines: int = 2,
) -> List[_CoreAccumulator]:
    """Per-core residency from the C-state summary section.

    Records are created on first sight of a core index and keep that
    order.  Within a bucket the last matching row wins.
    """
    section = _collect_section(lines, RESIDENCY_TITLE, RESIDENCY_TERMINATOR)
    if section is None:
        logger.debug("No C-state residency section")
        return []
    if len(section) <= header_lines:
        logger.debug("C-state residency section has no data rows")
        return []

    records: Dict[int, _CoreAccumulator] = {}
    n_cores = total_cores or 0

    for row in section[header_lines:]:
        values = row.split(",")
        state = values[0].strip()
        if not state or ROW_SEPARATOR in state:
            continue

        bucket = _bucket_for(state)
        for core in range(n_cores):
            raw = values[core + 1] if core + 1 < len(values) else None
            residency = parse_float_or_zero(raw)

            acc = records.get(core)
            if acc is None:
                acc = _CoreAccumulator(
                    core_index=core,
                    type=core_types.get(core, CoreType.UNKNOWN),
                )
                records[core] = acc

            if bucket is not None:
                setattr(acc, bucket, residency)

    return list(records.values())


def parse_frequencies(lines: List[str]) -> List[FrequencyEntry]:
    """``(core, MHz)`` rows of the average-frequency section, in file order."""
    section = _collect_section(lines, FREQUENCY_TITLE, FREQUENCY_TERMINATOR)
    if section is None:
        logger.debug("No average-frequency section")
        return []

    entries: List[FrequencyEntry] = []
    for line in section:
        m = _FREQUENCY_RE.search(line)
        if m:
            entries.append(FrequencyEntry(
                core_index=int(m.group(1)),
                frequency_mhz=int(m.group(2)),
            ))
    return entries


def _merge(
    accumulators: List[_CoreAccumulator],
    frequencies: List[FrequencyEntry],
) -> List[CoreRecord]:
    first_freq: Dict[int, int] = {}
    for entry in frequencies:
        first_freq.setdefault(entry.core_index, entry.frequency_mhz)

    return [
        CoreRecord(
            core_index=acc.core_index,
            type=acc.type,
            active_residency_percent=acc.active,
            cc6_residency_percent=acc.cc6,
            cc7_residency_percent=acc.cc7,
            frequency_mhz=first_freq.get(acc.core_index),
        )
        for acc in accumulators
    ]


# ── Public API ───────────────────────────────────────────────────────

def parse_report(
    raw_text: str,
    source_name: str,
    thresholds: Thresholds | None = None,
) -> Profile:
    """
    Parse one SoC Watch report into a :class:`Profile` (without insights).

    Parameters
    ----------
    raw_text : str
        Decoded report content.
    source_name : str
        File name (or equivalent identifier) the report came from.
    thresholds : Thresholds, optional
        Parser policy.  Defaults to ``Thresholds.v1()``.
    """
    if thresholds is None:
        thresholds = Thresholds.v1()

    lines = raw_text.split("\n")

    metadata = scan_metadata(lines, thresholds.metadata_scan_lines)
    core_types = scan_core_types(lines)
    accumulators = parse_residency(
        lines,
        metadata.total_cores,
        core_types,
        header_lines=thresholds.residency_header_lines,
    )
    frequencies = parse_frequencies(lines)

    profile = Profile(
        name=derive_profile_name(source_name),
        metadata=metadata,
        core_type_map=core_types,
        core_records=_merge(accumulators, frequencies),
    )

    logger.info(
        "Parsed %s: %d cores (%d typed), %d frequency rows",
        source_name, len(profile.core_records), len(core_types), len(frequencies),
    )
    return profile


def parse_report_file(
    path: str | Path,
    thresholds: Thresholds | None = None,
) -> Profile:
    """Read *path* as UTF-8 and parse it; the file name becomes the source name."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Report not found: {path}")
    text = p.read_text(encoding="utf-8", errors="replace")
    return parse_report(text, p.name, thresholds)

