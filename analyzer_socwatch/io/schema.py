"""
Schema — Pydantic models for parsed SoC Watch profiles.

Data products handed to the presentation layer:
  1. Profile   — per-core residency / frequency table + report metadata.
  2. Insights  — P-core vs E-core averages, threading ratio and model.
  3. Group     — named, ordered collection of profiles (a SKU folder).

Profile models are frozen.  Averages over an empty core subset are NaN; JSON
has no NaN or infinity, so non-finite insight values serialise as ``null``
and read back as NaN.
"""
from __future__ import annotations

import math
from enum import Enum, unique
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from analyzer_socwatch import ANALYZER_VERSION, PACKAGE_NAME, SCHEMA_VERSION
from analyzer_socwatch.errors import InsightsAlreadyAttached


_FROZEN = ConfigDict(frozen=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Vocabulary
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class CoreType(str, Enum):
    P_CORE = "P-Core"
    E_CORE = "E-Core"
    UNKNOWN = "Unknown"


@unique
class ThreadingModel(str, Enum):
    P_CORE_DOMINANT = "P-Core Dominant"
    E_CORE_DOMINANT = "E-Core Dominant"
    BALANCED = "Balanced"


# ═══════════════════════════════════════════════════════════════════════════════
# Profile
# ═══════════════════════════════════════════════════════════════════════════════

class ProfileMetadata(BaseModel):
    """Report header values.  ``None`` means the report did not say."""

    model_config = _FROZEN

    duration: Optional[float] = None            # seconds
    base_frequency_mhz: Optional[int] = None
    total_cores: Optional[int] = None


class CoreRecord(BaseModel):
    """C-state residency and average frequency of one core."""

    model_config = _FROZEN

    core_index: int
    type: CoreType = CoreType.UNKNOWN

    active_residency_percent: float = 0.0       # CC0 / CC1
    cc6_residency_percent: float = 0.0
    cc7_residency_percent: float = 0.0

    frequency_mhz: Optional[int] = None


def _fixed(value: float, digits: int) -> str:
    """Fixed-point text for display; NaN is spelled ``NaN``."""
    if math.isnan(value):
        return "NaN"
    return f"{value:.{digits}f}"


class Insights(BaseModel):
    """Threading insights derived from a profile's core records.

    Fields hold the raw (unrounded) values.  Rounded text lives in
    :meth:`display` and is never used for comparisons.
    """

    model_config = _FROZEN

    p_core_activity_avg: float
    e_core_activity_avg: float
    p_core_freq_avg: float
    e_core_freq_avg: float
    threading_ratio: float
    threading_model: ThreadingModel

    @field_validator(
        "p_core_activity_avg",
        "e_core_activity_avg",
        "p_core_freq_avg",
        "e_core_freq_avg",
        "threading_ratio",
        mode="before",
    )
    @classmethod
    def _null_is_nan(cls, v):
        return float("nan") if v is None else v

    @field_serializer(
        "p_core_activity_avg",
        "e_core_activity_avg",
        "p_core_freq_avg",
        "e_core_freq_avg",
        "threading_ratio",
        when_used="json",
    )
    def _non_finite_is_null(self, v: float) -> Optional[float]:
        return v if math.isfinite(v) else None

    def display(self) -> Dict[str, str]:
        """Rounded strings: activity 1 dp, frequency 0 dp, ratio 2 dp."""
        return {
            "p_core_activity": _fixed(self.p_core_activity_avg, 1),
            "e_core_activity": _fixed(self.e_core_activity_avg, 1),
            "p_core_avg_freq": _fixed(self.p_core_freq_avg, 0),
            "e_core_avg_freq": _fixed(self.e_core_freq_avg, 0),
            "threading_ratio": _fixed(self.threading_ratio, 2),
            "threading_model": self.threading_model.value,
        }


class Profile(BaseModel):
    """One parsed report.

    ``core_records`` keeps first-observed order and holds at most one record
    per ``core_index``.  ``insights`` is attached once, after parsing.
    """

    model_config = _FROZEN

    name: str
    metadata: ProfileMetadata = Field(default_factory=ProfileMetadata)
    core_type_map: Dict[int, CoreType] = Field(default_factory=dict)
    core_records: List[CoreRecord] = Field(default_factory=list)
    insights: Optional[Insights] = None

    def with_insights(self, insights: Insights) -> Profile:
        """Return a copy of this profile carrying *insights*."""
        if self.insights is not None:
            raise InsightsAlreadyAttached(
                f"Profile {self.name!r} already has insights attached"
            )
        return self.model_copy(update={"insights": insights})


# ═══════════════════════════════════════════════════════════════════════════════
# Group
# ═══════════════════════════════════════════════════════════════════════════════

class Group(BaseModel):
    """Named collection of profiles (one SKU / build configuration)."""

    model_config = _FROZEN

    name: str
    profiles: List[Profile] = Field(default_factory=list)
    archived: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Batch summary (runner / API)
# ═══════════════════════════════════════════════════════════════════════════════

class IngestSummary(BaseModel):
    """What one ingestion batch added to a group."""

    package_name: str = PACKAGE_NAME
    analyzer_version: str = ANALYZER_VERSION
    schema_version: str = SCHEMA_VERSION
    policy_id: str

    group_name: str
    n_files_seen: int = 0
    n_files_skipped: int = 0
    profile_names: List[str] = Field(default_factory=list)
