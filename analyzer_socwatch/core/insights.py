"""
Insight engine — P-core vs E-core threading metrics for one profile.

A pure function of ``Profile.core_records``:

* activity averages  — mean ``active_residency_percent`` per core type,
* frequency averages — mean ``frequency_mhz`` per core type, where a core
  without frequency data contributes 0 but still counts in the divisor,
* threading ratio    — P average / E average (an exact-zero E average is
  replaced by 1; NaN is not),
* threading model    — P/E dominant when one average beats the other by
  more than the dominance margin, else balanced.

An empty core subset yields NaN averages.  That NaN propagates into the
ratio on purpose so that consumers can see "no cores of this type".
"""
from __future__ import annotations

import logging
from typing import List, Tuple

from analyzer_socwatch.io.schema import (
    CoreRecord,
    CoreType,
    Insights,
    Profile,
    ThreadingModel,
)
from analyzer_socwatch.policy.thresholds import Thresholds

logger = logging.getLogger(__name__)

NAN = float("nan")


def partition_cores(records: List[CoreRecord]) -> Tuple[List[CoreRecord], List[CoreRecord]]:
    """(P-core records, E-core records); Unknown cores are left out."""
    p_cores = [c for c in records if c.type == CoreType.P_CORE]
    e_cores = [c for c in records if c.type == CoreType.E_CORE]
    return p_cores, e_cores


def _mean(values: List[float]) -> float:
    """Arithmetic mean, NaN for an empty list."""
    if not values:
        return NAN
    return sum(values) / len(values)


def threading_ratio(p_activity: float, e_activity: float) -> float:
    divisor = 1.0 if e_activity == 0 else e_activity
    return p_activity / divisor


def classify_threading_model(
    p_activity: float,
    e_activity: float,
    margin: float = 10.0,
) -> ThreadingModel:
    """Threading model from *unrounded* activity averages.

    Comparisons against NaN are false, so a missing core type ends up
    ``BALANCED``.
    """
    if p_activity > e_activity + margin:
        return ThreadingModel.P_CORE_DOMINANT
    if e_activity > p_activity + margin:
        return ThreadingModel.E_CORE_DOMINANT
    return ThreadingModel.BALANCED


def compute_insights(
    profile: Profile,
    thresholds: Thresholds | None = None,
) -> Insights:
    """Derive :class:`Insights` from *profile*'s core records."""
    if thresholds is None:
        thresholds = Thresholds.v1()

    p_cores, e_cores = partition_cores(profile.core_records)

    p_activity = _mean([c.active_residency_percent for c in p_cores])
    e_activity = _mean([c.active_residency_percent for c in e_cores])
    p_freq = _mean([float(c.frequency_mhz or 0) for c in p_cores])
    e_freq = _mean([float(c.frequency_mhz or 0) for c in e_cores])

    insights = Insights(
        p_core_activity_avg=p_activity,
        e_core_activity_avg=e_activity,
        p_core_freq_avg=p_freq,
        e_core_freq_avg=e_freq,
        threading_ratio=threading_ratio(p_activity, e_activity),
        threading_model=classify_threading_model(
            p_activity, e_activity, thresholds.dominance_margin,
        ),
    )

    if not p_cores or not e_cores:
        logger.debug(
            "%s: %d P-cores, %d E-cores; empty subsets average to NaN",
            profile.name, len(p_cores), len(e_cores),
        )
    return insights


def attach_insights(
    profile: Profile,
    thresholds: Thresholds | None = None,
) -> Profile:
    """Return *profile* with freshly computed insights attached."""
    return profile.with_insights(compute_insights(profile, thresholds))
