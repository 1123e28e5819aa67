"""
Comparison selection — up to four profiles picked for side-by-side view.

Entries are keyed by ``(group_name, profile.name)`` and keep insertion
order, which is the column order of the comparison table.  Entries hold
references to profiles owned by their group; the workspace removes
matching entries when a profile or group goes away.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, unique
from typing import Iterator, Optional, Tuple

from analyzer_socwatch.errors import SelectionCapacityExceeded
from analyzer_socwatch.io.schema import Profile
from analyzer_socwatch.policy.thresholds import Thresholds

logger = logging.getLogger(__name__)


@unique
class SelectionResult(str, Enum):
    ADDED = "ADDED"
    REMOVED = "REMOVED"
    REJECTED_CAPACITY = "REJECTED_CAPACITY"


@dataclass(frozen=True)
class ComparisonEntry:
    profile: Profile
    group_name: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.group_name, self.profile.name)


class ComparisonSelection:
    """Bounded, ordered, de-duplicated selection of profiles."""

    def __init__(self, capacity: Optional[int] = None):
        if capacity is None:
            capacity = Thresholds.v1().comparison_capacity
        self.capacity = capacity
        self._entries: Tuple[ComparisonEntry, ...] = ()

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def entries(self) -> Tuple[ComparisonEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ComparisonEntry]:
        return iter(self._entries)

    def is_full(self) -> bool:
        return len(self._entries) >= self.capacity

    def contains(self, profile: Profile, group_name: str) -> bool:
        key = (group_name, profile.name)
        return any(e.key == key for e in self._entries)

    # ── Mutations (whole-tuple replacement) ─────────────────────────

    def toggle(self, profile: Profile, group_name: str) -> SelectionResult:
        """Remove the entry if present, else append it when there is room."""
        key = (group_name, profile.name)
        if any(e.key == key for e in self._entries):
            self._entries = tuple(e for e in self._entries if e.key != key)
            return SelectionResult.REMOVED

        if self.is_full():
            logger.info(
                "Selection full (%d); rejected %s/%s",
                self.capacity, group_name, profile.name,
            )
            return SelectionResult.REJECTED_CAPACITY

        self._entries = self._entries + (ComparisonEntry(profile, group_name),)
        return SelectionResult.ADDED

    def require_toggle(self, profile: Profile, group_name: str) -> SelectionResult:
        """Like :meth:`toggle` but raise when the selection is full."""
        result = self.toggle(profile, group_name)
        if result == SelectionResult.REJECTED_CAPACITY:
            raise SelectionCapacityExceeded(self.capacity)
        return result

    def remove_matching(self, group_name: str, profile_name: Optional[str] = None) -> int:
        """Drop entries of *group_name* (optionally only *profile_name*).

        Returns the number of entries removed.
        """
        kept = tuple(
            e for e in self._entries
            if not (
                e.group_name == group_name
                and (profile_name is None or e.profile.name == profile_name)
            )
        )
        removed = len(self._entries) - len(kept)
        self._entries = kept
        return removed

    def clear(self) -> None:
        self._entries = ()
