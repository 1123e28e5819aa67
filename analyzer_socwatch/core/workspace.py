"""
Workspace — named groups of profiles, the archive, and the references into them.

Two partitions (active, archived) each hold groups with unique names.
Every mutation replaces the affected partition tuple as a whole; groups
and profiles are frozen models and are never edited in place.

Reference integrity: removing or archiving a profile also removes its
comparison-selection entry and clears the focused-profile reference when
it pointed at that profile, in the same call.  A group left without
profiles is deleted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from analyzer_socwatch.core.selection import ComparisonSelection, SelectionResult
from analyzer_socwatch.errors import GroupNameCollision, GroupNotFound, ProfileNotFound
from analyzer_socwatch.io.schema import Group, Profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FocusRef:
    """The profile currently open in the focused view."""
    group_name: str
    profile_name: str


class Workspace:
    """Active and archived groups plus selection / focus state."""

    def __init__(
        self,
        active: Iterable[Group] = (),
        archived: Iterable[Group] = (),
        selection: Optional[ComparisonSelection] = None,
    ):
        self.active: Tuple[Group, ...] = tuple(active)
        self.archived: Tuple[Group, ...] = tuple(archived)
        self.selection = selection if selection is not None else ComparisonSelection()
        self.focused: Optional[FocusRef] = None
        self.comparison_mode = False

    # ── Lookups ──────────────────────────────────────────────────────

    def find_group(self, name: str, archived: bool = False) -> Optional[Group]:
        groups = self.archived if archived else self.active
        for g in groups:
            if g.name == name:
                return g
        return None

    def get_group(self, name: str, archived: bool = False) -> Group:
        group = self.find_group(name, archived)
        if group is None:
            raise GroupNotFound(name, archived)
        return group

    def get_profile(self, group_name: str, index: int) -> Profile:
        group = self.get_group(group_name)
        if not 0 <= index < len(group.profiles):
            raise ProfileNotFound(group_name, index)
        return group.profiles[index]

    def total_profiles(self) -> int:
        """Number of profiles across active groups."""
        return sum(len(g.profiles) for g in self.active)

    def focused_profile(self) -> Optional[Profile]:
        if self.focused is None:
            return None
        group = self.find_group(self.focused.group_name)
        if group is None:
            return None
        for p in group.profiles:
            if p.name == self.focused.profile_name:
                return p
        return None

    # ── Reference cleanup ────────────────────────────────────────────

    def _drop_references(self, group_name: str, profile_name: Optional[str] = None) -> None:
        self.selection.remove_matching(group_name, profile_name)
        if self.focused is not None and self.focused.group_name == group_name:
            if profile_name is None or self.focused.profile_name == profile_name:
                self.focused = None

    # ── Group mutations ──────────────────────────────────────────────

    def add_profiles(self, group_name: str, profiles: Iterable[Profile]) -> Group:
        """Append *profiles* to the active group, creating it if needed."""
        new_profiles = list(profiles)
        existing = self.find_group(group_name)

        if existing is None:
            if not new_profiles:
                raise ValueError(f"Cannot create group {group_name!r} without profiles")
            group = Group(name=group_name, profiles=new_profiles, archived=False)
            self.active = self.active + (group,)
            logger.info("Created group %s with %d profiles", group_name, len(new_profiles))
            return group

        group = existing.model_copy(
            update={"profiles": list(existing.profiles) + new_profiles}
        )
        self.active = tuple(group if g.name == group_name else g for g in self.active)
        logger.info("Appended %d profiles to group %s", len(new_profiles), group_name)
        return group

    def remove_profile(self, group_name: str, index: int) -> Profile:
        """Remove one profile; an emptied group is deleted."""
        removed = self.get_profile(group_name, index)
        group = self.get_group(group_name)
        remaining = [p for i, p in enumerate(group.profiles) if i != index]

        if remaining:
            updated = group.model_copy(update={"profiles": remaining})
            self.active = tuple(updated if g.name == group_name else g for g in self.active)
        else:
            self.active = tuple(g for g in self.active if g.name != group_name)
            logger.info("Group %s is empty and was removed", group_name)

        self._drop_references(group_name, removed.name)
        return removed

    def remove_group(self, group_name: str) -> Group:
        group = self.get_group(group_name)
        self.active = tuple(g for g in self.active if g.name != group_name)
        self._drop_references(group_name)
        return group

    def remove_archived_group(self, group_name: str) -> Group:
        group = self.get_group(group_name, archived=True)
        self.archived = tuple(g for g in self.archived if g.name != group_name)
        return group

    def archive(self, group_name: str) -> Group:
        """Move an active group to the archive.

        Raises :class:`GroupNameCollision` (and changes nothing) when the
        archive already holds a group with the same name.
        """
        group = self.get_group(group_name)
        if self.find_group(group_name, archived=True) is not None:
            raise GroupNameCollision(group_name, archived=True)

        moved = group.model_copy(update={"archived": True})
        self.active = tuple(g for g in self.active if g.name != group_name)
        self.archived = self.archived + (moved,)
        self._drop_references(group_name)
        return moved

    def unarchive(self, group_name: str) -> Group:
        """Move an archived group back to the active partition."""
        group = self.get_group(group_name, archived=True)
        if self.find_group(group_name) is not None:
            raise GroupNameCollision(group_name, archived=False)

        moved = group.model_copy(update={"archived": False})
        self.archived = tuple(g for g in self.archived if g.name != group_name)
        self.active = self.active + (moved,)
        return moved

    # ── Focus / comparison ───────────────────────────────────────────

    def focus(self, group_name: str, index: int) -> Profile:
        profile = self.get_profile(group_name, index)
        self.focused = FocusRef(group_name, profile.name)
        return profile

    def clear_focus(self) -> None:
        self.focused = None

    def set_comparison_mode(self, enabled: bool) -> bool:
        """Enter or leave comparison mode; leaving clears the selection.

        Comparison needs at least two profiles, otherwise the mode stays off.
        """
        if enabled and self.total_profiles() < 2:
            enabled = False
        if not enabled:
            self.selection.clear()
        self.comparison_mode = enabled
        return enabled

    def toggle_comparison(self, group_name: str, index: int) -> SelectionResult:
        profile = self.get_profile(group_name, index)
        return self.selection.toggle(profile, group_name)

    def groups(self, archived: bool = False) -> List[Group]:
        return list(self.archived if archived else self.active)
