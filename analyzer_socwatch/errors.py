"""
Errors raised by analyzer_socwatch.

Malformed report text is never an error (the parser degrades to defaults).
These classes cover the caller-facing failures: batch ingestion, workspace
lookups, name collisions and selection capacity.
"""
from __future__ import annotations

from typing import Optional


BATCH_PARSE_MESSAGE = "Make sure they are Intel SoC Watch CSV files."


class SocWatchError(Exception):
    """Base class for analyzer_socwatch errors."""


class BatchParseError(SocWatchError):
    """A file in an ingestion batch could not be read or parsed."""

    def __init__(self, source_name: Optional[str], reason: str = ""):
        self.source_name = source_name
        self.reason = reason
        self.user_message = BATCH_PARSE_MESSAGE
        detail = f"Error parsing {source_name!r}" if source_name else "Error parsing files"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail)


class GroupNotFound(SocWatchError, KeyError):
    """No group with the requested name exists in the partition."""

    def __init__(self, name: str, archived: bool = False):
        self.name = name
        self.archived = archived
        partition = "archived" if archived else "active"
        super().__init__(f"No {partition} group named {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class ProfileNotFound(SocWatchError, IndexError):
    """Profile index out of range for a group."""

    def __init__(self, group_name: str, index: int):
        self.group_name = group_name
        self.index = index
        super().__init__(f"Group {group_name!r} has no profile at index {index}")


class GroupNameCollision(SocWatchError):
    """The destination partition already holds a group with this name."""

    def __init__(self, name: str, archived: bool):
        self.name = name
        self.archived = archived
        partition = "archived" if archived else "active"
        super().__init__(f"A group named {name!r} already exists in the {partition} partition")


class SelectionCapacityExceeded(SocWatchError):
    """The comparison selection is full.

    The message is user-facing text, where each profile is one game capture.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        super().__init__(
            f"Maximum {capacity} games can be compared at once. "
            f"Please deselect a game first."
        )


class InsightsAlreadyAttached(SocWatchError):
    """Insights may be attached to a profile only once."""
