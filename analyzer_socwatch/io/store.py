"""
Store — persist a workspace into a flat key-value store.

Two keys, each holding a JSON array of Group records:
    socwatch_skus           — active groups
    socwatch_archived_skus  — archived groups

Selection, focus and comparison mode are session state and are not saved.
NaN insight averages are stored as ``null`` and come back as NaN.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from analyzer_socwatch.core.workspace import Workspace
from analyzer_socwatch.io.schema import Group

logger = logging.getLogger(__name__)

ACTIVE_KEY = "socwatch_skus"
ARCHIVED_KEY = "socwatch_archived_skus"

_GROUPS = TypeAdapter(List[Group])


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Dict-backed store, for tests and embedding."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """All keys in one JSON object file; rewritten on every ``set``."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error("Store file %s is not valid JSON: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Store file %s does not hold an object", self.path)
            return {}
        return data

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(data, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )


def dump_groups(groups: List[Group]) -> str:
    return json.dumps([g.model_dump(mode="json") for g in groups], sort_keys=True)


def load_groups(raw: Optional[str], key: str = "") -> List[Group]:
    """Groups from a stored JSON string; bad data logs and reads as empty.

    The loaded partition keeps the workspace rules: no empty groups, one
    group per name (first wins), and ``archived`` set from *key*.
    """
    if raw is None:
        return []
    try:
        stored = _GROUPS.validate_python(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error("Error loading %s from store: %s", key or "groups", e)
        return []

    archived = key == ARCHIVED_KEY
    groups: List[Group] = []
    seen = set()
    for group in stored:
        if not group.profiles:
            logger.warning("Dropping empty group %s from %s", group.name, key or "store")
            continue
        if group.name in seen:
            logger.warning("Dropping duplicate group %s from %s", group.name, key or "store")
            continue
        seen.add(group.name)
        if group.archived != archived:
            group = group.model_copy(update={"archived": archived})
        groups.append(group)
    return groups


def save_workspace(workspace: Workspace, store: KeyValueStore) -> None:
    store.set(ACTIVE_KEY, dump_groups(list(workspace.active)))
    store.set(ARCHIVED_KEY, dump_groups(list(workspace.archived)))


def load_workspace(store: KeyValueStore) -> Workspace:
    return Workspace(
        active=load_groups(store.get(ACTIVE_KEY), ACTIVE_KEY),
        archived=load_groups(store.get(ARCHIVED_KEY), ARCHIVED_KEY),
    )
