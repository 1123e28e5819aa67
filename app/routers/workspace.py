"""
Workspace Router
Upload SoC Watch reports into groups, archive groups, and manage the
comparison selection.

Workspace state lives in the process; when ``STORE_PATH`` is set it is
loaded at first use and saved after every mutation.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from analyzer_socwatch.core.selection import SelectionResult
from analyzer_socwatch.core.workspace import Workspace
from analyzer_socwatch.errors import (
    BatchParseError,
    GroupNameCollision,
    GroupNotFound,
    ProfileNotFound,
    SelectionCapacityExceeded,
)
from analyzer_socwatch.io.schema import Group, IngestSummary
from analyzer_socwatch.io.store import JsonFileStore, KeyValueStore, load_workspace, save_workspace
from analyzer_socwatch.policy.heatmap import legend
from analyzer_socwatch.runner import ReportSource, ingest_reports
from app.config import settings
from data.reporting import comparison_table, overall_table

logger = logging.getLogger(__name__)


# =============================================================================
# State
# =============================================================================

class WorkspaceState:
    """Process-wide workspace plus optional backing store."""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store
        self.workspace = load_workspace(store) if store is not None else Workspace()

    def commit(self) -> None:
        if self.store is not None:
            save_workspace(self.workspace, self.store)


_state: Optional[WorkspaceState] = None


def get_state() -> WorkspaceState:
    global _state
    if _state is None:
        store = JsonFileStore(settings.STORE_PATH) if settings.STORE_PATH else None
        _state = WorkspaceState(store)
    return _state


# =============================================================================
# Request/Response Models
# =============================================================================

class ReportFile(BaseModel):
    """One uploaded report."""
    name: str = Field(..., description="File name, e.g. Game_A PTATMonitor.csv")
    content: str = Field(..., description="Decoded report text")


class IngestRequest(BaseModel):
    """A batch of reports for one group."""
    group_name: Optional[str] = Field(
        None,
        description="Group (SKU) name; defaults to 'Untitled'",
    )
    files: List[ReportFile] = Field(default_factory=list)


class GroupsResponse(BaseModel):
    active: List[Group] = Field(default_factory=list)
    archived: List[Group] = Field(default_factory=list)


class ToggleRequest(BaseModel):
    group_name: str
    index: int = Field(..., ge=0)


class SelectionItem(BaseModel):
    group_name: str
    profile_name: str


class SelectionResponse(BaseModel):
    result: Optional[str] = None
    capacity: int
    entries: List[SelectionItem] = Field(default_factory=list)


def _selection_response(state: WorkspaceState, result: Optional[SelectionResult] = None) -> SelectionResponse:
    selection = state.workspace.selection
    return SelectionResponse(
        result=result.value if result else None,
        capacity=selection.capacity,
        entries=[
            SelectionItem(group_name=e.group_name, profile_name=e.profile.name)
            for e in selection
        ],
    )


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =============================================================================
# Router
# =============================================================================

router = APIRouter()


@router.post(
    "/reports",
    response_model=IngestSummary,
    summary="Parse a batch of SoC Watch reports into a group",
)
async def ingest(request: IngestRequest, state: WorkspaceState = Depends(get_state)):
    """
    Parse every ``.csv`` report in the batch, in the order given, and
    append the resulting profiles to the group.  A file that fails to
    parse aborts the batch with 422; files before it stay in the group.
    """
    group_name = (request.group_name or "").strip() or "Untitled"
    sources = [ReportSource.from_text(f.name, f.content) for f in request.files]

    try:
        summary = ingest_reports(state.workspace, group_name, sources)
    except BatchParseError as e:
        state.commit()
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"title": "Error Parsing Files", "message": e.user_message, "file": e.source_name},
        )

    state.commit()
    return summary


@router.get("/groups", response_model=GroupsResponse, summary="List active and archived groups")
async def list_groups(state: WorkspaceState = Depends(get_state)):
    return GroupsResponse(
        active=state.workspace.groups(),
        archived=state.workspace.groups(archived=True),
    )


@router.delete("/groups/{name}", summary="Remove a whole group")
async def remove_group(name: str, state: WorkspaceState = Depends(get_state)):
    try:
        group = state.workspace.remove_group(name)
    except GroupNotFound as e:
        raise _not_found(e)
    state.commit()
    return {"removed": group.name, "n_profiles": len(group.profiles)}


@router.delete("/groups/{name}/profiles/{index}", summary="Remove one profile from a group")
async def remove_profile(name: str, index: int, state: WorkspaceState = Depends(get_state)):
    try:
        profile = state.workspace.remove_profile(name, index)
    except (GroupNotFound, ProfileNotFound) as e:
        raise _not_found(e)
    state.commit()
    return {
        "removed": profile.name,
        "group_exists": state.workspace.find_group(name) is not None,
    }


@router.post("/groups/{name}/archive", response_model=Group, summary="Archive a group")
async def archive_group(name: str, state: WorkspaceState = Depends(get_state)):
    try:
        group = state.workspace.archive(name)
    except GroupNotFound as e:
        raise _not_found(e)
    except GroupNameCollision as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    state.commit()
    return group


@router.post("/groups/{name}/unarchive", response_model=Group, summary="Restore an archived group")
async def unarchive_group(name: str, state: WorkspaceState = Depends(get_state)):
    try:
        group = state.workspace.unarchive(name)
    except GroupNotFound as e:
        raise _not_found(e)
    except GroupNameCollision as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    state.commit()
    return group


@router.get("/comparison", response_model=SelectionResponse, summary="Current comparison selection")
async def get_comparison(state: WorkspaceState = Depends(get_state)):
    return _selection_response(state)


@router.post("/comparison/toggle", response_model=SelectionResponse, summary="Toggle a profile in the comparison")
async def toggle_comparison(request: ToggleRequest, state: WorkspaceState = Depends(get_state)):
    try:
        profile = state.workspace.get_profile(request.group_name, request.index)
    except (GroupNotFound, ProfileNotFound) as e:
        raise _not_found(e)
    try:
        result = state.workspace.selection.require_toggle(profile, request.group_name)
    except SelectionCapacityExceeded as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"title": "Selection Limit Reached", "message": str(e)},
        )
    return _selection_response(state, result)


@router.delete("/comparison", response_model=SelectionResponse, summary="Clear the comparison selection")
async def clear_comparison(state: WorkspaceState = Depends(get_state)):
    state.workspace.selection.clear()
    return _selection_response(state)


@router.get("/comparison/table", summary="Comparison table for the selection")
async def comparison(state: WorkspaceState = Depends(get_state)):
    df = comparison_table(state.workspace.selection)
    return {"metrics": list(df.index), "columns": df.reset_index().to_dict(orient="records")}


@router.get("/overview", summary="Overall threading heatmap table")
async def overview(state: WorkspaceState = Depends(get_state)):
    df = overall_table(state.workspace.active)
    return {"rows": df.to_dict(orient="records"), "legend": legend()}
