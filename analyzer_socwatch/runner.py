"""
Runner — top-level orchestration: report files → profiles in a workspace group.

This module ties parsing, insight derivation and the workspace together
into ``ingest_reports`` which can be called from the API endpoint, from a
CLI, or programmatically.

Batch semantics:
  1. Sources are processed strictly in the order given.
  2. Only ``.csv`` names are parsed; others are skipped.
  3. Each profile gets its insights and is appended to the group before the
     next source is read.
  4. A source that cannot be read or parsed raises ``BatchParseError``.
     Profiles appended earlier in the batch stay in the group.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from analyzer_socwatch.core.insights import attach_insights
from analyzer_socwatch.core.report_parser import parse_report
from analyzer_socwatch.core.workspace import Workspace
from analyzer_socwatch.errors import BatchParseError
from analyzer_socwatch.io.schema import IngestSummary, Profile
from analyzer_socwatch.io.store import JsonFileStore, load_workspace, save_workspace
from analyzer_socwatch.policy.heatmap import classify_insights
from analyzer_socwatch.policy.thresholds import Thresholds

logger = logging.getLogger(__name__)

REPORT_SUFFIX = ".csv"
DEFAULT_GROUP_NAME = "Untitled"


@dataclass(frozen=True)
class ReportSource:
    """A named report whose text is produced on demand."""
    name: str
    read: Callable[[], str]

    @classmethod
    def from_text(cls, name: str, text: str) -> ReportSource:
        return cls(name=name, read=lambda: text)

    @classmethod
    def from_path(cls, path: Path) -> ReportSource:
        return cls(
            name=path.name,
            read=lambda: path.read_text(encoding="utf-8", errors="replace"),
        )


def is_report_name(name: str) -> bool:
    return name.endswith(REPORT_SUFFIX)


def detect_group_name(paths: List[Path], explicit: Optional[str] = None) -> str:
    """Explicit name, else the first file's parent folder, else ``Untitled``."""
    if explicit and explicit.strip():
        return explicit.strip()
    if paths:
        parent = paths[0].parent.name
        if parent:
            return parent
    return DEFAULT_GROUP_NAME


# ── Public API ───────────────────────────────────────────────────────────────

def ingest_reports(
    workspace: Workspace,
    group_name: str,
    sources: Iterable[ReportSource],
    thresholds: Thresholds | None = None,
) -> IngestSummary:
    """
    Parse *sources* into profiles and append them to *group_name*.

    Parameters
    ----------
    workspace : Workspace
        Workspace receiving the profiles.
    group_name : str
        Active group to append to (created if missing).
    sources : Iterable[ReportSource]
        Reports in the order they should appear in the group.
    thresholds : Thresholds, optional
        Parser / insight policy. Defaults to ``Thresholds.v1()``.

    Returns
    -------
    IngestSummary

    Raises
    ------
    BatchParseError
        When a source cannot be read or parsed.
    """
    if thresholds is None:
        thresholds = Thresholds.v1()

    summary = IngestSummary(policy_id=thresholds.policy_id, group_name=group_name)

    for source in sources:
        summary.n_files_seen += 1
        if not is_report_name(source.name):
            logger.debug("Skipping non-report file %s", source.name)
            summary.n_files_skipped += 1
            continue

        try:
            text = source.read()
            profile: Profile = attach_insights(
                parse_report(text, source.name, thresholds), thresholds,
            )
        except Exception as e:
            logger.error("Error parsing %s: %s", source.name, e, exc_info=True)
            raise BatchParseError(source.name, str(e)) from e

        workspace.add_profiles(group_name, [profile])
        summary.profile_names.append(profile.name)

    logger.info(
        "Ingested %d profiles into %s (%d files skipped)",
        len(summary.profile_names), group_name, summary.n_files_skipped,
    )
    return summary


def ingest_paths(
    workspace: Workspace,
    paths: List[Path],
    group_name: Optional[str] = None,
    thresholds: Thresholds | None = None,
) -> IngestSummary:
    """Ingest files from disk; see :func:`detect_group_name` for the group."""
    name = detect_group_name(paths, group_name)
    return ingest_reports(
        workspace, name, [ReportSource.from_path(p) for p in paths], thresholds,
    )


# ── CLI ──────────────────────────────────────────────────────────────────────

def _expand_inputs(inputs: List[str]) -> List[Path]:
    paths: List[Path] = []
    for raw in inputs:
        p = Path(raw)
        if p.is_dir():
            paths.extend(sorted(c for c in p.iterdir() if c.is_file()))
        else:
            paths.append(p)
    return paths


def main():
    """CLI entry point for analyzer_socwatch."""
    parser = argparse.ArgumentParser(
        description="analyzer_socwatch — P-core / E-core threading insights from SoC Watch CSV reports",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Report files or folders of reports",
    )
    parser.add_argument(
        "-g", "--group",
        default=None,
        help="Group (SKU) name; defaults to the first file's folder name",
    )
    parser.add_argument(
        "-s", "--store",
        type=Path,
        default=None,
        help="JSON store file to load the workspace from and save it back to",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    paths = _expand_inputs(args.inputs)
    for p in paths:
        if not p.exists():
            logger.error("File not found: %s", p)
            sys.exit(1)

    store = JsonFileStore(args.store) if args.store else None
    workspace = load_workspace(store) if store else Workspace()

    try:
        summary = ingest_paths(workspace, paths, args.group)
    except BatchParseError as e:
        print(f"Error Parsing Files: {e.user_message} ({e})", file=sys.stderr)
        sys.exit(2)

    if not summary.profile_names:
        print(f"No {REPORT_SUFFIX} reports among {summary.n_files_seen} files")
        return

    group = workspace.get_group(summary.group_name)
    print(f"Group: {group.name} ({len(group.profiles)} profiles)")
    for profile in group.profiles:
        if profile.name not in summary.profile_names or profile.insights is None:
            continue
        shown = profile.insights.display()
        print(
            f"  {profile.name}: P={shown['p_core_activity']}% "
            f"E={shown['e_core_activity']}% "
            f"ratio={shown['threading_ratio']} "
            f"[{classify_insights(profile.insights).value}] "
            f"{shown['threading_model']}"
        )

    if store:
        save_workspace(workspace, store)
        print(f"Workspace saved to: {args.store}")


if __name__ == "__main__":
    main()
