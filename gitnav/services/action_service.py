"""Command executors that act on resolved status entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from ..errors import ActionError
from ..git import has_head, run_git
from ..models import Section, StatusEntry, StatusKind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ActionResult:
    paths: list[str] = field(default_factory=list)
    skipped: list[StatusEntry] = field(default_factory=list)
    message: str = ""


def _paths_for(entries: Iterable[StatusEntry], *, include_original: bool = False) -> list[str]:
    paths: list[str] = []
    seen: set[str] = set()
    for entry in entries:
        candidates = [entry.path]
        if include_original and entry.original_path:
            candidates.append(entry.original_path)
        for path in candidates:
            if path not in seen:
                seen.add(path)
                paths.append(path)
    return paths


def _split_untracked(
    entries: Sequence[StatusEntry],
) -> tuple[list[StatusEntry], list[StatusEntry]]:
    actionable = [entry for entry in entries if entry.kind is not StatusKind.UNTRACKED]
    skipped = [entry for entry in entries if entry.kind is StatusKind.UNTRACKED]
    return actionable, skipped


def add_entries(repo_root: Path, entries: Sequence[StatusEntry]) -> ActionResult:
    """Stage the selected entries, deletions included."""

    paths = _paths_for(entries)
    if not paths:
        raise ActionError("Nothing to add.")
    run_git(repo_root, ["add", "--", *paths])
    logger.debug("Staged %d path(s)", len(paths))
    return ActionResult(paths=paths)


def reset_entries(repo_root: Path, entries: Sequence[StatusEntry]) -> ActionResult:
    """Unstage the selected entries, keeping their working tree contents."""

    actionable, skipped = _split_untracked(entries)
    paths = _paths_for(actionable, include_original=True)
    if not paths:
        raise ActionError("None of the selected files are tracked; nothing to reset.")
    if has_head(repo_root):
        run_git(repo_root, ["reset", "--quiet", "HEAD", "--", *paths])
    else:
        # No commit to reset to yet: drop the paths from the index instead.
        run_git(repo_root, ["rm", "--cached", "--quiet", "-r", "--", *paths])
    return ActionResult(paths=paths, skipped=skipped)


def checkout_entries(repo_root: Path, entries: Sequence[StatusEntry]) -> ActionResult:
    """Discard working tree changes of the selected entries.

    Untracked files have nothing to restore from and are skipped.
    """

    actionable, skipped = _split_untracked(entries)
    for entry in skipped:
        logger.warning("Skipping untracked file %s", entry.path)
    paths = _paths_for(actionable)
    if not paths:
        raise ActionError("None of the selected files are tracked; nothing to check out.")
    run_git(repo_root, ["checkout", "--", *paths])
    return ActionResult(paths=paths, skipped=skipped)


def diff_args(entry: StatusEntry, *, color: bool = True, head_exists: bool = True) -> list[str] | None:
    """Return the ``git diff`` arguments for *entry*, or None when there is no diff."""

    if entry.kind is StatusKind.UNTRACKED:
        return None
    args = ["diff", "--color=always" if color else "--no-color"]
    if entry.section is Section.STAGED:
        args.append("--cached")
    elif entry.kind is StatusKind.UNSTAGED_DELETED and head_exists:
        args.append("HEAD")
    args.append("--")
    if entry.original_path:
        args.append(entry.original_path)
    args.append(entry.path)
    return args


def diff_entry(repo_root: Path, entry: StatusEntry, *, color: bool = True) -> str | None:
    head_exists = has_head(repo_root) if entry.kind is StatusKind.UNSTAGED_DELETED else True
    args = diff_args(entry, color=color, head_exists=head_exists)
    if args is None:
        return None
    completed = run_git(repo_root, args)
    return completed.stdout


def checkout_branch(repo_root: Path, name: str) -> ActionResult:
    completed = run_git(repo_root, ["checkout", name])
    return ActionResult(message=(completed.stderr or completed.stdout).strip())


def create_branch(repo_root: Path, name: str) -> ActionResult:
    if not name or name.startswith("-"):
        raise ActionError(f"Invalid branch name: {name!r}")
    completed = run_git(repo_root, ["checkout", "-b", name])
    return ActionResult(message=(completed.stderr or completed.stdout).strip())
