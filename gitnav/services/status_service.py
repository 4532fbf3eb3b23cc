"""Status collection, freshness tokens and numbered listings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .cache_service import store_branch_record_safe, store_record_safe
from ..cache import repository_key
from ..config import DEFAULT_UNTRACKED
from ..errors import CacheError
from ..freshness import build_token, control_file_signatures
from ..git import (
    StatusHeader,
    head_commit_summary,
    local_branch_listing,
    parse_branch_listing,
    parse_porcelain_v2,
    resolve_git_dir,
    status_porcelain,
)
from ..indexing import assign_branch_indices, assign_indices
from ..models import BranchEntry, BranchRecord, CacheRecord, IndexedEntry, StatusEntry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StatusSnapshot:
    repo_root: Path
    header: StatusHeader
    entries: list[StatusEntry]
    token: str


@dataclass(slots=True)
class StatusListing:
    snapshot: StatusSnapshot
    indexed: tuple[IndexedEntry, ...]
    record: CacheRecord | None = None
    cache_error: CacheError | None = None


@dataclass(slots=True)
class BranchSnapshot:
    repo_root: Path
    names: list[str]
    current: str | None
    token: str


@dataclass(slots=True)
class BranchListing:
    snapshot: BranchSnapshot
    branches: tuple[BranchEntry, ...]
    record: BranchRecord | None = None
    cache_error: CacheError | None = None


@dataclass(slots=True)
class HeadSummary:
    branch_label: str
    ahead: int = 0
    behind: int = 0
    short_hash: str | None = None
    subject: str | None = None
    upstream: str | None = None


def _status_token(repo_root: Path, untracked: str) -> tuple[str, str]:
    # Control files are stat'ed before git reports status, so an edit racing
    # with this call changes the next token rather than hiding in this one.
    control = control_file_signatures(resolve_git_dir(repo_root))
    text = status_porcelain(repo_root, untracked)
    token = build_token([f"untracked={untracked}", *control, text])
    return token, text


def snapshot_status(repo_root: Path, *, untracked: str = DEFAULT_UNTRACKED) -> StatusSnapshot:
    token, text = _status_token(repo_root, untracked)
    header, entries = parse_porcelain_v2(text)
    logger.debug("Collected %d status entries under %s", len(entries), repo_root)
    return StatusSnapshot(repo_root=repo_root, header=header, entries=entries, token=token)


def collect_status(repo_root: Path, *, untracked: str = DEFAULT_UNTRACKED) -> list[StatusEntry]:
    return snapshot_status(repo_root, untracked=untracked).entries


def current_token(repo_root: Path, *, untracked: str = DEFAULT_UNTRACKED) -> str:
    token, _ = _status_token(repo_root, untracked)
    return token


def list_status(repo_root: Path, *, untracked: str = DEFAULT_UNTRACKED) -> StatusListing:
    """Number a fresh snapshot and persist it for later index commands."""

    snapshot = snapshot_status(repo_root, untracked=untracked)
    indexed = assign_indices(snapshot.entries)
    record, error = store_record_safe(
        repository_key(repo_root),
        snapshot.token,
        indexed,
        repo_root=repo_root,
    )
    return StatusListing(snapshot=snapshot, indexed=indexed, record=record, cache_error=error)


def describe_head(repo_root: Path, header: StatusHeader) -> HeadSummary:
    if header.branch:
        label = header.branch
    elif header.oid:
        label = f"detached at {header.oid[:7]}"
    else:
        label = "-none-"
    summary = HeadSummary(
        branch_label=label,
        ahead=header.ahead,
        behind=header.behind,
        upstream=header.upstream,
    )
    if header.has_commits:
        commit = head_commit_summary(repo_root)
        if commit is not None:
            summary.short_hash, summary.subject = commit
    return summary


def branch_token(listing_text: str) -> str:
    return build_token(["branches", listing_text])


def snapshot_branches(repo_root: Path) -> BranchSnapshot:
    text = local_branch_listing(repo_root)
    names, current = parse_branch_listing(text)
    return BranchSnapshot(
        repo_root=repo_root,
        names=names,
        current=current,
        token=branch_token(text),
    )


def current_branch_token(repo_root: Path) -> str:
    return branch_token(local_branch_listing(repo_root))


def list_branches(repo_root: Path) -> BranchListing:
    snapshot = snapshot_branches(repo_root)
    branches = assign_branch_indices(snapshot.names, snapshot.current)
    record, error = store_branch_record_safe(
        repository_key(repo_root),
        snapshot.token,
        branches,
        repo_root=repo_root,
    )
    return BranchListing(snapshot=snapshot, branches=branches, record=record, cache_error=error)
