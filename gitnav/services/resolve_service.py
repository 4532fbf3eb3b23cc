"""Map user-supplied indices back to the entries they were shown for."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Sequence

from .cache_service import (
    load_branch_record_safe,
    load_record_safe,
    store_branch_record_safe,
    store_record_safe,
)
from .status_service import collect_status, current_branch_token, current_token, snapshot_branches
from ..cache import repository_key
from ..errors import CacheError, CacheUnavailableError, OutOfRangeError
from ..freshness import is_fresh
from ..indexing import assign_branch_indices, assign_indices
from ..models import BranchEntry, BranchRecord, CacheRecord, StatusEntry

logger = logging.getLogger(__name__)

StatusCollector = Callable[[Path], Sequence[StatusEntry]]
TokenSource = Callable[[Path], str]

REFRESH_MISSING = "missing"
REFRESH_STALE = "stale"


@dataclass(slots=True)
class Resolution:
    selected: list[tuple[int, StatusEntry]]
    record: CacheRecord
    refreshed: bool = False
    refresh_reason: str | None = None
    cache_error: CacheError | None = field(default=None)

    @property
    def entries(self) -> list[StatusEntry]:
        return [entry for _, entry in self.selected]


@dataclass(slots=True)
class BranchResolution:
    branch: BranchEntry
    record: BranchRecord
    refreshed: bool = False
    refresh_reason: str | None = None
    cache_error: CacheError | None = None


def _refresh_reason(
    record: CacheRecord | BranchRecord | None,
    token: str,
    max_age: timedelta | None,
    now: datetime | None,
) -> str | None:
    if record is None:
        return REFRESH_MISSING
    if not is_fresh(record, token, max_age=max_age, now=now):
        return REFRESH_STALE
    return None


def refresh_record(
    key: str,
    repo_root: Path,
    token: str,
    collector: StatusCollector,
) -> tuple[CacheRecord, CacheError | None]:
    """Re-number a fresh snapshot under *token* and persist it.

    *token* must have been computed before *collector* runs.
    """

    indexed = assign_indices(collector(repo_root))
    record, error = store_record_safe(key, token, indexed, repo_root=repo_root)
    if isinstance(error, CacheUnavailableError):
        raise error
    if record is None:
        record = CacheRecord(
            repository_key=key,
            freshness_token=token,
            entries=indexed,
            repo_root=str(repo_root),
        )
    return record, error


def resolve_indices(
    indices: Sequence[int],
    repo_root: Path,
    *,
    collector: StatusCollector = collect_status,
    token_source: TokenSource = current_token,
    max_age: timedelta | None = None,
    now: datetime | None = None,
) -> Resolution:
    """Resolve *indices* against the cached listing for *repo_root*.

    A missing, unreadable or stale cache is replaced by exactly one fresh
    snapshot before resolving. Every index must lie in ``1..N`` of the
    listing actually used; the result keeps the caller's order.
    """

    key = repository_key(repo_root)
    record = load_record_safe(key)
    token = token_source(repo_root)
    reason = _refresh_reason(record, token, max_age, now)
    cache_error: CacheError | None = None
    if record is None or reason is not None:
        logger.info("Refreshing numbered status for %s (%s cache)", repo_root, reason)
        record, cache_error = refresh_record(key, repo_root, token, collector)
    selected: list[tuple[int, StatusEntry]] = []
    for index in indices:
        entry = record.lookup(index)
        if entry is None:
            raise OutOfRangeError(index, record.max_index)
        selected.append((index, entry))
    return Resolution(
        selected=selected,
        record=record,
        refreshed=reason is not None,
        refresh_reason=reason,
        cache_error=cache_error,
    )


def resolve_branch_index(
    index: int,
    repo_root: Path,
    *,
    token_source: TokenSource = current_branch_token,
    max_age: timedelta | None = None,
    now: datetime | None = None,
) -> BranchResolution:
    """Resolve a branch number shown by the last branch listing."""

    key = repository_key(repo_root)
    record = load_branch_record_safe(key)
    token = token_source(repo_root)
    reason = _refresh_reason(record, token, max_age, now)
    cache_error: CacheError | None = None
    if record is None or reason is not None:
        logger.info("Refreshing numbered branches for %s (%s cache)", repo_root, reason)
        snapshot = snapshot_branches(repo_root)
        branches = assign_branch_indices(snapshot.names, snapshot.current)
        record, cache_error = store_branch_record_safe(
            key, snapshot.token, branches, repo_root=repo_root
        )
        if record is None:
            record = BranchRecord(
                repository_key=key,
                freshness_token=snapshot.token,
                branches=branches,
                repo_root=str(repo_root),
            )
    branch = record.lookup(index)
    if branch is None:
        raise OutOfRangeError(index, record.max_index)
    return BranchResolution(
        branch=branch,
        record=record,
        refreshed=reason is not None,
        refresh_reason=reason,
        cache_error=cache_error,
    )
