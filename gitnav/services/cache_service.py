"""Shared helpers that downgrade recoverable cache failures to cache misses."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from ..cache import (
    read_branch_record,
    read_record,
    write_branch_record,
    write_record,
)
from ..errors import CacheError, CacheUnavailableError
from ..models import BranchEntry, BranchRecord, CacheRecord, IndexedEntry

logger = logging.getLogger(__name__)


def load_record_safe(key: str) -> CacheRecord | None:
    """Load the status record, treating unreadable or corrupt files as absent."""

    try:
        return read_record(key)
    except CacheError as exc:
        logger.warning("Ignoring unusable status cache: %s", exc)
        return None


def load_branch_record_safe(key: str) -> BranchRecord | None:
    try:
        return read_branch_record(key)
    except CacheError as exc:
        logger.warning("Ignoring unusable branch cache: %s", exc)
        return None


def store_record_safe(
    key: str,
    token: str,
    entries: Iterable[IndexedEntry],
    *,
    repo_root: Path | str,
) -> tuple[CacheRecord | None, CacheError | None]:
    """Persist a numbered snapshot, returning the failure instead of raising.

    ``CacheUnavailableError`` is returned like any other failure; callers
    decide whether a missing cache directory is fatal for them.
    """

    try:
        return write_record(key, token, entries, repo_root=repo_root), None
    except CacheUnavailableError as exc:
        logger.error("Cache directory unavailable: %s", exc)
        return None, exc
    except CacheError as exc:
        logger.warning("Could not persist status cache: %s", exc)
        return None, exc


def store_branch_record_safe(
    key: str,
    token: str,
    branches: Iterable[BranchEntry],
    *,
    repo_root: Path | str,
) -> tuple[BranchRecord | None, CacheError | None]:
    try:
        return write_branch_record(key, token, branches, repo_root=repo_root), None
    except CacheError as exc:
        logger.warning("Could not persist branch cache: %s", exc)
        return None, exc
