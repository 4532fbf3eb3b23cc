"""Decide whether a cached numbered listing may still be trusted."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable

from .models import BranchRecord, CacheRecord

TOKEN_SCHEME = "gitnav-token-v1"


def record_age(record: CacheRecord | BranchRecord, now: datetime | None = None) -> timedelta:
    current = now or datetime.now(timezone.utc)
    return current - record.created_at


def is_fresh(
    cached: CacheRecord | BranchRecord,
    current_token: str,
    *,
    max_age: timedelta | None = None,
    now: datetime | None = None,
) -> bool:
    """Return True if *cached* matches *current_token* and is young enough.

    ``max_age=None`` means records never expire by age. A record whose
    timestamp lies in the future (clock skew) is treated as stale when an
    age limit is configured.
    """

    if cached.freshness_token != current_token:
        return False
    if max_age is None:
        return True
    age = record_age(cached, now)
    if age < timedelta(0):
        return False
    return age <= max_age


CONTROL_FILES: tuple[str, ...] = (
    "index",
    "HEAD",
    "MERGE_HEAD",
    "CHERRY_PICK_HEAD",
    "REBASE_HEAD",
)


def _stat_signature(path: Path) -> str:
    try:
        stat = path.stat()
    except FileNotFoundError:
        return "missing"
    except OSError:
        return "error"
    return f"{stat.st_mtime_ns}:{stat.st_size}"


def control_file_signatures(git_dir: Path | None) -> list[str]:
    """Stat the git control files whose changes can alter a status snapshot."""

    if git_dir is None:
        return ["git_dir:none"]
    return [f"{name}={_stat_signature(git_dir / name)}" for name in CONTROL_FILES]


def build_token(parts: Iterable[str]) -> str:
    """Digest the given signals into an opaque freshness token."""

    digest = hashlib.sha1()
    digest.update(TOKEN_SCHEME.encode("utf-8"))
    for part in parts:
        digest.update(b"\0")
        digest.update(part.encode("utf-8", errors="surrogateescape"))
    return digest.hexdigest()
