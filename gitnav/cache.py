"""Repository-scoped state cache for numbered status and branch listings.

Each repository gets its own directory under the cache root, named by a
stable hash of its resolved root path. Records are JSON documents that are
always replaced atomically (temp file + ``os.replace``) so a concurrent
reader sees either the previous record or the new one, never a mix.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, TypeVar

from platformdirs import user_cache_dir

from .errors import CacheCorruptError, CacheIoError, CacheUnavailableError
from .models import (
    BranchEntry,
    BranchRecord,
    CacheRecord,
    IndexedEntry,
    Section,
    StatusEntry,
    StatusKind,
)

logger = logging.getLogger(__name__)

APP_NAME = "gitnav"
CACHE_ENV = "GITNAV_CACHE_DIR"
DEFAULT_CACHE_DIR = Path(user_cache_dir(APP_NAME, appauthor=False))
CACHE_DIR = DEFAULT_CACHE_DIR
_CACHE_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "gitnav_cache_dir_override",
    default=None,
)
CACHE_VERSION = 1
FILES_FILENAME = "files.json"
BRANCHES_FILENAME = "branches.json"

_RecordT = TypeVar("_RecordT", CacheRecord, BranchRecord)


def repository_key(root: Path | str) -> str:
    """Return the stable cache key for the repository rooted at *root*."""

    canonical = Path(root).expanduser().resolve()
    return hashlib.sha1(str(canonical).encode("utf-8")).hexdigest()


def _resolve_cache_dir() -> Path:
    override = _CACHE_DIR_OVERRIDE.get()
    if override is not None:
        return override
    env_value = os.environ.get(CACHE_ENV, "").strip()
    if env_value and CACHE_DIR == DEFAULT_CACHE_DIR:
        return Path(env_value).expanduser().resolve()
    return CACHE_DIR


@contextmanager
def cache_dir_context(path: Path | str | None):
    """Temporarily override the cache directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CACHE_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CACHE_DIR_OVERRIDE.reset(token)


def set_cache_dir(path: Path | str | None) -> None:
    global CACHE_DIR
    if path is None:
        CACHE_DIR = DEFAULT_CACHE_DIR
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    CACHE_DIR = dir_path


def cache_root() -> Path:
    """Return the cache directory without creating it."""

    return _resolve_cache_dir()


def repository_cache_dir(key: str) -> Path:
    return _resolve_cache_dir() / key


def ensure_repository_cache_dir(key: str) -> Path:
    target = repository_cache_dir(key)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CacheUnavailableError(
            f"Cannot create cache directory {target}: {exc}", target
        ) from exc
    if not target.is_dir():
        raise CacheUnavailableError(f"Cache path is not a directory: {target}", target)
    return target


def record_path(key: str) -> Path:
    return repository_cache_dir(key) / FILES_FILENAME


def branch_record_path(key: str) -> Path:
    return repository_cache_dir(key) / BRANCHES_FILENAME


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _parse_timestamp(raw: object) -> datetime:
    if not isinstance(raw, str):
        raise ValueError("created_at must be a string")
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _entry_to_payload(item: IndexedEntry) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "index": item.index,
        "path": item.entry.path,
        "kind": item.entry.kind.value,
        "section": item.entry.section.value,
    }
    if item.entry.original_path:
        payload["original_path"] = item.entry.original_path
    return payload


def _payload_index(raw: Mapping[str, Any]) -> int:
    index = raw["index"]
    if not isinstance(index, int) or isinstance(index, bool):
        raise ValueError(f"index must be an integer, got {index!r}")
    return index


def _entry_from_payload(raw: Mapping[str, Any]) -> IndexedEntry:
    original = raw.get("original_path")
    entry = StatusEntry(
        path=str(raw["path"]),
        kind=StatusKind(raw["kind"]),
        section=Section(raw["section"]),
        original_path=str(original) if original else None,
    )
    return IndexedEntry(index=_payload_index(raw), entry=entry)


def _check_contiguous(indices: Iterable[int]) -> None:
    for expected, actual in enumerate(indices, start=1):
        if actual != expected:
            raise ValueError(f"indices are not contiguous: expected {expected}, got {actual}")


def record_to_payload(record: CacheRecord) -> dict[str, Any]:
    return {
        "version": CACHE_VERSION,
        "repository_key": record.repository_key,
        "repo_root": record.repo_root,
        "freshness_token": record.freshness_token,
        "created_at": _format_timestamp(record.created_at),
        "entries": [_entry_to_payload(item) for item in record.entries],
    }


def record_from_payload(raw: Mapping[str, Any]) -> CacheRecord:
    """Rebuild a ``CacheRecord``; raises ``ValueError``/``KeyError`` on bad data."""

    _check_version(raw)
    entries = tuple(_entry_from_payload(item) for item in raw["entries"])
    _check_contiguous(item.index for item in entries)
    return CacheRecord(
        repository_key=str(raw["repository_key"]),
        freshness_token=str(raw["freshness_token"]),
        entries=entries,
        created_at=_parse_timestamp(raw["created_at"]),
        repo_root=str(raw.get("repo_root") or ""),
    )


def branch_record_to_payload(record: BranchRecord) -> dict[str, Any]:
    return {
        "version": CACHE_VERSION,
        "repository_key": record.repository_key,
        "repo_root": record.repo_root,
        "freshness_token": record.freshness_token,
        "created_at": _format_timestamp(record.created_at),
        "branches": [
            {"index": item.index, "name": item.name, "is_current": item.is_current}
            for item in record.branches
        ],
    }


def branch_record_from_payload(raw: Mapping[str, Any]) -> BranchRecord:
    _check_version(raw)
    branches = tuple(
        BranchEntry(
            index=_payload_index(item),
            name=str(item["name"]),
            is_current=bool(item.get("is_current", False)),
        )
        for item in raw["branches"]
    )
    _check_contiguous(item.index for item in branches)
    return BranchRecord(
        repository_key=str(raw["repository_key"]),
        freshness_token=str(raw["freshness_token"]),
        branches=branches,
        created_at=_parse_timestamp(raw["created_at"]),
        repo_root=str(raw.get("repo_root") or ""),
    )


def _check_version(raw: Mapping[str, Any]) -> None:
    version = raw.get("version")
    if version != CACHE_VERSION:
        raise ValueError(f"unsupported cache version {version!r}")


def _atomic_write_text(target: Path, content: str) -> None:
    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def _write_payload(key: str, filename: str, payload: Mapping[str, Any]) -> Path:
    directory = ensure_repository_cache_dir(key)
    target = directory / filename
    content = json.dumps(payload, indent=2)
    try:
        _atomic_write_text(target, content)
    except OSError as exc:
        raise CacheIoError(f"Failed to write cache file {target}: {exc}", target) from exc
    logger.debug("Wrote cache record %s", target)
    return target


def _read_payload(
    target: Path,
    decode: Callable[[Mapping[str, Any]], _RecordT],
) -> _RecordT | None:
    try:
        text = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as exc:
        raise CacheCorruptError(f"Cache file {target} is corrupt: {exc}", target) from exc
    except OSError as exc:
        raise CacheIoError(f"Failed to read cache file {target}: {exc}", target) from exc
    try:
        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise ValueError("cache document is not an object")
        return decode(raw)
    except (ValueError, KeyError, TypeError, AttributeError, RecursionError) as exc:
        raise CacheCorruptError(f"Cache file {target} is corrupt: {exc}", target) from exc


def write_record(
    key: str,
    freshness_token: str,
    entries: Iterable[IndexedEntry],
    *,
    repo_root: Path | str = "",
    created_at: datetime | None = None,
) -> CacheRecord:
    """Persist a numbered snapshot, replacing any previous record for *key*."""

    record = CacheRecord(
        repository_key=key,
        freshness_token=freshness_token,
        entries=tuple(entries),
        created_at=created_at or datetime.now(timezone.utc),
        repo_root=str(repo_root),
    )
    _check_contiguous(item.index for item in record.entries)
    _write_payload(key, FILES_FILENAME, record_to_payload(record))
    return record


def _check_owner(record: _RecordT | None, key: str, target: Path) -> _RecordT | None:
    if record is not None and record.repository_key != key:
        raise CacheCorruptError(f"Cache file {target} belongs to another repository", target)
    return record


def read_record(key: str) -> CacheRecord | None:
    """Return the stored record for *key*, or None if there is none."""

    target = record_path(key)
    return _check_owner(_read_payload(target, record_from_payload), key, target)


def clear_record(key: str) -> bool:
    """Remove the status record for *key*; returns True if one existed."""

    return _unlink(record_path(key))


def write_branch_record(
    key: str,
    freshness_token: str,
    branches: Iterable[BranchEntry],
    *,
    repo_root: Path | str = "",
) -> BranchRecord:
    record = BranchRecord(
        repository_key=key,
        freshness_token=freshness_token,
        branches=tuple(branches),
        created_at=datetime.now(timezone.utc),
        repo_root=str(repo_root),
    )
    _write_payload(key, BRANCHES_FILENAME, branch_record_to_payload(record))
    return record


def read_branch_record(key: str) -> BranchRecord | None:
    target = branch_record_path(key)
    return _check_owner(_read_payload(target, branch_record_from_payload), key, target)


def clear_branch_record(key: str) -> bool:
    return _unlink(branch_record_path(key))


def _unlink(target: Path) -> bool:
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise CacheIoError(f"Failed to remove cache file {target}: {exc}", target) from exc
    _remove_if_empty(target.parent)
    return True


def _remove_if_empty(directory: Path) -> None:
    try:
        directory.rmdir()
    except OSError:
        pass


def clear_repository(key: str) -> int:
    """Remove every record for *key*, returning how many were removed."""

    removed = 0
    for clear in (clear_record, clear_branch_record):
        if clear(key):
            removed += 1
    return removed


def list_cache_entries() -> list[dict[str, object]]:
    """Return a summary of every repository that has cached listings."""

    root = _resolve_cache_dir()
    if not root.is_dir():
        return []
    entries: list[dict[str, object]] = []
    for directory in sorted(root.iterdir()):
        if not directory.is_dir():
            continue
        key = directory.name
        summary: dict[str, object] = {
            "key": key,
            "repo_root": "",
            "file_count": None,
            "branch_count": None,
            "created_at": None,
            "corrupt": False,
        }
        try:
            record = read_record(key)
        except (CacheCorruptError, CacheIoError):
            summary["corrupt"] = True
            record = None
        if record is not None:
            summary["repo_root"] = record.repo_root
            summary["file_count"] = record.max_index
            summary["created_at"] = _format_timestamp(record.created_at)
        try:
            branch_record = read_branch_record(key)
        except (CacheCorruptError, CacheIoError):
            summary["corrupt"] = True
            branch_record = None
        if branch_record is not None:
            summary["repo_root"] = summary["repo_root"] or branch_record.repo_root
            summary["branch_count"] = branch_record.max_index
            if summary["created_at"] is None:
                summary["created_at"] = _format_timestamp(branch_record.created_at)
        entries.append(summary)
    return entries


def clear_all_cache() -> int:
    """Remove every cached repository directory, returning how many were removed."""

    root = _resolve_cache_dir()
    if not root.is_dir():
        return 0
    removed = 0
    for directory in root.iterdir():
        if not directory.is_dir():
            continue
        try:
            shutil.rmtree(directory)
        except OSError as exc:
            raise CacheIoError(f"Failed to remove {directory}: {exc}", directory) from exc
        removed += 1
    return removed
