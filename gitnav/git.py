"""Thin subprocess wrapper around the git executable."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .errors import CollectorError, GitCommandError, NotInRepositoryError
from .models import StatusEntry, StatusKind

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 30.0
UNTRACKED_MODES: tuple[str, ...] = ("all", "normal", "no")

_STAGED_KINDS: dict[str, StatusKind] = {
    "A": StatusKind.STAGED_NEW,
    "C": StatusKind.STAGED_NEW,
    "M": StatusKind.STAGED_MODIFIED,
    "T": StatusKind.STAGED_MODIFIED,
    "D": StatusKind.STAGED_DELETED,
    "R": StatusKind.STAGED_RENAMED,
}
_UNSTAGED_KINDS: dict[str, StatusKind] = {
    "M": StatusKind.UNSTAGED_MODIFIED,
    "T": StatusKind.UNSTAGED_MODIFIED,
    "A": StatusKind.UNSTAGED_MODIFIED,
    "D": StatusKind.UNSTAGED_DELETED,
}


@dataclass(slots=True)
class StatusHeader:
    branch: str | None = None
    oid: str | None = None
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0

    @property
    def detached(self) -> bool:
        return self.branch is None and self.oid is not None

    @property
    def has_commits(self) -> bool:
        return self.oid is not None


def _git_env() -> dict[str, str]:
    env = dict(os.environ)
    # Status queries must not rewrite the index, or the freshness token of
    # one invocation would invalidate the next.
    env["GIT_OPTIONAL_LOCKS"] = "0"
    env.setdefault("LC_ALL", "C")
    return env


def run_git(
    root: Path,
    args: Sequence[str],
    *,
    check: bool = True,
    timeout: float = GIT_TIMEOUT_SECONDS,
) -> subprocess.CompletedProcess[str]:
    """Run ``git -C root <args>`` capturing text output."""

    command = ["git", "-C", str(root), *args]
    logger.debug("Running %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            check=False,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            timeout=timeout,
            env=_git_env(),
        )
    except FileNotFoundError as exc:
        raise CollectorError("git executable not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise CollectorError(f"git {args[0]} timed out after {timeout:.0f}s") from exc
    if check and completed.returncode != 0:
        raise GitCommandError(args, completed.returncode, completed.stderr or "")
    return completed


def find_repository_root(path: Path | str) -> Path:
    """Return the top-level directory of the work tree containing *path*."""

    start = Path(path).expanduser()
    try:
        completed = run_git(start, ["rev-parse", "--show-toplevel"])
    except GitCommandError as exc:
        raise NotInRepositoryError(start.resolve()) from exc
    top = completed.stdout.strip()
    if not top:
        raise NotInRepositoryError(start.resolve())
    return Path(top).resolve()


def resolve_git_dir(root: Path) -> Path | None:
    completed = run_git(root, ["rev-parse", "--absolute-git-dir"], check=False)
    if completed.returncode != 0:
        return None
    value = completed.stdout.strip()
    return Path(value) if value else None


def status_porcelain(root: Path, untracked: str = "all") -> str:
    if untracked not in UNTRACKED_MODES:
        raise ValueError(f"Unsupported untracked mode: {untracked}")
    completed = run_git(
        root,
        [
            "status",
            "--porcelain=v2",
            "--branch",
            "-z",
            f"--untracked-files={untracked}",
        ],
    )
    return completed.stdout


def _parse_header(line: str, header: StatusHeader) -> None:
    parts = line.split(" ", 2)
    if len(parts) < 3:
        return
    _, key, value = parts
    if key == "branch.oid":
        header.oid = None if value == "(initial)" else value
    elif key == "branch.head":
        header.branch = None if value == "(detached)" else value
    elif key == "branch.upstream":
        header.upstream = value
    elif key == "branch.ab":
        for token in value.split():
            if token.startswith("+"):
                header.ahead = int(token[1:])
            elif token.startswith("-"):
                header.behind = int(token[1:])


def _entries_for_xy(xy: str, path: str, original: str | None = None) -> list[StatusEntry]:
    entries: list[StatusEntry] = []
    staged = _STAGED_KINDS.get(xy[0])
    if staged is not None:
        entries.append(StatusEntry.of(path, staged, original))
    unstaged = _UNSTAGED_KINDS.get(xy[1])
    if unstaged is not None:
        entries.append(StatusEntry.of(path, unstaged))
    return entries


def parse_porcelain_v2(output: str) -> tuple[StatusHeader, list[StatusEntry]]:
    """Parse ``git status --porcelain=v2 --branch -z`` output."""

    header = StatusHeader()
    entries: list[StatusEntry] = []
    records = output.split("\0")
    position = 0
    while position < len(records):
        record = records[position]
        position += 1
        if not record:
            continue
        tag = record[0]
        if tag == "#":
            _parse_header(record, header)
        elif tag == "1":
            fields = record.split(" ", 8)
            if len(fields) == 9:
                entries.extend(_entries_for_xy(fields[1], fields[8]))
        elif tag == "2":
            fields = record.split(" ", 9)
            # With -z the original path is the following NUL-separated record.
            original = records[position] if position < len(records) else None
            position += 1
            if len(fields) == 10:
                entries.extend(_entries_for_xy(fields[1], fields[9], original or None))
        elif tag == "u":
            fields = record.split(" ", 10)
            if len(fields) == 11:
                entries.append(StatusEntry.of(fields[10], StatusKind.CONFLICTED))
        elif tag == "?":
            entries.append(StatusEntry.of(record[2:], StatusKind.UNTRACKED))
        # "!" (ignored) records are not part of the snapshot.
    return header, entries


def head_commit_summary(root: Path) -> tuple[str, str] | None:
    """Return ``(short_hash, subject)`` of HEAD, or None before the first commit."""

    completed = run_git(root, ["log", "-1", "--format=%h%x00%s"], check=False)
    if completed.returncode != 0 or not completed.stdout.strip():
        return None
    short_hash, _, subject = completed.stdout.strip().partition("\0")
    return short_hash, subject


def has_head(root: Path) -> bool:
    completed = run_git(root, ["rev-parse", "--verify", "--quiet", "HEAD"], check=False)
    return completed.returncode == 0


def local_branch_listing(root: Path) -> str:
    completed = run_git(
        root,
        ["for-each-ref", "--format=%(refname:short)%00%(HEAD)", "refs/heads"],
    )
    return completed.stdout


def parse_branch_listing(output: str) -> tuple[list[str], str | None]:
    names: list[str] = []
    current: str | None = None
    for line in output.splitlines():
        if not line:
            continue
        name, _, marker = line.partition("\0")
        names.append(name)
        if marker.strip() == "*":
            current = name
    return names, current
