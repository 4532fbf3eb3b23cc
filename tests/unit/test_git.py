from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from gitnav import git
from gitnav.errors import CollectorError, GitCommandError, NotInRepositoryError
from gitnav.models import StatusKind


def _z(*records: str) -> str:
    return "\0".join(records) + "\0"


SAMPLE = _z(
    "# branch.oid 1234567890abcdef1234567890abcdef12345678",
    "# branch.head main",
    "# branch.upstream origin/main",
    "# branch.ab +2 -1",
    "1 A. N... 000000 100644 100644 0000000000000000000000000000000000000000 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 a.txt",
    "1 MM N... 100644 100644 100644 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 dir/with space.rs",
    "1 .D N... 100644 100644 000000 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 gone.txt",
    "2 R. N... 100644 100644 100644 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 R100 new name.py",
    "old name.py",
    "u UU N... 100644 100644 100644 100644 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 e69de29bb2d1d6434b8b29ae775ad8c2e48c5391 clash.c",
    "? notes.md",
    "! build/",
)


def test_parse_porcelain_v2_header():
    header, _ = git.parse_porcelain_v2(SAMPLE)

    assert header.branch == "main"
    assert header.upstream == "origin/main"
    assert (header.ahead, header.behind) == (2, 1)
    assert header.has_commits is True
    assert header.detached is False


def test_parse_porcelain_v2_entries():
    _, entries = git.parse_porcelain_v2(SAMPLE)

    summary = [(entry.path, entry.kind, entry.original_path) for entry in entries]
    assert summary == [
        ("a.txt", StatusKind.STAGED_NEW, None),
        ("dir/with space.rs", StatusKind.STAGED_MODIFIED, None),
        ("dir/with space.rs", StatusKind.UNSTAGED_MODIFIED, None),
        ("gone.txt", StatusKind.UNSTAGED_DELETED, None),
        ("new name.py", StatusKind.STAGED_RENAMED, "old name.py"),
        ("clash.c", StatusKind.CONFLICTED, None),
        ("notes.md", StatusKind.UNTRACKED, None),
    ]


def test_parse_porcelain_v2_initial_and_detached():
    header, entries = git.parse_porcelain_v2(
        _z("# branch.oid (initial)", "# branch.head (detached)")
    )

    assert header.oid is None
    assert header.branch is None
    assert header.has_commits is False
    assert entries == []


def test_parse_empty_output():
    header, entries = git.parse_porcelain_v2("")
    assert entries == []
    assert header.branch is None


def test_parse_branch_listing():
    names, current = git.parse_branch_listing("dev\0 \nmain\0*\nrelease/1.0\0 \n")

    assert names == ["dev", "main", "release/1.0"]
    assert current == "main"


def test_parse_branch_listing_without_current():
    names, current = git.parse_branch_listing("")
    assert names == []
    assert current is None


def test_run_git_raises_on_failure(monkeypatch, tmp_path):
    def fake_run(command, **kwargs):
        assert command[:3] == ["git", "-C", str(tmp_path)]
        assert kwargs["env"]["GIT_OPTIONAL_LOCKS"] == "0"
        return subprocess.CompletedProcess(command, 128, "", "fatal: bad revision\n")

    monkeypatch.setattr(git.subprocess, "run", fake_run)

    with pytest.raises(GitCommandError) as excinfo:
        git.run_git(tmp_path, ["log", "-1"])

    assert excinfo.value.returncode == 128
    assert excinfo.value.git_args == ("log", "-1")
    assert str(excinfo.value) == "git log failed: fatal: bad revision"


def test_run_git_missing_executable(monkeypatch, tmp_path):
    def fake_run(command, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(git.subprocess, "run", fake_run)

    with pytest.raises(CollectorError, match="not found"):
        git.run_git(tmp_path, ["status"])


def test_find_repository_root_outside_repo(monkeypatch, tmp_path):
    def fake_run(command, **kwargs):
        return subprocess.CompletedProcess(command, 128, "", "fatal: not a git repository")

    monkeypatch.setattr(git.subprocess, "run", fake_run)

    with pytest.raises(NotInRepositoryError):
        git.find_repository_root(tmp_path)


def test_find_repository_root(monkeypatch, tmp_path):
    def fake_run(command, **kwargs):
        return subprocess.CompletedProcess(command, 0, f"{tmp_path}\n", "")

    monkeypatch.setattr(git.subprocess, "run", fake_run)

    assert git.find_repository_root(tmp_path / "sub") == Path(tmp_path).resolve()


def test_status_porcelain_rejects_unknown_mode(tmp_path):
    with pytest.raises(ValueError):
        git.status_porcelain(tmp_path, "sometimes")


def test_head_commit_summary(monkeypatch, tmp_path):
    def fake_run(command, **kwargs):
        return subprocess.CompletedProcess(command, 0, "abc1234\0Initial import\n", "")

    monkeypatch.setattr(git.subprocess, "run", fake_run)

    assert git.head_commit_summary(tmp_path) == ("abc1234", "Initial import")
