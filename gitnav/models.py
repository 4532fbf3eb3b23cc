"""Data types describing a numbered status snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import total_ordering


class Section(str, Enum):
    STAGED = "staged"
    NOT_STAGED = "not_staged"
    UNTRACKED = "untracked"
    CONFLICTS = "conflicts"

    @property
    def rank(self) -> int:
        return SECTION_ORDER.index(self)


SECTION_ORDER: tuple[Section, ...] = (
    Section.STAGED,
    Section.NOT_STAGED,
    Section.UNTRACKED,
    Section.CONFLICTS,
)


class StatusKind(str, Enum):
    STAGED_NEW = "staged_new"
    STAGED_MODIFIED = "staged_modified"
    STAGED_DELETED = "staged_deleted"
    STAGED_RENAMED = "staged_renamed"
    UNSTAGED_MODIFIED = "unstaged_modified"
    UNSTAGED_DELETED = "unstaged_deleted"
    UNTRACKED = "untracked"
    CONFLICTED = "conflicted"

    @property
    def section(self) -> Section:
        return _KIND_SECTIONS[self]

    @property
    def description(self) -> str:
        return _KIND_DESCRIPTIONS[self]

    @property
    def code(self) -> str:
        return _KIND_CODES[self]

    @property
    def is_deletion(self) -> bool:
        return self in (StatusKind.STAGED_DELETED, StatusKind.UNSTAGED_DELETED)


_KIND_SECTIONS: dict[StatusKind, Section] = {
    StatusKind.STAGED_NEW: Section.STAGED,
    StatusKind.STAGED_MODIFIED: Section.STAGED,
    StatusKind.STAGED_DELETED: Section.STAGED,
    StatusKind.STAGED_RENAMED: Section.STAGED,
    StatusKind.UNSTAGED_MODIFIED: Section.NOT_STAGED,
    StatusKind.UNSTAGED_DELETED: Section.NOT_STAGED,
    StatusKind.UNTRACKED: Section.UNTRACKED,
    StatusKind.CONFLICTED: Section.CONFLICTS,
}

_KIND_DESCRIPTIONS: dict[StatusKind, str] = {
    StatusKind.STAGED_NEW: "new",
    StatusKind.STAGED_MODIFIED: "modified",
    StatusKind.STAGED_DELETED: "deleted",
    StatusKind.STAGED_RENAMED: "renamed",
    StatusKind.UNSTAGED_MODIFIED: "modified",
    StatusKind.UNSTAGED_DELETED: "deleted",
    StatusKind.UNTRACKED: "untracked",
    StatusKind.CONFLICTED: "both modified",
}

_KIND_CODES: dict[StatusKind, str] = {
    StatusKind.STAGED_NEW: "A",
    StatusKind.STAGED_MODIFIED: "M",
    StatusKind.STAGED_DELETED: "D",
    StatusKind.STAGED_RENAMED: "R",
    StatusKind.UNSTAGED_MODIFIED: "M",
    StatusKind.UNSTAGED_DELETED: "D",
    StatusKind.UNTRACKED: "??",
    StatusKind.CONFLICTED: "UU",
}


@total_ordering
@dataclass(frozen=True, slots=True)
class StatusEntry:
    """One changed or untracked file, as classified by the status collector.

    Entries compare and sort by ``(section, path)``; a path may appear once
    per section, e.g. a file with both staged and unstaged edits.
    """

    path: str
    kind: StatusKind
    section: Section
    original_path: str | None = None

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("StatusEntry.path must not be empty")
        if self.kind.section is not self.section:
            raise ValueError(
                f"Status kind {self.kind.value} does not belong to section {self.section.value}"
            )

    @classmethod
    def of(cls, path: str, kind: StatusKind, original_path: str | None = None) -> "StatusEntry":
        return cls(path=path, kind=kind, section=kind.section, original_path=original_path)

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.section.rank, self.path)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StatusEntry):
            return NotImplemented
        return self.sort_key < other.sort_key


@dataclass(frozen=True, slots=True)
class IndexedEntry:
    index: int
    entry: StatusEntry


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class CacheRecord:
    """The numbered snapshot persisted by the most recent status listing."""

    repository_key: str
    freshness_token: str
    entries: tuple[IndexedEntry, ...]
    created_at: datetime = field(default_factory=utc_now)
    repo_root: str = ""

    @property
    def max_index(self) -> int:
        return len(self.entries)

    def lookup(self, index: int) -> StatusEntry | None:
        # Indices are the contiguous run 1..N, so position == index - 1.
        if 1 <= index <= len(self.entries):
            return self.entries[index - 1].entry
        return None


@dataclass(frozen=True, slots=True)
class BranchEntry:
    index: int
    name: str
    is_current: bool = False


@dataclass(frozen=True, slots=True)
class BranchRecord:
    repository_key: str
    freshness_token: str
    branches: tuple[BranchEntry, ...]
    created_at: datetime = field(default_factory=utc_now)
    repo_root: str = ""

    @property
    def max_index(self) -> int:
        return len(self.branches)

    def lookup(self, index: int) -> BranchEntry | None:
        if 1 <= index <= len(self.branches):
            return self.branches[index - 1]
        return None
