from datetime import timezone

import pytest

from gitnav.models import (
    SECTION_ORDER,
    CacheRecord,
    IndexedEntry,
    Section,
    StatusEntry,
    StatusKind,
)


def test_every_kind_maps_to_a_section():
    for kind in StatusKind:
        assert kind.section in SECTION_ORDER
        assert kind.description
        assert kind.code


def test_section_ranks_follow_display_order():
    assert [section.rank for section in SECTION_ORDER] == [0, 1, 2, 3]
    assert Section.STAGED.rank < Section.CONFLICTS.rank


def test_entry_rejects_mismatched_section():
    with pytest.raises(ValueError):
        StatusEntry(path="a.txt", kind=StatusKind.UNTRACKED, section=Section.STAGED)


def test_entry_rejects_empty_path():
    with pytest.raises(ValueError):
        StatusEntry.of("", StatusKind.UNTRACKED)


def test_entries_are_immutable():
    entry = StatusEntry.of("a.txt", StatusKind.STAGED_NEW)
    with pytest.raises(AttributeError):
        entry.path = "b.txt"  # type: ignore[misc]


def test_entries_sort_by_section_then_path():
    untracked = StatusEntry.of("a.txt", StatusKind.UNTRACKED)
    staged = StatusEntry.of("z.txt", StatusKind.STAGED_MODIFIED)
    other_staged = StatusEntry.of("b.txt", StatusKind.STAGED_DELETED)

    assert sorted([untracked, staged, other_staged]) == [other_staged, staged, untracked]


def test_deletion_kinds():
    assert StatusKind.STAGED_DELETED.is_deletion
    assert StatusKind.UNSTAGED_DELETED.is_deletion
    assert not StatusKind.STAGED_RENAMED.is_deletion


def test_cache_record_lookup_and_bounds():
    entries = (
        IndexedEntry(1, StatusEntry.of("a.txt", StatusKind.STAGED_NEW)),
        IndexedEntry(2, StatusEntry.of("b.txt", StatusKind.UNTRACKED)),
    )
    record = CacheRecord(repository_key="k", freshness_token="t", entries=entries)

    assert record.max_index == 2
    assert record.lookup(2).path == "b.txt"
    assert record.lookup(0) is None
    assert record.lookup(3) is None
    assert record.created_at.tzinfo == timezone.utc
