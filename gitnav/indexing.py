"""Deterministic assignment of display indices to a status snapshot."""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import SECTION_ORDER, BranchEntry, IndexedEntry, Section, StatusEntry


def order_entries(entries: Iterable[StatusEntry]) -> list[StatusEntry]:
    """Return *entries* grouped by section in display order, sorted by path.

    The result depends only on the multiset of entries, never on the order
    git or the filesystem happened to report them in.
    """

    seen: set[tuple[Section, str]] = set()
    ordered: list[StatusEntry] = []
    for entry in sorted(entries, key=lambda item: (item.sort_key, item.kind.value)):
        key = (entry.section, entry.path)
        if key in seen:
            raise ValueError(
                f"Duplicate status entry for {entry.path!r} in section {entry.section.value}"
            )
        seen.add(key)
        ordered.append(entry)
    return ordered


def assign_indices(entries: Iterable[StatusEntry]) -> tuple[IndexedEntry, ...]:
    """Number a snapshot 1..N across the sections in their fixed order."""

    return tuple(
        IndexedEntry(index=position, entry=entry)
        for position, entry in enumerate(order_entries(entries), start=1)
    )


def group_by_section(
    indexed: Sequence[IndexedEntry],
) -> list[tuple[Section, list[IndexedEntry]]]:
    """Split an indexed snapshot into its non-empty sections, in display order."""

    groups: dict[Section, list[IndexedEntry]] = {section: [] for section in SECTION_ORDER}
    for item in indexed:
        groups[item.entry.section].append(item)
    return [(section, groups[section]) for section in SECTION_ORDER if groups[section]]


def assign_branch_indices(
    names: Iterable[str],
    current: str | None,
) -> tuple[BranchEntry, ...]:
    unique = sorted(set(names))
    return tuple(
        BranchEntry(index=position, name=name, is_current=name == current)
        for position, name in enumerate(unique, start=1)
    )
