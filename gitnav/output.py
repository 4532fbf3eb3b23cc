"""Helpers for formatting CLI output safely across terminals."""

from __future__ import annotations

import sys
from typing import Sequence

from rich.console import Console
from rich.markup import escape

from .indexing import group_by_section
from .models import BranchEntry, IndexedEntry, Section, StatusKind
from .services.status_service import HeadSummary
from .text import Messages, Styles

_SECTION_STYLES: dict[Section, str] = {
    Section.STAGED: Styles.STAGED,
    Section.NOT_STAGED: Styles.NOT_STAGED,
    Section.UNTRACKED: Styles.UNTRACKED,
    Section.CONFLICTS: Styles.CONFLICT,
}


def _encoding_supports(text: str, encoding: str | None) -> bool:
    if not encoding:
        return False
    try:
        text.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return False
    return True


def supports_unicode_output(console: Console | None = None) -> bool:
    sample = Messages.SECTION_MARKER
    if console is not None and _encoding_supports(sample, console.encoding):
        return True
    return _encoding_supports(sample, sys.stdout.encoding)


def section_marker(console: Console | None = None) -> str:
    if supports_unicode_output(console):
        return Messages.SECTION_MARKER
    return Messages.SECTION_MARKER_ASCII


def entry_style(kind: StatusKind) -> str:
    if kind is StatusKind.UNSTAGED_DELETED:
        return Styles.DELETED
    return _SECTION_STYLES[kind.section]


def format_divergence(ahead: int, behind: int) -> str:
    """Return ``(+a/-b)``, ``(+a)`` or ``(-b)``; empty when in sync."""
    if ahead and behind:
        return f"(+{ahead}/-{behind})"
    if ahead:
        return f"(+{ahead})"
    if behind:
        return f"(-{behind})"
    return ""


def format_header_lines(summary: HeadSummary) -> list[str]:
    branch = escape(summary.branch_label)
    divergence = format_divergence(summary.ahead, summary.behind) if summary.upstream else ""
    if divergence:
        branch = f"{branch} {divergence}"
    lines = [Messages.HEADER_BRANCH.format(branch=branch)]
    if summary.short_hash:
        lines.append(
            Messages.HEADER_PARENT.format(
                short_hash=escape(summary.short_hash),
                subject=escape(summary.subject or ""),
            )
        )
    else:
        lines.append(Messages.HEADER_PARENT_NONE)
    return lines


def format_entry_line(item: IndexedEntry) -> str:
    entry = item.entry
    style = entry_style(entry.kind)
    path = escape(entry.path)
    if entry.original_path:
        path = f"{escape(entry.original_path)} -> {path}"
    return (
        f"   [{style}]({entry.kind.description})[/{style}] "
        f"[{Styles.INDEX}]\\[{item.index}][/{Styles.INDEX}] "
        f"[{style}]{path}[/{style}]"
    )


def format_status_lines(
    indexed: Sequence[IndexedEntry],
    console: Console | None = None,
) -> list[str]:
    marker = section_marker(console)
    lines: list[str] = []
    for section, items in group_by_section(indexed):
        title = Messages.SECTION_TITLES[section.value]
        lines.append(f"[{Styles.HEADING}]{marker} {title}[/{Styles.HEADING}]")
        lines.extend(format_entry_line(item) for item in items)
        lines.append("")
    if lines:
        lines.pop()
    return lines


def format_branch_lines(branches: Sequence[BranchEntry]) -> list[str]:
    lines: list[str] = []
    for branch in branches:
        name = escape(branch.name)
        if branch.is_current:
            lines.append(
                f" [{Styles.CURRENT_BRANCH}]* \\[{branch.index}] {name}[/{Styles.CURRENT_BRANCH}]"
            )
        else:
            lines.append(f"   [{Styles.INDEX}]\\[{branch.index}][/{Styles.INDEX}] {name}")
    return lines
