from rich.console import Console

from gitnav import output
from gitnav.indexing import assign_branch_indices, assign_indices
from gitnav.models import StatusEntry, StatusKind
from gitnav.services.status_service import HeadSummary


def _render(lines):
    console = Console(record=True, width=120, color_system=None)
    for line in lines:
        console.print(line, highlight=False)
    return console.export_text()


def test_status_lines_group_sections_with_indices(monkeypatch):
    monkeypatch.setattr(output, "supports_unicode_output", lambda console=None: True)
    indexed = assign_indices(
        [
            StatusEntry.of("a.txt", StatusKind.STAGED_NEW),
            StatusEntry.of("c.rs", StatusKind.UNSTAGED_MODIFIED),
            StatusEntry.of("d.txt", StatusKind.UNTRACKED),
            StatusEntry.of("x.c", StatusKind.CONFLICTED),
        ]
    )

    text = _render(output.format_status_lines(indexed))

    assert "➤ Staged:" in text
    assert "   (new) [1] a.txt" in text
    assert "➤ Not staged:" in text
    assert "   (modified) [2] c.rs" in text
    assert "   (untracked) [3] d.txt" in text
    assert "➤ Unmerged:" in text
    assert "   (both modified) [4] x.c" in text


def test_paths_with_markup_are_escaped():
    indexed = assign_indices([StatusEntry.of("[bold]odd[/bold].txt", StatusKind.UNTRACKED)])

    text = _render(output.format_status_lines(indexed))

    assert "[bold]odd[/bold].txt" in text


def test_renamed_entry_shows_source():
    indexed = assign_indices([StatusEntry.of("new.py", StatusKind.STAGED_RENAMED, "old.py")])

    text = _render([output.format_entry_line(indexed[0])])

    assert "(renamed) [1] old.py -> new.py" in text


def test_header_lines():
    summary = HeadSummary(
        branch_label="main",
        ahead=2,
        behind=0,
        short_hash="abc1234",
        subject="Add parser",
        upstream="origin/main",
    )

    text = _render(output.format_header_lines(summary))

    assert "Branch: main (+2)\n" in text
    assert "Parent: abc1234 Add parser" in text


def test_header_without_commits():
    text = _render(output.format_header_lines(HeadSummary(branch_label="main")))

    assert "Branch: main\n" in text
    assert "Parent: - no commits yet -" in text


def test_branch_lines_mark_current():
    text = _render(output.format_branch_lines(assign_branch_indices(["dev", "main"], "main")))

    assert "   [1] dev" in text
    assert " * [2] main" in text


def test_ascii_marker_when_encoding_lacks_unicode(monkeypatch):
    monkeypatch.setattr(output, "supports_unicode_output", lambda console=None: False)
    assert output.section_marker() == ">"


def test_header_omits_divergence_when_in_sync():
    summary = HeadSummary(branch_label="main", short_hash="abc1234", subject="x", upstream="origin/main")

    text = _render(output.format_header_lines(summary))

    assert "Branch: main\n" in text


def test_divergence_shows_only_nonzero_sides():
    assert output.format_divergence(3, 1) == "(+3/-1)"
    assert output.format_divergence(3, 0) == "(+3)"
    assert output.format_divergence(0, 4) == "(-4)"
    assert output.format_divergence(0, 0) == ""
