"""Command line interface for gitnav."""

from __future__ import annotations

import sys
from functools import partial
from pathlib import Path
from typing import NoReturn, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__, config as config_module
from .cache import cache_root, clear_all_cache, clear_repository, list_cache_entries, repository_key
from .config import Config, load_config
from .errors import ActionError, CacheUnavailableError, GitnavError
from .git import find_repository_root
from .index_parser import looks_like_index_expression, parse_index_args
from .logging_config import setup_logging
from .models import IndexedEntry
from .output import format_branch_lines, format_header_lines, format_status_lines
from .services.action_service import (
    add_entries,
    checkout_branch,
    checkout_entries,
    create_branch,
    diff_entry,
    reset_entries,
)
from .services.config_service import apply_config_updates, get_config_snapshot
from .services.resolve_service import REFRESH_STALE, Resolution, resolve_branch_index, resolve_indices
from .services.status_service import collect_status, current_token, describe_head, list_branches, list_status
from .text import Messages, Styles

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()

# Let negative tokens such as "-1" reach the index parser.
_INDEX_COMMAND_SETTINGS = {"ignore_unknown_options": True}


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _plural(count: int, singular: str = "", plural: str = "s") -> str:
    return singular if count == 1 else plural


def _fail(exc: BaseException | str) -> NoReturn:
    console.print(_styled(escape(str(exc)), Styles.ERROR))
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"gitnav v{__version__}")
        raise typer.Exit()


def _parse_boolean(value: str) -> bool:
    token = value.strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))


def _repository(path: Path | None) -> Path:
    try:
        return find_repository_root(path or Path.cwd())
    except GitnavError as exc:
        _fail(exc)


def _print_listing(indexed: Sequence[IndexedEntry]) -> None:
    if not indexed:
        console.print(_styled(Messages.INFO_CLEAN, Styles.INFO))
        return
    for line in format_status_lines(indexed, console):
        console.print(line, highlight=False)


def _show_status(repo_root: Path, cfg: Config) -> None:
    listing = list_status(repo_root, untracked=cfg.untracked_files)
    if cfg.show_header:
        summary = describe_head(repo_root, listing.snapshot.header)
        for line in format_header_lines(summary):
            console.print(line, highlight=False)
        console.print()
    _print_listing(listing.indexed)
    if isinstance(listing.cache_error, CacheUnavailableError):
        _fail(listing.cache_error)
    if listing.cache_error is not None:
        console.print(
            _styled(
                escape(Messages.WARNING_CACHE_NOT_SAVED.format(reason=listing.cache_error)),
                Styles.WARNING,
            )
        )


def _resolve(args: Sequence[str], repo_root: Path, cfg: Config) -> Resolution:
    indices = parse_index_args(args)
    resolution = resolve_indices(
        indices,
        repo_root,
        collector=partial(collect_status, untracked=cfg.untracked_files),
        token_source=partial(current_token, untracked=cfg.untracked_files),
        max_age=cfg.max_age,
    )
    if resolution.refresh_reason == REFRESH_STALE:
        console.print(_styled(Messages.WARNING_REFRESHED, Styles.WARNING))
        _print_listing(resolution.record.entries)
        console.print()
    if resolution.cache_error is not None:
        console.print(
            _styled(
                escape(Messages.WARNING_CACHE_NOT_SAVED.format(reason=resolution.cache_error)),
                Styles.WARNING,
            )
        )
    return resolution


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help=Messages.HELP_VERSION,
    ),
    debug: bool = typer.Option(False, "--debug", help=Messages.HELP_DEBUG),
) -> None:
    """Global Typer callback for shared options."""
    setup_logging(debug)


@app.command(help=Messages.HELP_STATUS)
def status(
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    repo_root = _repository(path)
    try:
        _show_status(repo_root, load_config())
    except GitnavError as exc:
        _fail(exc)


@app.command(help=Messages.HELP_ADD, context_settings=_INDEX_COMMAND_SETTINGS)
def add(
    indices: list[str] = typer.Argument(..., help=Messages.HELP_INDICES),
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    repo_root = _repository(path)
    cfg = load_config()
    try:
        resolution = _resolve(indices, repo_root, cfg)
        result = add_entries(repo_root, resolution.entries)
        count = len(result.paths)
        console.print(
            _styled(Messages.INFO_ADDED.format(count=count, plural=_plural(count)), Styles.SUCCESS)
        )
        _show_status(repo_root, cfg)
    except GitnavError as exc:
        _fail(exc)


@app.command(help=Messages.HELP_RESET, context_settings=_INDEX_COMMAND_SETTINGS)
def reset(
    indices: list[str] = typer.Argument(..., help=Messages.HELP_INDICES),
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    repo_root = _repository(path)
    cfg = load_config()
    try:
        resolution = _resolve(indices, repo_root, cfg)
        result = reset_entries(repo_root, resolution.entries)
        for entry in result.skipped:
            console.print(
                _styled(escape(Messages.INFO_SKIPPED_UNTRACKED.format(path=entry.path)), Styles.WARNING)
            )
        count = len(result.paths)
        console.print(
            _styled(Messages.INFO_RESET.format(count=count, plural=_plural(count)), Styles.SUCCESS)
        )
        _show_status(repo_root, cfg)
    except GitnavError as exc:
        _fail(exc)


@app.command(help=Messages.HELP_DIFF, context_settings=_INDEX_COMMAND_SETTINGS)
def diff(
    indices: list[str] = typer.Argument(..., help=Messages.HELP_INDICES),
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    repo_root = _repository(path)
    cfg = load_config()
    try:
        resolution = _resolve(indices, repo_root, cfg)
        for index, entry in resolution.selected:
            output = diff_entry(repo_root, entry, color=cfg.diff_color)
            if output is None:
                console.print(
                    _styled(
                        escape(Messages.INFO_DIFF_UNTRACKED.format(index=index, path=entry.path)),
                        Styles.INFO,
                    )
                )
            elif not output.strip():
                console.print(
                    _styled(
                        escape(Messages.INFO_DIFF_EMPTY.format(index=index, path=entry.path)),
                        Styles.INFO,
                    )
                )
            else:
                # git already colored the text; bypass rich so escapes pass through.
                typer.echo(output, nl=not output.endswith("\n"))
    except GitnavError as exc:
        _fail(exc)


@app.command(help=Messages.HELP_CHECKOUT, context_settings=_INDEX_COMMAND_SETTINGS)
def checkout(
    targets: list[str] | None = typer.Argument(None, help=Messages.HELP_INDICES),
    new_branch: str | None = typer.Option(
        None,
        "-b",
        "--create-branch",
        help=Messages.HELP_CHECKOUT_CREATE,
    ),
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    repo_root = _repository(path)
    cfg = load_config()
    args = list(targets or [])
    try:
        if new_branch is not None:
            if args:
                _fail(Messages.ERROR_CHECKOUT_ARGS)
            result = create_branch(repo_root, new_branch)
            console.print(_styled(escape(result.message), Styles.SUCCESS))
            return
        if not args:
            _fail(Messages.ERROR_CHECKOUT_ARGS)
        if (
            len(args) == 1
            and not args[0].startswith("-")
            and not looks_like_index_expression(args[0])
        ):
            result = checkout_branch(repo_root, args[0])
            console.print(_styled(escape(result.message), Styles.SUCCESS))
            return
        resolution = _resolve(args, repo_root, cfg)
        result = checkout_entries(repo_root, resolution.entries)
        for entry in result.skipped:
            console.print(
                _styled(escape(Messages.INFO_SKIPPED_UNTRACKED.format(path=entry.path)), Styles.WARNING)
            )
        count = len(result.paths)
        console.print(
            _styled(
                Messages.INFO_CHECKED_OUT.format(count=count, plural=_plural(count)),
                Styles.SUCCESS,
            )
        )
        _show_status(repo_root, cfg)
    except GitnavError as exc:
        _fail(exc)


@app.command(help=Messages.HELP_BRANCHES)
def branches(
    index: int | None = typer.Argument(None, min=1, help="Branch number to check out."),
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    repo_root = _repository(path)
    cfg = load_config()
    try:
        if index is None:
            listing = list_branches(repo_root)
            if not listing.branches:
                console.print(_styled(Messages.INFO_NO_BRANCHES, Styles.INFO))
            for line in format_branch_lines(listing.branches):
                console.print(line, highlight=False)
            if listing.cache_error is not None:
                console.print(
                    _styled(
                        escape(Messages.WARNING_CACHE_NOT_SAVED.format(reason=listing.cache_error)),
                        Styles.WARNING,
                    )
                )
            return
        resolution = resolve_branch_index(index, repo_root, max_age=cfg.max_age)
        if resolution.refresh_reason == REFRESH_STALE:
            console.print(_styled(Messages.WARNING_REFRESHED, Styles.WARNING))
            for line in format_branch_lines(resolution.record.branches):
                console.print(line, highlight=False)
        branch = resolution.branch
        if branch.is_current:
            raise ActionError(Messages.ERROR_CURRENT_BRANCH.format(branch=branch.name))
        result = checkout_branch(repo_root, branch.name)
        console.print(_styled(escape(result.message), Styles.SUCCESS))
    except GitnavError as exc:
        _fail(exc)


@app.command(help=Messages.HELP_CONFIG)
def config(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_SHOW_CONFIG),
    set_max_age_option: int | None = typer.Option(
        None,
        "--set-max-age",
        help=Messages.HELP_SET_MAX_AGE,
    ),
    clear_max_age: bool = typer.Option(
        False,
        "--clear-max-age",
        help=Messages.HELP_CLEAR_MAX_AGE,
    ),
    set_untracked_option: str | None = typer.Option(
        None,
        "--set-untracked",
        help=Messages.HELP_SET_UNTRACKED,
    ),
    set_show_header_option: str | None = typer.Option(
        None,
        "--set-show-header",
        help=Messages.HELP_SET_SHOW_HEADER,
    ),
    set_diff_color_option: str | None = typer.Option(
        None,
        "--set-diff-color",
        help=Messages.HELP_SET_DIFF_COLOR,
    ),
) -> None:
    """Manage gitnav settings."""
    try:
        show_header = (
            _parse_boolean(set_show_header_option) if set_show_header_option is not None else None
        )
        diff_color = (
            _parse_boolean(set_diff_color_option) if set_diff_color_option is not None else None
        )
        updates = apply_config_updates(
            max_age=set_max_age_option,
            clear_max_age=clear_max_age,
            untracked=set_untracked_option,
            show_header=show_header,
            diff_color=diff_color,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if updates.max_age_set:
        console.print(
            _styled(Messages.INFO_MAX_AGE_SET.format(value=set_max_age_option), Styles.SUCCESS)
        )
    if updates.max_age_cleared:
        console.print(_styled(Messages.INFO_MAX_AGE_CLEARED, Styles.SUCCESS))
    if updates.untracked_set:
        cfg = get_config_snapshot()
        console.print(
            _styled(Messages.INFO_UNTRACKED_SET.format(value=cfg.untracked_files), Styles.SUCCESS)
        )
    if updates.show_header_set:
        state = "on" if show_header else "off"
        console.print(_styled(Messages.INFO_SHOW_HEADER_SET.format(value=state), Styles.SUCCESS))
    if updates.diff_color_set:
        state = "on" if diff_color else "off"
        console.print(_styled(Messages.INFO_DIFF_COLOR_SET.format(value=state), Styles.SUCCESS))

    if show or not updates.changed:
        cfg = get_config_snapshot()
        max_age = f"{cfg.max_age_seconds}s" if cfg.max_age_seconds is not None else "unlimited"
        console.print(
            _styled(
                escape(
                    Messages.INFO_CONFIG_SUMMARY.format(
                        path=config_module.CONFIG_FILE,
                        max_age=max_age,
                        untracked=cfg.untracked_files,
                        show_header="yes" if cfg.show_header else "no",
                        diff_color="yes" if cfg.diff_color else "no",
                    )
                ),
                Styles.INFO,
            )
        )


@app.command(help=Messages.HELP_CACHE)
def cache(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_CACHE_SHOW),
    clear: bool = typer.Option(False, "--clear", help=Messages.HELP_CACHE_CLEAR),
    clear_all: bool = typer.Option(False, "--clear-all", help=Messages.HELP_CACHE_CLEAR_ALL),
    path: Path | None = typer.Option(None, "--path", "-p", help=Messages.HELP_PATH),
) -> None:
    """Inspect or clear cached listings."""
    try:
        if clear:
            repo_root = _repository(path)
            removed = clear_repository(repository_key(repo_root))
            if removed:
                console.print(
                    _styled(
                        escape(
                            Messages.INFO_CACHE_CLEARED.format(
                                count=removed, plural=_plural(removed), path=repo_root
                            )
                        ),
                        Styles.SUCCESS,
                    )
                )
            else:
                console.print(
                    _styled(escape(Messages.INFO_CACHE_CLEAR_NONE.format(path=repo_root)), Styles.INFO)
                )
        if clear_all:
            removed = clear_all_cache()
            if removed:
                console.print(
                    _styled(
                        Messages.INFO_CACHE_ALL_CLEARED.format(
                            count=removed, plural=_plural(removed, "y", "ies")
                        ),
                        Styles.SUCCESS,
                    )
                )
            else:
                console.print(_styled(Messages.INFO_CACHE_ALL_CLEAR_NONE, Styles.INFO))
    except GitnavError as exc:
        _fail(exc)

    if show or not (clear or clear_all):
        entries = list_cache_entries()
        if not entries:
            console.print(_styled(Messages.INFO_CACHE_EMPTY, Styles.INFO))
            return
        console.print(
            _styled(escape(Messages.INFO_CACHE_HEADER.format(path=cache_root())), Styles.TITLE)
        )
        table = Table(show_header=True, header_style=Styles.TABLE_HEADER)
        table.add_column(Messages.TABLE_CACHE_HEADER_ROOT, overflow="fold")
        table.add_column(Messages.TABLE_CACHE_HEADER_FILES, justify="right")
        table.add_column(Messages.TABLE_CACHE_HEADER_BRANCHES, justify="right")
        table.add_column(Messages.TABLE_CACHE_HEADER_CREATED, overflow="fold")
        for entry in entries:
            root_label = str(entry["repo_root"] or entry["key"])
            if entry["corrupt"]:
                root_label = f"{root_label} (corrupt)"
            table.add_row(
                escape(root_label),
                "-" if entry["file_count"] is None else str(entry["file_count"]),
                "-" if entry["branch_count"] is None else str(entry["branch_count"]),
                str(entry["created_at"] or "-"),
            )
        console.print(table)


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    args = list(argv) if argv is not None else sys.argv[1:]
    if argv is None:
        app()
    else:
        app(args=args)
