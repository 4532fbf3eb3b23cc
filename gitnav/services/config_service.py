"""Logic helpers for the `gitnav config` command."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import (
    Config,
    load_config,
    set_diff_color,
    set_max_age,
    set_show_header,
    set_untracked_files,
)


@dataclass(slots=True)
class ConfigUpdateResult:
    max_age_set: bool = False
    max_age_cleared: bool = False
    untracked_set: bool = False
    show_header_set: bool = False
    diff_color_set: bool = False

    @property
    def changed(self) -> bool:
        return any(
            (
                self.max_age_set,
                self.max_age_cleared,
                self.untracked_set,
                self.show_header_set,
                self.diff_color_set,
            )
        )


def apply_config_updates(
    *,
    max_age: int | None = None,
    clear_max_age: bool = False,
    untracked: str | None = None,
    show_header: bool | None = None,
    diff_color: bool | None = None,
) -> ConfigUpdateResult:
    """Apply config mutations and report which fields were updated."""

    result = ConfigUpdateResult()
    if max_age is not None:
        set_max_age(max_age)
        result.max_age_set = True
    if clear_max_age:
        set_max_age(None)
        result.max_age_cleared = True
    if untracked is not None:
        set_untracked_files(untracked)
        result.untracked_set = True
    if show_header is not None:
        set_show_header(show_header)
        result.show_header_set = True
    if diff_color is not None:
        set_diff_color(diff_color)
        result.diff_color_set = True
    return result


def get_config_snapshot() -> Config:
    """Return the current configuration dataclass."""

    return load_config()
