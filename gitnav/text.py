"""Centralized user-facing text for the gitnav CLI."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"
    HEADING = "bold"
    INDEX = "bold"
    STAGED = "green"
    NOT_STAGED = "red"
    UNTRACKED = "cyan"
    CONFLICT = "bold red"
    DELETED = "red"
    CURRENT_BRANCH = "bold green"


class Messages:
    APP_HELP = "gitnav - numbered git status; act on files by their index."
    HELP_VERSION = "Show version and exit."
    HELP_DEBUG = "Enable debug logging on stderr."
    HELP_STATUS = "Show the numbered status of the current repository."
    HELP_ADD = "Stage files by index (e.g. `gitnav add 1 3-5,8`)."
    HELP_RESET = "Unstage files by index."
    HELP_DIFF = "Show the diff of files by index."
    HELP_CHECKOUT = "Discard changes of files by index, or switch to a branch."
    HELP_CHECKOUT_CREATE = "Create the branch and switch to it."
    HELP_BRANCHES = "List local branches numbered, or check one out by index."
    HELP_CONFIG = "Show or change persistent settings."
    HELP_CACHE = "Inspect or clear cached numbered listings."
    HELP_INDICES = "Indices such as 1, 1-3, 1,3,5 or 1 3-5,8."
    HELP_PATH = "Directory inside the repository to operate on."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_MAX_AGE = "Treat cached indices older than N seconds as stale."
    HELP_CLEAR_MAX_AGE = "Remove the cache age limit (tokens only)."
    HELP_SET_UNTRACKED = "Untracked file listing mode: all, normal or no."
    HELP_SET_SHOW_HEADER = "Show the Branch/Parent header (true/false)."
    HELP_SET_DIFF_COLOR = "Ask git for colored diffs (true/false)."
    HELP_CACHE_SHOW = "List cached repositories."
    HELP_CACHE_CLEAR = "Remove the cached listings of this repository."
    HELP_CACHE_CLEAR_ALL = "Remove every cached listing."

    HEADER_BRANCH = "Branch: {branch}"
    HEADER_PARENT = "Parent: {short_hash} {subject}"
    HEADER_PARENT_NONE = "Parent: - no commits yet -"
    SECTION_TITLES = {
        "staged": "Staged:",
        "not_staged": "Not staged:",
        "untracked": "Untracked:",
        "conflicts": "Unmerged:",
    }
    SECTION_MARKER = "➤"
    SECTION_MARKER_ASCII = ">"

    INFO_CLEAN = "Nothing to commit, working tree clean."
    INFO_NO_BRANCHES = "No local branches yet."
    INFO_ADDED = "Staged {count} file{plural}."
    INFO_RESET = "Unstaged {count} file{plural}."
    INFO_CHECKED_OUT = "Discarded changes in {count} file{plural}."
    INFO_SKIPPED_UNTRACKED = "Skipped untracked file {path}."
    INFO_DIFF_UNTRACKED = "[{index}] {path} is untracked; there is no diff to show."
    INFO_DIFF_EMPTY = "[{index}] {path} has no differences."
    WARNING_REFRESHED = (
        "The working tree changed since the last listing; indices were re-assigned."
    )
    WARNING_CACHE_NOT_SAVED = "Could not save numbered listing: {reason}"
    ERROR_CURRENT_BRANCH = "Branch '{branch}' is already checked out."
    ERROR_CHECKOUT_ARGS = "Pass indices, a single branch name, or -b <new-branch>."
    ERROR_BOOLEAN_INVALID = "Invalid boolean value '{value}'. Use true or false."

    INFO_MAX_AGE_SET = "Cache max age set to {value} seconds."
    INFO_MAX_AGE_CLEARED = "Cache max age cleared."
    INFO_UNTRACKED_SET = "Untracked mode set to {value}."
    INFO_SHOW_HEADER_SET = "Show header set to {value}."
    INFO_DIFF_COLOR_SET = "Diff color set to {value}."
    INFO_CONFIG_SUMMARY = (
        "Config file: {path}\n"
        "Cache max age: {max_age}\n"
        "Untracked files: {untracked}\n"
        "Show header: {show_header}\n"
        "Diff color: {diff_color}"
    )

    INFO_CACHE_EMPTY = "No cached listings found."
    INFO_CACHE_HEADER = "Cached listings under {path}:"
    INFO_CACHE_CLEARED = "Removed {count} cached file{plural} for {path}."
    INFO_CACHE_CLEAR_NONE = "No cached listings found for {path}."
    INFO_CACHE_ALL_CLEARED = "Removed cached listings for {count} repositor{plural}."
    INFO_CACHE_ALL_CLEAR_NONE = "No cached listings to remove."
    TABLE_CACHE_HEADER_ROOT = "Repository"
    TABLE_CACHE_HEADER_FILES = "Files"
    TABLE_CACHE_HEADER_BRANCHES = "Branches"
    TABLE_CACHE_HEADER_CREATED = "Listed at"
