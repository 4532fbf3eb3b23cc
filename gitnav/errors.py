"""Exception hierarchy shared by the gitnav core and CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class GitnavError(Exception):
    """Base class for every error gitnav reports to the user."""


class ParseError(GitnavError):
    """Raised when an index expression cannot be parsed."""


class EmptyExpressionError(ParseError):
    def __init__(self) -> None:
        super().__init__(
            "No file indices provided. Use a format like: 1, 1-3, or 1,3,5"
        )


class InvalidTokenError(ParseError):
    """A token that is not a positive integer or a well-formed range."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        if reason == "zero":
            detail = "indices start at 1"
        elif reason == "negative":
            detail = "indices must be positive"
        elif reason == "malformed_range":
            detail = "ranges look like 3-6"
        else:
            detail = "expected a number or a range"
        super().__init__(f"Invalid index '{raw}': {detail}.")


class InvalidRangeError(ParseError):
    def __init__(self, raw: str, start: int, end: int) -> None:
        self.raw = raw
        self.start = start
        self.end = end
        super().__init__(
            f"Invalid range '{raw}': start ({start}) must be <= end ({end})."
        )


class CacheError(GitnavError):
    """Base class for persistence failures of the state cache."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class CacheIoError(CacheError):
    pass


class CacheCorruptError(CacheError):
    pass


class CacheUnavailableError(CacheError):
    pass


class ResolveError(GitnavError):
    """Raised when requested indices cannot be mapped to entries."""


class OutOfRangeError(ResolveError):
    def __init__(self, index: int, maximum: int) -> None:
        self.index = index
        self.maximum = maximum
        if maximum == 0:
            message = f"Index {index} is out of range: there is nothing to select."
        else:
            message = f"Index {index} is out of range (1-{maximum} available)."
        super().__init__(message)


class CollectorError(GitnavError):
    """Raised when querying git for status information fails."""


class NotInRepositoryError(CollectorError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Not in a git repository: {path}")


class GitCommandError(CollectorError):
    """A git invocation exited non-zero; *args* excludes the leading `git`."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str) -> None:
        self.git_args = tuple(args)
        self.returncode = returncode
        self.stderr = stderr
        subcommand = self.git_args[0] if self.git_args else ""
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"git {subcommand} failed: {detail}")


class ActionError(GitnavError):
    """Raised when a command executor has nothing valid to act on."""
