"""gitnav package initialization."""

from __future__ import annotations

from .errors import GitnavError
from .index_parser import parse_index_expression
from .indexing import assign_indices
from .models import IndexedEntry, Section, StatusEntry, StatusKind

__all__ = [
    "__version__",
    "GitnavError",
    "IndexedEntry",
    "Section",
    "StatusEntry",
    "StatusKind",
    "assign_indices",
    "get_version",
    "parse_index_expression",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
