"""Parse user index expressions such as ``1 3-5,8``.

An expression is a list of tokens separated by whitespace and/or commas.
Each token is a positive integer or an inclusive range ``A-B`` with
``A <= B``. The parser knows nothing about how many entries exist; bounds
are checked by the resolver.
"""

from __future__ import annotations

import re
from typing import Iterable

from .errors import EmptyExpressionError, InvalidRangeError, InvalidTokenError

_SEPARATOR_RE = re.compile(r"[\s,]+")
_NUMBER_RE = re.compile(r"^[0-9]+$")
_RANGE_RE = re.compile(r"^([0-9]+)-([0-9]+)$")
_EXPRESSION_RE = re.compile(r"^[0-9\s,-]+$")


def _split_tokens(text: str) -> list[str]:
    return [token for token in _SEPARATOR_RE.split(text) if token]


def _positive(raw_token: str, digits: str) -> int:
    value = int(digits)
    if value == 0:
        raise InvalidTokenError(raw_token, "zero")
    return value


def _classify_invalid(token: str) -> InvalidTokenError:
    if token.startswith("-") and _NUMBER_RE.match(token[1:]):
        return InvalidTokenError(token, "negative")
    if "-" in token and all(part.isdigit() for part in token.split("-") if part):
        return InvalidTokenError(token, "malformed_range")
    return InvalidTokenError(token, "not_integer")


def parse_index_expression(text: str) -> list[int]:
    """Return the distinct indices in *text*, in first-seen order.

    Raises ``EmptyExpressionError`` for blank input, ``InvalidTokenError``
    for zero, negative or non-numeric tokens and ``InvalidRangeError`` when
    a range is reversed.
    """

    tokens = _split_tokens(text or "")
    if not tokens:
        raise EmptyExpressionError()

    indices: dict[int, None] = {}
    for token in tokens:
        if _NUMBER_RE.match(token):
            indices.setdefault(_positive(token, token), None)
            continue
        match = _RANGE_RE.match(token)
        if match is None:
            raise _classify_invalid(token)
        start = _positive(token, match.group(1))
        end = _positive(token, match.group(2))
        if start > end:
            raise InvalidRangeError(token, start, end)
        for value in range(start, end + 1):
            indices.setdefault(value, None)
    return list(indices)


def parse_index_args(args: Iterable[str]) -> list[int]:
    """Parse CLI arguments; ``["1", "3-5,8"]`` is the same as ``"1 3-5,8"``."""

    return parse_index_expression(" ".join(args))


def looks_like_index_expression(text: str) -> bool:
    """Return True when *text* only holds digits, dashes, commas and spaces.

    Used to tell ``checkout 2`` (an index) from ``checkout main`` (a branch).
    """

    stripped = (text or "").strip()
    if not stripped or not _EXPRESSION_RE.match(stripped):
        return False
    return any(char.isdigit() for char in stripped) and not stripped.startswith("-")
