#!/usr/bin/env python3
"""Shared C-family source scanning utilities: literals, comments, escapes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

# item kinds
KIND_STRING = "string"
KIND_CHAR = "char"
KIND_COMMENT = "comment"
KIND_OTHER = "other"
KIND_ESCAPE = "escape"
KIND_PRAGMA_IF = "pragma_if"
KIND_PRAGMA_ELSE = "pragma_else"
KIND_PRAGMA_ENDIF = "pragma_endif"
KIND_PRAGMA_OTHER = "pragma_other"

ITEM_KINDS = frozenset(
    {
        KIND_STRING,
        KIND_CHAR,
        KIND_COMMENT,
        KIND_OTHER,
        KIND_ESCAPE,
        KIND_PRAGMA_IF,
        KIND_PRAGMA_ELSE,
        KIND_PRAGMA_ENDIF,
        KIND_PRAGMA_OTHER,
    }
)
LITERAL_KINDS = frozenset({KIND_STRING, KIND_CHAR})

# scanner states
STATE_NORMAL = "normal"
STATE_STRING = "string"
STATE_CHAR = "char"
STATE_COMMENT = "comment"
STATE_ESCAPE = "escape"

COMMENT_OPEN = "/*"
COMMENT_CLOSE = "*/"
ESCAPE_MARK = "\\"

_SPECIAL_RE = re.compile(r"[\"'\\/]")


@dataclass(frozen=True)
class DiffOptions:
    """Settings threaded through scanning, extraction and the diff driver."""

    show_all: bool = False
    full_function: bool = True
    nested_comments: bool = True


@dataclass(frozen=True)
class Span:
    begin: int
    end: int
    kind: str

    def __post_init__(self) -> None:
        if self.kind not in ITEM_KINDS:
            raise ValueError(f"unknown item kind: {self.kind!r}")
        if self.begin < 0 or self.end < self.begin:
            raise ValueError(f"invalid {self.kind} span [{self.begin}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.begin

    def text(self, buffer: str) -> str:
        return buffer[self.begin : self.end]


def add_item(items: List[Span], limit: int, begin: int, end: int, kind: str) -> Span:
    """Append a span after checking it lies inside a buffer of length ``limit``."""
    if end > limit:
        raise ValueError(f"{kind} span [{begin}, {end}) exceeds buffer length {limit}")
    item = Span(begin, end, kind)
    items.append(item)
    return item


def items_within(items: List[Span], begin: int, end: int) -> List[Span]:
    """Return the items lying entirely inside ``[begin, end)``, in order."""
    return [it for it in items if it.begin >= begin and it.end <= end]


def line_number(buffer: str, index: int) -> int:
    """Translate a buffer offset into a 1-based line number (-1 for no offset)."""
    if index < 0:
        return -1
    if index > len(buffer):
        raise ValueError(f"offset {index} is past the end of a buffer of length {len(buffer)}")
    return buffer.count("\n", 0, index) + 1


# -------------------------
# matching
# -------------------------
def match_quote(buffer: str, index: int) -> int:
    """Return the offset just past the quote closing the literal opened at ``index``.

    A quote preceded by an odd run of backslashes is escaped and does not close
    the literal; an even run (including zero) means the backslashes escape each
    other. A literal with no closing quote runs to the end of the buffer.
    """
    quote = buffer[index]
    pos = index + 1
    while True:
        found = buffer.find(quote, pos)
        if found < 0:
            return len(buffer)
        run = 0
        k = found - 1
        while k > index and buffer[k] == ESCAPE_MARK:
            run += 1
            k -= 1
        if run % 2 == 0:
            return found + 1
        pos = found + 1


def match_comment(buffer: str, index: int) -> int:
    """Return the offset just past the first comment closer after ``index``."""
    found = buffer.find(COMMENT_CLOSE, index + len(COMMENT_OPEN))
    if found < 0:
        return len(buffer)
    return found + len(COMMENT_CLOSE)


def match_nested(buffer: str, index: int, opening: str, closing: str) -> Optional[int]:
    """Return the offset just past the closer balancing the opener at ``index``.

    Openers met on the way nest arbitrarily deep. ``None`` means the buffer
    ended before the depth returned to zero.
    """
    if not buffer.startswith(opening, index):
        raise ValueError(f"no {opening!r} at offset {index}")
    depth = 1
    pos = index + len(opening)
    while depth > 0:
        next_close = buffer.find(closing, pos)
        if next_close < 0:
            return None
        next_open = buffer.find(opening, pos)
        if 0 <= next_open < next_close:
            depth += 1
            pos = next_open + len(opening)
        else:
            depth -= 1
            pos = next_close + len(closing)
    return pos


# -------------------------
# scanning
# -------------------------
def scan_step(buffer: str, index: int, nested_comments: bool) -> Tuple[str, int]:
    """Consume the construct starting at ``index``; return (state, end offset)."""
    ch = buffer[index]
    if ch == '"':
        return STATE_STRING, match_quote(buffer, index)
    if ch == "'":
        return STATE_CHAR, match_quote(buffer, index)
    if buffer.startswith(COMMENT_OPEN, index):
        if not nested_comments:
            return STATE_COMMENT, match_comment(buffer, index)
        end = match_nested(buffer, index, COMMENT_OPEN, COMMENT_CLOSE)
        if end is None:
            raise SystemExit(f"No matching closing comment for comment at line {line_number(buffer, index)}")
        return STATE_COMMENT, end
    if ch == ESCAPE_MARK:
        return STATE_ESCAPE, min(index + 2, len(buffer))
    m = _SPECIAL_RE.search(buffer, index + 1)
    return STATE_NORMAL, m.start() if m else len(buffer)


_STATE_KINDS = {
    STATE_STRING: KIND_STRING,
    STATE_CHAR: KIND_CHAR,
    STATE_COMMENT: KIND_COMMENT,
    STATE_ESCAPE: KIND_ESCAPE,
}


def find_items(
    buffer: str,
    options: DiffOptions,
    *,
    start: int = 0,
    literals: bool = True,
    comments: bool = True,
    escapes: bool = False,
) -> List[Span]:
    """Find literals, comments and escape sequences from ``start`` to the end.

    Every construct is recognised regardless of which kinds are recorded, so
    that e.g. a quote inside a comment never opens a literal.
    """
    wanted = set()
    if literals:
        wanted.update(LITERAL_KINDS)
    if comments:
        wanted.add(KIND_COMMENT)
    if escapes:
        wanted.add(KIND_ESCAPE)

    items: List[Span] = []
    n = len(buffer)
    pos = start
    while pos < n:
        state, end = scan_step(buffer, pos, options.nested_comments)
        kind = _STATE_KINDS.get(state)
        if kind in wanted:
            add_item(items, n, pos, end, kind)
        pos = end
    return items


def find_literals(buffer: str, options: DiffOptions) -> List[Span]:
    return find_items(buffer, options, literals=True, comments=False)


def find_comments(buffer: str, options: DiffOptions) -> List[Span]:
    return find_items(buffer, options, literals=False, comments=True)
