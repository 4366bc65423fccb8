#!/usr/bin/env python3
"""Blank selected items of a source buffer without moving any offsets."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import source_scan as sscan

FILLER = " "


def clear(buffer: str, items: Iterable[sscan.Span], kinds: Optional[Iterable[str]] = None) -> str:
    """Return a copy of ``buffer`` with the selected items replaced by filler.

    The result always has the same length as ``buffer``, so offsets (and the
    line numbers derived from them) stay valid for both forms.
    """
    selected = None if kinds is None else set(kinds)
    chars = list(buffer)
    n = len(chars)
    for it in items:
        if selected is not None and it.kind not in selected:
            continue
        if it.end > n:
            raise ValueError(f"{it.kind} span [{it.begin}, {it.end}) exceeds buffer length {n}")
        chars[it.begin : it.end] = FILLER * it.length
    return "".join(chars)


def blank_literals(buffer: str, options: sscan.DiffOptions) -> Tuple[str, List[sscan.Span]]:
    """Blank string and character literals; return the new buffer and the literals."""
    literals = sscan.find_literals(buffer, options)
    return clear(buffer, literals), literals


def blank_comments(buffer: str, options: sscan.DiffOptions) -> Tuple[str, List[sscan.Span]]:
    """Blank comments; return the new buffer and the comments."""
    comments = sscan.find_comments(buffer, options)
    return clear(buffer, comments), comments


def normalize_source(buffer: str, options: sscan.DiffOptions) -> Tuple[str, List[sscan.Span]]:
    """Blank literals, then comments; return the normalized buffer and the literals.

    Comments are searched on the literal-blanked text so that comment markers
    inside string literals are never taken for comments.
    """
    no_literals, literals = blank_literals(buffer, options)
    normalized, _comments = blank_comments(no_literals, options)
    return normalized, literals
