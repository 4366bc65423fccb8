#!/usr/bin/env python3
"""Delimiter-based tokenizer and preprocessor line detection for C-family code.

The tokenizer runs on buffers whose comments, literals and escapes are already
blanked, so it only has to separate identifiers from punctuation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

import source_scan as sscan

DELIMITERS = frozenset("!@#$%^&*()-+=|\\`~[]{};:'\"<>,.?/ \t\r\n")
SPACES = " \t\n\r"

# two-character operators glued together from adjacent one-character tokens
COMPOUND_TOKENS = frozenset(
    {
        "<=", ">=", "==", "!=",
        "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "~=",
        "<<", ">>", "->", "++", "--", "||", "&&",
        "*/", "/*",
    }
)

_WORD_RE = re.compile(r"[^!@#$%^&*()\-+=|\\`~\[\]{};:'\"<>,.?/ \t\r\n]+")

_DIRECTIVE_KINDS = {
    "#if": sscan.KIND_PRAGMA_IF,
    "#ifdef": sscan.KIND_PRAGMA_IF,
    "#ifndef": sscan.KIND_PRAGMA_IF,
    "#else": sscan.KIND_PRAGMA_ELSE,
    "#elif": sscan.KIND_PRAGMA_ELSE,
    "#endif": sscan.KIND_PRAGMA_ENDIF,
}


@dataclass(frozen=True)
class Token:
    text: str
    begin: int
    end: int
    next: int  # offset of the following token (trailing blanks skipped)


def skip_spaces(buffer: str, index: int) -> int:
    n = len(buffer)
    while index < n and buffer[index] in SPACES:
        index += 1
    return index


def get_simple_token(buffer: str, index: int) -> Optional[Token]:
    """Return the word or single delimiter at ``index`` (after leading blanks)."""
    n = len(buffer)
    if index < 0 or index >= n:
        return None
    begin = skip_spaces(buffer, index)
    if begin >= n:
        return None
    if buffer[begin] in DELIMITERS:
        end = begin + 1
    else:
        end = _WORD_RE.match(buffer, begin).end()
    return Token(buffer[begin:end], begin, end, skip_spaces(buffer, end))


def compatible_tokens(first: Token, second: Token) -> bool:
    if first.text == "#":
        return True
    if second.begin != first.end:
        return False
    return first.text + second.text in COMPOUND_TOKENS


def get_token(buffer: str, index: int) -> Optional[Token]:
    """Return the next token, gluing two-character operators and ``#`` names."""
    first = get_simple_token(buffer, index)
    if first is None:
        return None
    second = get_simple_token(buffer, first.next)
    if second is None or not compatible_tokens(first, second):
        return first
    return Token(first.text + second.text, first.begin, second.end, second.next)


def is_identifier(text: str) -> bool:
    return bool(text) and not any(ch in DELIMITERS for ch in text)


def find_token(buffer: str, index: int, target: str) -> Optional[int]:
    """Return the start offset of the next ``target`` token from ``index``."""
    while True:
        tok = get_token(buffer, index)
        if tok is None:
            return None
        if tok.text == target:
            return tok.begin
        index = tok.next


def match_bracket(buffer: str, index: int, opening: str, closing: str) -> int:
    """Return the start offset of the token closing the bracket at ``index``.

    Raises ``ValueError`` when ``index`` does not hold ``opening`` or when the
    buffer ends before the bracket is balanced.
    """
    tok = get_token(buffer, index)
    if tok is None or tok.text != opening:
        found = tok.text if tok is not None else "end of buffer"
        raise ValueError(f"Invalid bracket match: must be '{opening}' instead of '{found}'")
    depth = 1
    pos = tok.next
    while True:
        tok = get_token(buffer, pos)
        if tok is None:
            raise ValueError(
                f"Cannot find '{closing}' matching '{opening}' at line {sscan.line_number(buffer, index)}"
            )
        if tok.text == opening:
            depth += 1
        elif tok.text == closing:
            depth -= 1
            if depth == 0:
                return tok.begin
        pos = tok.next


def directive_kind(line: str) -> Optional[str]:
    """Classify a preprocessor line, or return None for ordinary code."""
    tok = get_token(line, 0)
    if tok is None or not tok.text.startswith("#"):
        return None
    return _DIRECTIVE_KINDS.get(tok.text, sscan.KIND_PRAGMA_OTHER)


def find_directives(buffer: str) -> List[sscan.Span]:
    """Return one span per preprocessor directive line (newline excluded)."""
    items: List[sscan.Span] = []
    n = len(buffer)
    begin = 0
    while begin < n:
        end = buffer.find("\n", begin)
        if end < 0:
            end = n
        kind = directive_kind(buffer[begin:end])
        if kind is not None:
            sscan.add_item(items, n, begin, end, kind)
        begin = end + 1
    return items


def unmatched_conditional(directives: List[sscan.Span]) -> Optional[sscan.Span]:
    """Return the first #else/#endif without an #if, or the first unclosed #if."""
    open_ifs: List[sscan.Span] = []
    for it in directives:
        if it.kind == sscan.KIND_PRAGMA_IF:
            open_ifs.append(it)
        elif it.kind in (sscan.KIND_PRAGMA_ELSE, sscan.KIND_PRAGMA_ENDIF):
            if not open_ifs:
                return it
            if it.kind == sscan.KIND_PRAGMA_ENDIF:
                open_ifs.pop()
    return open_ifs[0] if open_ifs else None
