#!/usr/bin/env python3
"""Locate named function definitions in C-family source buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import source_normalize as snorm
import source_scan as sscan
import source_tokens as stok

DATA_DECLARATIONS = "#DATA DECLARATIONS OUTSIDE OF FUNCTIONS#"


@dataclass(frozen=True)
class FunctionEntry:
    name: str
    begin: int
    end: int

    def __post_init__(self) -> None:
        if self.begin < 0 or self.end < self.begin:
            raise ValueError(f"invalid span [{self.begin}, {self.end}) for function {self.name!r}")


def extraction_buffer(buffer: str, options: sscan.DiffOptions) -> str:
    """Blank literals, comments, escapes and preprocessor lines of ``buffer``.

    Escapes are blanked before directives are looked for, so a backslash-newline
    continuation keeps a multi-line directive on one logical line.
    """
    items = sscan.find_items(buffer, options, literals=True, comments=True, escapes=True)
    cleared = snorm.clear(buffer, items)
    directives = stok.find_directives(cleared)
    bad = stok.unmatched_conditional(directives)
    if bad is not None:
        print(f"WARNING: unmatched preprocessor conditional at line {sscan.line_number(buffer, bad.begin)}")
    return snorm.clear(cleared, directives)


def declaration_start(cleared: str, name_begin: int, prev_end: int) -> int:
    """First token after the last ';' between the previous function and a name."""
    start = max(cleared.rfind(";", prev_end, name_begin) + 1, prev_end)
    tok = stok.get_token(cleared, start)
    if tok is None:
        raise ValueError("Internal error: no function name and body")
    return tok.begin


def next_function(
    cleared: str,
    index: int,
    prev_end: int,
    full_function: bool,
) -> Optional[Tuple[FunctionEntry, int]]:
    """Find the next function definition at or after ``index``.

    Returns the entry and the offset to resume from, or None when no further
    definition exists. Raises ``ValueError`` on unbalanced brackets or a
    missing body.
    """
    prev: Optional[stok.Token] = None
    while True:
        tok = stok.get_token(cleared, index)
        if tok is None:
            return None

        if tok.text == "(":
            close = stok.match_bracket(cleared, tok.begin, "(", ")")
            if prev is None or not stok.is_identifier(prev.text):
                prev = tok
                index = close + 1
                continue

            after = stok.get_token(cleared, close + 1)
            if after is None:
                raise ValueError(f"Cannot find body of function '{prev.text}'")
            if after.text in (";", ","):
                # declaration without a body
                prev = after
                index = after.next
                continue
            if after.text == "(":
                # function pointer declarator such as "int (*fp)(int);"
                prev = None
                index = close + 1
                continue

            body_begin = stok.find_token(cleared, close + 1, "{")
            if body_begin is None:
                raise ValueError(f"Cannot find body of function '{prev.text}'")
            body_end = stok.match_bracket(cleared, body_begin, "{", "}") + 1

            begin = body_begin
            if full_function:
                begin = declaration_start(cleared, prev.begin, prev_end)
            return FunctionEntry(prev.text, begin, body_end), body_end

        if tok.text in ("[", "{"):
            closing = "]" if tok.text == "[" else "}"
            close = stok.match_bracket(cleared, tok.begin, tok.text, closing)
            prev = None
            index = close + 1
            continue

        prev = tok
        index = tok.next


def find_functions(buffer: str, options: sscan.DiffOptions) -> List[FunctionEntry]:
    """Return the function definitions of ``buffer`` in file order.

    A structural parse failure aborts the run; duplicate names and
    overlapping spans only produce warnings.
    """
    cleared = extraction_buffer(buffer, options)
    out: List[FunctionEntry] = []
    index = 0
    prev_end = 0
    while True:
        try:
            found = next_function(cleared, index, prev_end, options.full_function)
        except ValueError as exc:
            raise SystemExit(f"ERROR: {exc}")
        if found is None:
            break
        entry, index = found
        prev_end = entry.end
        out.append(entry)

    if has_duplicate_names(out):
        print("WARNING: duplicate function names found: RESULTS CAN BE INCORRECT")
    if has_overlap(out):
        print("WARNING: function declarations overlapped: RESULTS can show more changed functions than necessary")
    return out


def has_duplicate_names(functions: List[FunctionEntry]) -> bool:
    names = [f.name for f in functions]
    return len(names) != len(set(names))


def has_overlap(functions: List[FunctionEntry]) -> bool:
    for i, a in enumerate(functions):
        for b in functions[i + 1 :]:
            if a.begin < b.end and b.begin < a.end:
                return True
    return False


def function_items(functions: List[FunctionEntry]) -> List[sscan.Span]:
    """Turn function entries into ``other`` spans, e.g. for blanking bodies."""
    return [sscan.Span(f.begin, f.end, sscan.KIND_OTHER) for f in functions]


def print_functions(buffer: str, functions: List[FunctionEntry]) -> None:
    for f in functions:
        last = max(f.begin, f.end - 1)
        print(f'Function "{f.name}" [{sscan.line_number(buffer, f.begin)}, {sscan.line_number(buffer, last)}]')
