#!/usr/bin/env python3
"""
Compare two versions of a C-family source file function by function.

comparison
----------
every function of file1 is looked up by name in file2 (first match wins):
  - found: the two function texts are compared ignoring whitespace and
    comments, while string/character literals must match exactly
  - not found: the function is reported as deleted
functions of file2 missing from file1 are reported as added.

a second pass blanks all function definitions and compares what is left
(globals, includes, macros) as one pseudo-function named
"#DATA DECLARATIONS OUTSIDE OF FUNCTIONS#".

a missing input file is treated as empty, so a removed or new file still
yields deleted/added reports.

output
------
  Function "<name>" is changed at lines (<line in file1>, <line in file2>)
  Function "<name>" is deleted at line <line in file1>
  Function "<name>" is added at line <line in file2>
  Function "<name>" is the same               (only with --show-all)
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import cli_paths as cpaths
import source_compare as scmp
import source_functions as sfunc
import source_normalize as snorm
import source_scan as sscan

STATUS_CHANGED = "changed"
STATUS_SAME = "same"
STATUS_DELETED = "deleted"
STATUS_ADDED = "added"

Extractor = Callable[[str, sscan.DiffOptions], List[sfunc.FunctionEntry]]


# -------------------------
# dataclasses
# -------------------------
@dataclass
class FunctionReport:
    name: str
    status: str
    line1: int = -1
    line2: int = -1

    def describe(self) -> str:
        if self.status == STATUS_CHANGED:
            return f'Function "{self.name}" is changed at lines ({self.line1}, {self.line2})'
        if self.status == STATUS_SAME:
            return f'Function "{self.name}" is the same'
        if self.status == STATUS_DELETED:
            return f'Function "{self.name}" is deleted at line {self.line1}'
        return f'Function "{self.name}" is added at line {self.line2}'


@dataclass
class NormalizedSource:
    text: str
    normalized: str
    literals: List[sscan.Span]


# -------------------------
# basic helpers
# -------------------------
def read_source(path: Path) -> str:
    """Read one input; a missing or unreadable file is reported and read as empty."""
    try:
        # undecodable bytes survive as surrogates and line endings are kept as-is
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
            return f.read()
    except OSError:
        print(f"File {path} is missing")
        return ""


def normalize(buffer: str, options: sscan.DiffOptions) -> NormalizedSource:
    normalized, literals = snorm.normalize_source(buffer, options)
    return NormalizedSource(text=buffer, normalized=normalized, literals=literals)


def find_by_name(functions: List[sfunc.FunctionEntry], name: str) -> Optional[sfunc.FunctionEntry]:
    return next((f for f in functions if f.name == name), None)


# -------------------------
# core compare computation
# -------------------------
def diff_functions(
    buffer1: str,
    buffer2: str,
    functions1: List[sfunc.FunctionEntry],
    functions2: List[sfunc.FunctionEntry],
    options: sscan.DiffOptions,
) -> List[FunctionReport]:
    src1 = normalize(buffer1, options)
    src2 = normalize(buffer2, options)
    out: List[FunctionReport] = []

    for f1 in functions1:
        f2 = find_by_name(functions2, f1.name)
        if f2 is None:
            out.append(FunctionReport(f1.name, STATUS_DELETED, line1=sscan.line_number(buffer1, f1.begin)))
            continue

        res = scmp.compare_regions(
            src1.text, src1.normalized, f1.begin, f1.end, src1.literals,
            src2.text, src2.normalized, f2.begin, f2.end, src2.literals,
        )
        if res.different:
            out.append(
                FunctionReport(
                    f1.name,
                    STATUS_CHANGED,
                    line1=sscan.line_number(buffer1, res.offset1),
                    line2=sscan.line_number(buffer2, res.offset2),
                )
            )
        else:
            out.append(FunctionReport(f1.name, STATUS_SAME))

    names1 = {f.name for f in functions1}
    for f2 in functions2:
        if f2.name not in names1:
            out.append(FunctionReport(f2.name, STATUS_ADDED, line2=sscan.line_number(buffer2, f2.begin)))
    return out


def diff_outside_functions(
    buffer1: str,
    buffer2: str,
    functions1: List[sfunc.FunctionEntry],
    functions2: List[sfunc.FunctionEntry],
    options: sscan.DiffOptions,
) -> List[FunctionReport]:
    """Compare everything outside function definitions as one pseudo-function."""
    rest1 = snorm.clear(buffer1, sfunc.function_items(functions1))
    rest2 = snorm.clear(buffer2, sfunc.function_items(functions2))
    whole1 = [sfunc.FunctionEntry(sfunc.DATA_DECLARATIONS, 0, len(rest1))]
    whole2 = [sfunc.FunctionEntry(sfunc.DATA_DECLARATIONS, 0, len(rest2))]
    return diff_functions(rest1, rest2, whole1, whole2, options)


def compare_sources(
    buffer1: str,
    buffer2: str,
    options: sscan.DiffOptions,
    extractor: Extractor = sfunc.find_functions,
) -> List[FunctionReport]:
    functions1 = extractor(buffer1, options)
    functions2 = extractor(buffer2, options)
    out = diff_functions(buffer1, buffer2, functions1, functions2, options)
    out.extend(diff_outside_functions(buffer1, buffer2, functions1, functions2, options))
    return out


def compare_files(path1: Path, path2: Path, options: sscan.DiffOptions) -> List[FunctionReport]:
    return compare_sources(read_source(path1), read_source(path2), options)


def print_reports(reports: List[FunctionReport], options: sscan.DiffOptions) -> None:
    for rep in reports:
        if rep.status == STATUS_SAME and not options.show_all:
            continue
        print(rep.describe())


# -------------------------
# main
# -------------------------
def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Compare two versions of a C source file function by function.")
    ap.add_argument("file1", type=Path, help="old version (may be missing)")
    ap.add_argument("file2", type=Path, help="new version (may be missing)")
    ap.add_argument("--show-all", action="store_true", help="also print functions that are the same")
    ap.add_argument(
        "--body-only",
        action="store_true",
        help="compare function bodies only, not the declaration before the opening brace",
    )
    ap.add_argument("--not-nested", action="store_true", help="disable nested /* */ comments")
    ap.add_argument("--list-funcs", action="store_true", help="print the functions found in each input first")
    args = ap.parse_args(argv)

    options = sscan.DiffOptions(
        show_all=args.show_all,
        full_function=not args.body_only,
        nested_comments=not args.not_nested,
    )
    path1, path2 = cpaths.resolve_input_pair(args.file1, args.file2)

    buffer1 = read_source(path1)
    buffer2 = read_source(path2)

    if args.list_funcs:
        for path, buffer in ((path1, buffer1), (path2, buffer2)):
            print(f"functions in {path}:")
            sfunc.print_functions(buffer, sfunc.find_functions(buffer, options))
            print()

    reports = compare_sources(buffer1, buffer2, options)
    print_reports(reports, options)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
