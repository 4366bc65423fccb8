#!/usr/bin/env python3
"""Whitespace-insensitive comparison of two source regions with literal checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import source_scan as sscan

BLANKS = " \t\n"


@dataclass
class Divergence:
    different: bool
    offset1: int = -1
    offset2: int = -1


def check_region(buffer: str, normalized: str, begin: int, end: int) -> None:
    """Validate one side's buffers and region bounds."""
    if len(buffer) != len(normalized):
        raise ValueError("The size of the original and processed buffers do not match")
    if begin < 0 or end < begin or end > len(buffer):
        raise ValueError(f"Invalid subrange [{begin}, {end}) of a buffer of length {len(buffer)}")


def skip_blanks(buffer: str, index: int, end: int) -> int:
    while index < end and buffer[index] in BLANKS:
        index += 1
    return index


def count_mismatch_offset(literals: List[sscan.Span], common: int, region_begin: int) -> int:
    """Offset reported for one side when the two literal counts differ."""
    if len(literals) > common:
        return literals[common].begin
    if common > 0:
        return literals[common - 1].end
    return region_begin


def compare_literals(
    buffer1: str,
    literals1: List[sscan.Span],
    begin1: int,
    buffer2: str,
    literals2: List[sscan.Span],
    begin2: int,
) -> Divergence:
    """Compare literals pairwise in discovery order, then their counts."""
    for a, b in zip(literals1, literals2):
        if a.length != b.length or a.kind != b.kind or a.text(buffer1) != b.text(buffer2):
            return Divergence(True, a.begin, b.begin)
    common = min(len(literals1), len(literals2))
    if len(literals1) != len(literals2):
        return Divergence(
            True,
            count_mismatch_offset(literals1, common, begin1),
            count_mismatch_offset(literals2, common, begin2),
        )
    return Divergence(False)


def compare_regions(
    buffer1: str,
    normalized1: str,
    begin1: int,
    end1: int,
    literals1: List[sscan.Span],
    buffer2: str,
    normalized2: str,
    begin2: int,
    end2: int,
    literals2: List[sscan.Span],
) -> Divergence:
    """Decide whether two regions differ and where they first diverge.

    Literals inside each region are validated first (length, kind, raw text,
    then count). The normalized regions are then walked in lock-step with runs
    of blanks skipped independently on each side. Offsets in the result point
    into the original buffers.
    """
    check_region(buffer1, normalized1, begin1, end1)
    check_region(buffer2, normalized2, begin2, end2)

    lit1 = sscan.items_within(literals1, begin1, end1)
    lit2 = sscan.items_within(literals2, begin2, end2)
    res = compare_literals(buffer1, lit1, begin1, buffer2, lit2, begin2)
    if res.different:
        return res

    i = begin1
    j = begin2
    while True:
        i = skip_blanks(normalized1, i, end1)
        j = skip_blanks(normalized2, j, end2)
        if i >= end1 or j >= end2:
            break
        if normalized1[i] != normalized2[j]:
            return Divergence(True, i, j)
        i += 1
        j += 1

    if i < end1 or j < end2:
        return Divergence(True, i, j)
    return Divergence(False)
