#!/usr/bin/env python3
"""Input path helpers for the two-file comparison CLI."""

from __future__ import annotations

from glob import glob
from pathlib import Path
from typing import Tuple


def expand_single_pattern(path: Path) -> Path:
    """Expand a wildcard that matches exactly one file (for shells that do not glob)."""
    raw = str(path)
    if not any(ch in raw for ch in "*?[]"):
        return path
    matches = sorted(glob(raw), key=lambda x: x.lower())
    if len(matches) == 1:
        return Path(matches[0])
    # Keep the pattern so the missing-file report names what was asked for.
    return path


def resolve_input_pair(path1: Path, path2: Path) -> Tuple[Path, Path]:
    """Resolve the two CLI inputs, pairing a directory with the other file's name.

    ``old/ new/foo.c`` compares ``old/foo.c`` with ``new/foo.c``, as diff does.
    Two directories cannot be compared file-by-file here.
    """
    p1 = expand_single_pattern(path1)
    p2 = expand_single_pattern(path2)
    if p1.is_dir() and p2.is_dir():
        raise SystemExit(f"both inputs are directories: {p1} {p2}")
    if p1.is_dir():
        return p1 / p2.name, p2
    if p2.is_dir():
        return p1, p2 / p1.name
    return p1, p2
