"""Lazy depth-first directory traversal with caller-controlled pruning."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

DescendPredicate = Callable[[Path], bool]
SortKey = Callable[[str, bool], str]


def _by_name(name: str, is_dir: bool) -> str:
    return name


def walk(
    root: str | Path,
    should_descend: DescendPredicate | None = None,
    sort_key: SortKey | None = None,
) -> Iterator[Path]:
    """Yield file paths below ``root`` in depth-first pre-order.

    Entries of each directory are visited in ``sort_key(name, is_dir)``
    order. ``should_descend`` is called with a subdirectory's path right
    before the walk would enter it, so it sees any state the caller has
    built from files yielded earlier. Returning False skips the subtree.

    The walk is not isolated from concurrent changes: directories that
    vanish mid-walk are skipped, and ``root`` itself missing yields nothing.
    """
    order = sort_key or _by_name
    try:
        with os.scandir(root) as it:
            entries = [(entry.name, entry.is_dir(follow_symlinks=False)) for entry in it]
    except (FileNotFoundError, NotADirectoryError):
        return

    entries.sort(key=lambda e: order(e[0], e[1]))
    root = Path(root)
    for name, is_dir in entries:
        path = root / name
        if not is_dir:
            yield path
        elif should_descend is None or should_descend(path):
            yield from walk(path, should_descend, sort_key)
