"""Working tree traversal for the report.

Hidden entries (names starting with ".") are pruned, directories and all, and
the remaining files are listed relative to the repository root in the order a
walk sorted by file name at every level would visit them.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path, PurePosixPath

HIDDEN_PREFIX = "."


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def path_sort_key(path: str) -> tuple[str, ...]:
    """Component-wise key, so `a/z` sorts before `a.txt` and `b`."""
    return PurePosixPath(path).parts


def visible_paths(paths: Iterable[str]) -> list[str]:
    """Drop paths with any hidden component and sort the rest."""
    kept = [p for p in paths if not any(is_hidden(part) for part in PurePosixPath(p).parts)]
    return sorted(kept, key=path_sort_key)


def _display_path(path: str) -> str:
    """Undo os.walk's surrogate escapes, replacing bytes that are not UTF-8.

    git reports such names the same way, so lookup keys still match.
    """
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _walk(root: Path) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)

        # Symlinked directories are listed, not followed
        linked = [d for d in dirnames if os.path.islink(os.path.join(dirpath, d))]
        dirnames[:] = [d for d in dirnames if not is_hidden(d) and d not in linked]

        for filename in filenames + linked:
            if is_hidden(filename):
                continue
            rel_path = os.path.join(rel_dir, filename) if rel_dir != "." else filename
            yield _display_path(Path(rel_path).as_posix())


def iter_report_paths(root: str | Path) -> list[str]:
    """All non-hidden, non-directory paths under `root`, sorted."""
    root = Path(root).resolve()
    return visible_paths(_walk(root))
