"""Git diff parser - extract per-file hunks from unified diffs.

Parses the output of `git diff <old> <new>` into structured file diffs. Only
the hunk headers matter for the touched-line map, but hunk bodies are walked
line by line so that removed lines which happen to start with `---` are not
mistaken for file headers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

DEV_NULL = "/dev/null"


@dataclass
class DiffHunk:
    """A single hunk from a unified diff."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int

    @property
    def old_lines(self) -> range:
        """1-based old-side line numbers covered by the hunk, context included."""
        return range(self.old_start, self.old_start + self.old_count)


@dataclass
class FileDiff:
    """Changes to a single file."""
    path: str
    old_path: str | None = None  # None for added files
    new_path: str | None = None  # None for deleted files
    hunks: list[DiffHunk] = field(default_factory=list)
    added_lines: int = 0
    deleted_lines: int = 0
    binary: bool = False

    @property
    def status(self) -> str:
        if self.old_path is None:
            return "added"
        if self.new_path is None:
            return "deleted"
        return "modified"


def _strip_prefix(raw: str, prefix: str) -> str | None:
    """Turn a `--- a/path` / `+++ b/path` operand into a repository path."""
    raw = raw.rstrip("\t")
    if raw == DEV_NULL:
        return None
    if raw.startswith('"') and raw.endswith('"'):
        raw = _unquote(raw[1:-1])
    if raw.startswith(prefix):
        raw = raw[len(prefix):]
    return raw


def _unquote(text: str) -> str:
    """Undo git's C-style quoting of unusual path names."""
    escapes = {"n": "\n", "t": "\t", '"': '"', "\\": "\\", "a": "\a", "b": "\b",
               "f": "\f", "r": "\r", "v": "\v"}
    out = bytearray()
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if nxt in escapes:
                out.extend(escapes[nxt].encode())
                i += 2
                continue
            if re.match(r"[0-7]{3}", text[i + 1:i + 4]):
                out.append(int(text[i + 1:i + 4], 8))
                i += 4
                continue
        out.extend(ch.encode("utf-8"))
        i += 1
    return out.decode("utf-8", errors="replace")


def _path_from_header(line: str) -> str:
    """Best-effort path from a `diff --git a/x b/x` line."""
    parts = line.split(" b/")
    return parts[-1] if len(parts) > 1 else ""


def parse_diff(diff_text: str) -> list[FileDiff]:
    """Parse unified diff text into structured FileDiff objects."""
    files: list[FileDiff] = []
    current_file: FileDiff | None = None
    old_remaining = 0
    new_remaining = 0

    # git ends diff lines with "\n" only; content may hold form feeds
    for line in diff_text.split("\n"):
        # Inside a hunk body every marked line belongs to the hunk
        if current_file is not None and (old_remaining > 0 or new_remaining > 0):
            marker = line[:1]
            if marker == "\\":
                continue  # "\ No newline at end of file"
            if marker == "-":
                current_file.deleted_lines += 1
                old_remaining -= 1
                continue
            if marker == "+":
                current_file.added_lines += 1
                new_remaining -= 1
                continue
            if marker in (" ", ""):
                old_remaining -= 1
                new_remaining -= 1
                continue
            # Truncated hunk; treat the line as a header
            old_remaining = new_remaining = 0

        if line.startswith("diff --git "):
            if current_file:
                files.append(current_file)
            path = _path_from_header(line)
            current_file = FileDiff(path=path, old_path=path, new_path=path)
            continue

        if current_file is None:
            continue

        if line.startswith("new file"):
            current_file.old_path = None
        elif line.startswith("deleted file"):
            current_file.new_path = None
        elif line.startswith("Binary files "):
            current_file.binary = True
        elif line.startswith("--- "):
            current_file.old_path = _strip_prefix(line[4:], "a/")
        elif line.startswith("+++ "):
            current_file.new_path = _strip_prefix(line[4:], "b/")
            current_file.path = current_file.new_path or current_file.old_path or ""
        elif line.startswith("@@"):
            # Hunk header: @@ -old_start,old_count +new_start,new_count @@
            match = HUNK_HEADER.match(line)
            if match:
                hunk = DiffHunk(
                    old_start=int(match.group(1)),
                    old_count=int(match.group(2) or "1"),
                    new_start=int(match.group(3)),
                    new_count=int(match.group(4) or "1"),
                )
                current_file.hunks.append(hunk)
                old_remaining = hunk.old_count
                new_remaining = hunk.new_count

    if current_file:
        files.append(current_file)

    return files
