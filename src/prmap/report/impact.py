"""Per-file impact fractions over the aggregated pull request lookup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from prmap.git.aggregator import AggregateLookup
from prmap.report.gradient import fraction_to_rgb
from prmap.report.walker import iter_report_paths


@dataclass(frozen=True)
class ReportRow:
    """One file in the report."""
    path: str
    touched_by: int
    total: int
    fraction: float
    rgb: tuple[int, int, int]


def touch_count(path: str, lookup: AggregateLookup) -> int:
    """Number of pull requests whose touched-line map contains `path`."""
    return sum(1 for touched in lookup.values() if path in touched)


def impact_fraction(path: str, lookup: AggregateLookup) -> float:
    """1.0 for a file no pull request touches, 0.0 for one every pull request touches.

    An empty lookup has nothing to compare against, so every file is coldest.
    """
    total = len(lookup)
    if total == 0:
        return 1.0
    return 1.0 - touch_count(path, lookup) / total


def build_rows(paths: list[str], lookup: AggregateLookup) -> list[ReportRow]:
    """Score an already ordered list of paths."""
    total = len(lookup)
    rows = []
    for path in paths:
        fraction = impact_fraction(path, lookup)
        rows.append(ReportRow(
            path=path,
            touched_by=touch_count(path, lookup),
            total=total,
            fraction=fraction,
            rgb=fraction_to_rgb(fraction),
        ))
    return rows


def build_rows_for_tree(root: str | Path, lookup: AggregateLookup) -> list[ReportRow]:
    """Walk the working tree under `root` and score every visible file."""
    return build_rows(iter_report_paths(root), lookup)


def hottest(rows: list[ReportRow], limit: int = 10) -> list[ReportRow]:
    """Touched rows, most-touched first, ties broken by path order."""
    touched = [r for r in rows if r.touched_by > 0]
    return sorted(touched, key=lambda r: -r.touched_by)[:limit]
