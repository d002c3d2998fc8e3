"""Tests for the tree walk, impact fractions, colours and HTML output."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from prmap.report.gradient import css_rgb, fraction_to_rgb
from prmap.report.impact import (
    ReportRow,
    build_rows,
    build_rows_for_tree,
    hottest,
    impact_fraction,
    touch_count,
)
from prmap.report.renderer import render_report
from prmap.report.walker import is_hidden, iter_report_paths, path_sort_key, visible_paths


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "tree"
    for rel in [
        "b.txt",
        "a.txt",
        "a/z.txt",
        "a/b/c.txt",
        "src/main.rs",
        ".env",
        ".github/workflows/ci.yml",
        "src/.cache/blob",
        "docs/.hidden.md",
    ]:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rel)
    (root / "empty_dir").mkdir()
    return root


class TestWalker:
    def test_is_hidden(self):
        assert is_hidden(".git")
        assert is_hidden(".env")
        assert not is_hidden("a.txt")
        assert not is_hidden("dir.d")

    def test_sort_key_orders_by_component(self):
        paths = ["b", "a.txt", "a/z.txt", "a/b/c.txt"]
        assert sorted(paths, key=path_sort_key) == ["a/b/c.txt", "a/z.txt", "a.txt", "b"]

    def test_visible_paths_filters_hidden_components(self):
        paths = ["x/.y/z", ".git/config", "x/y", "w"]
        assert visible_paths(paths) == ["w", "x/y"]

    def test_walk(self, tree: Path):
        assert iter_report_paths(tree) == [
            "a/b/c.txt",
            "a/z.txt",
            "a.txt",
            "b.txt",
            "src/main.rs",
        ]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_listed_not_followed(self, tree: Path):
        os.symlink(tree / "src", tree / "link", target_is_directory=True)
        paths = iter_report_paths(tree)
        assert "link" in paths
        assert "link/main.rs" not in paths


class TestImpactFraction:
    LOOKUP = {
        1: {"b.txt": {1, 2}, "c.txt": {4}},
        2: {"c.txt": {9}},
        3: {},
    }

    def test_untouched_is_coldest(self):
        assert impact_fraction("a.txt", self.LOOKUP) == 1.0

    def test_touched_by_every_pull_request(self):
        lookup = {1: {"x": {1}}, 2: {"x": {5}}}
        assert impact_fraction("x", lookup) == 0.0

    def test_partial(self):
        assert touch_count("c.txt", self.LOOKUP) == 2
        assert impact_fraction("c.txt", self.LOOKUP) == pytest.approx(1 / 3)
        assert impact_fraction("b.txt", self.LOOKUP) == pytest.approx(2 / 3)

    def test_empty_pull_request_contributes_nothing(self):
        with_empty = {1: {"b.txt": {1}}, 2: {}}
        assert touch_count("b.txt", with_empty) == 1

    def test_two_pull_request_scenario(self):
        lookup = {1: {"b.txt": {10, 11, 12}}, 2: {}}
        assert impact_fraction("a.txt", lookup) == 1.0
        assert impact_fraction("b.txt", lookup) == 0.5

    def test_empty_lookup_is_coldest(self):
        assert impact_fraction("anything", {}) == 1.0

    def test_range(self):
        for path in ["a.txt", "b.txt", "c.txt"]:
            assert 0.0 <= impact_fraction(path, self.LOOKUP) <= 1.0


class TestRows:
    def test_build_rows(self):
        rows = build_rows(["a.txt", "b.txt"], {1: {"b.txt": {1}}, 2: {}})
        assert [(r.path, r.touched_by, r.total, r.fraction) for r in rows] == [
            ("a.txt", 0, 2, 1.0),
            ("b.txt", 1, 2, 0.5),
        ]
        assert rows[0].rgb == fraction_to_rgb(1.0)

    def test_build_rows_for_tree(self, tree: Path):
        rows = build_rows_for_tree(tree, {1: {"src/main.rs": {3}}})
        by_path = {r.path: r for r in rows}
        assert by_path["src/main.rs"].fraction == 0.0
        assert by_path["a.txt"].fraction == 1.0
        assert ".env" not in by_path

    def test_hottest(self):
        lookup = {1: {"x": {1}, "y": {1}}, 2: {"y": {1}}}
        rows = build_rows(["w", "x", "y"], lookup)
        assert [r.path for r in hottest(rows)] == ["y", "x"]


class TestGradient:
    def test_ends_of_spectral(self):
        hot = fraction_to_rgb(0.0)
        cold = fraction_to_rgb(1.0)
        # ColorBrewer Spectral: #9e0142 -> #5e4fa2
        assert hot == pytest.approx((158, 1, 66), abs=1)
        assert cold == pytest.approx((94, 79, 162), abs=1)

    def test_channels_in_range(self):
        for i in range(11):
            rgb = fraction_to_rgb(i / 10)
            assert all(isinstance(c, int) and 0 <= c <= 255 for c in rgb)

    def test_out_of_domain_clamped(self):
        assert fraction_to_rgb(-0.5) == fraction_to_rgb(0.0)
        assert fraction_to_rgb(1.5) == fraction_to_rgb(1.0)

    def test_css(self):
        assert css_rgb((1, 2, 3)) == "rgb(1, 2, 3)"


class TestRenderer:
    def _row(self, path: str, touched_by: int = 0, total: int = 2) -> ReportRow:
        fraction = 1.0 - touched_by / total
        return ReportRow(path, touched_by, total, fraction, fraction_to_rgb(fraction))

    def test_document_structure(self):
        html = render_report([self._row("a.txt"), self._row("b.txt", 1)], title="My Map")
        assert html.startswith("<!DOCTYPE html>")
        assert '<meta charset="utf-8">' in html
        assert "<title>My Map</title>" in html
        assert "<h1>" in html
        assert html.count("<li>") == 2
        assert html.index("a.txt") < html.index("b.txt")

    def test_swatch_colour(self):
        row = self._row("b.txt", 1)
        html = render_report([row])
        assert f"background-color: {css_rgb(row.rgb)}" in html
        assert "touched by 1 of 2 pull requests" in html

    def test_paths_escaped(self):
        html = render_report([self._row("<script>.txt")])
        assert "<script>.txt" not in html
        assert "&lt;script&gt;.txt" in html

    def test_footer_counts(self):
        html = render_report([self._row("a.txt")], total_pull_requests=1)
        assert "Based on 1 pull request across 1 file." in html

    def test_footer_plural_files(self):
        html = render_report([self._row("a.txt"), self._row("b.txt")], total_pull_requests=2)
        assert "Based on 2 pull requests across 2 files." in html

    def test_empty(self):
        html = render_report([])
        assert "<ul>\n</ul>" in html
        assert "Based on 0 pull requests" in html
