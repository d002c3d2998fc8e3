"""HTML renderer for the pull request map.

Generates a single self-contained page with:
  - A title and heading
  - One row per file: colour swatch followed by the path
  - A footer stating how many pull requests the map covers
"""

from __future__ import annotations

from html import escape

from prmap.report.gradient import css_rgb
from prmap.report.impact import ReportRow

PAGE_STYLE = """\
html {
    font-family: ui-sans-serif, system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, "Noto Sans", sans-serif;
}
ul {
    list-style: none;
    padding: 0;
}
li {
    display: flex;
    gap: 1rem;
    align-items: center;
}
.swatch {
    width: 4rem;
    height: 1rem;
    flex-shrink: 0;
}
footer {
    margin-top: 2rem;
    color: #666;
}"""


def render_report(
    rows: list[ReportRow],
    title: str = "Pull request map",
    heading: str = "Files touched by open pull requests",
    total_pull_requests: int | None = None,
) -> str:
    """Render the report rows as an HTML document."""
    if total_pull_requests is None:
        total_pull_requests = rows[0].total if rows else 0

    sections: list[str] = []
    sections.append("<!DOCTYPE html>")
    sections.append("<html>")
    sections.append("<head>")
    sections.append('<meta charset="utf-8">')
    sections.append(f"<title>{escape(title)}</title>")
    sections.append(f"<style>\n{PAGE_STYLE}\n</style>")
    sections.append("</head>")
    sections.append("<body>")
    sections.append(f"<h1>{escape(heading)}</h1>")
    sections.append("<ul>")
    for row in rows:
        sections.append(_render_row(row))
    sections.append("</ul>")
    sections.append(_footer(total_pull_requests, len(rows)))
    sections.append("</body>")
    sections.append("</html>")
    return "\n".join(sections) + "\n"


def _render_row(row: ReportRow) -> str:
    tooltip = f"touched by {row.touched_by} of {row.total} pull requests"
    swatch = (
        f'<div class="swatch" style="background-color: {css_rgb(row.rgb)}" '
        f'title="{escape(tooltip)}"></div>'
    )
    return f"<li>{swatch}{escape(row.path)}</li>"


def _footer(total_pull_requests: int, file_count: int) -> str:
    noun = "pull request" if total_pull_requests == 1 else "pull requests"
    files = "file" if file_count == 1 else "files"
    return (
        f"<footer>Based on {total_pull_requests} {noun} "
        f"across {file_count} {files}.</footer>"
    )
