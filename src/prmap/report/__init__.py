"""Report generation: tree walk, impact fractions, colours and HTML."""

from prmap.report.impact import ReportRow, build_rows, impact_fraction
from prmap.report.renderer import render_report

__all__ = ["ReportRow", "build_rows", "impact_fraction", "render_report"]
