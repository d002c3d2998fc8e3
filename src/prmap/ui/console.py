"""Rich-powered console output for prmap."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from prmap.git.aggregator import AggregateLookup
from prmap.pipeline import ItemResult, RunSummary
from prmap.report.impact import ReportRow


class Console:
    """Terminal output for prmap using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {escape(message)}")

    def progress(self) -> Progress:
        """Create a progress bar for the fetch and diff stages."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=self.console,
        )

    def show_summary(self, summary: RunSummary) -> None:
        """Display what each stage did."""
        table = Table(title="Run Summary", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right", style="cyan")

        table.add_row("Pull requests mapped", str(len(summary.lookup)))
        table.add_row("Branches fetched", str(summary.fetch_count))
        table.add_row("Skipped", str(len(summary.skipped)))
        table.add_row("Files listed", str(len(summary.rows)))
        table.add_row(
            "Files touched", str(sum(1 for r in summary.rows if r.touched_by > 0))
        )
        self.console.print(table)

    def show_skipped(self, skipped: list[ItemResult]) -> None:
        if not skipped:
            return
        table = Table(title="Skipped Pull Requests", border_style="yellow")
        table.add_column("PR", justify="right", style="bold")
        table.add_column("Stage")
        table.add_column("Reason", style="dim")
        for item in skipped:
            table.add_row(f"#{item.number}", item.stage, escape(item.reason))
        self.console.print(table)

    def show_hottest(self, rows: list[ReportRow]) -> None:
        """Display the most contended files."""
        if not rows:
            return
        table = Table(title="Hottest Files", border_style="red")
        table.add_column("File", style="bold")
        table.add_column("PRs", justify="right", style="cyan")
        table.add_column("Share", justify="right")
        for row in rows:
            share = row.touched_by / row.total if row.total else 0.0
            table.add_row(escape(row.path), f"{row.touched_by}/{row.total}", f"{share:.0%}")
        self.console.print(table)

    def show_touched(self, lookup: AggregateLookup) -> None:
        """Display the touched files of every pull request."""
        table = Table(title="Touched Files", border_style="cyan")
        table.add_column("PR", justify="right", style="bold")
        table.add_column("File", style="cyan")
        table.add_column("Lines", justify="right")
        for number, touched in lookup.items():
            if not touched:
                table.add_row(f"#{number}", "[dim](no old-side changes)[/dim]", "0")
                continue
            for path in sorted(touched):
                table.add_row(f"#{number}", escape(path), str(len(touched[path])))
        self.console.print(table)
