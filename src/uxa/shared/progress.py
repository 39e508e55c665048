"""Rich progress display and final score summary for an audit run."""

from __future__ import annotations

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from uxa.schemas.audit import AuditResult

console = Console()

# (label, attribute on ScoreBreakdown)
_BREAKDOWN_ROWS: tuple[tuple[str, str], ...] = (
    ("Accessibility", "accessibility"),
    ("Content Clarity", "content_clarity"),
    ("Navigation", "navigation"),
    ("Visual Design", "visual_design"),
    ("Mobile Friendliness", "mobile_friendliness"),
)


class PipelineProgress:
    """One spinner line per pipeline stage."""

    def __init__(self, out: Console = console) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=out,
        )
        self._task_ids: dict[str, int] = {}

    def __enter__(self) -> "PipelineProgress":
        self._progress.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self._progress.__exit__(*args)

    def start_stage(self, label: str) -> None:
        tid = self._progress.add_task(f"[cyan]{label}[/]", total=None)
        self._task_ids[label] = tid

    def finish_stage(self, label: str, note: str = "") -> None:
        if label in self._task_ids:
            suffix = f" [dim]{note}[/]" if note else ""
            self._progress.update(
                self._task_ids[label],
                description=f"[green]✓ {label}[/]{suffix}",
                completed=True,
            )

    def fail_stage(self, label: str, error: str) -> None:
        if label in self._task_ids:
            self._progress.update(
                self._task_ids[label],
                description=f"[red]✗ {label}: {error}[/]",
                completed=True,
            )

    def log_event(self, label: str, message: str, style: str = "dim") -> None:
        """Print a persistent log line above the spinner (not overwritten)."""
        self._progress.console.print(f"  [{style}]{label}:[/] {message}")


def _fmt(score: float) -> str:
    return f"{score:g}/100"


def print_summary(result: AuditResult, report_path: str, output_dir: str, *, out: Console = console) -> None:
    """Print the six scores and where the artifacts went."""
    table = Table(title="UX Audit Scores", show_header=True, header_style="bold")
    table.add_column("Dimension")
    table.add_column("Score", justify="right")
    table.add_row("[bold]Overall[/]", f"[bold]{_fmt(result.overall)}[/]")
    for label, attr in _BREAKDOWN_ROWS:
        table.add_row(label, _fmt(getattr(result.breakdown, attr)))

    out.print()
    out.print("[green]Audit complete![/]")
    out.print(table)
    out.print(f"[green]Full report saved to:[/] {report_path}")
    out.print(f"[green]Screenshots saved to:[/] {output_dir}/")
