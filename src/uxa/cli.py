"""Typer CLI — ``uxa <URL>`` runs one UX audit."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

from uxa.config import load_options, load_settings
from uxa.errors import MissingConfiguration

# Load .env file from project root (if it exists)
load_dotenv()

app = typer.Typer(
    name="uxa",
    help="UX Audit Agent — screenshot, accessibility-check and AI-score a web page.",
    add_completion=False,
)
console = Console()

USAGE = """\
Usage: uxa <URL> [--output-dir DIR] [--config FILE] [--dry-run] [--verbose]

Examples:
  uxa https://example.com
  uxa https://github.com --output-dir ./reports"""


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every HTTP request at INFO — noisy and unhelpful for users
    logging.getLogger("httpx").setLevel(logging.WARNING)


@app.command()
def audit(
    url: Optional[str] = typer.Argument(None, help="Page to audit, e.g. https://example.com"),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Parent directory for run folders (default: ./artifacts)."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Optional YAML file with timeouts and output settings."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Use a canned evaluation instead of calling the model."
    ),
) -> None:
    """Audit the UX of a single page and write screenshots plus report.json."""
    if not url:
        console.print(USAGE)
        raise typer.Exit(code=1)

    _setup_logging(verbose)

    settings = None
    if not dry_run:
        try:
            settings = load_settings()
        except MissingConfiguration as exc:
            console.print(f"[red]{exc.message}[/]")
            raise typer.Exit(code=1)

    try:
        options = load_options(config)
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/] {exc}")
        raise typer.Exit(code=1)
    if output_dir is not None:
        options = options.model_copy(update={"output_directory": str(output_dir)})

    if dry_run:
        console.print("[yellow]DRY-RUN mode — no model calls will be made.[/]\n")
    console.print(f"[bold]Starting UX audit for:[/] {url}\n")

    state = asyncio.run(_run_audit(url, settings, options, dry_run=dry_run))

    if state.failed:
        console.print(
            f"\n[red]Audit failed[/] during [bold]{state.failed_stage.value}[/] "
            f"({state.error_kind}): {state.error}"
        )
        raise typer.Exit(code=1)

    from uxa.shared.progress import print_summary

    print_summary(state.result, state.report_path, state.output_dir, out=console)


async def _run_audit(
    url: str,
    settings: "EvaluatorSettings | None",  # noqa: F821
    options: "AuditOptions",  # noqa: F821
    *,
    dry_run: bool = False,
) -> "PipelineState":  # noqa: F821
    """Build the client and run the orchestrator once."""
    from uxa.agents.orchestrator.agent import AuditOrchestrator

    if dry_run:
        from uxa.shared.llm_client import DryRunClient
        client = DryRunClient()
    else:
        from uxa.shared.llm_client import LLMClient
        client = LLMClient(settings, timeout=options.request_timeout)

    orchestrator = AuditOrchestrator(client=client, options=options)
    return await orchestrator.run(url)