#!/usr/bin/env python3
"""CLI entry point for the Feed Extractor.

Usage::

    python main.py --input input.html
    python main.py --input saved_feed.html --output-dir results --format csv
    python main.py --input saved_feed.html --no-download
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from feed_extractor.config import DEFAULT_WATCH_BASE_URL
from feed_extractor.job_manager import JobFailed, JobManager
from feed_extractor.logger import setup_logging

cli = typer.Typer(
    name="feed-extractor",
    help="📰 Feed Extractor — split a saved feed page into per-post folders and download its media.",
    add_completion=False,
)
console = Console()


@cli.command()
def extract(
    input_path: str = typer.Option("input.html", "--input", "-i", help="Saved HTML feed page."),
    output_dir: str = typer.Option("results", "--output-dir", "-o", help="Output directory."),
    fmt: str = typer.Option("jsonl", "--format", "-f", help="Post dataset format: jsonl, csv, parquet."),
    no_download: bool = typer.Option(False, "--no-download", help="Record media URLs without downloading."),
    watch_base_url: str = typer.Option(
        DEFAULT_WATCH_BASE_URL, "--watch-base-url", help="Prefix for clickable video links.",
    ),
    timeout: int = typer.Option(30, "--timeout", "-t", help="Per-download timeout in seconds."),
    retries: int = typer.Option(2, "--retries", help="Retries per failed download."),
    concurrency: int = typer.Option(4, "--concurrency", "-c", help="Parallel downloads."),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output logs as JSON lines."),
) -> None:
    """📥 Extract posts, captions, images and videos from a saved feed page."""
    setup_logging(level=log_level, json_output=json_logs)

    rprint(Panel.fit(
        f"[bold cyan]Feed Extractor[/bold cyan]\n"
        f"[dim]Input:[/dim]  {input_path}\n"
        f"[dim]Output:[/dim] {output_dir}/  •  [dim]Format:[/dim] {fmt}\n"
        f"[dim]Downloads:[/dim] {'off' if no_download else f'on ({concurrency} parallel, {timeout}s timeout)'}",
        border_style="blue",
    ))

    try:
        manager = JobManager(
            input_path=input_path,
            output_dir=output_dir,
            output_format=fmt,
            download_media=not no_download,
            request_timeout=timeout,
            max_retries=retries,
            max_concurrent_downloads=concurrency,
            watch_base_url=watch_base_url,
        )
    except ValidationError as exc:
        rprint(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    try:
        report = manager.run()
    except JobFailed as exc:
        rprint(f"[bold red]Extraction failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        rprint("\n[yellow]Extraction interrupted by user.[/yellow]")
        raise typer.Exit(code=130)

    # ── Summary ───────────────────────────────────────────────────────
    _print_report(report, output_dir)


def _print_report(report: dict, output_dir: str) -> None:
    """Pretty-print the extraction report summary."""
    rprint()
    table = Table(title="📊 Extraction Report", border_style="bright_blue")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="bold white")

    table.add_row("Posts", str(report.get("total_posts", 0)))
    table.add_row("Captions", str(report.get("total_captions", 0)))
    table.add_row("Images", str(report.get("total_images", 0)))
    table.add_row("Videos", str(report.get("total_videos", 0)))
    table.add_row("Downloads OK", str(report.get("downloads_ok", 0)))
    table.add_row("Downloads Failed", str(report.get("downloads_failed", 0)))
    table.add_row("Time Taken", f"{report.get('time_taken_seconds', 0):.1f}s")

    console.print(table)

    if report.get("diagnostics"):
        rprint(f"\n[yellow]⚠️  {report['diagnostics']} problem(s) recorded. See errorlog.txt for details.[/yellow]")

    rprint(f"\n[green]✅ Posts saved to:[/green] [bold]{output_dir}/[/bold]")
    rprint("[dim]Files: <MM-DD-YYYY>/post.txt, imageURLs.txt, videoURLs.txt, extraction_report.json[/dim]")


if __name__ == "__main__":
    cli()
