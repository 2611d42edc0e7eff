"""CLI for the stepcalc scenario harness.

Usage:
    python -m stepcalc list [PATH]                 # Show features
    python -m stepcalc steps                       # Show the step table
    python -m stepcalc run [PATHS]...              # Run features
    python -m stepcalc results                     # List stored runs
    python -m stepcalc report                      # Generate RESULTS.md
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stepcalc.config import Settings, load_settings, parse_policy
from stepcalc.features import list_features
from stepcalc.runner import run_features
from stepcalc.scorer import generate_report, list_all_results, render_run
from stepcalc.steps import STEP_TABLE

app = typer.Typer(
    name="stepcalc",
    help="Integer calculator driven by Gherkin scenarios",
    no_args_is_help=True,
)
console = Console(stderr=True)


def _settings() -> Settings:
    try:
        return load_settings()
    except ValueError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command("list")
def cmd_list(
    path: Optional[Path] = typer.Argument(None, help="Directory of .feature files"),
) -> None:
    """Show available features."""
    root = path or _settings().features_dir
    features = list_features(root)
    if not features:
        console.print(f"[yellow]No features found in {escape(str(root))}.[/yellow]")
        raise typer.Exit(1)

    table = Table(title="Available Features", show_header=True, header_style="bold")
    table.add_column("Name", style="green", min_width=12)
    table.add_column("Title", min_width=20)
    table.add_column("Scenarios", justify="right")

    for f in features:
        table.add_row(escape(f.name), escape(f.title), str(f.total_scenarios))

    console.print()
    console.print(table)
    console.print()


@app.command("steps")
def cmd_steps() -> None:
    """Show the step phrase table."""
    table = Table(title="Step Definitions", show_header=True, header_style="bold")
    table.add_column("Kind", style="cyan")
    table.add_column("Phrase", min_width=30)
    table.add_column("Operation")

    for d in STEP_TABLE:
        table.add_row(d.kind.value.capitalize(), d.phrase, d.action.__name__.lstrip("_"))

    console.print()
    console.print(table)
    console.print()


@app.command("run")
def cmd_run(
    paths: Optional[List[Path]] = typer.Argument(None, help="Feature files or directories"),
    policy: Optional[str] = typer.Option(None, "--policy", "-p", help="Integer policy: unbounded, wrap32"),
    results_dir: Optional[Path] = typer.Option(None, "--results-dir", "-r", help="Where to store results.json"),
    no_save: bool = typer.Option(False, "--no-save", help="Do not store results"),
) -> None:
    """Run features and show a scorecard."""
    settings = _settings()
    try:
        integer_policy = parse_policy(policy, "--policy") if policy else settings.policy
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    targets = list(paths) if paths else [settings.features_dir]
    missing = [p for p in targets if not p.exists()]
    if missing:
        for p in missing:
            console.print(f"[red]Error:[/red] No such feature file or directory: {escape(str(p))}")
        raise typer.Exit(1)

    run = run_features(
        targets, console,
        policy=integer_policy,
        results_dir=results_dir or settings.results_dir,
        save=not no_save,
    )
    render_run(run, console)
    if run.verdict != "pass":
        raise typer.Exit(1)


@app.command("results")
def cmd_results(
    results_dir: Optional[Path] = typer.Option(None, "--results-dir", "-r", help="Results directory"),
) -> None:
    """List all stored results."""
    list_all_results(console, results_dir or _settings().results_dir)


@app.command("report")
def cmd_report(
    results_dir: Optional[Path] = typer.Option(None, "--results-dir", "-r", help="Results directory"),
) -> None:
    """Generate RESULTS.md with the run history."""
    path = generate_report(results_dir or _settings().results_dir)
    console.print(f"Report written to {escape(str(path))}")


if __name__ == "__main__":
    app()
