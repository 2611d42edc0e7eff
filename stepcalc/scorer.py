"""Stepcalc scorer — renders Rich tables and generates markdown reports.

Results are stored as <results_dir>/<timestamp>/results.json. Timestamps are
UTC and sort lexicographically, so the newest run is the last one.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stepcalc.models import RunResult
from stepcalc.runner import verdict_style


def _load_all_runs(results_dir: Path) -> list[RunResult]:
    """Load every stored run, oldest first."""
    if not results_dir.is_dir():
        return []
    runs: list[RunResult] = []
    for run_dir in sorted(results_dir.iterdir()):
        if not run_dir.is_dir():
            continue
        result = RunResult.load(run_dir)
        if result:
            runs.append(result)
    runs.sort(key=lambda r: r.timestamp)
    return runs


def render_run(run: RunResult, console: Console) -> None:
    """Render a Rich table of every scenario in a run."""
    if not run.features:
        console.print("[yellow]No features were run.[/yellow]")
        return

    table = Table(
        title=f"stepcalc: {escape(run.timestamp)} ({escape(run.policy)})",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Feature", style="dim", min_width=12)
    table.add_column("Scenario", min_width=24)
    table.add_column("Steps", justify="right")
    table.add_column("Verdict", justify="right")
    table.add_column("Message")

    for feature in run.features:
        if feature.error:
            table.add_row(escape(feature.name), "--", "--", "[red]error[/red]", escape(feature.error))
            continue
        for s in feature.scenarios:
            style = verdict_style(s.verdict)
            table.add_row(
                escape(feature.name),
                escape(s.name),
                f"{s.steps_passed}/{len(s.steps)}",
                f"[{style}]{s.verdict}[/{style}]",
                escape(s.message),
            )

    style = verdict_style(run.verdict)
    console.print()
    console.print(table)
    console.print(
        f"  [{style}]{run.verdict}[/{style}]: {run.passed}/{run.total} scenarios passed"
        + (f", {run.errors} feature file(s) with errors" if run.errors else "")
    )
    console.print()


def list_all_results(console: Console, results_dir: Path) -> None:
    """List all stored runs, newest first."""
    runs = _load_all_runs(results_dir)
    if not runs:
        console.print("[yellow]No results yet. Run the features first.[/yellow]")
        return

    for r in reversed(runs):
        tests = f"{r.passed}/{r.total}"
        console.print(
            f"  {escape(r.timestamp)}  {escape(r.policy):9s} {r.verdict:8s} {tests:6s} {r.wall_clock_s:>7.3f}s"
        )


def _report_path(results_dir: Path) -> Path:
    """Path to the generated RESULTS.md."""
    return results_dir / "RESULTS.md"


def generate_report(results_dir: Path) -> Path:
    """Generate RESULTS.md with the run history and latest failures.

    Returns the path to the generated file.
    """
    runs = _load_all_runs(results_dir)

    lines: list[str] = []
    lines.append("# stepcalc Results")
    lines.append("")
    lines.append(f"*Generated {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}*")
    lines.append("")

    if not runs:
        lines.append("No results yet.")
    else:
        lines.append("| # | Timestamp | Policy | Verdict | Scenarios | Errors | Wall Clock |")
        lines.append("|---|-----------|--------|---------|-----------|--------|------------|")
        for i, r in enumerate(runs, 1):
            lines.append(
                f"| {i} | `{r.timestamp}` | {r.policy} | **{r.verdict}** "
                f"| {r.passed}/{r.total} | {r.errors} | {r.wall_clock_s}s |"
            )
        lines.append("")

        latest = runs[-1]
        failing = [
            (f.name, s) for f in latest.features for s in f.scenarios if not s.passed
        ]
        broken = [f for f in latest.features if f.error]
        lines.append("## Latest run")
        lines.append("")
        if not failing and not broken:
            lines.append("All scenarios passed.")
        for feature_name, s in failing:
            lines.append(f"- {feature_name} / {s.name}: **{s.verdict}** {s.message}".rstrip())
        for f in broken:
            lines.append(f"- {f.name}: **error** {f.error}")
        lines.append("")

    out = _report_path(results_dir)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return out
