"""Stepcalc runner — parse features, run scenarios, collect results.

Data flow per run:
1. Expand each path (directories → their *.feature files)
2. Parse each file; parse errors become feature-level errors
3. Run every scenario against a fresh ScenarioContext
4. Assemble RunResult, optionally save as results.json
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape

from stepcalc.calculator import IntegerPolicy
from stepcalc.features import feature_paths
from stepcalc.gherkin import Feature, FeatureParseError, Scenario, parse_feature_file
from stepcalc.models import FeatureResult, RunResult, ScenarioResult, StepResult, StepStatus
from stepcalc.steps import ScenarioContext, StepAssertionError, UndefinedStepError, execute_step

_VERDICT_STYLES = {"pass": "green", "partial": "yellow", "undefined": "yellow"}


def verdict_style(verdict: str) -> str:
    return _VERDICT_STYLES.get(verdict, "red")


def run_scenario(scenario: Scenario, policy: IntegerPolicy = IntegerPolicy.UNBOUNDED) -> ScenarioResult:
    """Run one scenario against its own Calculator.

    Steps after the first one that does not pass are recorded as skipped.
    """
    ctx = ScenarioContext(policy=policy)
    result = ScenarioResult(name=scenario.name, line=scenario.line, tags=list(scenario.tags))
    halted = False

    for step in scenario.steps:
        status = StepStatus.SKIPPED
        message = ""
        if not halted:
            try:
                execute_step(ctx, step.kind, step.text)
                status = StepStatus.PASSED
            except UndefinedStepError as e:
                status, message = StepStatus.UNDEFINED, str(e)
            except StepAssertionError as e:
                status, message = StepStatus.FAILED, f"line {step.line}: {e}"
            halted = status is not StepStatus.PASSED
        result.steps.append(StepResult(
            keyword=step.keyword,
            text=step.text,
            status=status,
            line=step.line,
            message=message,
        ))

    result.final_value = ctx.calculator.value
    return result


def run_feature(feature: Feature, policy: IntegerPolicy = IntegerPolicy.UNBOUNDED) -> FeatureResult:
    """Run every scenario of a parsed feature."""
    return FeatureResult(
        name=feature.name,
        path=str(feature.path or ""),
        scenarios=[run_scenario(s, policy) for s in feature.scenarios],
    )


def _expand_paths(paths: Iterable[Path]) -> list[Path]:
    expanded: list[Path] = []
    for p in paths:
        expanded.extend(feature_paths(Path(p)) if Path(p).is_dir() else [Path(p)])
    return expanded


def run_features(
    paths: Iterable[Path],
    console: Console,
    policy: IntegerPolicy = IntegerPolicy.UNBOUNDED,
    results_dir: Optional[Path] = None,
    save: bool = True,
) -> RunResult:
    """Parse and run feature files, reporting progress on the console.

    Args:
        paths: Feature files or directories of feature files.
        console: Rich Console for status output.
        policy: Integer policy for every Calculator in the run.
        results_dir: Root under which <timestamp>/results.json is written.
        save: Set False to skip writing results.

    Returns:
        RunResult with every feature's outcome.
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    run = RunResult(timestamp=timestamp, policy=policy.value)
    start = time.monotonic()

    for path in _expand_paths(paths):
        try:
            feature = parse_feature_file(path)
        except (FeatureParseError, OSError) as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            run.features.append(FeatureResult(name=path.stem, path=str(path), error=str(e)))
            continue

        console.print(f"\n[bold]Feature:[/bold] {escape(feature.name)} [dim]({escape(str(path))})[/dim]")
        feature_result = run_feature(feature, policy)
        for s in feature_result.scenarios:
            style = verdict_style(s.verdict)
            console.print(f"  [{style}]{s.verdict:9s}[/{style}] {escape(s.name)}")
            if s.message:
                console.print(f"            [dim]{escape(s.message)}[/dim]")
        run.features.append(feature_result)

    run.wall_clock_s = round(time.monotonic() - start, 3)

    if save and results_dir is not None:
        result_dir = Path(results_dir) / timestamp
        run.save(result_dir)
        console.print(f"\n  Results saved to {escape(str(result_dir / 'results.json'))}")

    return run
