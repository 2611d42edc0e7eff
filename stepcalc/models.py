"""Data models for the stepcalc scenario harness.

StepKind, StepStatus, StepResult, ScenarioResult, FeatureResult, RunResult:
the typed structures that flow through gherkin → runner → scorer → CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class StepKind(str, Enum):
    """Gherkin step kinds. And/But resolve to the kind before them."""

    GIVEN = "given"
    WHEN = "when"
    THEN = "then"


class StepStatus(str, Enum):
    """Outcome of a single step."""

    PASSED = "passed"
    FAILED = "failed"
    UNDEFINED = "undefined"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """Outcome of one step inside a scenario run."""

    keyword: str
    text: str
    status: StepStatus
    line: int = 0
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "text": self.text,
            "status": self.status.value,
            "line": self.line,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, d: dict) -> StepResult:
        return cls(
            keyword=d.get("keyword", ""),
            text=d.get("text", ""),
            status=StepStatus(d.get("status", StepStatus.SKIPPED.value)),
            line=d.get("line", 0),
            message=d.get("message", ""),
        )


@dataclass
class ScenarioResult:
    """Outcome of one scenario against its own Calculator."""

    name: str
    line: int = 0
    tags: list[str] = field(default_factory=list)
    steps: list[StepResult] = field(default_factory=list)
    final_value: Optional[int] = None

    @property
    def verdict(self) -> str:
        if not self.steps:
            return "no-steps"
        statuses = {s.status for s in self.steps}
        if statuses == {StepStatus.PASSED}:
            return "pass"
        if StepStatus.UNDEFINED in statuses:
            return "undefined"
        return "fail"

    @property
    def passed(self) -> bool:
        return self.verdict == "pass"

    @property
    def steps_passed(self) -> int:
        return sum(1 for s in self.steps if s.status is StepStatus.PASSED)

    @property
    def message(self) -> str:
        """First failure message, empty when the scenario passed."""
        for s in self.steps:
            if s.message:
                return s.message
        return ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "line": self.line,
            "tags": list(self.tags),
            "final_value": self.final_value,
            "verdict": self.verdict,
            "steps": [s.to_dict() for s in self.steps],
        }

    @classmethod
    def from_dict(cls, d: dict) -> ScenarioResult:
        return cls(
            name=d.get("name", ""),
            line=d.get("line", 0),
            tags=list(d.get("tags", [])),
            steps=[StepResult.from_dict(s) for s in d.get("steps", [])],
            final_value=d.get("final_value"),
        )


@dataclass
class FeatureResult:
    """Outcome of every scenario in one .feature file."""

    name: str
    path: str = ""
    scenarios: list[ScenarioResult] = field(default_factory=list)
    # Set when the file could not be parsed; scenarios is then empty.
    error: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "error": self.error,
            "scenarios": [s.to_dict() for s in self.scenarios],
        }

    @classmethod
    def from_dict(cls, d: dict) -> FeatureResult:
        return cls(
            name=d.get("name", ""),
            path=d.get("path", ""),
            error=d.get("error", ""),
            scenarios=[ScenarioResult.from_dict(s) for s in d.get("scenarios", [])],
        )


@dataclass
class RunResult:
    """Complete result of a single stepcalc run."""

    timestamp: str
    policy: str = "unbounded"
    wall_clock_s: float = 0.0
    features: list[FeatureResult] = field(default_factory=list)

    @property
    def scenarios(self) -> list[ScenarioResult]:
        return [s for f in self.features for s in f.scenarios]

    @property
    def total(self) -> int:
        return len(self.scenarios)

    @property
    def passed(self) -> int:
        return sum(1 for s in self.scenarios if s.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def errors(self) -> int:
        return sum(1 for f in self.features if f.error)

    @property
    def verdict(self) -> str:
        if self.total == 0:
            return "fail" if self.errors else "no-tests"
        if self.passed == self.total and not self.errors:
            return "pass"
        if self.passed > 0:
            return "partial"
        return "fail"

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "timestamp": self.timestamp,
            "policy": self.policy,
            "wall_clock_s": self.wall_clock_s,
            "passed": self.passed,
            "failed": self.failed,
            "errors": self.errors,
            "total": self.total,
            "verdict": self.verdict,
            "features": [f.to_dict() for f in self.features],
        }

    @classmethod
    def from_dict(cls, d: dict) -> RunResult:
        """Deserialize from a JSON dict (results.json)."""
        return cls(
            timestamp=d.get("timestamp", ""),
            policy=d.get("policy", "unbounded"),
            wall_clock_s=d.get("wall_clock_s", 0.0),
            features=[FeatureResult.from_dict(f) for f in d.get("features", [])],
        )

    def save(self, result_dir: Path) -> None:
        """Write results.json to the result directory."""
        result_dir.mkdir(parents=True, exist_ok=True)
        (result_dir / "results.json").write_text(
            json.dumps(self.to_dict(), indent=2), encoding="utf-8"
        )

    @classmethod
    def load(cls, result_dir: Path) -> Optional[RunResult]:
        """Load results.json from a result directory."""
        p = result_dir / "results.json"
        if not p.exists():
            return None
        try:
            return cls.from_dict(json.loads(p.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, OSError, ValueError):
            return None
