"""Step phrase → Calculator operation table.

Each StepDefinition pairs a step kind and a phrase with an action. The
phrase's single ``{n}`` placeholder matches a signed decimal integer. The
table is the only dispatch mechanism: there is no decorator registry and no
reflection.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

from stepcalc.calculator import Calculator, IntegerPolicy
from stepcalc.models import StepKind

_INT_PATTERN = r"(?P<n>[-+]?\d+)"


class UndefinedStepError(LookupError):
    """No step definition matches the step text."""

    def __init__(self, kind: StepKind, text: str) -> None:
        self.kind = kind
        self.text = text
        super().__init__(f"undefined {kind.value} step: {text!r}")


class StepAssertionError(AssertionError):
    """A Then step's expectation did not hold."""

    def __init__(self, expected: int, actual: Optional[int]) -> None:
        self.expected = expected
        self.actual = actual
        shown = "no result" if actual is None else str(actual)
        super().__init__(f"expected {expected}, got {shown}")


class ScenarioContext:
    """Per-scenario state: a fresh Calculator and the last operation result."""

    def __init__(self, policy: IntegerPolicy = IntegerPolicy.UNBOUNDED) -> None:
        self.calculator = Calculator(policy=policy)
        self.result: Optional[int] = None


Action = Callable[[ScenarioContext, int], None]


@dataclass(frozen=True)
class StepDefinition:
    kind: StepKind
    phrase: str
    action: Action

    @property
    def pattern(self) -> re.Pattern:
        return re.compile("^" + re.escape(self.phrase).replace(r"\{n\}", _INT_PATTERN) + "$")

    def match(self, text: str) -> Optional[int]:
        """Return the captured integer if text matches this phrase."""
        m = self.pattern.match(text.strip())
        if not m:
            return None
        return int(m.group("n"))


def _enter(ctx: ScenarioContext, n: int) -> None:
    ctx.calculator.set_value(n)


def _add(ctx: ScenarioContext, n: int) -> None:
    ctx.result = ctx.calculator.add(n)


def _subtract(ctx: ScenarioContext, n: int) -> None:
    ctx.result = ctx.calculator.subtract(n)


def _expect_result(ctx: ScenarioContext, n: int) -> None:
    if ctx.result != n:
        raise StepAssertionError(expected=n, actual=ctx.result)


STEP_TABLE: tuple[StepDefinition, ...] = (
    StepDefinition(StepKind.GIVEN, "I have entered {n} into the calculator", _enter),
    StepDefinition(StepKind.WHEN, "I add {n}", _add),
    StepDefinition(StepKind.WHEN, "I subtract {n}", _subtract),
    StepDefinition(StepKind.THEN, "the result should be {n}", _expect_result),
)


def find_step(kind: StepKind, text: str) -> tuple[StepDefinition, int]:
    """Look up the definition for a step and its integer argument.

    Raises:
        UndefinedStepError: nothing of this kind matches the text.
    """
    for definition in STEP_TABLE:
        if definition.kind is not kind:
            continue
        n = definition.match(text)
        if n is not None:
            return definition, n
    raise UndefinedStepError(kind, text)


def execute_step(ctx: ScenarioContext, kind: StepKind, text: str) -> None:
    """Resolve a step against the table and apply it to the context."""
    definition, n = find_step(kind, text)
    definition.action(ctx, n)
