"""Gherkin feature reading for the calculator scenarios.

Parsing and pickle compilation are done by gherkin-official (the parser
pytest-bdd uses). Pickles already have Background steps prepended, outlines
expanded, tags inherited and And/But resolved; this module maps them onto
the small Feature/Scenario/Step types the runner works with.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gherkin.errors import ParserError
from gherkin.parser import Parser
from gherkin.pickles.compiler import Compiler

from stepcalc.models import StepKind

# Pickle step types. "Unknown" is a "*" step, or an And/But with nothing before it.
_PICKLE_KINDS = {"Context": StepKind.GIVEN, "Action": StepKind.WHEN, "Outcome": StepKind.THEN}
_OUTLINE_KEYWORDS = ("Scenario Outline", "Scenario Template")
_LOCATION_PREFIX = re.compile(r"^\(\d+:\d+\):\s*")
_PLACEHOLDER = re.compile(r"<([^<>]+)>")


class FeatureParseError(ValueError):
    """A .feature file is not valid Gherkin, or not readable as UTF-8."""

    def __init__(self, message: str, line: int = 0, source: str = "<string>") -> None:
        self.line = line
        self.source = source
        location = f"{source}:{line}" if line else source
        super().__init__(f"{location}: {message}")


@dataclass
class Step:
    keyword: str
    kind: StepKind
    text: str
    line: int = 0


@dataclass
class Scenario:
    name: str
    steps: list[Step] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    line: int = 0


@dataclass
class Feature:
    name: str
    description: str = ""
    scenarios: list[Scenario] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    path: Optional[Path] = None


class _AstIndex:
    """Lookup of AST nodes by id, plus the Examples header of each row."""

    def __init__(self, feature: dict) -> None:
        self.nodes: dict[str, dict] = {}
        self.headers: dict[str, list[str]] = {}
        self.outlines: list[dict] = []
        self._visit(feature.get("children", []))

    def _visit(self, children: list[dict]) -> None:
        for child in children:
            if "rule" in child:
                self._visit(child["rule"].get("children", []))
                continue
            node = child.get("background") or child.get("scenario")
            if not node:
                continue
            self.nodes[node["id"]] = node
            for step in node.get("steps", []):
                self.nodes[step["id"]] = step
            if node.get("examples") or node.get("keyword", "").strip() in _OUTLINE_KEYWORDS:
                self.outlines.append(node)
            for examples in node.get("examples", []):
                header = [c["value"] for c in (examples.get("tableHeader") or {}).get("cells", [])]
                for row in examples.get("tableBody", []):
                    self.nodes[row["id"]] = row
                    self.headers[row["id"]] = header

    def row_values(self, row_id: str) -> dict[str, str]:
        cells = [c["value"] for c in self.nodes[row_id].get("cells", [])]
        return dict(zip(self.headers[row_id], cells))


def _substitute(text: str, values: dict[str, str]) -> str:
    """Replace <name> placeholders in one pass; substituted values are final."""
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), text)


def _parse_error(exc: ParserError, source: str) -> FeatureParseError:
    errors = getattr(exc, "errors", None) or [exc]
    first = errors[0]
    location = getattr(first, "location", None) or {}
    message = _LOCATION_PREFIX.sub("", str(first))
    return FeatureParseError(message, location.get("line") or 0, source)


def _step(
    pickle_step: dict,
    index: _AstIndex,
    values: dict[str, str],
    previous: Optional[StepKind],
    source: str,
) -> Step:
    ast_step = index.nodes[pickle_step["astNodeIds"][0]]
    line = ast_step["location"]["line"]
    kind = _PICKLE_KINDS.get(pickle_step.get("type", "Unknown"), previous)
    keyword = ast_step["keyword"].strip()
    if kind is None:
        raise FeatureParseError(f"'{keyword}' has no preceding step", line, source)
    # Background steps carry a single AST id and are never substituted.
    if values and len(pickle_step["astNodeIds"]) > 1:
        text = _substitute(ast_step["text"], values)
    else:
        text = pickle_step["text"]
    return Step(keyword, kind, text, line)


def parse_feature(text: str, source: str = "<string>") -> Feature:
    """Parse Gherkin text into a Feature with outlines expanded.

    Raises:
        FeatureParseError: the text is not valid Gherkin, has no Feature,
            or has a Scenario Outline without example rows.
    """
    try:
        document = Parser().parse(text)
    except ParserError as e:
        raise _parse_error(e, source) from None

    ast_feature = document.get("feature")
    if not ast_feature:
        raise FeatureParseError("no 'Feature:' found", 0, source)

    index = _AstIndex(ast_feature)
    for outline in index.outlines:
        if not any(ex.get("tableBody") for ex in outline.get("examples", [])):
            raise FeatureParseError(
                f"Scenario Outline '{outline['name']}' has no example rows",
                outline["location"]["line"], source,
            )

    document["uri"] = source
    feature = Feature(
        name=ast_feature["name"],
        description="\n".join(ln.strip() for ln in (ast_feature.get("description") or "").splitlines()).strip(),
        tags=[t["name"] for t in ast_feature.get("tags", [])],
    )

    example_numbers: Counter = Counter()
    for pickle in Compiler().compile(document):
        ast_ids = pickle["astNodeIds"]
        ast_scenario = index.nodes[ast_ids[0]]
        values: dict[str, str] = {}
        if len(ast_ids) > 1:
            row = index.nodes[ast_ids[1]]
            values = index.row_values(ast_ids[1])
            example_numbers[ast_scenario["id"]] += 1
            name = f"{_substitute(ast_scenario['name'], values)} (example {example_numbers[ast_scenario['id']]})"
            line = row["location"]["line"]
        else:
            name = pickle["name"]
            line = ast_scenario["location"]["line"]

        steps: list[Step] = []
        for pickle_step in pickle.get("steps", []):
            previous = steps[-1].kind if steps else None
            steps.append(_step(pickle_step, index, values, previous, source))

        feature.scenarios.append(Scenario(
            name=name,
            steps=steps,
            tags=[t["name"] for t in pickle.get("tags", [])],
            line=line,
        ))
    return feature


def parse_feature_file(path: Path) -> Feature:
    """Read and parse a .feature file.

    Raises:
        FeatureParseError: not valid UTF-8, or not valid Gherkin.
        OSError: the file cannot be read.
    """
    path = Path(path)
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        line = raw.count(b"\n", 0, e.start) + 1
        raise FeatureParseError(f"not valid UTF-8 ({e.reason})", line, str(path)) from None
    feature = parse_feature(text, source=str(path))
    feature.path = path
    return feature
