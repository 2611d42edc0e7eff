"""Feature discovery for stepcalc.

Bundled scenarios live next to this module as ``*.feature`` files. Any other
directory of feature files can be listed the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from stepcalc.gherkin import FeatureParseError, parse_feature_file


@dataclass
class FeatureInfo:
    """Metadata about a discovered feature file."""

    name: str
    title: str
    path: Path
    total_scenarios: int


def features_root() -> Path:
    """Absolute path to the bundled features/ directory."""
    return Path(__file__).parent


def feature_paths(root: Optional[Path] = None) -> list[Path]:
    """All *.feature files directly under root, sorted by name."""
    root = root or features_root()
    if root.is_file():
        return [root]
    if not root.is_dir():
        return []
    return sorted(root.glob("*.feature"))


def _info(path: Path) -> FeatureInfo:
    feature = parse_feature_file(path)
    return FeatureInfo(
        name=path.stem,
        title=feature.name,
        path=path,
        total_scenarios=len(feature.scenarios),
    )


def list_features(root: Optional[Path] = None) -> list[FeatureInfo]:
    """Discover all parseable feature files under root.

    Files that fail to read or parse are left out; run them to see the error.
    """
    infos = []
    for path in feature_paths(root):
        try:
            infos.append(_info(path))
        except (FeatureParseError, OSError):
            continue
    return infos


def load_feature(name: str, root: Optional[Path] = None) -> Optional[FeatureInfo]:
    """Load a single feature by bundled name (e.g. 'calculator') or by path.

    Returns:
        FeatureInfo if the feature exists and parses, None otherwise.
    """
    candidate = Path(name)
    if not candidate.is_file():
        candidate = (root or features_root()) / f"{name}.feature"
    if not candidate.is_file():
        return None
    try:
        return _info(candidate)
    except (FeatureParseError, OSError):
        return None
