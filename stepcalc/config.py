"""Environment-driven settings for stepcalc runs.

    STEPCALC_FEATURES_DIR    default: the bundled stepcalc/features/
    STEPCALC_RESULTS_DIR     default: ./stepcalc-results
    STEPCALC_INTEGER_POLICY  unbounded (default) or wrap32

CLI options override whatever the environment provides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from stepcalc.calculator import IntegerPolicy
from stepcalc.features import features_root

DEFAULT_RESULTS_DIR = "stepcalc-results"


@dataclass
class Settings:
    features_dir: Path
    results_dir: Path
    policy: IntegerPolicy = IntegerPolicy.UNBOUNDED


def parse_policy(value: str, source: str = "policy") -> IntegerPolicy:
    """Convert a policy name, raising ValueError that names its source."""
    try:
        return IntegerPolicy(value.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in IntegerPolicy)
        raise ValueError(f"{source}: invalid integer policy {value!r} (choose: {choices})") from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment (os.environ by default)."""
    env = os.environ if env is None else env
    features_dir = env.get("STEPCALC_FEATURES_DIR")
    return Settings(
        features_dir=Path(features_dir) if features_dir else features_root(),
        results_dir=Path(env.get("STEPCALC_RESULTS_DIR", DEFAULT_RESULTS_DIR)),
        policy=parse_policy(env.get("STEPCALC_INTEGER_POLICY", "unbounded"), "STEPCALC_INTEGER_POLICY"),
    )
