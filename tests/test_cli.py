"""CLI tests for the stepcalc Typer app."""

from textwrap import dedent

import pytest
from typer.testing import CliRunner

from stepcalc.__main__ import app

FAILING = dedent("""
    Feature: Broken
      Scenario: Wrong
        Given I have entered 1 into the calculator
        When I add 1
        Then the result should be 3
""")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def results_dir(tmp_path, monkeypatch):
    """Point results at a temp dir and clear any policy override."""
    path = tmp_path / "results"
    monkeypatch.setenv("STEPCALC_RESULTS_DIR", str(path))
    monkeypatch.delenv("STEPCALC_INTEGER_POLICY", raising=False)
    monkeypatch.delenv("STEPCALC_FEATURES_DIR", raising=False)
    return path


# --- list / steps ---

def test_list(runner, results_dir):
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "calculator" in result.output


def test_list_empty_dir(runner, results_dir, tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    result = runner.invoke(app, ["list", str(empty)])
    assert result.exit_code == 1


def test_steps(runner):
    result = runner.invoke(app, ["steps"])
    assert result.exit_code == 0
    assert "I add {n}" in result.output


# --- run ---

def test_run_bundled(runner, results_dir):
    result = runner.invoke(app, ["run"])
    assert result.exit_code == 0
    assert len(list(results_dir.glob("*/results.json"))) == 1


def test_run_no_save(runner, results_dir):
    result = runner.invoke(app, ["run", "--no-save"])
    assert result.exit_code == 0
    assert not results_dir.exists()


def test_run_failing_feature(runner, results_dir, tmp_path):
    feature = tmp_path / "broken.feature"
    feature.write_text(FAILING, encoding="utf-8")
    result = runner.invoke(app, ["run", str(feature), "--no-save"])
    assert result.exit_code == 1


def test_run_missing_path(runner, results_dir, tmp_path):
    result = runner.invoke(app, ["run", str(tmp_path / "missing.feature")])
    assert result.exit_code == 1
    assert "No such feature" in result.output


def test_run_bad_policy_option(runner, results_dir):
    result = runner.invoke(app, ["run", "--policy", "saturate"])
    assert result.exit_code == 1


def test_run_bad_policy_env(runner, results_dir, monkeypatch):
    monkeypatch.setenv("STEPCALC_INTEGER_POLICY", "bogus")
    result = runner.invoke(app, ["run", "--no-save"])
    assert result.exit_code == 1
    assert "STEPCALC_INTEGER_POLICY" in result.output


def test_run_features_dir_from_env(runner, results_dir, tmp_path, monkeypatch):
    features = tmp_path / "features"
    features.mkdir()
    (features / "broken.feature").write_text(FAILING, encoding="utf-8")
    monkeypatch.setenv("STEPCALC_FEATURES_DIR", str(features))
    result = runner.invoke(app, ["run", "--no-save"])
    assert result.exit_code == 1


# --- results / report ---

def test_results_and_report(runner, results_dir):
    assert runner.invoke(app, ["run"]).exit_code == 0

    result = runner.invoke(app, ["results"])
    assert result.exit_code == 0
    assert "pass" in result.output

    result = runner.invoke(app, ["report"])
    assert result.exit_code == 0
    report = (results_dir / "RESULTS.md").read_text(encoding="utf-8")
    assert "All scenarios passed." in report


def test_run_parse_error_reports_location(runner, results_dir, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bad.feature").write_text("Scenario: no feature\n", encoding="utf-8")
    result = runner.invoke(app, ["run", "bad.feature", "--no-save"])
    assert result.exit_code == 1
    assert "bad.feature:1:" in result.output


def test_run_non_utf8_feature(runner, results_dir, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "latin1.feature").write_bytes(b"Feature: Caf\xe9\n")
    result = runner.invoke(app, ["run", "latin1.feature", "--no-save"])
    assert result.exit_code == 1
    assert "not valid UTF-8" in result.output


def test_list_skips_non_utf8(runner, results_dir, tmp_path):
    (tmp_path / "latin1.feature").write_bytes(b"Feature: Caf\xe9\n")
    (tmp_path / "ok.feature").write_text("Feature: Ok\n", encoding="utf-8")
    result = runner.invoke(app, ["list", str(tmp_path)])
    assert result.exit_code == 0
    assert "Ok" in result.output
