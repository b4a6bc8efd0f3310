"""Test the command-line interface."""

import json
import logging
import shutil
from pathlib import Path

import pytest
from typer.testing import CliRunner

from batplan_engine import __version__
from batplan_engine.cli import app

runner = CliRunner()


@pytest.fixture
def bundle(tmp_path):
    bundle_path = tmp_path / "bundle"
    shutil.copytree(
        Path(__file__).parent.parent / "examples" / "bundles" / "grid_limit_two_hours",
        bundle_path,
    )
    return bundle_path


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_validate_bundle(bundle):
    result = runner.invoke(app, ["validate", str(bundle)])

    assert result.exit_code == 0
    assert "is valid" in result.output


def test_validate_missing_file(bundle):
    (bundle / "forecasts.json").unlink()

    result = runner.invoke(app, ["validate", str(bundle)])

    assert result.exit_code == 1
    assert "forecasts.json" in result.output


def test_plan_bundle(bundle):
    result = runner.invoke(app, ["plan", str(bundle), "--parquet"])

    assert result.exit_code == 0
    assert "Battery planning complete" in result.output
    assert (bundle / "output_plan.json").exists()
    assert (bundle / "plan.parquet").exists()


def test_plan_logs_run_summary_by_default(bundle, caplog):
    result = runner.invoke(app, ["plan", str(bundle)])

    assert result.exit_code == 0
    assert logging.getLogger().level == logging.INFO
    assert "reference price 0.3000" in caplog.text


def test_plan_with_price_gap_fails(bundle):
    prices_file = bundle / "day-ahead.json"
    document = json.loads(prices_file.read_text())
    document["prices"] = document["prices"][:1]
    prices_file.write_text(json.dumps(document))

    result = runner.invoke(app, ["plan", str(bundle)])

    assert result.exit_code == 1
    assert "NoCoveringPriceInterval" in result.output
    assert not (bundle / "output_plan.json").exists()


def test_plan_rejects_unknown_log_level(bundle):
    result = runner.invoke(app, ["plan", str(bundle), "--log-level", "CHATTY"])

    assert result.exit_code != 0


def test_report_before_plan(bundle):
    result = runner.invoke(app, ["report", str(bundle)])

    assert result.exit_code == 1
    assert "Run plan first" in result.output


def test_report_after_plan(bundle):
    runner.invoke(app, ["plan", str(bundle)])

    result = runner.invoke(app, ["report", str(bundle)])

    assert result.exit_code == 0
    assert "PLAN RESULTS" in result.output
    assert "Discharge:        2" in result.output
