"""Golden bundle tests - validate example bundles produce expected results."""

import json
import shutil
from pathlib import Path

import pytest

from batplan_engine.core.schemas import Action
from batplan_engine.runners.plan import run_plan


@pytest.fixture
def examples_dir():
    """Get examples directory path."""
    return Path(__file__).parent.parent / "examples" / "bundles"


@pytest.fixture
def grid_limit_bundle(examples_dir, tmp_path):
    """Copy of the two-hour grid limit bundle, so outputs stay out of the repo."""
    bundle_path = tmp_path / "grid_limit_two_hours"
    shutil.copytree(examples_dir / "grid_limit_two_hours", bundle_path)
    return bundle_path


def test_grid_limit_two_hours_bundle(grid_limit_bundle):
    """Test cheap-then-expensive prices against a 7.8 MW grid limit."""
    plan, metrics = run_plan(grid_limit_bundle)

    assert [entry.action for entry in plan.entries] == [
        Action.CHARGE,
        Action.CHARGE,
        Action.DISCHARGE,
        Action.CHARGE,
        Action.IDLE,
        Action.DISCHARGE,
        Action.IDLE,
        Action.IDLE,
    ]
    assert plan.reference_price == pytest.approx(0.30)
    assert plan.entries[2].power == pytest.approx(700_000.0)
    assert plan.entries[5].power == pytest.approx(1_200_000.0)
    assert plan.final_charge == pytest.approx(1_984_722.22, abs=0.01)

    # Grid limit honored everywhere
    assert metrics["intervals_over_limit_before"] == 2
    assert metrics["intervals_over_limit_after"] == 0
    assert metrics["baseline_peak_import_w"] == pytest.approx(9_000_000.0)
    assert metrics["planned_peak_import_w"] == pytest.approx(7_800_000.0)
    assert metrics["peak_reduction_w"] == pytest.approx(1_200_000.0)

    # All charging happens in the cheap hour
    assert metrics["energy_charged_kwh"] == pytest.approx(1125.0)
    assert metrics["charging_cost"] == pytest.approx(225.0)

    print(f"✓ Grid limit: Peak reduction = {metrics['peak_reduction_w']:.0f} W")


def test_grid_limit_bundle_outputs(grid_limit_bundle):
    """Test the files written next to the inputs."""
    plan, metrics = run_plan(grid_limit_bundle, parquet=True)

    for filename in ["output_plan.json", "metrics.json", "plan_metadata.json", "plan.parquet"]:
        assert (grid_limit_bundle / filename).exists(), f"{filename} should be written"

    with open(grid_limit_bundle / "output_plan.json") as f:
        document = json.load(f)

    records = document["planning"]
    assert len(records) == len(plan)
    assert records[0]["start"].startswith("2022-12-12T00:00:00")
    assert [r["action"] for r in records[:3]] == ["charge", "charge", "discharge"]
    assert records[4]["power"] == 0.0

    with open(grid_limit_bundle / "metrics.json") as f:
        assert json.load(f) == pytest.approx(metrics)

    with open(grid_limit_bundle / "plan_metadata.json") as f:
        metadata = json.load(f)
    assert metadata["bidding_zone"] == "10YNL----------L"
    assert metadata["price_weighting"] == "interval"
    assert metadata["num_intervals"] == 8


def test_rerun_is_reproducible(grid_limit_bundle):
    """Test that planning the same bundle twice writes the same plan."""
    run_plan(grid_limit_bundle)
    first = (grid_limit_bundle / "output_plan.json").read_text()

    run_plan(grid_limit_bundle)
    second = (grid_limit_bundle / "output_plan.json").read_text()

    assert first == second
