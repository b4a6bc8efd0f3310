"""Plan runner: load a bundle, generate the plan, write results."""

from pathlib import Path

from batplan_engine import __version__
from batplan_engine.core.metrics import compute_metrics
from batplan_engine.core.schemas import Plan, PlanMetadata
from batplan_engine.core.validate import validate_forecasts, validate_plan, validate_prices
from batplan_engine.io.bundle import load_bundle, write_results
from batplan_engine.planning.generator import generate_plan
from batplan_engine.planning.statistics import summarize_prices


def run_plan(bundle_path: str | Path, parquet: bool = False) -> tuple[Plan, dict]:
    """Run planning on a bundle.

    Args:
        bundle_path: Path to run bundle
        parquet: Also write the plan as Parquet

    Returns:
        Tuple of (plan, metrics)
    """
    print(f"Loading bundle from {bundle_path}...")
    settings, forecast_series, price_series = load_bundle(bundle_path)

    config = settings.to_battery_config()
    forecasts = forecast_series.forecasts
    prices = price_series.prices

    # Validate input
    validate_forecasts(forecasts)
    validate_prices(prices)

    summary = summarize_prices(prices, settings.price_weighting)

    print(f"Bidding zone: {price_series.bidding_zone or 'unspecified'}")
    print(
        f"Forecast: {len(forecasts)} intervals from {forecasts[0].start.isoformat()} "
        f"to {forecasts[-1].end.isoformat()}"
    )
    print(
        f"Prices: {summary.count} intervals, {summary.min_price:.4f} to {summary.max_price:.4f} "
        f"{summary.currency}/kWh, reference {summary.reference_price:.4f} ({summary.weighting}-weighted)"
    )
    print(
        f"Battery: {config.capacity:.0f} Wh capacity, {config.initial_charge:.0f} Wh initial, "
        f"{config.max_rate:.0f} W max rate, grid limit {config.grid_limit:.0f} W"
    )

    print("Generating plan...")
    plan = generate_plan(forecasts, prices, config, settings.price_weighting)

    # Validate result
    validate_plan(plan, forecasts, config)
    print("✓ Plan validation passed")

    print("Computing metrics...")
    metrics = compute_metrics(plan, forecasts, prices, config)

    print(
        f"Actions: {metrics['num_charge']} charge, {metrics['num_discharge']} discharge, "
        f"{metrics['num_idle']} idle"
    )
    print(f"Peak import: {metrics['baseline_peak_import_w']:.0f} W -> {metrics['planned_peak_import_w']:.0f} W")
    if metrics["intervals_over_limit_after"]:
        print(
            f"⚠ {metrics['intervals_over_limit_after']} intervals still exceed the grid limit "
            f"({metrics['unmet_grid_limit_kwh']:.2f} kWh unmet)"
        )
    print(f"Final charge: {plan.final_charge:.0f} Wh")

    metadata = PlanMetadata(
        batplan_version=__version__,
        price_weighting=settings.price_weighting,
        bidding_zone=price_series.bidding_zone,
        num_intervals=len(plan),
    )

    print(f"\nWriting results to {bundle_path}...")
    write_results(bundle_path, plan, metrics, metadata, parquet=parquet)

    return plan, metrics
