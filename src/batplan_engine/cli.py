"""Command-line interface for the battery planning engine."""

import logging
from pathlib import Path

import typer

from batplan_engine import __version__

app = typer.Typer(
    help="Battery charge/discharge planner for day-ahead prices and a grid import limit",
    no_args_is_help=True,
)

LOG_LEVEL_OPTION = typer.Option(
    "INFO", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"
)


def _configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise typer.BadParameter(f"Unknown log level: {level}")
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # basicConfig leaves the level alone once the root logger has handlers
    logging.getLogger().setLevel(numeric)


@app.command()
def version():
    """Show batplan version."""
    typer.echo(f"batplan engine v{__version__}")


@app.command()
def validate(
    bundle_path: str = typer.Argument(".", help="Path to bundle directory"),
    log_level: str = LOG_LEVEL_OPTION,
):
    """Validate a run bundle's files, settings, and input data.

    Args:
        bundle_path: Path to bundle directory
    """
    from batplan_engine.core.validate import validate_forecasts, validate_prices
    from batplan_engine.io.bundle import load_bundle, validate_bundle
    from batplan_engine.planning.alignment import check_price_coverage

    _configure_logging(log_level)

    try:
        validate_bundle(bundle_path)
        settings, forecasts, prices = load_bundle(bundle_path)
        settings.to_battery_config()
        validate_forecasts(forecasts.forecasts)
        validate_prices(prices.prices)
        check_price_coverage(forecasts.forecasts, prices.prices)
        typer.secho(f"✓ Bundle at {bundle_path} is valid", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(
            f"✗ Bundle validation failed: {type(e).__name__}: {e}", fg=typer.colors.RED, err=True
        )
        raise typer.Exit(1)


@app.command()
def plan(
    bundle_path: str = typer.Argument(".", help="Path to bundle directory"),
    parquet: bool = typer.Option(False, "--parquet", help="Also write plan.parquet"),
    log_level: str = LOG_LEVEL_OPTION,
):
    """Generate a battery plan for a bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from batplan_engine.runners.plan import run_plan

    _configure_logging(log_level)

    try:
        run_plan(bundle_path, parquet=parquet)
        typer.secho(
            f"\n✓ Battery planning complete! Check {Path(bundle_path) / 'output_plan.json'} for details.",
            fg=typer.colors.GREEN,
        )
    except Exception as e:
        typer.secho(f"\n✗ Planning failed: {type(e).__name__}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def report(bundle_path: str = typer.Argument(".", help="Path to bundle directory")):
    """Show metrics from a completed planning run.

    Args:
        bundle_path: Path to bundle directory
    """
    import json

    from batplan_engine.core.constants import METRICS_FILE

    bundle_path_obj = Path(bundle_path)

    # Check if results exist
    metrics_file = bundle_path_obj / METRICS_FILE
    if not metrics_file.exists():
        typer.secho(
            "✗ No results found in bundle. Run plan first.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1)

    with open(metrics_file) as f:
        metrics = json.load(f)

    typer.echo("\n" + "=" * 60)
    typer.echo("PLAN RESULTS")
    typer.echo("=" * 60)

    typer.echo("\nActions:")
    typer.echo(f"  Intervals:        {metrics['num_intervals']}")
    typer.echo(f"  Charge:           {metrics['num_charge']}")
    typer.echo(f"  Discharge:        {metrics['num_discharge']}")
    typer.echo(f"  Idle:             {metrics['num_idle']}")

    typer.echo("\nGrid Limit:")
    typer.echo(f"  Limit:            {metrics['grid_limit_w']:.0f} W")
    typer.echo(f"  Baseline peak:    {metrics['baseline_peak_import_w']:.0f} W")
    typer.echo(f"  Planned peak:     {metrics['planned_peak_import_w']:.0f} W")
    typer.echo(
        f"  Over limit:       {metrics['intervals_over_limit_before']} -> "
        f"{metrics['intervals_over_limit_after']} intervals"
    )
    typer.echo(f"  Unmet energy:     {metrics['unmet_grid_limit_kwh']:.2f} kWh")

    typer.echo("\nEnergy:")
    typer.echo(f"  Charged (grid):   {metrics['energy_charged_kwh']:.2f} kWh")
    typer.echo(f"  Discharged:       {metrics['energy_discharged_kwh']:.2f} kWh")
    typer.echo(f"  Charging cost:    {metrics['charging_cost']:.2f}")
    typer.echo(f"  Reference price:  {metrics['reference_price']:.4f} /kWh")

    typer.echo("\nBattery:")
    typer.echo(f"  Initial charge:   {metrics['initial_charge_wh']:.0f} Wh")
    typer.echo(f"  Final charge:     {metrics['final_charge_wh']:.0f} Wh")

    typer.echo("\n" + "=" * 60 + "\n")

    typer.secho("✓ Report generated", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
