"""Run bundle I/O operations.

A run bundle is a folder containing:
- config.toml (or config.yaml): Battery and grid settings
- forecasts.json: Consumption forecast
- day-ahead.json: Day-ahead prices
- (outputs):
  - output_plan.json: Planned actions
  - metrics.json: Computed metrics
  - plan_metadata.json: Reproducibility metadata
  - plan.parquet: Plan table (optional)
"""

import json
from pathlib import Path

import yaml

from batplan_engine import __version__
from batplan_engine.core.constants import (
    CONFIG_TOML,
    CONFIG_YAML,
    FORECASTS_FILE,
    METADATA_FILE,
    METRICS_FILE,
    PLAN_FILE,
    PLAN_PARQUET_FILE,
    PRICES_FILE,
)
from batplan_engine.core.schemas import (
    ForecastSeries,
    Plan,
    PlanMetadata,
    PlannerSettings,
    PriceSeries,
)
from batplan_engine.io.formats import write_plan_json, write_plan_parquet
from batplan_engine.io.loaders import load_forecasts, load_prices, load_settings


def find_config(bundle_path: str | Path) -> Path:
    """Return the bundle's configuration file, preferring TOML over YAML.

    Raises:
        FileNotFoundError: If neither config.toml nor config.yaml exists
    """
    bundle_path = Path(bundle_path)

    for filename in (CONFIG_TOML, CONFIG_YAML):
        candidate = bundle_path / filename
        if candidate.exists():
            return candidate

    raise FileNotFoundError(f"No {CONFIG_TOML} or {CONFIG_YAML} in bundle: {bundle_path}")


def load_bundle(
    bundle_path: str | Path,
) -> tuple[PlannerSettings, ForecastSeries, PriceSeries]:
    """Load a run bundle.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        Tuple of (settings, forecasts, prices)
    """
    bundle_path = Path(bundle_path)

    if not bundle_path.exists():
        raise FileNotFoundError(f"Bundle not found: {bundle_path}")

    settings = load_settings(find_config(bundle_path))
    forecasts = load_forecasts(bundle_path / FORECASTS_FILE)
    prices = load_prices(bundle_path / PRICES_FILE)

    return settings, forecasts, prices


def write_results(
    bundle_path: str | Path,
    plan: Plan,
    metrics: dict | None = None,
    metadata: PlanMetadata | None = None,
    parquet: bool = False,
) -> None:
    """Write results to bundle.

    Args:
        bundle_path: Path to bundle directory
        plan: Generated plan
        metrics: Optional metrics dictionary
        metadata: Optional metadata; a default record is written if omitted
        parquet: Also write the plan as Parquet
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(parents=True, exist_ok=True)

    # Write plan
    write_plan_json(plan, bundle_path / PLAN_FILE)

    if parquet:
        write_plan_parquet(plan, bundle_path / PLAN_PARQUET_FILE)

    # Write metrics if provided
    if metrics is not None:
        with open(bundle_path / METRICS_FILE, "w") as f:
            json.dump(metrics, f, indent=2, default=str)

    # Write metadata
    if metadata is None:
        metadata = PlanMetadata(batplan_version=__version__, num_intervals=len(plan))
    with open(bundle_path / METADATA_FILE, "w") as f:
        json.dump(metadata.model_dump(), f, indent=2, default=str)


def init_bundle(
    bundle_path: str | Path,
    settings: PlannerSettings,
    forecasts: ForecastSeries,
    prices: PriceSeries,
    config_format: str = "toml",
) -> None:
    """Initialize a new run bundle.

    Args:
        bundle_path: Path to bundle directory
        settings: Planner settings in configuration units
        forecasts: Consumption forecast
        prices: Day-ahead prices
        config_format: "toml" or "yaml"
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(parents=True, exist_ok=True)

    # Write config
    if config_format == "toml":
        with open(bundle_path / CONFIG_TOML, "w") as f:
            f.write(_settings_to_toml(settings))
    elif config_format == "yaml":
        with open(bundle_path / CONFIG_YAML, "w") as f:
            yaml.dump({"settings": settings.model_dump()}, f, default_flow_style=False)
    else:
        raise ValueError(f"Unknown config format: {config_format}")

    # Write inputs using the external field names
    with open(bundle_path / FORECASTS_FILE, "w") as f:
        json.dump(forecasts.model_dump(mode="json", by_alias=True), f, indent=2)

    with open(bundle_path / PRICES_FILE, "w") as f:
        json.dump(prices.model_dump(mode="json", by_alias=True), f, indent=2)


def _settings_to_toml(settings: PlannerSettings) -> str:
    lines = ["[settings]"]
    for key, value in settings.model_dump().items():
        if isinstance(value, str):
            lines.append(f'{key} = "{value}"')
        else:
            lines.append(f"{key} = {value!r}")
    return "\n".join(lines) + "\n"


def validate_bundle(bundle_path: str | Path) -> bool:
    """Validate that a bundle has all required files.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        True if valid

    Raises:
        ValueError: If bundle is invalid
    """
    bundle_path = Path(bundle_path)

    if not ((bundle_path / CONFIG_TOML).exists() or (bundle_path / CONFIG_YAML).exists()):
        raise ValueError(f"Missing required file: {CONFIG_TOML} (or {CONFIG_YAML})")

    for filename in [FORECASTS_FILE, PRICES_FILE]:
        if not (bundle_path / filename).exists():
            raise ValueError(f"Missing required file: {filename}")

    return True
