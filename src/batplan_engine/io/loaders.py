"""Loading of forecast, price, and settings files.

Parse and schema errors are re-raised as the engine's typed errors so that
callers only need to handle ``PlanningError`` and ``FileNotFoundError``.
"""

import json
import logging
import tomllib
from pathlib import Path

import yaml
from pydantic import ValidationError

from batplan_engine.core.errors import InputValidationError, InvalidConfig
from batplan_engine.core.schemas import ForecastSeries, PlannerSettings, PriceSeries

logger = logging.getLogger(__name__)


def _read_json(path: Path, what: str) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Unable to read {what} file: {path}")

    with open(path) as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise InputValidationError(f"JSON parsing error in {what} file {path}: {e}") from e


def load_forecasts(path: str | Path) -> ForecastSeries:
    """Load consumption forecasts from a JSON file.

    Args:
        path: Path to a {"forecasts": [...]} document

    Returns:
        Parsed forecast series

    Raises:
        FileNotFoundError: If the file does not exist
        InputValidationError: If the file is not valid JSON or fails the schema
    """
    path = Path(path)
    document = _read_json(path, "forecasts")

    try:
        series = ForecastSeries(**document)
    except (ValidationError, TypeError) as e:
        raise InputValidationError(f"Invalid forecasts in {path}: {e}") from e

    logger.info("Loaded %d forecast intervals from %s", len(series.forecasts), path)
    return series


def load_prices(path: str | Path) -> PriceSeries:
    """Load day-ahead prices from a JSON file.

    Args:
        path: Path to a {"bidding_zone": ..., "prices": [...]} document

    Returns:
        Parsed price series

    Raises:
        FileNotFoundError: If the file does not exist
        InputValidationError: If the file is not valid JSON or fails the schema
    """
    path = Path(path)
    document = _read_json(path, "day-ahead prices")

    try:
        series = PriceSeries(**document)
    except (ValidationError, TypeError) as e:
        raise InputValidationError(f"Invalid day-ahead prices in {path}: {e}") from e

    logger.info(
        "Loaded %d price intervals for bidding zone %s from %s",
        len(series.prices),
        series.bidding_zone,
        path,
    )
    return series


def load_settings(path: str | Path) -> PlannerSettings:
    """Load planner settings from a TOML or YAML file.

    Settings may sit under a top-level ``settings`` table or at the top level.

    Args:
        path: Path to config.toml, config.yaml, or config.yml

    Returns:
        Parsed settings in configuration units (MWh, MW, W)

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidConfig: If the file cannot be parsed or fails the schema
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Failed to read configuration file: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            with open(path, "rb") as f:
                document = tomllib.load(f)
        elif suffix in (".yaml", ".yml"):
            with open(path) as f:
                document = yaml.safe_load(f) or {}
        else:
            raise InvalidConfig(f"Unsupported configuration format: {path}")
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise InvalidConfig(f"Failed to parse configuration file {path}: {e}") from e

    if not isinstance(document, dict):
        raise InvalidConfig(f"Configuration file {path} must contain a mapping")

    values = document.get("settings", document)

    try:
        settings = PlannerSettings(**values)
    except (ValidationError, TypeError) as e:
        raise InvalidConfig(f"Invalid settings in {path}: {e}") from e

    logger.info("Loaded configuration from %s: %s", path, settings.model_dump())
    return settings
