"""Generate synthetic example bundles for testing and demonstration."""

import numpy as np
import pandas as pd
from pathlib import Path

# Add src to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from batplan_engine.core.schemas import (
    ConsumptionInterval,
    ForecastSeries,
    PlannerSettings,
    PriceInterval,
    PriceSeries,
)
from batplan_engine.io.bundle import init_bundle

BUNDLES_DIR = Path(__file__).parent.parent / "examples" / "bundles"


def _forecast_series(dates: pd.DatetimeIndex, load_w: np.ndarray, step_minutes: int) -> ForecastSeries:
    step = pd.Timedelta(minutes=step_minutes)
    return ForecastSeries(
        forecasts=[
            ConsumptionInterval(
                start=ts.to_pydatetime(),
                end=(ts + step).to_pydatetime(),
                average_power=float(power),
            )
            for ts, power in zip(dates, load_w)
        ]
    )


def _price_series(hours: pd.DatetimeIndex, price: np.ndarray, bidding_zone: str) -> PriceSeries:
    step = pd.Timedelta(hours=1)
    return PriceSeries(
        bidding_zone=bidding_zone,
        prices=[
            PriceInterval(
                start=ts.to_pydatetime(),
                end=(ts + step).to_pydatetime(),
                currency="EUR",
                price_per_energy=round(float(p), 4),
            )
            for ts, p in zip(hours, price)
        ],
    )


def generate_day_ahead_peak_shave():
    """Generate one day of 15-minute forecasts against hourly prices."""
    print("Generating day_ahead_peak_shave bundle...")

    settings = PlannerSettings(
        capacity=3.0,
        initial_charge=1.5,
        max_rate=1.5,
        efficiency=0.9,
        grid_limit=7_800_000.0,
    )

    rng = np.random.default_rng(42)
    dates = pd.date_range("2022-12-12", periods=96, freq="15min", tz="UTC")

    # Synthetic site load (W): base load with a midday and an evening peak
    hour = dates.hour + dates.minute / 60.0
    load_w = (
        4_500_000.0
        + 2_500_000.0 * np.exp(-((hour - 12.0) ** 2) / 6.0)
        + 3_500_000.0 * np.exp(-((hour - 18.5) ** 2) / 2.0)
        + rng.normal(0, 150_000.0, len(dates))
    )

    # Day-ahead prices (EUR/kWh): cheap night, morning and evening peaks
    hours = pd.date_range("2022-12-12", periods=24, freq="1h", tz="UTC")
    h = np.arange(24)
    price = (
        0.22
        + 0.08 * np.exp(-((h - 8.0) ** 2) / 4.0)
        + 0.14 * np.exp(-((h - 18.0) ** 2) / 4.0)
        - 0.05 * ((h < 6) | (h >= 23))
    )

    init_bundle(
        BUNDLES_DIR / "day_ahead_peak_shave",
        settings,
        _forecast_series(dates, load_w, 15),
        _price_series(hours, price, "10YNL----------L"),
    )
    print(f"✓ Created {BUNDLES_DIR / 'day_ahead_peak_shave'}")


def generate_sustained_overload_yaml():
    """Generate a bundle whose overload outlasts the battery (YAML config)."""
    print("Generating sustained_overload_yaml bundle...")

    settings = PlannerSettings(
        capacity=1.0,
        initial_charge=0.5,
        max_rate=2.0,
        efficiency=0.95,
        grid_limit=5_000_000.0,
        price_weighting="duration",
    )

    dates = pd.date_range("2022-12-12", periods=16, freq="15min", tz="UTC")
    load_w = np.full(len(dates), 6_500_000.0)
    load_w[:4] = 3_000_000.0

    hours = pd.date_range("2022-12-12", periods=4, freq="1h", tz="UTC")
    price = np.array([0.10, 0.30, 0.35, 0.25])

    init_bundle(
        BUNDLES_DIR / "sustained_overload_yaml",
        settings,
        _forecast_series(dates, load_w, 15),
        _price_series(hours, price, "10Y1001A1001A82H"),
        config_format="yaml",
    )
    print(f"✓ Created {BUNDLES_DIR / 'sustained_overload_yaml'}")


if __name__ == "__main__":
    generate_day_ahead_peak_shave()
    generate_sustained_overload_yaml()
