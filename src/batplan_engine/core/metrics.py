"""Metrics computation for generated plans."""

from typing import Sequence

import pandas as pd

from batplan_engine.core.constants import (
    COL_ACTION,
    COL_AVERAGE_POWER_W,
    COL_DURATION_HOURS,
    COL_GRID_IMPORT_W,
    COL_POWER_W,
    COL_PRICE,
    NUMERICAL_TOLERANCE,
    WH_PER_KWH,
)
from batplan_engine.core.schemas import (
    Action,
    BatteryConfig,
    ConsumptionInterval,
    Plan,
    PriceInterval,
)


def build_metrics_frame(
    plan: Plan,
    forecasts: Sequence[ConsumptionInterval],
    prices: Sequence[PriceInterval],
) -> pd.DataFrame:
    """Join plan entries with forecast power, resolved price, and grid import.

    Args:
        plan: Generated plan
        forecasts: Consumption intervals the plan was generated from
        prices: Price intervals

    Returns:
        Plan dataframe with average_power_w, price_per_kwh, duration_hours,
        and grid_import_w columns
    """
    from batplan_engine.io.formats import plan_to_frame
    from batplan_engine.planning.alignment import PriceTimeline

    timeline = PriceTimeline(prices)
    df = plan_to_frame(plan)

    df[COL_AVERAGE_POWER_W] = [f.average_power for f in forecasts]
    df[COL_DURATION_HOURS] = [f.duration_hours for f in forecasts]
    df[COL_PRICE] = [timeline.lookup(f.start).price_per_energy for f in forecasts]

    charge_w = df[COL_POWER_W].where(df[COL_ACTION] == Action.CHARGE.value, 0.0)
    discharge_w = df[COL_POWER_W].where(df[COL_ACTION] == Action.DISCHARGE.value, 0.0)
    df[COL_GRID_IMPORT_W] = df[COL_AVERAGE_POWER_W] + charge_w - discharge_w

    return df


def compute_metrics(
    plan: Plan,
    forecasts: Sequence[ConsumptionInterval],
    prices: Sequence[PriceInterval],
    config: BatteryConfig,
) -> dict:
    """Compute summary metrics for a plan.

    Args:
        plan: Generated plan
        forecasts: Consumption intervals the plan was generated from
        prices: Price intervals
        config: Battery configuration

    Returns:
        Dictionary of metrics
    """
    df = build_metrics_frame(plan, forecasts, prices)
    hours = df[COL_DURATION_HOURS]

    is_charge = df[COL_ACTION] == Action.CHARGE.value
    is_discharge = df[COL_ACTION] == Action.DISCHARGE.value

    # Grid-side energy
    charged_kwh = (df[COL_POWER_W].where(is_charge, 0.0) * hours).sum() / WH_PER_KWH
    discharged_kwh = (df[COL_POWER_W].where(is_discharge, 0.0) * hours).sum() / WH_PER_KWH

    # Charging cost at the resolved day-ahead price
    charging_cost = (
        df[COL_POWER_W].where(is_charge, 0.0) * hours / WH_PER_KWH * df[COL_PRICE]
    ).sum()

    # Peak import
    baseline_peak_w = df[COL_AVERAGE_POWER_W].max()
    planned_peak_w = df[COL_GRID_IMPORT_W].max()

    limit = config.grid_limit + NUMERICAL_TOLERANCE
    intervals_over_limit_before = int((df[COL_AVERAGE_POWER_W] > limit).sum())
    intervals_over_limit_after = int((df[COL_GRID_IMPORT_W] > limit).sum())
    unmet_kwh = (
        (df[COL_GRID_IMPORT_W] - config.grid_limit).clip(lower=0) * hours
    ).sum() / WH_PER_KWH

    return {
        "num_intervals": len(df),
        "num_charge": int(is_charge.sum()),
        "num_discharge": int(is_discharge.sum()),
        "num_idle": int((df[COL_ACTION] == Action.IDLE.value).sum()),
        "energy_charged_kwh": float(charged_kwh),
        "energy_stored_kwh": float(charged_kwh * config.efficiency),
        "energy_discharged_kwh": float(discharged_kwh),
        "energy_drawn_kwh": float(discharged_kwh / config.efficiency),
        "charging_cost": float(charging_cost),
        "reference_price": float(plan.reference_price),
        "baseline_peak_import_w": float(baseline_peak_w),
        "planned_peak_import_w": float(planned_peak_w),
        "peak_reduction_w": float(baseline_peak_w - planned_peak_w),
        "grid_limit_w": float(config.grid_limit),
        "intervals_over_limit_before": intervals_over_limit_before,
        "intervals_over_limit_after": intervals_over_limit_after,
        "unmet_grid_limit_kwh": float(unmet_kwh),
        "initial_charge_wh": float(plan.initial_charge),
        "final_charge_wh": float(plan.final_charge),
    }
