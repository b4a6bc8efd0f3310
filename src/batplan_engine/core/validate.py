"""Input validation beyond Pydantic schemas."""

import math
from typing import Sequence

from batplan_engine.core.constants import NUMERICAL_TOLERANCE
from batplan_engine.core.errors import EmptyPriceSeries, InputValidationError, InvalidConfig
from batplan_engine.core.schemas import (
    Action,
    BatteryConfig,
    ConsumptionInterval,
    Plan,
    PriceInterval,
)


def validate_battery_config(config: BatteryConfig) -> None:
    """Validate battery parameter ranges.

    Args:
        config: Battery configuration in internal units

    Raises:
        InvalidConfig: If any parameter is out of range
    """
    for name in ("capacity", "initial_charge", "max_rate", "efficiency", "grid_limit"):
        if not math.isfinite(getattr(config, name)):
            raise InvalidConfig(f"{name} must be finite, got {getattr(config, name)}")

    if config.capacity <= 0:
        raise InvalidConfig(f"capacity must be > 0, got {config.capacity}")

    if not 0 <= config.initial_charge <= config.capacity:
        raise InvalidConfig(
            f"initial_charge must be within [0, {config.capacity}], got {config.initial_charge}"
        )

    if config.max_rate <= 0:
        raise InvalidConfig(f"max_rate must be > 0, got {config.max_rate}")

    if not 0 < config.efficiency <= 1:
        raise InvalidConfig(f"efficiency must be within (0, 1], got {config.efficiency}")

    if config.grid_limit <= 0:
        raise InvalidConfig(f"grid_limit must be > 0, got {config.grid_limit}")


def validate_forecasts(forecasts: Sequence[ConsumptionInterval]) -> None:
    """Validate the consumption forecast sequence.

    Gaps between intervals are allowed; overlaps and disorder are not.

    Args:
        forecasts: Consumption intervals sorted by start

    Raises:
        InputValidationError: If validation fails
    """
    if len(forecasts) == 0:
        raise InputValidationError("Forecast contains no intervals")

    for interval in forecasts:
        if interval.start >= interval.end:
            raise InputValidationError(
                f"Forecast start time must be before end time at {interval.start.isoformat()}"
            )
        if not math.isfinite(interval.average_power):
            raise InputValidationError(
                f"Forecast power is not finite at {interval.start.isoformat()}"
            )

    for prev, cur in zip(forecasts, forecasts[1:]):
        if cur.start < prev.start:
            raise InputValidationError(
                f"Forecast intervals must be sorted by start: {cur.start.isoformat()} "
                f"follows {prev.start.isoformat()}"
            )
        if cur.start < prev.end:
            raise InputValidationError(
                f"Forecast intervals overlap at {cur.start.isoformat()}"
            )


def validate_prices(prices: Sequence[PriceInterval]) -> None:
    """Validate the day-ahead price sequence.

    Coverage of the forecast horizon is checked separately by
    ``check_price_coverage``.

    Args:
        prices: Price intervals sorted by start

    Raises:
        EmptyPriceSeries: If there are no prices
        InputValidationError: If validation fails
    """
    if len(prices) == 0:
        raise EmptyPriceSeries("Price series is empty")

    for price in prices:
        if price.start >= price.end:
            raise InputValidationError(
                f"Price start time must be before end time at {price.start.isoformat()}"
            )
        if not math.isfinite(price.price_per_energy):
            raise InputValidationError(f"Price is not finite at {price.start.isoformat()}")

    for prev, cur in zip(prices, prices[1:]):
        if cur.start < prev.start:
            raise InputValidationError(
                f"Price intervals must be sorted by start: {cur.start.isoformat()} "
                f"follows {prev.start.isoformat()}"
            )

    currencies = {price.currency for price in prices}
    if len(currencies) > 1:
        raise InputValidationError(f"Price series mixes currencies: {sorted(currencies)}")


def validate_plan(
    plan: Plan, forecasts: Sequence[ConsumptionInterval], config: BatteryConfig
) -> None:
    """Validate a plan satisfies physical constraints.

    Args:
        plan: Generated plan
        forecasts: Consumption intervals the plan was generated from
        config: Battery configuration

    Raises:
        InputValidationError: If constraints are violated
    """
    if len(plan.entries) != len(forecasts):
        raise InputValidationError(
            f"Plan has {len(plan.entries)} entries for {len(forecasts)} forecast intervals"
        )

    for entry, interval in zip(plan.entries, forecasts):
        at = entry.start.isoformat()

        if entry.start != interval.start or entry.end != interval.end:
            raise InputValidationError(f"Plan entry at {at} does not match forecast order")

        if entry.resulting_charge < -NUMERICAL_TOLERANCE:
            raise InputValidationError(f"Charge below zero at {at}: {entry.resulting_charge} Wh")

        if entry.resulting_charge > config.capacity + NUMERICAL_TOLERANCE:
            raise InputValidationError(
                f"Charge above capacity at {at}: {entry.resulting_charge} Wh"
            )

        if entry.power > config.max_rate + NUMERICAL_TOLERANCE:
            raise InputValidationError(f"Power exceeds max rate at {at}: {entry.power} W")

        if entry.action == Action.IDLE and entry.power != 0:
            raise InputValidationError(f"Idle entry carries power at {at}: {entry.power} W")
