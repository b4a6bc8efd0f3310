"""Plan generation: a single left-to-right pass over the forecast.

Decision policy per interval, in priority order:
1. Consumption above the grid limit: discharge the deficit
2. Price strictly below the reference price: charge at max rate
3. Otherwise: idle

Protecting the grid connection always wins over price. The battery state
produced for interval i is the input state for interval i+1.
"""

import logging
from typing import Sequence

from batplan_engine.core.constants import NUMERICAL_TOLERANCE, WEIGHTING_INTERVAL
from batplan_engine.core.schemas import (
    Action,
    BatteryConfig,
    BatteryState,
    ConsumptionInterval,
    Plan,
    PlanEntry,
    PriceInterval,
)
from batplan_engine.core.validate import (
    validate_battery_config,
    validate_forecasts,
    validate_prices,
)
from batplan_engine.planning import simulator
from batplan_engine.planning.alignment import PriceTimeline, check_price_coverage
from batplan_engine.planning.statistics import compute_reference_price

logger = logging.getLogger(__name__)


def decide_action(
    interval: ConsumptionInterval,
    price: PriceInterval,
    reference_price: float,
    config: BatteryConfig,
) -> tuple[Action, float]:
    """Select the action and requested power for one interval.

    Returns:
        Tuple of (action, requested_power_w)
    """
    if interval.average_power > config.grid_limit:
        return Action.DISCHARGE, interval.average_power - config.grid_limit

    if price.price_per_energy < reference_price:
        return Action.CHARGE, config.max_rate

    return Action.IDLE, 0.0


def generate_plan(
    forecasts: Sequence[ConsumptionInterval],
    prices: Sequence[PriceInterval],
    config: BatteryConfig,
    weighting: str = WEIGHTING_INTERVAL,
) -> Plan:
    """Generate a battery plan for the forecast horizon.

    The run is all-or-nothing: any configuration, price, or alignment error
    propagates and no plan is returned.

    Args:
        forecasts: Consumption intervals sorted by start
        prices: Day-ahead price intervals sorted by start
        config: Battery configuration in internal units
        weighting: Reference price weighting ("duration" or "interval")

    Returns:
        Plan with one entry per forecast interval, in forecast order

    Raises:
        InvalidConfig: If the battery configuration is out of range
        EmptyPriceSeries: If prices is empty
        InputValidationError: If an interval does not end after it starts,
            or forecasts or prices are out of order
        NoCoveringPriceInterval: If a forecast interval has no price
        AmbiguousPriceInterval: If price intervals overlap
    """
    validate_battery_config(config)
    validate_prices(prices)
    if forecasts:
        validate_forecasts(forecasts)

    reference_price = compute_reference_price(prices, weighting)
    check_price_coverage(forecasts, prices)
    timeline = PriceTimeline(prices)

    logger.info(
        "Planning %d intervals against %d prices, reference price %.4f (%s-weighted)",
        len(forecasts),
        len(timeline),
        reference_price,
        weighting,
    )

    state = BatteryState(charge=config.initial_charge)
    entries = []

    for interval in forecasts:
        price = timeline.lookup(interval.start)
        action, requested = decide_action(interval, price, reference_price, config)
        duration = interval.end - interval.start

        if action == Action.IDLE:
            power = 0.0
        else:
            power, state = simulator.apply(state, requested, action, duration, config)

        if action == Action.DISCHARGE:
            if power < requested - NUMERICAL_TOLERANCE:
                logger.warning(
                    "Grid limit %.0f W exceeded at %s: deficit %.0f W, battery covers %.0f W",
                    config.grid_limit,
                    interval.start.isoformat(),
                    requested,
                    power,
                )
            logger.debug(
                "%s discharge %.0f W, drew %.1f Wh, charge %.1f Wh",
                interval.start.isoformat(),
                power,
                simulator.drawn_energy(power, duration, config),
                state.charge,
            )
        elif action == Action.CHARGE:
            logger.debug(
                "%s charge %.0f W at %.4f/kWh, stored %.1f Wh, charge %.1f Wh",
                interval.start.isoformat(),
                power,
                price.price_per_energy,
                simulator.stored_energy(power, duration, config),
                state.charge,
            )
        else:
            logger.debug(
                "%s idle at %.4f/kWh, charge %.1f Wh",
                interval.start.isoformat(),
                price.price_per_energy,
                state.charge,
            )

        entries.append(
            PlanEntry(
                start=interval.start,
                end=interval.end,
                action=action,
                power=power,
                resulting_charge=state.charge,
            )
        )

    plan = Plan(
        entries=entries,
        reference_price=reference_price,
        initial_charge=config.initial_charge,
    )

    logger.info(
        "Plan complete: final charge %.1f Wh (initial %.1f Wh)",
        plan.final_charge,
        plan.initial_charge,
    )

    return plan
