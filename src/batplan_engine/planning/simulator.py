"""Battery state transition for a single interval.

Efficiency is applied once per direction: charging stores
``power * hours * efficiency`` and discharging draws ``power * hours / efficiency``
from storage for ``power`` delivered at the grid side.
"""

from datetime import timedelta

from batplan_engine.core.constants import SECONDS_PER_HOUR
from batplan_engine.core.errors import InvalidConfig
from batplan_engine.core.schemas import Action, BatteryConfig, BatteryState


def _duration_hours(duration: timedelta) -> float:
    hours = duration.total_seconds() / SECONDS_PER_HOUR
    if hours <= 0:
        raise InvalidConfig(f"Interval duration must be positive, got {duration}")
    return hours


def apply(
    state: BatteryState,
    requested_power: float,
    direction: Action,
    duration: timedelta,
    config: BatteryConfig,
) -> tuple[float, BatteryState]:
    """Apply a charge or discharge request for one interval.

    Args:
        state: State of charge at interval start
        requested_power: Requested grid-side power in W (>= 0)
        direction: Action.CHARGE or Action.DISCHARGE
        duration: Interval length
        config: Battery configuration

    Returns:
        Tuple of (actual_power, new_state). actual_power is the requested
        power clamped to the rate limit and to what the battery can absorb
        or deliver within the interval.

    Raises:
        InvalidConfig: If duration, capacity, or efficiency is out of range
        ValueError: If requested_power is negative or direction is not
            charge/discharge
    """
    hours = _duration_hours(duration)

    if config.capacity <= 0:
        raise InvalidConfig(f"capacity must be > 0, got {config.capacity}")
    if not 0 < config.efficiency <= 1:
        raise InvalidConfig(f"efficiency must be within (0, 1], got {config.efficiency}")

    if requested_power < 0:
        raise ValueError(f"Requested power must be non-negative, got {requested_power}")

    if direction == Action.CHARGE:
        headroom = max(0.0, config.capacity - state.charge)
        max_charge = headroom / config.efficiency / hours
        actual_power = max(0.0, min(requested_power, config.max_rate, max_charge))

        stored = actual_power * hours * config.efficiency
        new_charge = min(config.capacity, state.charge + stored)

    elif direction == Action.DISCHARGE:
        available = max(0.0, state.charge)
        max_discharge = available * config.efficiency / hours
        actual_power = max(0.0, min(requested_power, config.max_rate, max_discharge))

        drawn = actual_power * hours / config.efficiency
        new_charge = max(0.0, state.charge - drawn)

    else:
        raise ValueError(f"Direction must be charge or discharge, got {direction}")

    return actual_power, BatteryState(charge=new_charge)


def stored_energy(power: float, duration: timedelta, config: BatteryConfig) -> float:
    """Energy in Wh added to storage by charging at power for duration."""
    return power * _duration_hours(duration) * config.efficiency


def drawn_energy(power: float, duration: timedelta, config: BatteryConfig) -> float:
    """Energy in Wh removed from storage by discharging at power for duration."""
    return power * _duration_hours(duration) / config.efficiency
