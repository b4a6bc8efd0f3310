"""Test battery state transitions, clamping, and efficiency accounting."""

from datetime import timedelta

import pytest

from batplan_engine.core.errors import InvalidConfig
from batplan_engine.core.schemas import Action, BatteryConfig, BatteryState
from batplan_engine.planning.simulator import apply, drawn_energy, stored_energy

ONE_HOUR = timedelta(hours=1)
QUARTER_HOUR = timedelta(minutes=15)


@pytest.fixture
def config():
    """3 MWh / 1.5 MW battery at 90% efficiency, in Wh and W."""
    return BatteryConfig(
        capacity=3_000_000.0,
        initial_charge=1_500_000.0,
        max_rate=1_500_000.0,
        efficiency=0.9,
        grid_limit=7_800_000.0,
    )


@pytest.fixture
def state(config):
    return BatteryState(charge=config.initial_charge)


def test_charge_with_efficiency(config, state):
    """1 MW for 1 hour stores 0.9 MWh."""
    power, new_state = apply(state, 1_000_000.0, Action.CHARGE, ONE_HOUR, config)

    assert power == pytest.approx(1_000_000.0)
    assert new_state.charge == pytest.approx(2_400_000.0)


def test_discharge_with_efficiency(config, state):
    """1 MW delivered for 1 hour draws 1/0.9 MWh from storage."""
    power, new_state = apply(state, 1_000_000.0, Action.DISCHARGE, ONE_HOUR, config)

    assert power == pytest.approx(1_000_000.0)
    assert new_state.charge == pytest.approx(1_500_000.0 - 1_000_000.0 / 0.9)
    assert new_state.charge == pytest.approx(388_888.9, abs=1.0)


def test_charge_and_discharge_cycle(config, state):
    """Charge then discharge 1 MW for 1 hour each."""
    _, charged = apply(state, 1_000_000.0, Action.CHARGE, ONE_HOUR, config)
    assert charged.charge == pytest.approx(2_400_000.0)

    power, discharged = apply(charged, 1_000_000.0, Action.DISCHARGE, ONE_HOUR, config)

    assert power == pytest.approx(1_000_000.0)
    assert discharged.charge == pytest.approx(1_288_888.9, abs=1.0)


def test_charge_limited_by_max_rate(config, state):
    """Requests above max_rate are clamped to max_rate."""
    power, new_state = apply(state, 5_000_000.0, Action.CHARGE, ONE_HOUR, config)

    assert power == pytest.approx(config.max_rate)
    assert new_state.charge == pytest.approx(1_500_000.0 + 1_350_000.0)
    assert new_state.charge <= config.capacity


def test_charge_clamped_at_capacity(config, state):
    """A charge that would overflow is clamped and ends exactly full."""
    power, new_state = apply(state, config.max_rate, Action.CHARGE, timedelta(hours=2), config)

    headroom_power = (config.capacity - state.charge) / config.efficiency / 2.0

    assert power < config.max_rate, "Actual power should be below the request"
    assert power == pytest.approx(headroom_power)
    assert new_state.charge == pytest.approx(config.capacity)
    assert new_state.charge <= config.capacity


def test_charge_when_full_is_zero(config):
    """A full battery absorbs nothing."""
    full = BatteryState(charge=config.capacity)

    power, new_state = apply(full, config.max_rate, Action.CHARGE, QUARTER_HOUR, config)

    assert power == 0.0
    assert new_state.charge == config.capacity


def test_discharge_clamped_at_empty(config, state):
    """Discharging more than is stored delivers what is available and ends empty."""
    power, new_state = apply(state, 3_000_000.0, Action.DISCHARGE, ONE_HOUR, config)

    assert power == pytest.approx(state.charge * config.efficiency)
    assert power < config.max_rate
    assert new_state.charge == pytest.approx(0.0, abs=1e-6)
    assert new_state.charge >= 0.0


def test_discharge_when_empty_is_zero(config):
    """An empty battery delivers nothing."""
    empty = BatteryState(charge=0.0)

    power, new_state = apply(empty, 500_000.0, Action.DISCHARGE, QUARTER_HOUR, config)

    assert power == 0.0
    assert new_state.charge == 0.0


@pytest.mark.parametrize("direction", [Action.CHARGE, Action.DISCHARGE])
def test_conservation(config, state, direction):
    """Charge change equals stored (charge) or drawn (discharge) energy."""
    power, new_state = apply(state, 600_000.0, direction, QUARTER_HOUR, config)

    if direction == Action.CHARGE:
        expected_delta = power * 0.25 * config.efficiency
        assert new_state.charge - state.charge == pytest.approx(expected_delta)
        assert stored_energy(power, QUARTER_HOUR, config) == pytest.approx(expected_delta)
    else:
        expected_delta = power * 0.25 / config.efficiency
        assert state.charge - new_state.charge == pytest.approx(expected_delta)
        assert drawn_energy(power, QUARTER_HOUR, config) == pytest.approx(expected_delta)


def test_transition_is_deterministic(config, state):
    """Replaying the same transition yields the same result."""
    first = apply(state, 1_200_000.0, Action.DISCHARGE, QUARTER_HOUR, config)
    second = apply(state, 1_200_000.0, Action.DISCHARGE, QUARTER_HOUR, config)

    assert first == second


def test_input_state_not_modified(config, state):
    """The input state is a value and is left untouched."""
    apply(state, 1_000_000.0, Action.CHARGE, ONE_HOUR, config)

    assert state.charge == 1_500_000.0


def test_negative_request_rejected(config, state):
    """Negative requested power is an error."""
    with pytest.raises(ValueError):
        apply(state, -1_000_000.0, Action.CHARGE, ONE_HOUR, config)

    with pytest.raises(ValueError):
        apply(state, -1_000_000.0, Action.DISCHARGE, ONE_HOUR, config)


def test_idle_direction_rejected(config, state):
    with pytest.raises(ValueError):
        apply(state, 0.0, Action.IDLE, ONE_HOUR, config)


@pytest.mark.parametrize("duration", [timedelta(0), timedelta(minutes=-15)])
def test_non_positive_duration_is_invalid(config, state, duration):
    with pytest.raises(InvalidConfig):
        apply(state, 1_000_000.0, Action.CHARGE, duration, config)


@pytest.mark.parametrize("efficiency", [0.0, -0.5, 1.01])
def test_efficiency_out_of_range_is_invalid(config, state, efficiency):
    bad = config.model_copy(update={"efficiency": efficiency})

    with pytest.raises(InvalidConfig):
        apply(state, 1_000_000.0, Action.DISCHARGE, ONE_HOUR, bad)


def test_zero_capacity_is_invalid(config, state):
    bad = config.model_copy(update={"capacity": 0.0})

    with pytest.raises(InvalidConfig):
        apply(state, 1_000_000.0, Action.CHARGE, ONE_HOUR, bad)


def test_perfect_efficiency(config, state):
    """With efficiency 1.0 grid-side and storage-side energy are equal."""
    lossless = config.model_copy(update={"efficiency": 1.0})

    power, new_state = apply(state, 1_000_000.0, Action.CHARGE, ONE_HOUR, lossless)

    assert new_state.charge - state.charge == pytest.approx(power)
