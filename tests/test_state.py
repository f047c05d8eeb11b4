"""Tests for the immutable vehicle state and set-up actions."""

import pytest

from rally_engine.core.action import (
    AddFuel,
    ChangeCar,
    ChangeCarAndDriver,
    ChangePressure,
    ChangeTyres,
    ChangeTyresFuelPressure,
    Continue,
    apply_action,
)
from rally_engine.core.errors import ConfigurationError
from rally_engine.core.state import FUEL_MAX, VehicleState
from rally_engine.core.tyre import TirePressure

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _sample_state(**overrides: object) -> VehicleState:
    fields: dict[str, object] = {
        "position": 3,
        "slip": False,
        "slip_time_left": 0,
        "breakdown": False,
        "breakdown_time_left": 0,
        "car": "fast",
        "fuel": 30,
        "pressure": TirePressure.FIFTY_PERCENT,
        "driver": "steady",
        "tyre": "mud",
    }
    fields.update(overrides)
    return VehicleState(**fields)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_fuel_outside_bounds_rejected() -> None:
    """Fuel must stay within [FUEL_MIN, FUEL_MAX]."""
    with pytest.raises(ValueError):
        _sample_state(fuel=FUEL_MAX + 1)
    with pytest.raises(ValueError):
        _sample_state(fuel=-1)


def test_slip_and_breakdown_are_exclusive() -> None:
    """A car cannot slip and be broken down at the same time."""
    with pytest.raises(ValueError):
        _sample_state(
            slip=True, slip_time_left=1, breakdown=True, breakdown_time_left=1
        )


# ---------------------------------------------------------------------------
# Movement and conditions
# ---------------------------------------------------------------------------


def test_change_position_clamps_to_track() -> None:
    """Moves are clamped to [1, n]."""
    state = _sample_state(position=3)
    assert state.change_position(-4, 10).position == 1
    assert state.change_position(5, 10).position == 8
    assert state.change_position(5, 6).position == 6


def test_state_is_not_mutated() -> None:
    """Transitions return new snapshots."""
    state = _sample_state()
    state.change_position(2, 10)
    state.add_fuel(5)
    assert state.position == 3
    assert state.fuel == 30


def test_slip_timer_clears_condition() -> None:
    """The slip flag is cleared when its timer reaches zero."""
    state = _sample_state(slip=True, slip_time_left=2)
    state = state.reduce_slip_time_left()
    assert state.slip and state.slip_time_left == 1
    state = state.reduce_slip_time_left()
    assert not state.slip and state.slip_time_left == 0
    assert not state.stationary


def test_breakdown_timer_clears_condition() -> None:
    state = _sample_state(breakdown=True, breakdown_time_left=1)
    assert state.stationary
    state = state.reduce_breakdown_time_left()
    assert not state.breakdown
    assert state.breakdown_time_left == 0


# ---------------------------------------------------------------------------
# Fuel
# ---------------------------------------------------------------------------


def test_add_fuel_caps_at_max() -> None:
    """Refuelling never exceeds FUEL_MAX."""
    assert _sample_state(fuel=45).add_fuel(20).fuel == FUEL_MAX


def test_add_negative_fuel_rejected() -> None:
    with pytest.raises(ValueError):
        _sample_state().add_fuel(-1)


def test_consume_more_than_on_board_raises() -> None:
    """Burning more fuel than is on board is a bookkeeping defect."""
    state = _sample_state(fuel=4)
    assert state.consume_fuel(4).fuel == 0
    with pytest.raises(ConfigurationError):
        state.consume_fuel(5)
    with pytest.raises(ConfigurationError):
        state.consume_fuel(-1)


# ---------------------------------------------------------------------------
# Set-up actions
# ---------------------------------------------------------------------------


def test_change_car_refuels_and_resets_pressure() -> None:
    """A fresh car comes with a full tank at 100% pressure."""
    state = apply_action(_sample_state(fuel=12), ChangeCar("economy"))
    assert state.car == "economy"
    assert state.fuel == FUEL_MAX
    assert state.pressure is TirePressure.ONE_HUNDRED_PERCENT


def test_change_tyres_resets_pressure_only() -> None:
    state = apply_action(_sample_state(), ChangeTyres("all-terrain"))
    assert state.tyre == "all-terrain"
    assert state.pressure is TirePressure.ONE_HUNDRED_PERCENT
    assert state.fuel == 30


def test_compound_actions() -> None:
    """Compound actions apply every component change."""
    base = _sample_state(fuel=20)

    both = apply_action(base, ChangeCarAndDriver("economy", "aggressive"))
    assert (both.car, both.driver, both.fuel) == ("economy", "aggressive", FUEL_MAX)

    refit = apply_action(
        base,
        ChangeTyresFuelPressure("all-terrain", 30, TirePressure.SEVENTY_FIVE_PERCENT),
    )
    assert refit.tyre == "all-terrain"
    assert refit.fuel == FUEL_MAX
    assert refit.pressure is TirePressure.SEVENTY_FIVE_PERCENT


def test_continue_and_pressure_actions() -> None:
    state = _sample_state()
    assert apply_action(state, Continue()) == state
    changed = apply_action(state, ChangePressure(TirePressure.ONE_HUNDRED_PERCENT))
    assert changed.pressure is TirePressure.ONE_HUNDRED_PERCENT


def test_add_fuel_action_requires_positive_amount() -> None:
    """AddFuel carries a strictly positive amount."""
    with pytest.raises(ValueError):
        AddFuel(0)
    assert apply_action(_sample_state(fuel=10), AddFuel(15)).fuel == 25


def test_unknown_action_type_rejected() -> None:
    with pytest.raises(TypeError):
        apply_action(_sample_state(), "A1")  # type: ignore[arg-type]
