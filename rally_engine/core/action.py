"""Action variants and their effect on the vehicle set-up.

Each action is a small frozen dataclass carrying only the parameters of
its kind.  ``Continue`` does not change the parameter state here; moving
the car is the job of :mod:`rally_engine.core.transition`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Union

from rally_engine.core.state import VehicleState
from rally_engine.core.tyre import TirePressure


class ActionKind(enum.IntEnum):
    """Action kinds, numbered A1..A8."""

    CONTINUE = 1
    CHANGE_CAR = 2
    CHANGE_DRIVER = 3
    CHANGE_TYRES = 4
    ADD_FUEL = 5
    CHANGE_PRESSURE = 6
    CHANGE_CAR_AND_DRIVER = 7
    CHANGE_TYRES_FUEL_PRESSURE = 8


@dataclass(frozen=True)
class Continue:
    kind: ClassVar[ActionKind] = ActionKind.CONTINUE

    def __str__(self) -> str:
        return "A1"


@dataclass(frozen=True)
class ChangeCar:
    car: str
    kind: ClassVar[ActionKind] = ActionKind.CHANGE_CAR

    def __str__(self) -> str:
        return f"A2:{self.car}"


@dataclass(frozen=True)
class ChangeDriver:
    driver: str
    kind: ClassVar[ActionKind] = ActionKind.CHANGE_DRIVER

    def __str__(self) -> str:
        return f"A3:{self.driver}"


@dataclass(frozen=True)
class ChangeTyres:
    tyre: str
    kind: ClassVar[ActionKind] = ActionKind.CHANGE_TYRES

    def __str__(self) -> str:
        return f"A4:{self.tyre}"


@dataclass(frozen=True)
class AddFuel:
    amount: int
    kind: ClassVar[ActionKind] = ActionKind.ADD_FUEL

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("amount must be > 0.")

    def __str__(self) -> str:
        return f"A5:{self.amount}"


@dataclass(frozen=True)
class ChangePressure:
    pressure: TirePressure
    kind: ClassVar[ActionKind] = ActionKind.CHANGE_PRESSURE

    def __str__(self) -> str:
        return f"A6:{self.pressure.value}"


@dataclass(frozen=True)
class ChangeCarAndDriver:
    car: str
    driver: str
    kind: ClassVar[ActionKind] = ActionKind.CHANGE_CAR_AND_DRIVER

    def __str__(self) -> str:
        return f"A7:{self.car}:{self.driver}"


@dataclass(frozen=True)
class ChangeTyresFuelPressure:
    tyre: str
    amount: int
    pressure: TirePressure
    kind: ClassVar[ActionKind] = ActionKind.CHANGE_TYRES_FUEL_PRESSURE

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("amount must be >= 0.")

    def __str__(self) -> str:
        return f"A8:{self.tyre}:{self.amount}:{self.pressure.value}"


Action = Union[
    Continue,
    ChangeCar,
    ChangeDriver,
    ChangeTyres,
    AddFuel,
    ChangePressure,
    ChangeCarAndDriver,
    ChangeTyresFuelPressure,
]


def action_slot(action: Action) -> object:
    """Identity of *action* ignoring its refuel amount.

    The fill-up amount follows the fuel on board, so the same choice made
    before and after a move differs only in that field.
    """
    if isinstance(action, AddFuel):
        return action.kind
    if isinstance(action, ChangeTyresFuelPressure):
        return (action.kind, action.tyre, action.pressure)
    return action


def apply_action(state: VehicleState, action: Action) -> VehicleState:
    """Return the state after the set-up change described by *action*.

    Raises:
        TypeError: If *action* is not one of the known variants.
    """
    if isinstance(action, Continue):
        return state
    if isinstance(action, ChangeCar):
        return state.change_car(action.car)
    if isinstance(action, ChangeDriver):
        return state.change_driver(action.driver)
    if isinstance(action, ChangeTyres):
        return state.change_tyres(action.tyre)
    if isinstance(action, AddFuel):
        return state.add_fuel(action.amount)
    if isinstance(action, ChangePressure):
        return state.change_pressure(action.pressure)
    if isinstance(action, ChangeCarAndDriver):
        return state.change_car_and_driver(action.car, action.driver)
    if isinstance(action, ChangeTyresFuelPressure):
        return state.change_tyres_fuel_pressure(
            action.tyre, action.amount, action.pressure
        )
    raise TypeError(f"Unknown action type: {type(action).__name__}")
