"""Legal action enumeration for a state at the configured level.

Actions whose parameter equals the current value of that attribute are
never offered, so every branch changes something.  ``Continue`` is always
offered unless the low-fuel rule applies.
"""

from __future__ import annotations

from rally_engine.core.action import (
    Action,
    ActionKind,
    AddFuel,
    ChangeCar,
    ChangeCarAndDriver,
    ChangeDriver,
    ChangePressure,
    ChangeTyres,
    ChangeTyresFuelPressure,
    Continue,
    apply_action,
)
from rally_engine.core.problem import ProblemModel
from rally_engine.core.state import FUEL_MAX, VehicleState
from rally_engine.core.transition import TransitionModel
from rally_engine.core.tyre import PRESSURE_LEVELS

DEFAULT_LOW_FUEL_THRESHOLD: int = 10


class ActionCatalog:
    """Enumerates child actions and the set-up states they lead to.

    Attributes:
        problem: The static problem tables.
        transition: Transition model used for the fuel cost of a move.
        low_fuel_threshold: Below this fuel level (or below the cost of
            the next move, whichever is higher) only refuelling is offered.
    """

    __slots__ = ("problem", "transition", "low_fuel_threshold")

    def __init__(
        self,
        problem: ProblemModel,
        transition: TransitionModel | None = None,
        low_fuel_threshold: int = DEFAULT_LOW_FUEL_THRESHOLD,
    ) -> None:
        if low_fuel_threshold < 0:
            raise ValueError("low_fuel_threshold must be >= 0.")
        self.problem: ProblemModel = problem
        self.transition: TransitionModel = transition or TransitionModel(problem)
        self.low_fuel_threshold: int = low_fuel_threshold

    def is_low_fuel(self, state: VehicleState) -> bool:
        limit = max(self.low_fuel_threshold, self.transition.fuel_cost(state))
        return state.fuel < limit

    def legal_actions(self, state: VehicleState) -> list[Action]:
        """Return the actions offered from *state*, in a stable order."""
        level = self.problem.level

        # A full tank that still cannot pay for a move falls through to the
        # normal branching set: only a set-up change can help.
        if self.is_low_fuel(state) and state.fuel < FUEL_MAX:
            if level.allows(ActionKind.ADD_FUEL):
                return [AddFuel(FUEL_MAX - state.fuel)]
            # A fresh car comes full, so it is the only way to refuel here.
            if level.allows(ActionKind.CHANGE_CAR) and len(self.problem.cars) > 1:
                return self._car_changes(state)

        actions: list[Action] = []
        for kind in level.ordered_actions():
            if kind is ActionKind.CONTINUE:
                actions.append(Continue())
            elif kind is ActionKind.CHANGE_CAR:
                actions.extend(self._car_changes(state))
            elif kind is ActionKind.CHANGE_DRIVER:
                actions.extend(
                    ChangeDriver(name)
                    for name in self.problem.driver_names
                    if name != state.driver
                )
            elif kind is ActionKind.CHANGE_TYRES:
                actions.extend(
                    ChangeTyres(name)
                    for name in self.problem.tyre_names
                    if name != state.tyre
                )
            elif kind is ActionKind.ADD_FUEL:
                if state.fuel < FUEL_MAX:
                    actions.append(AddFuel(FUEL_MAX - state.fuel))
            elif kind is ActionKind.CHANGE_PRESSURE:
                actions.extend(
                    ChangePressure(p) for p in PRESSURE_LEVELS if p != state.pressure
                )
            elif kind is ActionKind.CHANGE_CAR_AND_DRIVER:
                actions.extend(
                    ChangeCarAndDriver(car, driver)
                    for car in self.problem.car_names
                    for driver in self.problem.driver_names
                    if car != state.car and driver != state.driver
                )
            elif kind is ActionKind.CHANGE_TYRES_FUEL_PRESSURE:
                amount = FUEL_MAX - state.fuel
                actions.extend(
                    ChangeTyresFuelPressure(tyre, amount, p)
                    for tyre in self.problem.tyre_names
                    for p in PRESSURE_LEVELS
                    if not (tyre == state.tyre and p == state.pressure and amount == 0)
                )
            else:
                raise TypeError(f"Unhandled action kind: {kind!r}")
        return actions

    def expand(self, state: VehicleState) -> list[tuple[Action, VehicleState]]:
        """Return ``(action, child_state)`` pairs for every legal action."""
        return [(a, apply_action(state, a)) for a in self.legal_actions(state)]

    def _car_changes(self, state: VehicleState) -> list[Action]:
        return [ChangeCar(name) for name in self.problem.car_names if name != state.car]
