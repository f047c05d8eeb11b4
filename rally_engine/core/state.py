"""Immutable vehicle state for the rally planner.

Every transition returns a new :class:`VehicleState`; no component mutates
a state in place.  The snapshot is hashable, and its set-up tuple decides
whether search statistics carry over between decisions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from rally_engine.core.errors import ConfigurationError
from rally_engine.core.tyre import TirePressure

if TYPE_CHECKING:
    from rally_engine.core.problem import ProblemModel

FUEL_MIN: int = 0
FUEL_MAX: int = 50


@dataclass(frozen=True)
class VehicleState:
    """Snapshot of the simulated vehicle.

    Attributes:
        position: 1-based cell index.
        slip: Whether the car is recovering from a slip.
        slip_time_left: Steps until the slip is recovered.
        breakdown: Whether the car is broken down.
        breakdown_time_left: Steps until the repair is finished.
        car: Car type name.
        fuel: Fuel remaining, in ``[FUEL_MIN, FUEL_MAX]``.
        pressure: Current tyre pressure.
        driver: Driver name.
        tyre: Tyre model name.
    """

    position: int
    slip: bool
    slip_time_left: int
    breakdown: bool
    breakdown_time_left: int
    car: str
    fuel: int
    pressure: TirePressure
    driver: str
    tyre: str

    def __post_init__(self) -> None:
        if self.position < 1:
            raise ValueError("position must be >= 1.")
        if not FUEL_MIN <= self.fuel <= FUEL_MAX:
            raise ValueError(f"fuel must be between {FUEL_MIN} and {FUEL_MAX}.")
        if self.slip and self.breakdown:
            raise ValueError("slip and breakdown are mutually exclusive.")
        if self.slip_time_left < 0 or self.breakdown_time_left < 0:
            raise ValueError("condition timers must be >= 0.")

    @classmethod
    def start(cls, problem: ProblemModel) -> VehicleState:
        """Return the fixed start state of *problem*."""
        return cls(
            position=1,
            slip=False,
            slip_time_left=0,
            breakdown=False,
            breakdown_time_left=0,
            car=problem.cars[0].name,
            fuel=FUEL_MAX,
            pressure=TirePressure.ONE_HUNDRED_PERCENT,
            driver=problem.drivers[0].name,
            tyre=problem.tyres[0].name,
        )

    @property
    def stationary(self) -> bool:
        """True while a slip or breakdown keeps the car from moving."""
        return self.slip or self.breakdown

    @property
    def setup(self) -> tuple[str, str, str, TirePressure]:
        """Vehicle set-up ``(car, driver, tyre, pressure)``; a move keeps it."""
        return (self.car, self.driver, self.tyre, self.pressure)

    # -- Movement and conditions ---------------------------------------------

    def change_position(self, delta: int, n: int) -> VehicleState:
        """Move by *delta* cells, clamped to ``[1, n]``."""
        return replace(self, position=min(max(self.position + delta, 1), n))

    def change_slip_condition(self, slip: bool, time_left: int) -> VehicleState:
        return replace(self, slip=slip, slip_time_left=time_left)

    def reduce_slip_time_left(self) -> VehicleState:
        remaining = self.slip_time_left - 1
        if remaining <= 0:
            return self.change_slip_condition(False, 0)
        return self.change_slip_condition(self.slip, remaining)

    def change_breakdown_condition(
        self, breakdown: bool, time_left: int
    ) -> VehicleState:
        return replace(self, breakdown=breakdown, breakdown_time_left=time_left)

    def reduce_breakdown_time_left(self) -> VehicleState:
        remaining = self.breakdown_time_left - 1
        if remaining <= 0:
            return self.change_breakdown_condition(False, 0)
        return self.change_breakdown_condition(self.breakdown, remaining)

    # -- Vehicle set-up ------------------------------------------------------

    def change_car(self, car: str) -> VehicleState:
        """Swap the car; a fresh car comes fuelled and at full pressure."""
        return replace(
            self, car=car, fuel=FUEL_MAX, pressure=TirePressure.ONE_HUNDRED_PERCENT
        )

    def change_driver(self, driver: str) -> VehicleState:
        return replace(self, driver=driver)

    def change_tyres(self, tyre: str) -> VehicleState:
        """Fit a new tyre model; new tyres are inflated to 100%."""
        return replace(self, tyre=tyre, pressure=TirePressure.ONE_HUNDRED_PERCENT)

    def change_pressure(self, pressure: TirePressure) -> VehicleState:
        return replace(self, pressure=pressure)

    def change_car_and_driver(self, car: str, driver: str) -> VehicleState:
        return self.change_car(car).change_driver(driver)

    def change_tyres_fuel_pressure(
        self, tyre: str, amount: int, pressure: TirePressure
    ) -> VehicleState:
        return replace(self.add_fuel(amount), tyre=tyre, pressure=pressure)

    # -- Fuel ----------------------------------------------------------------

    def add_fuel(self, amount: int) -> VehicleState:
        """Add *amount* fuel, capped at ``FUEL_MAX``.

        Raises:
            ValueError: If *amount* is negative.
        """
        if amount < 0:
            raise ValueError("fuel to add must be >= 0.")
        return replace(self, fuel=min(self.fuel + amount, FUEL_MAX))

    def consume_fuel(self, amount: int) -> VehicleState:
        """Burn *amount* fuel.

        Raises:
            ConfigurationError: If *amount* is negative or exceeds the fuel
                on board.  The transition model checks fuel before moving,
                so reaching this is a bookkeeping defect.
        """
        if amount < 0:
            raise ConfigurationError("fuel consumed must be >= 0.")
        if self.fuel - amount < FUEL_MIN:
            raise ConfigurationError(
                f"too much fuel consumed: {amount} with {self.fuel} on board."
            )
        return replace(self, fuel=self.fuel - amount)
