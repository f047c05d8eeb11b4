"""Read-only problem definition consumed by every planning component."""

from __future__ import annotations

from dataclasses import dataclass

from rally_engine.core.car import Car
from rally_engine.core.driver import Driver
from rally_engine.core.level import Level
from rally_engine.core.track import Terrain, Track
from rally_engine.core.tyre import TyreModel


@dataclass(frozen=True)
class ProblemModel:
    """Static tables of one planning problem.

    Catalog order matters: the first car, driver and tyre model form the
    start state.

    Attributes:
        level: Level configuration.
        discount: Discount factor (0.0-1.0].
        slip_recovery_time: Steps a slip keeps the car stationary (>= 1).
        repair_time: Steps a breakdown keeps the car stationary (>= 1).
        max_time_steps: Step budget of one episode (>= 1).
        max_slip_probability: Cap on the pressure-adjusted slip probability.
        track: Terrain of every cell.
        terrains: Terrain definitions keyed by name.
        cars: Ordered car catalog.
        drivers: Ordered driver catalog.
        tyres: Ordered tyre model catalog.
    """

    level: Level
    discount: float
    slip_recovery_time: int
    repair_time: int
    max_time_steps: int
    max_slip_probability: float
    track: Track
    terrains: dict[str, Terrain]
    cars: tuple[Car, ...]
    drivers: tuple[Driver, ...]
    tyres: tuple[TyreModel, ...]

    def __post_init__(self) -> None:
        """Validate cross-table consistency."""
        if not 0.0 < self.discount <= 1.0:
            raise ValueError("discount must be in (0.0, 1.0].")
        if self.slip_recovery_time < 1 or self.repair_time < 1:
            raise ValueError("slip_recovery_time and repair_time must be >= 1.")
        if self.max_time_steps < 1:
            raise ValueError("max_time_steps must be >= 1.")
        if not 0.0 <= self.max_slip_probability <= 1.0:
            raise ValueError("max_slip_probability must be between 0.0 and 1.0.")
        for label, catalog in (
            ("cars", self.cars),
            ("drivers", self.drivers),
            ("tyres", self.tyres),
        ):
            if not catalog:
                raise ValueError(f"{label} catalog must not be empty.")
            names = [entry.name for entry in catalog]
            if len(set(names)) != len(names):
                raise ValueError(f"{label} catalog contains duplicate names.")
        for cell, name in enumerate(self.track.cells, start=1):
            if name not in self.terrains:
                raise ValueError(f"cell {cell} uses unknown terrain {name!r}.")
        for terrain in self.terrains.values():
            missing = [c.name for c in self.cars if c.name not in terrain.fuel_usage]
            if missing:
                raise ValueError(
                    f"terrain {terrain.name!r} has no fuel usage for cars {missing}."
                )

    # -- Read accessors -------------------------------------------------------

    @property
    def n(self) -> int:
        """Track length; the goal is reached at ``position >= n``."""
        return self.track.length

    def terrain_at(self, position: int) -> Terrain:
        return self.terrains[self.track.terrain_at(position)]

    def fuel_usage(self, terrain: Terrain, car: str) -> int:
        return terrain.fuel_usage[car]

    def car(self, name: str) -> Car:
        return _lookup(self.cars, name, "car")

    def driver(self, name: str) -> Driver:
        return _lookup(self.drivers, name, "driver")

    def tyre(self, name: str) -> TyreModel:
        return _lookup(self.tyres, name, "tyre")

    @property
    def car_names(self) -> list[str]:
        return [c.name for c in self.cars]

    @property
    def driver_names(self) -> list[str]:
        return [d.name for d in self.drivers]

    @property
    def tyre_names(self) -> list[str]:
        return [t.name for t in self.tyres]


def _lookup(catalog, name, label):
    for entry in catalog:
        if entry.name == name:
            return entry
    raise KeyError(f"unknown {label} {name!r}.")
