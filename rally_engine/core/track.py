"""Track and terrain model for the rally planner."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Terrain:
    """Deterministic description of one terrain type.

    Attributes:
        name: Terrain label (e.g. "dirt-straight-hilly").
        slip_probability: Base probability of slipping at 50% pressure (0.0-1.0).
        fuel_usage: Fuel consumed per move, keyed by car name (>= 0).
    """

    name: str
    slip_probability: float
    fuel_usage: dict[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Validate terrain parameters."""
        if not self.name:
            raise ValueError("Terrain name must not be empty.")
        if not 0.0 <= self.slip_probability <= 1.0:
            raise ValueError("slip_probability must be between 0.0 and 1.0.")
        for car, usage in self.fuel_usage.items():
            if usage < 0:
                raise ValueError(
                    f"Terrain {self.name!r}: fuel usage for car {car!r} must be >= 0."
                )


@dataclass(frozen=True)
class Track:
    """Linear track of ``N`` cells, numbered 1..N.

    Attributes:
        cells: Terrain name of every cell, in track order.
    """

    cells: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.cells) < 2:
            raise ValueError("A track needs at least 2 cells.")

    @property
    def length(self) -> int:
        return len(self.cells)

    def terrain_at(self, position: int) -> str:
        """Return the terrain name of the 1-based cell *position*."""
        if not 1 <= position <= self.length:
            raise ValueError(f"position {position} outside [1, {self.length}].")
        return self.cells[position - 1]
