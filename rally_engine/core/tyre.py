"""Tyre model and tyre pressure definitions.

Pressure drives two opposing effects: lower pressure improves grip (less
slip) but multiplies fuel consumption.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from rally_engine.core.outcome import validate_move_probabilities

# ---------------------------------------------------------------------------
# Tyre pressure
# ---------------------------------------------------------------------------


class TirePressure(enum.Enum):
    """Discrete tyre pressure levels."""

    FIFTY_PERCENT = "50%"
    SEVENTY_FIVE_PERCENT = "75%"
    ONE_HUNDRED_PERCENT = "100%"

    @property
    def fuel_multiplier(self) -> int:
        """Factor applied to the terrain/car fuel usage."""
        return _FUEL_MULTIPLIER[self]

    @property
    def slip_multiplier(self) -> int:
        """Factor applied to the terrain slip probability."""
        return _SLIP_MULTIPLIER[self]

    @classmethod
    def from_label(cls, label: str) -> TirePressure:
        for pressure in cls:
            if pressure.value == label:
                return pressure
        raise ValueError(f"Unknown tyre pressure {label!r}.")


_FUEL_MULTIPLIER: dict[TirePressure, int] = {
    TirePressure.FIFTY_PERCENT: 3,
    TirePressure.SEVENTY_FIVE_PERCENT: 2,
    TirePressure.ONE_HUNDRED_PERCENT: 1,
}

_SLIP_MULTIPLIER: dict[TirePressure, int] = {
    TirePressure.FIFTY_PERCENT: 1,
    TirePressure.SEVENTY_FIVE_PERCENT: 2,
    TirePressure.ONE_HUNDRED_PERCENT: 3,
}

PRESSURE_LEVELS: tuple[TirePressure, ...] = tuple(TirePressure)


# ---------------------------------------------------------------------------
# Tyre model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TyreModel:
    """Immutable description of a tyre model.

    Attributes:
        name: Tyre model label (e.g. "all-terrain").
        move_probabilities: P(outcome | tyre) over the 12 outcome indices.
    """

    name: str
    move_probabilities: tuple[float, ...]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tyre model name must be non-empty.")
        validate_move_probabilities(f"tyre {self.name!r}", self.move_probabilities)
