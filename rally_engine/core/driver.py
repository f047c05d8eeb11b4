"""Driver model for the rally planner.

A driver shifts the move distribution of whatever car they are driving
through an independent conditional table.
"""

from dataclasses import dataclass

from rally_engine.core.outcome import validate_move_probabilities


@dataclass(frozen=True)
class Driver:
    """Immutable representation of a driver.

    Attributes:
        name: Unique driver name.
        move_probabilities: P(outcome | driver) over the 12 outcome indices.
    """

    name: str
    move_probabilities: tuple[float, ...]

    def __post_init__(self) -> None:
        """Validate driver parameters."""
        if not self.name:
            raise ValueError("name must not be empty.")
        validate_move_probabilities(f"driver {self.name!r}", self.move_probabilities)
