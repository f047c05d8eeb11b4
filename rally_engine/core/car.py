"""Car type model for the rally planner."""

from dataclasses import dataclass

from rally_engine.core.outcome import validate_move_probabilities


@dataclass(frozen=True)
class Car:
    """Immutable representation of a car type.

    Attributes:
        name: Car type identifier.
        move_probabilities: P(outcome | car) over the 12 outcome indices.
    """

    name: str
    move_probabilities: tuple[float, ...]

    def __post_init__(self) -> None:
        """Validate car parameters."""
        if not self.name:
            raise ValueError("name must not be empty.")
        validate_move_probabilities(f"car {self.name!r}", self.move_probabilities)
