"""Level configuration: which action kinds are legal and how hard it is."""

from __future__ import annotations

from dataclasses import dataclass

from rally_engine.core.action import ActionKind

_SETUP_ACTIONS: frozenset[ActionKind] = frozenset(
    {
        ActionKind.CONTINUE,
        ActionKind.CHANGE_CAR,
        ActionKind.CHANGE_DRIVER,
        ActionKind.CHANGE_TYRES,
    }
)
_FUEL_ACTIONS: frozenset[ActionKind] = _SETUP_ACTIONS | {
    ActionKind.ADD_FUEL,
    ActionKind.CHANGE_PRESSURE,
}
_ALL_ACTIONS: frozenset[ActionKind] = frozenset(ActionKind)

# Level number -> legal action kinds.
DEFAULT_LEVEL_ACTIONS: dict[int, frozenset[ActionKind]] = {
    1: _SETUP_ACTIONS,
    2: _FUEL_ACTIONS,
    3: _ALL_ACTIONS,
    4: _ALL_ACTIONS,
    5: _ALL_ACTIONS,
}


@dataclass(frozen=True)
class Level:
    """Difficulty level of a problem.

    Attributes:
        number: Level number (1-5); also sizes the search time budget.
        actions: Action kinds legal at this level.
    """

    number: int
    actions: frozenset[ActionKind]

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError("level number must be >= 1.")
        if ActionKind.CONTINUE not in self.actions:
            raise ValueError("every level must allow CONTINUE.")

    @classmethod
    def for_number(cls, number: int) -> Level:
        """Return the standard action set for level *number*."""
        if number not in DEFAULT_LEVEL_ACTIONS:
            raise ValueError(f"unknown level {number}.")
        return cls(number=number, actions=DEFAULT_LEVEL_ACTIONS[number])

    @property
    def accounts_fuel(self) -> bool:
        """Fuel is only consumed above the most basic level."""
        return self.number > 1

    def allows(self, kind: ActionKind) -> bool:
        return kind in self.actions

    def ordered_actions(self) -> list[ActionKind]:
        return sorted(self.actions)
