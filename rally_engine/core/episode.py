"""Episode simulator and driver loop.

The simulator owns the running vehicle state and the step accounting of
one attempt.  It raises :class:`SimulationFailure` once the step budget of
the problem is exhausted; :func:`run_episode` then discards the attempt and
starts again from the fixed start state.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from numpy.random import Generator

from rally_engine.core.action import Action, ActionKind, AddFuel, Continue, apply_action
from rally_engine.core.errors import ConfigurationError, SimulationFailure
from rally_engine.core.mcts import MCTSEngine
from rally_engine.core.outcome import outcome_label
from rally_engine.core.problem import ProblemModel
from rally_engine.core.state import VehicleState
from rally_engine.core.transition import TransitionModel

logger = logging.getLogger(__name__)

FUEL_PER_STEP: int = 10  # refuelling speed, units per time step


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------


class EpisodeSimulator:
    """Applies actions to a running simulation of one attempt.

    Attributes:
        problem: Static problem tables.
        current_state: State after the last applied action.
        steps: Time steps used so far.
    """

    __slots__ = ("problem", "rng", "transition", "current_state", "steps")

    def __init__(self, problem: ProblemModel, rng: Generator) -> None:
        self.problem: ProblemModel = problem
        self.rng: Generator = rng
        self.transition: TransitionModel = TransitionModel(problem)
        self.current_state: VehicleState = VehicleState.start(problem)
        self.steps: int = 0

    def is_goal(self, state: VehicleState | None = None) -> bool:
        state = state if state is not None else self.current_state
        return state.position >= self.problem.n

    def apply(self, action: Action) -> VehicleState:
        """Apply *action* and return the resulting state.

        Raises:
            ConfigurationError: If the action is not legal at the level.
            SimulationFailure: If the step budget is exceeded.
        """
        if not self.problem.level.allows(action.kind):
            raise ConfigurationError(
                f"action {action} is not legal at level {self.problem.level.number}."
            )

        if isinstance(action, Continue):
            next_state = self._continue(self.current_state)
        else:
            next_state = apply_action(self.current_state, action)

        self.steps += step_cost(action)
        if self.steps > self.problem.max_time_steps:
            raise SimulationFailure(
                f"step budget of {self.problem.max_time_steps} exceeded "
                f"at cell {self.current_state.position}."
            )
        self.current_state = next_state
        return next_state

    def _continue(self, state: VehicleState) -> VehicleState:
        if state.slip:
            return state.reduce_slip_time_left()
        if state.breakdown:
            return state.reduce_breakdown_time_left()
        outcome, next_state = self.transition.step(state, self.rng)
        if outcome is not None:
            logger.debug(
                "Cell %d: sampled %s -> cell %d",
                state.position,
                outcome_label(outcome),
                next_state.position,
            )
        return next_state


def step_cost(action: Action) -> int:
    """Time steps taken by *action*; refuelling takes longer for more fuel."""
    if isinstance(action, AddFuel):
        return max(1, math.ceil(action.amount / FUEL_PER_STEP))
    return 1


# ---------------------------------------------------------------------------
# Driver loop
# ---------------------------------------------------------------------------


@dataclass
class EpisodeResult:
    """Outcome of a successful episode.

    Attributes:
        steps: Time steps used by the successful attempt.
        attempts: Attempts made, including the successful one.
        decisions: Planner decisions taken in the successful attempt.
        actions: Every action applied in the successful attempt.
        positions: Cell index after every applied action, starting at 1.
    """

    steps: int = 0
    attempts: int = 0
    decisions: int = 0
    actions: list[Action] = field(default_factory=list)
    positions: list[int] = field(default_factory=list)

    def action_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {kind.name: 0 for kind in ActionKind}
        for action in self.actions:
            counts[action.kind.name] += 1
        return counts


def run_episode(
    problem: ProblemModel,
    engine: MCTSEngine,
    rng: Generator,
    max_attempts: int = 20,
    verbose: bool = True,
) -> EpisodeResult:
    """Drive the vehicle from the start state to the end of the track.

    Each step the engine decides an action; set-up actions are followed by
    a ``Continue`` so that simulated time advances.  While the car is
    slipping or broken down it waits with ``Continue`` without planning.
    A failed attempt is discarded entirely and planning restarts from the
    start state.  With *verbose* a retry notice and a completion notice
    are printed.

    Raises:
        ValueError: If max_attempts < 1.
        SimulationFailure: If every attempt fails.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1.")

    for attempt in range(1, max_attempts + 1):
        sim = EpisodeSimulator(problem, rng)
        engine.reset()
        result = EpisodeResult(
            attempts=attempt, positions=[sim.current_state.position]
        )

        def _apply(action: Action) -> None:
            state = sim.apply(action)
            result.actions.append(action)
            result.positions.append(state.position)

        try:
            while not sim.is_goal():
                if sim.current_state.stationary:
                    _apply(Continue())
                    continue
                action = engine.decide(sim.current_state)
                result.decisions += 1
                _apply(action)
                if not isinstance(action, Continue):
                    _apply(Continue())
        except SimulationFailure as exc:
            logger.info("Failed attempt %d (%s). Retrying...", attempt, exc)
            if verbose:
                print("Failed attempt. Retrying...")
            continue

        result.steps = sim.steps
        logger.info("Goal reached in %d steps after %d attempts", sim.steps, attempt)
        if verbose:
            print("Goal reached!")
        return result

    raise SimulationFailure(f"no attempt reached the goal in {max_attempts} tries.")
