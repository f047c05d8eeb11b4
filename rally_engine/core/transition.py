"""Stochastic one-step transition model.

The outcome distribution of a move combines independent conditional
tables -- P(outcome | car), P(outcome | driver), P(outcome | tyre) and a
terrain/pressure slip vector -- by Bayesian recombination:

    posterior_k = table_k * prior_factor / prior_outcome
    P(k)        ~ prior_outcome * prod(posterior_k over all factors)

with uniform priors over the 12 outcomes and over each factor's catalog.
Sampling draws a single uniform value from the supplied
``numpy.random.Generator`` and inverts the cumulative distribution, so the
model itself holds no random state.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray

from rally_engine.core.errors import ConfigurationError
from rally_engine.core.outcome import (
    BREAKDOWN,
    OUTCOME_COUNT,
    SLIP,
    index_for_move,
    move_for_index,
)
from rally_engine.core.problem import ProblemModel
from rally_engine.core.state import VehicleState
from rally_engine.core.tyre import PRESSURE_LEVELS

logger = logging.getLogger(__name__)

_PRIOR_OUTCOME: float = 1.0 / OUTCOME_COUNT


def bayes_rule(
    conditional: NDArray[np.float64],
    prior_factor: float,
    prior_outcome: float = _PRIOR_OUTCOME,
) -> NDArray[np.float64]:
    """Swap P(outcome | factor) into P(factor | outcome) element-wise."""
    return conditional * prior_factor / prior_outcome


class TransitionModel:
    """Move outcome distribution and state update for one problem.

    Attributes:
        problem: The static problem tables.
    """

    __slots__ = ("problem",)

    def __init__(self, problem: ProblemModel) -> None:
        self.problem: ProblemModel = problem

    # -- Fuel ------------------------------------------------------------------

    def fuel_cost(self, state: VehicleState) -> int:
        """Fuel needed to move from *state*.

        ``fuel_usage[terrain][car]`` scaled x3 at 50% pressure, x2 at 75%
        and x1 at 100%.
        """
        terrain = self.problem.terrain_at(state.position)
        usage = self.problem.fuel_usage(terrain, state.car)
        return usage * state.pressure.fuel_multiplier

    def can_move(self, state: VehicleState) -> bool:
        return self.fuel_cost(state) <= state.fuel

    # -- Distribution ------------------------------------------------------------

    def slip_vector(self, state: VehicleState) -> NDArray[np.float64]:
        """P(outcome | terrain, pressure).

        The terrain slip probability is scaled by the pressure multiplier,
        capped at ``max_slip_probability``, and the remaining mass is spread
        uniformly over the other 11 outcomes.
        """
        terrain = self.problem.terrain_at(state.position)
        slip = terrain.slip_probability * state.pressure.slip_multiplier
        slip = min(slip, self.problem.max_slip_probability)
        vector = np.full(OUTCOME_COUNT, (1.0 - slip) / (OUTCOME_COUNT - 1))
        vector[SLIP] = slip
        return vector

    def outcome_distribution(self, state: VehicleState) -> NDArray[np.float64]:
        """Return the 12-way outcome distribution for a move from *state*.

        Outcomes that would leave ``[1, N]`` have their mass merged into the
        delta that reaches the boundary.

        Each table is checked to sum to 1 when it is built (see
        :func:`~rally_engine.core.outcome.validate_move_probabilities`), so
        only a combination without common support can fail here.

        Raises:
            ConfigurationError: If the tables give every outcome zero
                probability.
        """
        problem = self.problem
        car = np.asarray(problem.car(state.car).move_probabilities, dtype=float)
        driver = np.asarray(
            problem.driver(state.driver).move_probabilities, dtype=float
        )
        tyre = np.asarray(problem.tyre(state.tyre).move_probabilities, dtype=float)

        factors = (
            bayes_rule(car, 1.0 / len(problem.cars)),
            bayes_rule(driver, 1.0 / len(problem.drivers)),
            bayes_rule(tyre, 1.0 / len(problem.tyres)),
            bayes_rule(
                self.slip_vector(state),
                1.0 / (len(problem.terrains) * len(PRESSURE_LEVELS)),
            ),
        )

        probs = np.full(OUTCOME_COUNT, _PRIOR_OUTCOME)
        for factor in factors:
            probs = probs * factor

        total = float(probs.sum())
        if not np.isfinite(total) or total <= 0.0:
            raise ConfigurationError(
                f"move tables for car={state.car!r}, driver={state.driver!r}, "
                f"tyre={state.tyre!r} give every outcome zero probability."
            )
        return self._clip_to_track(state.position, probs / total)

    def _clip_to_track(
        self, position: int, probs: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        n = self.problem.n
        clipped = probs.copy()
        for index in range(SLIP):
            delta = move_for_index(index)
            reachable = min(max(position + delta, 1), n) - position
            if reachable != delta:
                clipped[index_for_move(reachable)] += clipped[index]
                clipped[index] = 0.0
        return clipped

    # -- Sampling ------------------------------------------------------------------

    def sample_outcome(self, state: VehicleState, rng: Generator) -> int | None:
        """Sample one outcome index for a move from *state*.

        Returns:
            ``None`` when the fuel cost exceeds the fuel on board (the move
            is a no-op and nothing is sampled), otherwise an outcome index
            in ``[0, 12)``.
        """
        if not self.can_move(state):
            return None
        probs = self.outcome_distribution(state)
        cdf = np.cumsum(probs)
        draw = float(rng.random())
        index = int(np.searchsorted(cdf, draw, side="right"))
        # Rounding can leave cdf[-1] a hair under the draw.
        last_possible = int(np.flatnonzero(probs)[-1])
        return min(index, last_possible)

    def apply_outcome(
        self, state: VehicleState, outcome: int, fuel_cost: int
    ) -> VehicleState:
        """Return the state after a sampled *outcome*.

        SLIP and BREAKDOWN start their timers without moving the car; a
        numeric delta moves it within ``[1, N]``.  Fuel is consumed after
        the position/condition update on levels that account fuel.
        """
        problem = self.problem
        if outcome == SLIP:
            next_state = state.change_slip_condition(True, problem.slip_recovery_time)
        elif outcome == BREAKDOWN:
            next_state = state.change_breakdown_condition(True, problem.repair_time)
        else:
            next_state = state.change_position(move_for_index(outcome), problem.n)

        if problem.level.accounts_fuel:
            next_state = next_state.consume_fuel(fuel_cost)
        return next_state

    def step(
        self, state: VehicleState, rng: Generator
    ) -> tuple[int | None, VehicleState]:
        """Sample an outcome for *state* and apply it.

        Returns:
            ``(outcome, next_state)``; ``outcome`` is ``None`` and the state
            is returned unchanged when there is not enough fuel to move.
        """
        cost = self.fuel_cost(state)
        outcome = self.sample_outcome(state, rng)
        if outcome is None:
            logger.debug(
                "Not enough fuel at cell %d: need %d, have %d",
                state.position,
                cost,
                state.fuel,
            )
            return None, state
        return outcome, self.apply_outcome(state, outcome, cost)
