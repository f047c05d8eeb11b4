"""Monte-Carlo Tree Search decision engine.

One call to :meth:`MCTSEngine.decide` runs the four-phase loop

    Selecting -> Expanding -> Simulating -> Backpropagating

until a wall-clock deadline passes, then recommends the most visited root
child (robust-child rule).  Selection works on the root's children only:
each iteration picks one root child, fully expands it, and rolls out a
single transition from one of its children chosen at random.

The deadline is ``k * (c1 * level + c2)`` milliseconds and is checked
between iterations; an iteration always runs to completion.  The root is
expanded before the loop, so a decision is available even when the budget
is already spent.
"""

from __future__ import annotations

import enum
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from numpy.random import Generator

from rally_engine.core.action import Action, Continue
from rally_engine.core.catalog import DEFAULT_LOW_FUEL_THRESHOLD, ActionCatalog
from rally_engine.core.errors import ConfigurationError
from rally_engine.core.outcome import BREAKDOWN, SLIP
from rally_engine.core.problem import ProblemModel
from rally_engine.core.state import VehicleState
from rally_engine.core.transition import TransitionModel
from rally_engine.core.tree import SearchTree

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

EXPLORATION: float = 1.41421356


@dataclass(frozen=True)
class SearchSettings:
    """Tunable parameters of the search.

    Attributes:
        exploration: UCT exploration constant ``C``.
        discount: Reward discount per time step.  ``None`` uses the
            problem's discount factor.
        budget_scale_ms: ``k`` in ``k * (c1 * level + c2)``.
        level_budget_ms: ``c1``, budget growth per level.
        base_budget_ms: ``c2``, budget at level zero.
        time_budget_ms: Fixed budget overriding the level formula.
        max_iterations: Optional cap on iterations per decision.
        slip_penalty: Reward for landing in SLIP or BREAKDOWN.  ``None``
            uses ``-repair_time``.
        low_fuel_penalty: Added when a rollout ends below the low-fuel
            threshold on a level that accounts fuel.
        low_fuel_threshold: Fuel level under which only refuelling is
            offered.
        reuse_tree: Seed the next decision with the statistics of the
            winner's children when the vehicle set-up is unchanged.
    """

    exploration: float = EXPLORATION
    discount: float | None = None
    budget_scale_ms: float = 100.0
    level_budget_ms: float = 5.0
    base_budget_ms: float = 5.0
    time_budget_ms: float | None = None
    max_iterations: int | None = None
    slip_penalty: float | None = None
    low_fuel_penalty: float = -1.0
    low_fuel_threshold: int = DEFAULT_LOW_FUEL_THRESHOLD
    reuse_tree: bool = False

    def __post_init__(self) -> None:
        """Validate search parameters."""
        if self.exploration < 0.0:
            raise ValueError("exploration must be >= 0.0.")
        if self.discount is not None and not 0.0 < self.discount <= 1.0:
            raise ValueError("discount must be in (0.0, 1.0].")
        if self.time_budget_ms is not None and self.time_budget_ms < 0.0:
            raise ValueError("time_budget_ms must be >= 0.0.")
        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError("max_iterations must be >= 0.")
        if self.low_fuel_threshold < 0:
            raise ValueError("low_fuel_threshold must be >= 0.")

    def budget_ms(self, level_number: int) -> float:
        """Return the time budget of one decision at *level_number*."""
        if self.time_budget_ms is not None:
            return self.time_budget_ms
        return self.budget_scale_ms * (
            self.level_budget_ms * level_number + self.base_budget_ms
        )


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


class SearchPhase(enum.Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    EXPANDING = "expanding"
    SIMULATING = "simulating"
    BACKPROPAGATING = "backpropagating"
    DONE = "done"


@dataclass
class SearchReport:
    """Summary of the last decision.

    Attributes:
        action: Recommended action.
        iterations: Completed search iterations.
        elapsed_ms: Wall-clock time spent.
        budget_ms: Time budget of the decision.
        tree_size: Number of nodes in the tree when the search stopped.
        carried_children: Root children seeded from the previous decision.
        root_children: ``(action label, visits, mean reward)`` per root child.
    """

    action: Action
    iterations: int
    elapsed_ms: float
    budget_ms: float
    tree_size: int
    carried_children: int = 0
    root_children: list[tuple[str, int, float]] = field(default_factory=list)


def uct_value(
    parent_visits: int,
    child_reward: float,
    child_visits: int,
    exploration: float = EXPLORATION,
) -> float:
    """Upper confidence bound of a child; unvisited children score ``inf``."""
    if child_visits == 0:
        return math.inf
    mean = child_reward / child_visits
    return mean + exploration * math.sqrt(math.log(parent_visits) / child_visits)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class MCTSEngine:
    """Online planner returning one action per decision point.

    Args:
        problem: Static problem tables.
        rng: Shared random generator; seed it for reproducible decisions.
        settings: Search parameters.
        clock: Monotonic clock in seconds, injectable for tests.
    """

    def __init__(
        self,
        problem: ProblemModel,
        rng: Generator,
        settings: SearchSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.problem: ProblemModel = problem
        self.rng: Generator = rng
        self.settings: SearchSettings = settings or SearchSettings()
        self.clock: Callable[[], float] = clock
        self.transition: TransitionModel = TransitionModel(problem)
        self.catalog: ActionCatalog = ActionCatalog(
            problem, self.transition, self.settings.low_fuel_threshold
        )
        self.phase: SearchPhase = SearchPhase.IDLE
        self.last_report: SearchReport | None = None
        self._retained: SearchTree | None = None

    @property
    def discount(self) -> float:
        if self.settings.discount is not None:
            return self.settings.discount
        return self.problem.discount

    @property
    def slip_penalty(self) -> float:
        if self.settings.slip_penalty is not None:
            return self.settings.slip_penalty
        return -float(self.problem.repair_time)

    def reset(self) -> None:
        """Forget any subtree retained from a previous decision."""
        self._retained = None
        self.phase = SearchPhase.IDLE

    # -- Public API ------------------------------------------------------------

    def decide(self, state: VehicleState) -> Action:
        """Search from *state* and return the recommended action.

        Raises:
            ConfigurationError: If no action is legal from *state*.
        """
        budget_ms = self.settings.budget_ms(self.problem.level.number)
        start = self.clock()
        deadline = start + budget_ms / 1000.0

        tree = SearchTree(state)
        if not tree.expand(tree.root, self.catalog):
            raise ConfigurationError(f"no legal action from state {state}.")
        carried = self._carry_retained(tree)

        iterations = 0
        max_iterations = self.settings.max_iterations
        while self.clock() < deadline:
            if max_iterations is not None and iterations >= max_iterations:
                break
            self.iterate(tree)
            iterations += 1

        winner = self.robust_child(tree)
        action = tree.node(winner).action
        assert action is not None
        self.phase = SearchPhase.DONE

        self.last_report = SearchReport(
            action=action,
            iterations=iterations,
            elapsed_ms=(self.clock() - start) * 1000.0,
            budget_ms=budget_ms,
            tree_size=len(tree),
            carried_children=carried,
            root_children=[
                (str(child.action), child.visits, child.mean_reward)
                for child in tree.children(tree.root)
            ],
        )
        logger.debug(
            "Decided %s at cell %d after %d iterations (%d nodes)",
            action,
            state.position,
            iterations,
            len(tree),
        )

        if self.settings.reuse_tree:
            tree.reroot(winner)
            self._retained = tree
        return action

    def iterate(self, tree: SearchTree) -> int:
        """Run one selection/expansion/simulation/backpropagation pass.

        Returns:
            Handle of the node the rollout reward was backed up from.
        """
        self.phase = SearchPhase.SELECTING
        selected = self.select(tree, tree.root)

        self.phase = SearchPhase.EXPANDING
        children = tree.expand(selected, self.catalog)

        self.phase = SearchPhase.SIMULATING
        if children:
            target = children[int(self.rng.integers(len(children)))]
        else:
            target = selected
        reward = self.rollout(tree, target)

        self.phase = SearchPhase.BACKPROPAGATING
        tree.backpropagate(target, reward)
        return target

    # -- Phases ------------------------------------------------------------------

    def select(self, tree: SearchTree, handle: int) -> int:
        """Pick one child of *handle*.

        While the node has fewer visits than children, a random unvisited
        child is chosen; afterwards the child with the highest UCT value.
        """
        node = tree.node(handle)
        children = node.children
        if node.visits < len(children):
            pool = [c for c in children if tree.node(c).visits == 0] or children
            return pool[int(self.rng.integers(len(pool)))]
        exploration = self.settings.exploration
        return max(
            children,
            key=lambda c: uct_value(
                node.visits,
                tree.node(c).reward,
                tree.node(c).visits,
                exploration,
            ),
        )

    def rollout(self, tree: SearchTree, handle: int) -> float:
        """Sample one move from *handle* and score it.

        A SLIP or BREAKDOWN scores ``slip_penalty``; otherwise the reward is
        the number of cells gained.  The reward is discounted once for the
        move and once for every set-up action on the path from the root.
        """
        node = tree.node(handle)
        state = node.state

        if state.stationary:
            outcome, next_state = None, state
            base = self.slip_penalty
        else:
            outcome, next_state = self.transition.step(state, self.rng)
            if outcome == SLIP or outcome == BREAKDOWN:
                base = self.slip_penalty
            else:
                base = float(next_state.position - state.position)

        setup_steps = sum(
            1
            for h in tree.path_to_root(handle)
            if tree.node(h).action is not None
            and not isinstance(tree.node(h).action, Continue)
        )
        reward = base * self.discount ** (1 + setup_steps)

        if (
            self.problem.level.accounts_fuel
            and next_state.fuel < self.settings.low_fuel_threshold
        ):
            reward += self.settings.low_fuel_penalty
        return reward

    def robust_child(self, tree: SearchTree) -> int:
        """Return the most visited root child (first one on ties)."""
        return max(tree.node(tree.root).children, key=lambda c: tree.node(c).visits)

    # -- Tree reuse ----------------------------------------------------------------

    def _carry_retained(self, tree: SearchTree) -> int:
        """Seed *tree* with the kept winner subtree of the last decision.

        Between decisions the driver moves the car, so position and fuel
        differ from the kept root.  Statistics carry over only while the
        vehicle set-up is the same; the new tree is always bound to the
        observed state.
        """
        retained = self._retained
        self._retained = None
        if retained is None:
            return 0
        kept_state = retained.node(retained.root).state
        if kept_state.setup != tree.node(tree.root).state.setup:
            return 0
        carried = tree.carry_statistics(retained)
        if carried:
            logger.debug(
                "Reusing statistics of %d root children (%d visits)",
                carried,
                tree.node(tree.root).visits,
            )
        return carried
