"""Monte Carlo evaluation of the planner over many seeded episodes.

Runs ``run_episode`` repeatedly and aggregates the outcomes into success
rate, step statistics and action frequencies.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

import numpy as np

from rally_engine.core.episode import run_episode
from rally_engine.core.errors import SimulationFailure
from rally_engine.core.mcts import MCTSEngine, SearchSettings
from rally_engine.core.problem import ProblemModel


def simulate_episodes(
    problem: ProblemModel,
    episodes: int,
    base_seed: int = 42,
    settings: SearchSettings | None = None,
    max_attempts: int = 20,
) -> dict[str, Any]:
    """Run a Monte Carlo ensemble of planned episodes.

    Episode *i* uses its own generator seeded with ``base_seed + i`` so
    that results are reproducible and no global random state is touched.

    Args:
        problem: Problem to plan on.
        episodes: Number of episodes (>= 1).
        base_seed: Starting seed value.
        settings: Search parameters shared by every episode.
        max_attempts: Attempts allowed per episode before it counts as a
            failure.

    Returns:
        Dictionary with keys:
            success_rate        -- fraction of episodes reaching the goal
            mean_steps          -- mean steps of successful episodes
            steps_distribution  -- ``{steps: probability}`` over successes
            mean_attempts       -- mean attempts of successful episodes
            mean_decisions      -- mean planner decisions per success
            action_frequencies  -- ``{kind name: share of applied actions}``

    Raises:
        ValueError: If episodes < 1.
    """
    if episodes < 1:
        raise ValueError("episodes must be >= 1.")

    successes: int = 0
    steps_sum: int = 0
    attempts_sum: int = 0
    decisions_sum: int = 0
    steps_counts: dict[int, int] = defaultdict(int)
    action_counts: dict[str, int] = defaultdict(int)

    for i in range(episodes):
        rng = np.random.default_rng(base_seed + i)
        engine = MCTSEngine(problem, rng, settings)
        try:
            result = run_episode(
                problem, engine, rng, max_attempts=max_attempts, verbose=False
            )
        except SimulationFailure:
            continue

        successes += 1
        steps_sum += result.steps
        attempts_sum += result.attempts
        decisions_sum += result.decisions
        steps_counts[result.steps] += 1
        for name, count in result.action_counts().items():
            action_counts[name] += count

    # -- Normalise ------------------------------------------------------------
    inv_success: float = 1.0 / successes if successes else 0.0
    total_actions: int = sum(action_counts.values())

    return {
        "success_rate": successes / episodes,
        "mean_steps": steps_sum * inv_success,
        "steps_distribution": {
            steps: count * inv_success for steps, count in sorted(steps_counts.items())
        },
        "mean_attempts": attempts_sum * inv_success,
        "mean_decisions": decisions_sum * inv_success,
        "action_frequencies": {
            name: count / total_actions for name, count in sorted(action_counts.items())
        }
        if total_actions
        else {},
    }
