"""Tests for the episode simulator and the driver loop."""

import logging

import numpy as np
import pytest

from rally_engine.core.action import AddFuel, ChangeCar, ChangeDriver, Continue
from rally_engine.core.car import Car
from rally_engine.core.driver import Driver
from rally_engine.core.episode import EpisodeSimulator, run_episode, step_cost
from rally_engine.core.errors import ConfigurationError, SimulationFailure
from rally_engine.core.level import Level
from rally_engine.core.mcts import MCTSEngine, SearchSettings
from rally_engine.core.outcome import OUTCOME_COUNT, index_for_move
from rally_engine.core.problem import ProblemModel
from rally_engine.core.track import Terrain, Track
from rally_engine.core.tyre import TyreModel

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

UNIFORM: tuple[float, ...] = (1.0 / OUTCOME_COUNT,) * OUTCOME_COUNT
FORWARD_THREE: tuple[float, ...] = tuple(
    1.0 if i == index_for_move(3) else 0.0 for i in range(OUTCOME_COUNT)
)


def _sample_problem(max_time_steps: int = 80) -> ProblemModel:
    return ProblemModel(
        level=Level.for_number(1),
        discount=0.9,
        slip_recovery_time=2,
        repair_time=3,
        max_time_steps=max_time_steps,
        max_slip_probability=0.5,
        track=Track(cells=("tarmac",) * 10),
        terrains={"tarmac": Terrain("tarmac", 0.0, {"rally": 1, "spare": 1})},
        cars=(Car("rally", FORWARD_THREE), Car("spare", FORWARD_THREE)),
        drivers=(Driver("steady", UNIFORM), Driver("bold", UNIFORM)),
        tyres=(TyreModel("slick", UNIFORM),),
    )


def _sample_engine(problem: ProblemModel, seed: int = 11) -> MCTSEngine:
    settings = SearchSettings(time_budget_ms=10_000.0, max_iterations=30)
    return MCTSEngine(problem, np.random.default_rng(seed), settings)


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------


def test_step_cost() -> None:
    """Refuelling takes one step per 10 units; everything else one step."""
    assert step_cost(Continue()) == 1
    assert step_cost(ChangeCar("spare")) == 1
    assert step_cost(AddFuel(5)) == 1
    assert step_cost(AddFuel(10)) == 1
    assert step_cost(AddFuel(45)) == 5


def test_continue_moves_and_counts_a_step() -> None:
    problem = _sample_problem()
    sim = EpisodeSimulator(problem, np.random.default_rng(0))
    state = sim.apply(Continue())
    assert state.position == 4
    assert sim.steps == 1
    assert not sim.is_goal()


def test_illegal_action_rejected() -> None:
    """Actions outside the level's set are configuration errors."""
    sim = EpisodeSimulator(_sample_problem(), np.random.default_rng(0))
    with pytest.raises(ConfigurationError):
        sim.apply(AddFuel(10))


def test_continue_while_slipping_waits() -> None:
    """Continue during a slip only counts down the recovery timer."""
    sim = EpisodeSimulator(_sample_problem(), np.random.default_rng(0))
    sim.current_state = sim.current_state.change_slip_condition(True, 2)

    state = sim.apply(Continue())
    assert state.position == 1
    assert state.slip and state.slip_time_left == 1

    state = sim.apply(Continue())
    assert not state.slip
    assert sim.steps == 2


def test_step_budget_exceeded_raises() -> None:
    """Going past max_time_steps fails the attempt."""
    sim = EpisodeSimulator(_sample_problem(max_time_steps=2), np.random.default_rng(0))
    sim.apply(ChangeDriver("bold"))
    sim.apply(ChangeDriver("steady"))
    with pytest.raises(SimulationFailure):
        sim.apply(ChangeCar("spare"))


# ---------------------------------------------------------------------------
# Driver loop
# ---------------------------------------------------------------------------


def test_run_episode_reaches_goal(capsys: pytest.CaptureFixture[str]) -> None:
    """Planned episodes reach the last cell on the first attempt."""
    problem = _sample_problem()
    engine = _sample_engine(problem)
    result = run_episode(problem, engine, engine.rng)

    assert result.positions[0] == 1
    assert result.positions[-1] == problem.n
    assert result.attempts == 1
    assert 3 <= result.steps <= problem.max_time_steps
    assert len(result.positions) == len(result.actions) + 1
    assert result.decisions >= 3
    assert sum(result.action_counts().values()) == len(result.actions)
    assert "Goal reached!" in capsys.readouterr().out


def test_run_episode_retries_then_fails(capsys: pytest.CaptureFixture[str]) -> None:
    """Every failed attempt restarts; exhausting attempts raises."""
    problem = _sample_problem(max_time_steps=1)
    engine = _sample_engine(problem)
    with pytest.raises(SimulationFailure):
        run_episode(problem, engine, engine.rng, max_attempts=3)
    assert capsys.readouterr().out.count("Failed attempt. Retrying...") == 3


def test_run_episode_quiet_mode(capsys: pytest.CaptureFixture[str]) -> None:
    problem = _sample_problem()
    engine = _sample_engine(problem)
    run_episode(problem, engine, engine.rng, verbose=False)
    assert capsys.readouterr().out == ""


def test_run_episode_rejects_zero_attempts() -> None:
    problem = _sample_problem()
    engine = _sample_engine(problem)
    with pytest.raises(ValueError):
        run_episode(problem, engine, engine.rng, max_attempts=0)


def test_run_episode_reuses_statistics_between_decisions(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """With reuse enabled, later decisions start from carried statistics."""
    problem = _sample_problem()
    settings = SearchSettings(
        time_budget_ms=10_000.0, max_iterations=30, reuse_tree=True
    )
    engine = MCTSEngine(problem, np.random.default_rng(0), settings)
    caplog.set_level(logging.DEBUG, logger="rally_engine.core.mcts")

    result = run_episode(problem, engine, engine.rng, verbose=False)

    reused = [r for r in caplog.records if "Reusing statistics" in r.getMessage()]
    assert result.decisions >= 3
    assert len(reused) == result.decisions - 1
    assert engine.last_report is not None
    assert engine.last_report.carried_children > 0
