"""Core planning modules for the rally engine."""

from rally_engine.core.action import (
    Action,
    ActionKind,
    AddFuel,
    ChangeCar,
    ChangeCarAndDriver,
    ChangeDriver,
    ChangePressure,
    ChangeTyres,
    ChangeTyresFuelPressure,
    Continue,
    action_slot,
    apply_action,
)
from rally_engine.core.car import Car
from rally_engine.core.catalog import ActionCatalog
from rally_engine.core.driver import Driver
from rally_engine.core.episode import (
    EpisodeResult,
    EpisodeSimulator,
    run_episode,
    step_cost,
)
from rally_engine.core.errors import ConfigurationError, SimulationFailure
from rally_engine.core.evaluation import simulate_episodes
from rally_engine.core.level import Level
from rally_engine.core.mcts import (
    MCTSEngine,
    SearchPhase,
    SearchReport,
    SearchSettings,
    uct_value,
)
from rally_engine.core.outcome import BREAKDOWN, OUTCOME_COUNT, SLIP
from rally_engine.core.problem import ProblemModel
from rally_engine.core.state import FUEL_MAX, FUEL_MIN, VehicleState
from rally_engine.core.track import Terrain, Track
from rally_engine.core.transition import TransitionModel
from rally_engine.core.tree import Node, SearchTree
from rally_engine.core.tyre import TirePressure, TyreModel

__all__ = [
    "Action",
    "ActionCatalog",
    "ActionKind",
    "AddFuel",
    "BREAKDOWN",
    "Car",
    "ChangeCar",
    "ChangeCarAndDriver",
    "ChangeDriver",
    "ChangePressure",
    "ChangeTyres",
    "ChangeTyresFuelPressure",
    "ConfigurationError",
    "Continue",
    "Driver",
    "EpisodeResult",
    "EpisodeSimulator",
    "FUEL_MAX",
    "FUEL_MIN",
    "Level",
    "MCTSEngine",
    "Node",
    "OUTCOME_COUNT",
    "ProblemModel",
    "SLIP",
    "SearchPhase",
    "SearchReport",
    "SearchSettings",
    "SearchTree",
    "SimulationFailure",
    "Terrain",
    "TirePressure",
    "Track",
    "TransitionModel",
    "TyreModel",
    "VehicleState",
    "action_slot",
    "apply_action",
    "run_episode",
    "simulate_episodes",
    "step_cost",
    "uct_value",
]
