"""Configuration loader for the rally planner.

A problem definition is a YAML document::

    level: 2
    discount: 0.9
    recover_time: 2
    repair_time: 3
    max_time_steps: 80
    max_slip_probability: 0.5
    track: [asphalt-straight, dirt-hilly, ...]
    terrains:
      asphalt-straight:
        slip_probability: 0.02
        fuel_usage: {fast-4wd: 3, economy: 2}
    cars:
      - {name: fast-4wd, move_probabilities: [12 floats]}
    drivers: [...]
    tyres: [...]
    search:            # optional, see SearchSettings
      time_budget_ms: 200
"""

from pathlib import Path
from typing import Any

import yaml

from rally_engine.core.action import ActionKind
from rally_engine.core.car import Car
from rally_engine.core.driver import Driver
from rally_engine.core.level import Level
from rally_engine.core.mcts import SearchSettings
from rally_engine.core.problem import ProblemModel
from rally_engine.core.track import Terrain, Track
from rally_engine.core.tyre import TyreModel

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
SAMPLE_PROBLEM_PATH: Path = DATA_DIR / "sample_problem.yaml"

_REQUIRED_FIELDS: tuple[str, ...] = (
    "level",
    "discount",
    "recover_time",
    "repair_time",
    "max_time_steps",
    "max_slip_probability",
    "track",
    "terrains",
    "cars",
    "drivers",
    "tyres",
)

_SEARCH_FIELDS: dict[str, type] = {
    "exploration": float,
    "discount": float,
    "budget_scale_ms": float,
    "level_budget_ms": float,
    "base_budget_ms": float,
    "time_budget_ms": float,
    "max_iterations": int,
    "slip_penalty": float,
    "low_fuel_penalty": float,
    "low_fuel_threshold": int,
    "reuse_tree": bool,
}


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Problem file not found: {path}")
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level.")
    return data


def load_config(path: Path | None = None) -> tuple[ProblemModel, SearchSettings]:
    """Load the problem and its search settings from one YAML file.

    The file is parsed once and both results are built from the same
    mapping.

    Args:
        path: Optional override for the problem file path.

    Raises:
        FileNotFoundError: If the problem file does not exist.
        ValueError: If a field is missing, has the wrong type, or a table
            is inconsistent.
    """
    problem_path = path or SAMPLE_PROBLEM_PATH
    data = _read_yaml(problem_path)
    return (
        problem_from_mapping(data, str(problem_path)),
        search_settings_from_mapping(data),
    )


def load_problem(path: Path | None = None) -> ProblemModel:
    """Load a problem definition from a YAML file.

    Args:
        path: Optional override for the problem file path.

    Returns:
        A validated :class:`ProblemModel`.

    Raises:
        FileNotFoundError: If the problem file does not exist.
        ValueError: If a field is missing, has the wrong type, or a table
            is inconsistent.
    """
    problem_path = path or SAMPLE_PROBLEM_PATH
    return problem_from_mapping(_read_yaml(problem_path), str(problem_path))


def load_search_settings(path: Path | None = None) -> SearchSettings:
    """Load the optional ``search`` section of a problem file."""
    return search_settings_from_mapping(_read_yaml(path or SAMPLE_PROBLEM_PATH))


def problem_from_mapping(
    data: dict[str, Any], source: str = "<mapping>"
) -> ProblemModel:
    """Build a :class:`ProblemModel` from a parsed problem document.

    *source* only labels error messages.
    """
    # --- Validate required fields ---
    for name in _REQUIRED_FIELDS:
        if name not in data:
            raise ValueError(f"{source}: missing required field '{name}'")

    level_number = _as_int(data, "level")
    if "actions" in data:
        level = Level(
            number=level_number,
            actions=frozenset(ActionKind(int(a)) for a in data["actions"]),
        )
    else:
        level = Level.for_number(level_number)

    terrains: dict[str, Terrain] = {}
    for name, entry in dict(data["terrains"]).items():
        if "slip_probability" not in entry or "fuel_usage" not in entry:
            raise ValueError(
                f"Terrain '{name}' needs 'slip_probability' and 'fuel_usage'."
            )
        terrains[str(name)] = Terrain(
            name=str(name),
            slip_probability=float(entry["slip_probability"]),
            fuel_usage={str(c): int(u) for c, u in dict(entry["fuel_usage"]).items()},
        )

    return ProblemModel(
        level=level,
        discount=_as_float(data, "discount"),
        slip_recovery_time=_as_int(data, "recover_time"),
        repair_time=_as_int(data, "repair_time"),
        max_time_steps=_as_int(data, "max_time_steps"),
        max_slip_probability=_as_float(data, "max_slip_probability"),
        track=Track(cells=tuple(str(cell) for cell in data["track"])),
        terrains=terrains,
        cars=tuple(Car(**_catalog_entry(e, "car")) for e in data["cars"]),
        drivers=tuple(Driver(**_catalog_entry(e, "driver")) for e in data["drivers"]),
        tyres=tuple(TyreModel(**_catalog_entry(e, "tyre")) for e in data["tyres"]),
    )


def search_settings_from_mapping(data: dict[str, Any]) -> SearchSettings:
    """Build search settings from the optional ``search`` section.

    Missing sections give default settings.

    Raises:
        ValueError: If the section contains unknown keys.
    """
    section = data.get("search") or {}
    unknown = sorted(set(section) - set(_SEARCH_FIELDS))
    if unknown:
        raise ValueError(f"Unknown search settings: {unknown}")
    kwargs: dict[str, Any] = {}
    for key, value in section.items():
        kwargs[key] = None if value is None else _SEARCH_FIELDS[key](value)
    return SearchSettings(**kwargs)


def _catalog_entry(entry: Any, label: str) -> dict[str, Any]:
    if not isinstance(entry, dict) or "name" not in entry:
        raise ValueError(f"Every {label} entry needs a 'name'.")
    if "move_probabilities" not in entry:
        raise ValueError(f"{label} '{entry['name']}' is missing 'move_probabilities'.")
    return {
        "name": str(entry["name"]),
        "move_probabilities": tuple(float(p) for p in entry["move_probabilities"]),
    }


def _as_int(data: dict[str, Any], field: str) -> int:
    val = data[field]
    if isinstance(val, bool) or not isinstance(val, int):
        raise ValueError(f"'{field}' must be an integer, got {type(val).__name__}")
    return val


def _as_float(data: dict[str, Any], field: str) -> float:
    val = data[field]
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ValueError(f"'{field}' must be numeric, got {type(val).__name__}")
    return float(val)
