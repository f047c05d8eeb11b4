"""CLI entrypoint for the rally MCTS planner."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

import numpy as np

from rally_engine import __version__
from rally_engine.config import SAMPLE_PROBLEM_PATH, load_config
from rally_engine.core.episode import run_episode
from rally_engine.core.mcts import MCTSEngine
from rally_engine.logging_utils import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan a rally episode with MCTS")
    parser.add_argument(
        "problem",
        type=Path,
        nargs="?",
        default=SAMPLE_PROBLEM_PATH,
        help="YAML problem definition",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--max-attempts", type=int, default=20, help="Restarts allowed"
    )
    parser.add_argument(
        "--reuse-tree",
        action="store_true",
        help="Carry the winning subtree into the next decision",
    )
    parser.add_argument("--log-level", default="WARNING", help="Console log level")
    parser.add_argument("--log-file", type=Path, default=None, help="Debug log file")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Load a problem, run one planned episode and print a summary."""
    args = parse_args(argv)
    setup_logging(
        console_level=getattr(logging, args.log_level.upper(), logging.WARNING),
        file_path=args.log_file,
    )

    print(f"Rally MCTS Planner v{__version__}")
    print("=" * 56)

    # -- Load problem ---------------------------------------------------------
    problem, settings = load_config(args.problem)
    if args.reuse_tree:
        settings = replace(settings, reuse_tree=True)
    print(f"\nProblem : {args.problem}")
    print(f"Level   : {problem.level.number}")
    print(f"Track   : {problem.n} cells")
    print(f"Budget  : {settings.budget_ms(problem.level.number):.0f} ms per decision")
    print("-" * 56)

    # -- Run episode ----------------------------------------------------------
    rng = np.random.default_rng(args.seed)
    engine = MCTSEngine(problem, rng, settings)
    start = time.monotonic()
    result = run_episode(problem, engine, rng, max_attempts=args.max_attempts)
    duration = time.monotonic() - start

    print(f"\n  {'Step':>4}  {'Action':<28}  {'Cell':>4}")
    print(f"  {'----':>4}  {'-' * 28}  {'----':>4}")
    for i, (action, cell) in enumerate(
        zip(result.actions, result.positions[1:]), start=1
    ):
        print(f"  {i:4d}  {str(action):<28}  {cell:4d}")

    print(f"\nSteps used       : {result.steps}")
    print(f"Attempts         : {result.attempts}")
    print(f"Output created in {duration:.3f} seconds")
    print(f"Duration per step: {duration / max(1, result.steps):.4f}")


if __name__ == "__main__":
    sys.exit(main() or 0)
