#!/usr/bin/env python
"""Batch evaluation of the planner over many seeded episodes.

This script orchestrates the evaluation workflow:

1. Load the problem definition and search settings from YAML.
2. Run a Monte Carlo batch of planned episodes.
3. Save results to ``results/episode_batch.json``.
4. Print a structured summary.

Usage
-----
::

    python scripts/run_episode_batch.py [PROBLEM.yaml] [--episodes N]
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

# Ensure the project root is on the import path.
_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from rally_engine.config import SAMPLE_PROBLEM_PATH, load_config  # noqa: E402
from rally_engine.core.evaluation import simulate_episodes  # noqa: E402
from rally_engine.logging_utils import setup_logging  # noqa: E402

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

EPISODES: int = 20
BASE_SEED: int = 2018
RESULTS_DIR: str = os.path.join(_project_root, "results")
OUTPUT_PATH: str = os.path.join(RESULTS_DIR, "episode_batch.json")


def main() -> None:
    """Run the batch evaluation and write its summary."""
    parser = argparse.ArgumentParser(description="Evaluate the planner in batch")
    parser.add_argument("problem", type=Path, nargs="?", default=SAMPLE_PROBLEM_PATH)
    parser.add_argument("--episodes", type=int, default=EPISODES)
    parser.add_argument("--seed", type=int, default=BASE_SEED)
    args = parser.parse_args()
    setup_logging(file_path=os.path.join(RESULTS_DIR, "episode_batch.log"))

    print("=" * 60)
    print("EPISODE BATCH EVALUATION")
    print("=" * 60)
    print()

    # -- Step 1: Load problem ------------------------------------------------
    print(f"[1/3] Loading problem {args.problem}")
    problem, settings = load_config(args.problem)
    print(f"      Level {problem.level.number}, {problem.n} cells.")
    print()

    # -- Step 2: Run episodes ------------------------------------------------
    print(f"[2/3] Running {args.episodes} episodes")
    result = simulate_episodes(
        problem, args.episodes, base_seed=args.seed, settings=settings
    )
    print("      Batch complete.")
    print()

    # -- Step 3: Save and summarise ------------------------------------------
    print("[3/3] Saving results")
    output: dict[str, object] = {
        "metadata": {
            "problem": str(args.problem),
            "level": problem.level.number,
            "episodes": args.episodes,
            "base_seed": args.seed,
        },
        **result,
    }
    os.makedirs(RESULTS_DIR, exist_ok=True)
    with open(OUTPUT_PATH, "w", encoding="utf-8") as fh:
        json.dump(output, fh, indent=2, sort_keys=True)
    print(f"      Results saved to {OUTPUT_PATH}")
    print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"  Success rate   : {result['success_rate']:.3f}")
    print(f"  Mean steps     : {result['mean_steps']:.2f}")
    print(f"  Mean attempts  : {result['mean_attempts']:.2f}")
    print(f"  Mean decisions : {result['mean_decisions']:.2f}")
    print()
    print("  Action frequencies:")
    for name, share in result["action_frequencies"].items():
        print(f"    {name:<28s} {share:.3f}")
    print()
    print("Batch complete.")


if __name__ == "__main__":
    main()
