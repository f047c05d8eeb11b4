"""Move outcome indexing shared by the probability tables and the sampler.

Every conditional table has one entry per outcome index::

    index 0..9  -> move delta -4..+5
    index 10    -> SLIP
    index 11    -> BREAKDOWN
"""

from __future__ import annotations

import math
from collections.abc import Sequence

MIN_MOVE: int = -4
MAX_MOVE: int = 5
SLIP: int = 10
BREAKDOWN: int = 11
OUTCOME_COUNT: int = 12

PROBABILITY_TOLERANCE: float = 1e-6


def move_for_index(index: int) -> int:
    """Return the cell delta for a numeric outcome index."""
    if not 0 <= index < SLIP:
        raise ValueError(f"outcome index {index} is not a move.")
    return index + MIN_MOVE


def index_for_move(delta: int) -> int:
    """Return the outcome index of a cell delta in [-4, 5]."""
    if not MIN_MOVE <= delta <= MAX_MOVE:
        raise ValueError(f"move delta {delta} outside [{MIN_MOVE}, {MAX_MOVE}].")
    return delta - MIN_MOVE


def outcome_label(index: int) -> str:
    if index == SLIP:
        return "SLIP"
    if index == BREAKDOWN:
        return "BREAKDOWN"
    return f"{move_for_index(index):+d}"


def validate_move_probabilities(owner: str, probabilities: Sequence[float]) -> None:
    """Check that *probabilities* is a 12-way distribution.

    Raises:
        ValueError: If the length is wrong, an entry is negative, or the
            entries do not sum to 1 within ``PROBABILITY_TOLERANCE``.
    """
    if len(probabilities) != OUTCOME_COUNT:
        raise ValueError(
            f"{owner}: expected {OUTCOME_COUNT} move probabilities, "
            f"got {len(probabilities)}."
        )
    if any(p < 0.0 for p in probabilities):
        raise ValueError(f"{owner}: move probabilities must be >= 0.")
    total = math.fsum(probabilities)
    if abs(total - 1.0) > PROBABILITY_TOLERANCE:
        raise ValueError(f"{owner}: move probabilities sum to {total}, not 1.")
