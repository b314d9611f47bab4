from __future__ import annotations

import random
from typing import List

from esper import World

from match3.constants import MIN_BOARD_DIMENSION, MIN_DISTINCT_COLORS, RESHUFFLE_MAX_ATTEMPTS
from match3.systems.board_ops import apply_layout, cell_map, require_dimensions, world_rng
from match3.systems.match import find_all_matches
from match3.systems.moves import has_any_legal_move


def check_reshuffle_preconditions(rows: int, cols: int, distinct_colors: int) -> None:
    if min(rows, cols) < MIN_BOARD_DIMENSION:
        raise ValueError(
            f"Board must be at least {MIN_BOARD_DIMENSION}x{MIN_BOARD_DIMENSION} to reshuffle, got {rows}x{cols}"
        )
    if distinct_colors < MIN_DISTINCT_COLORS:
        raise ValueError(
            f"Need at least {MIN_DISTINCT_COLORS} distinct colors to reshuffle, got {distinct_colors}"
        )


def reshuffle(
    world: World,
    rng: random.Random | None = None,
    *,
    max_attempts: int = RESHUFFLE_MAX_ATTEMPTS,
) -> int:
    """Permute the board's colors in place until it is match-free with a legal move.

    Every tile comes back NORMAL; the multiset of colors is preserved. Returns
    the number of shuffles it took.
    """
    rng = rng or world_rng(world)
    rows, cols = require_dimensions(world)
    cells = cell_map(world)
    pool: List[str] = [cells[(r, c)].color for r in range(rows) for c in range(cols)]
    check_reshuffle_preconditions(rows, cols, len(set(pool)))

    for attempt in range(1, max_attempts + 1):
        rng.shuffle(pool)
        apply_layout(world, (pool[r * cols:(r + 1) * cols] for r in range(rows)))
        if find_all_matches(world):
            continue
        if not has_any_legal_move(world):
            continue
        return attempt

    raise RuntimeError(f"Unable to reshuffle board without matches and with a legal move after {max_attempts} attempts")
