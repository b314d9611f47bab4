from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Tuple

from match3.constants import (
    COLORS,
    DEFAULT_BOOSTER_CHARGES,
    GOAL_BASE_COUNT,
    GOAL_COUNT_STEP,
    GRID_COLS,
    GRID_ROWS,
    MIN_BOARD_DIMENSION,
    MIN_DISTINCT_COLORS,
    MOVE_BUDGET,
    TARGET_SCORE,
    TIME_BUDGET_SECONDS,
)


@dataclass(slots=True)
class LevelConfig:
    """Parameters the core consumes to start a level."""
    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    colors: Tuple[str, ...] = COLORS
    target_score: int = TARGET_SCORE
    move_budget: int = MOVE_BUDGET
    time_budget_seconds: int = TIME_BUDGET_SECONDS
    goal_color: str = COLORS[1]
    goal_count: int = GOAL_BASE_COUNT
    boosters: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_BOOSTER_CHARGES))
    level: int = 1

    def __post_init__(self) -> None:
        # Preserve order while dropping duplicates.
        self.colors = tuple(dict.fromkeys(self.colors))

    def validate(self) -> None:
        if min(self.rows, self.cols) < MIN_BOARD_DIMENSION:
            raise ValueError(f"Board must be at least {MIN_BOARD_DIMENSION}x{MIN_BOARD_DIMENSION}, got {self.rows}x{self.cols}")
        if len(self.colors) < MIN_DISTINCT_COLORS:
            raise ValueError(f"Need at least {MIN_DISTINCT_COLORS} colors, got {list(self.colors)}")
        if self.goal_color not in self.colors:
            raise ValueError(f"Goal color {self.goal_color!r} is not in the palette {list(self.colors)}")
        if self.goal_count < 0 or self.move_budget < 0 or self.target_score < 0 or self.time_budget_seconds < 0:
            raise ValueError("Goal count, move budget, target score and time budget must be non-negative")
        negative = {name: count for name, count in self.boosters.items() if count < 0}
        if negative:
            raise ValueError(f"Booster charges must be non-negative: {negative}")

    @classmethod
    def for_level(cls, level: int, rng: random.Random | None = None, **overrides) -> "LevelConfig":
        """Default level progression: random goal color, goal count grows every second level."""
        rng = rng or random.Random()
        colors = tuple(overrides.pop("colors", COLORS))
        return cls(
            colors=colors,
            goal_color=overrides.pop("goal_color", None) or rng.choice(colors),
            goal_count=overrides.pop("goal_count", GOAL_BASE_COUNT + (level // 2) * GOAL_COUNT_STEP),
            level=level,
            **overrides,
        )
