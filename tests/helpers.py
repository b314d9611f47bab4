from __future__ import annotations

import random
from collections import deque
from typing import Iterable, List, Sequence

from esper import World

from match3.components.tile import Tile, TileKind
from match3.events.bus import EventBus
from match3.level_config import LevelConfig
from match3.systems.board import BoardSystem
from match3.systems.board_ops import apply_layout, set_cell
from match3.systems.level import LevelSystem
from match3.world import create_world

LETTERS = {
    'R': 'red',
    'B': 'blue',
    'G': 'green',
    'P': 'purple',
    'Y': 'yellow',
    'O': 'orange',
}

# (c + 2r) % 6 over the palette: no runs and no legal move anywhere.
DEADLOCK_8X8 = [
    "RBGPYORB",
    "GPYORBGP",
    "YORBGPYO",
    "RBGPYORB",
    "GPYORBGP",
    "YORBGPYO",
    "RBGPYORB",
    "GPYORBGP",
]

# Same board with (7,1) turned green: the only legal move is (6,2) <-> (7,2).
SINGLE_MOVE_8X8 = DEADLOCK_8X8[:7] + ["GGYORBGP"]

# Row 0 holds R R R; swapping (0,3) with the red at (1,3) makes a straight four.
ROW_ZERO_FOUR_8X8 = ["RRRPYORB", "GPYRRBGP"] + SINGLE_MOVE_8X8[2:]


class ScriptedRandom(random.Random):
    """Random whose ``choice`` returns queued colors first, then falls back to chance."""

    def __init__(self, seed=None):
        super().__init__(seed)
        self._queue: deque = deque()

    def script(self, values: Iterable[str]) -> None:
        self._queue.extend(values)

    def choice(self, seq):
        if self._queue:
            value = self._queue.popleft()
            assert value in seq, f"Scripted value {value!r} not among {list(seq)}"
            return value
        return super().choice(seq)


def colors_from(rows: Sequence[str]) -> List[List[str]]:
    return [[LETTERS[ch] for ch in row] for row in rows]


def paint(world: World, rows: Sequence[str]) -> None:
    apply_layout(world, colors_from(rows))


def set_rainbow(world: World, row: int, col: int, color: str = 'purple') -> None:
    set_cell(world, row, col, Tile(color=color, kind=TileKind.RAINBOW))


def make_board_env(rows: Sequence[str], *, seed: int = 7):
    bus = EventBus()
    world = create_world(bus, rng=ScriptedRandom(seed))
    board = BoardSystem(world, bus, len(rows), len(rows[0]), populate=False)
    paint(world, rows)
    return bus, world, board


def make_level_env(layout: Sequence[str] = SINGLE_MOVE_8X8, *, seed: int = 7, **config_overrides):
    bus = EventBus()
    rng = ScriptedRandom(seed)
    world = create_world(bus, rng=rng)
    level = LevelSystem(world, bus)
    config_values = dict(
        rows=len(layout),
        cols=len(layout[0]),
        goal_color='purple',
        goal_count=5,
        target_score=100_000,
        move_budget=20,
    )
    config_values.update(config_overrides)
    level.start_level(LevelConfig(**config_values))
    paint(world, layout)
    return bus, world, level, rng
