"""Headless entry point for the match-3 engine.

Plays levels by following hints (or a random legal move) and prints the board
as text. The real presentation layer lives elsewhere; this driver exists to
exercise the core end to end from a terminal.

Run with: ``python -m match3.autoplay [seed] [levels]`` or the ``match3-autoplay`` script.
"""
import random
import sys

from match3.components.game_state import LevelStatus
from match3.components.tile import TileKind
from match3.events.bus import (
    EventBus,
    EVENT_BOARD_RESHUFFLED,
    EVENT_LEVEL_LOST,
    EVENT_LEVEL_WON,
    EVENT_SPECIAL_CREATED,
)
from match3.level_config import LevelConfig
from match3.outcomes import Rejected
from match3.systems.level import LevelSystem
from match3.systems.moves import find_legal_moves
from match3.world import create_world

KIND_GLYPHS = {
    TileKind.NORMAL: "",
    TileKind.STRIPED_H: "-",
    TileKind.STRIPED_V: "|",
    TileKind.WRAPPED: "#",
    TileKind.RAINBOW: "*",
}


def render_text(snapshot) -> str:
    lines = []
    for row in snapshot:
        cells = []
        for tile in row:
            glyph = "*" if tile.kind is TileKind.RAINBOW else tile.color[0].upper()
            cells.append(f"{glyph}{KIND_GLYPHS[tile.kind] or ' '}")
        lines.append(" ".join(cells))
    return "\n".join(lines)


def play_level(level_system: LevelSystem, rng: random.Random, *, seconds_per_move: float = 3.0) -> LevelStatus:
    while level_system.status is LevelStatus.PLAYING:
        moves = find_legal_moves(level_system.world)
        move = rng.choice(moves) if moves else level_system.request_hint()
        if not move:
            level_system.request_reshuffle()
            continue
        result = level_system.request_swap(*move)
        if isinstance(result, Rejected):
            print(f"rejected {move}: {result.reason.value}")
            continue
        progress = level_system.progress
        print(
            f"swap {move.src}->{move.dst}: +{result.total_score_delta} "
            f"(chain {result.chain_depth}, cleared {result.cleared_cell_count}) "
            f"score={progress.score} moves={progress.moves_left} "
            f"goal={result.goal_state.remaining} {result.goal_state.target_color}"
        )
        level_system.tick(seconds_per_move)
    return level_system.status


def main(argv=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    seed = int(argv[0]) if argv else 1234
    levels = int(argv[1]) if len(argv) > 1 else 1
    rng = random.Random(seed)

    bus = EventBus()
    world = create_world(bus, rng=random.Random(seed))
    level_system = LevelSystem(world, bus)
    bus.subscribe(EVENT_SPECIAL_CREATED, lambda s, **k: print(f"  special {k['kind'].value} at {k['position']}"))
    bus.subscribe(EVENT_BOARD_RESHUFFLED, lambda s, **k: print(f"  board reshuffled ({k['reason']}, {k['attempts']} tries)"))
    bus.subscribe(EVENT_LEVEL_WON, lambda s, **k: print(f"level {k['level']} won with {k['score']}"))
    bus.subscribe(EVENT_LEVEL_LOST, lambda s, **k: print(f"level {k['level']} lost ({k['reason']}) with {k['score']}"))

    snapshot = level_system.start_level(LevelConfig.for_level(1, rng))
    print(render_text(snapshot))
    for _ in range(levels):
        status = play_level(level_system, rng)
        print(render_text(level_system.snapshot()))
        if status is LevelStatus.WON:
            level_system.advance_level()
        else:
            level_system.restart_level()
    return 0


if __name__ == "__main__":
    sys.exit(main())
