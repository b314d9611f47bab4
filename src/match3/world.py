import random
from typing import Iterable

from esper import World

from match3.components.game_state import GameState, LevelStatus
from match3.components.resolve_state import ResolveState
from match3.components.tile_palette import TilePalette
from match3.constants import COLORS
from match3.events.bus import EventBus


def create_world(
    event_bus: EventBus,
    *,
    colors: Iterable[str] = COLORS,
    rng: random.Random | None = None,
) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())

    # Shared state resources.
    world.create_entity(GameState(status=LevelStatus.PLAYING), ResolveState())

    # Single palette entity with the spawnable colors.
    world.create_entity(TilePalette(colors=list(colors)))
    return world
