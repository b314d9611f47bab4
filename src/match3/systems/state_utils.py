from typing import Optional

from esper import World

from match3.components.booster_inventory import BoosterInventory
from match3.components.game_state import GameState
from match3.components.goal_state import GoalState
from match3.components.level_progress import LevelProgress
from match3.components.resolve_state import ResolveState


def get_or_create_resolve_state(world: World) -> ResolveState:
    """Return the shared ResolveState component, creating it if absent."""
    existing = list(world.get_component(ResolveState))
    if existing:
        return existing[0][1]
    world.create_entity(ResolveState())
    return list(world.get_component(ResolveState))[0][1]


def get_game_state(world: World) -> GameState:
    existing = list(world.get_component(GameState))
    if existing:
        return existing[0][1]
    world.create_entity(GameState())
    return list(world.get_component(GameState))[0][1]


def get_goal_state(world: World) -> Optional[GoalState]:
    for _, goal in world.get_component(GoalState):
        return goal
    return None


def get_level_progress(world: World) -> Optional[LevelProgress]:
    for _, progress in world.get_component(LevelProgress):
        return progress
    return None


def get_inventory(world: World) -> Optional[BoosterInventory]:
    for _, inventory in world.get_component(BoosterInventory):
        return inventory
    return None
