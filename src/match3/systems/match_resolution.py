from __future__ import annotations

from typing import Iterator, List, Tuple

from esper import World

from match3.constants import POINTS_PER_CLEARED_TILE
from match3.events.bus import (
    EventBus,
    EVENT_BOARD_RESHUFFLED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GOAL_PROGRESS,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_SPECIAL_CREATED,
)
from match3.outcomes import CascadeStep
from match3.systems.board_ops import clear_tiles, collapse_and_refill, get_cell, world_rng
from match3.systems.match import MatchGroup, find_all_matches
from match3.systems.moves import has_any_legal_move
from match3.systems.reshuffle import reshuffle
from match3.systems.specials import promote_specials
from match3.systems.state_utils import get_goal_state, get_or_create_resolve_state


def step_score(cleared: int, depth: int) -> int:
    return cleared * POINTS_PER_CLEARED_TILE * depth


class MatchResolutionSystem:
    """Runs promote -> clear -> score -> collapse/refill -> rescan until the board settles.

    The cascade is a generator so a caller can pace the chain (one CascadeStep
    per depth); resolve() simply drains it.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus

    def iter_cascade(self, groups: List[MatchGroup], *, reason: str = "swap") -> Iterator[CascadeStep]:
        state = get_or_create_resolve_state(self.world)
        state.action_source = reason
        rng = world_rng(self.world)
        depth = 1
        try:
            while groups:
                state.cascade_depth = depth
                step = self._resolve_step(groups, depth, reason, rng)
                self.event_bus.emit(EVENT_CASCADE_STEP, step=step)
                yield step
                groups = find_all_matches(self.world)
                depth += 1
        finally:
            state.cascade_depth = 0
            state.action_source = None

    def resolve(self, groups: List[MatchGroup], *, reason: str = "swap") -> List[CascadeStep]:
        steps = list(self.iter_cascade(groups, reason=reason))
        self.event_bus.emit(
            EVENT_CASCADE_COMPLETE,
            depth=len(steps),
            cleared=sum(step.cleared_count for step in steps),
            score=sum(step.score_delta for step in steps),
        )
        return steps

    def ensure_playable(self, reason: str = "deadlock") -> Tuple[bool, bool]:
        """Reshuffle a deadlocked board. Returns (had_any_move, reshuffled)."""
        if has_any_legal_move(self.world):
            return True, False
        attempts = reshuffle(self.world, world_rng(self.world))
        self.event_bus.emit(EVENT_BOARD_RESHUFFLED, reason=reason, attempts=attempts)
        return False, True

    def _resolve_step(self, groups: List[MatchGroup], depth: int, reason: str, rng) -> CascadeStep:
        positions = sorted({pos for group in groups for pos in group.cells})
        self.event_bus.emit(EVENT_MATCH_FOUND, positions=positions, size=len(positions), depth=depth, reason=reason)

        promoted = promote_specials(self.world, groups, rng)
        for position, kind in promoted.items():
            tile = get_cell(self.world, *position)
            self.event_bus.emit(
                EVENT_SPECIAL_CREATED,
                position=position,
                kind=kind,
                color=tile.color if tile is not None else None,
            )

        cleared = clear_tiles(self.world, [pos for pos in positions if pos not in promoted])
        self._record_goal_progress(cleared)
        self.event_bus.emit(
            EVENT_MATCH_CLEARED,
            positions=[(row, col) for row, col, _ in cleared],
            colors=cleared,
            depth=depth,
        )

        moves, new_tiles = collapse_and_refill(self.world, rng)
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=moves)
        if new_tiles:
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=new_tiles)

        return CascadeStep(
            depth=depth,
            groups=list(groups),
            cleared=[(row, col) for row, col, _ in cleared],
            promoted=promoted,
            score_delta=step_score(len(cleared), depth),
            new_tiles=new_tiles,
        )

    def _record_goal_progress(self, cleared) -> None:
        goal = get_goal_state(self.world)
        if goal is None:
            return
        hits = sum(1 for _, _, color in cleared if goal.record_cleared(color))
        if hits:
            self.event_bus.emit(EVENT_GOAL_PROGRESS, color=goal.target_color, remaining=goal.remaining)
