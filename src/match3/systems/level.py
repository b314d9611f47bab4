from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple, Union

from esper import World

from match3.components.booster_inventory import BoosterInventory
from match3.components.game_state import LevelStatus
from match3.components.goal_state import GoalState
from match3.components.level_progress import LevelProgress
from match3.constants import (
    AREA_BLAST_BONUS_PER_TILE,
    AREA_BLAST_RADIUS,
    BOOSTER_AREA_BLAST,
    BOOSTER_COLOR_CLEAR,
    BOOSTER_FREE_SWAP,
    BOOSTER_TIME_BONUS,
    COLOR_CLEAR_BONUS_PER_TILE,
    TIME_BONUS_SECONDS,
    TOTAL_LEVELS,
)
from match3.events.bus import (
    EventBus,
    EVENT_BOARD_RESHUFFLED,
    EVENT_BOOSTER_ARMED,
    EVENT_BOOSTER_USED,
    EVENT_FREE_SWAP_USED,
    EVENT_LEVEL_LOST,
    EVENT_LEVEL_STARTED,
    EVENT_LEVEL_WON,
    EVENT_REQUEST_REJECTED,
    EVENT_SCORE_CHANGED,
    EVENT_SWAP_REVERTED,
    EVENT_TICK,
    EVENT_TIME_CHANGED,
)
from match3.level_config import LevelConfig
from match3.outcomes import (
    NO_MOVE_AVAILABLE,
    CascadeStep,
    NoMoveAvailable,
    Rejected,
    RejectReason,
    ResolutionResult,
)
from match3.systems.board import BoardSystem
from match3.systems.board_ops import (
    Position,
    Snapshot,
    board_snapshot,
    cell_map,
    get_cell,
    get_palette,
    in_bounds,
    is_adjacent,
    require_dimensions,
    swap_cells,
    world_rng,
)
from match3.systems.match import MatchGroup, find_all_matches
from match3.systems.match_resolution import MatchResolutionSystem
from match3.systems.moves import Move, find_first_legal_move
from match3.systems.reshuffle import reshuffle
from match3.systems.state_utils import get_game_state, get_or_create_resolve_state

SwapOutcome = Union[ResolutionResult, Rejected]


def color_group(world: World, color: str) -> MatchGroup:
    """Every non-rainbow board cell whose stored color equals ``color``.

    A rainbow's stored color is cosmetic, so rainbows never join a color group.
    """
    return MatchGroup.synthetic(
        pos for pos, tile in cell_map(world).items() if tile.color == color and not tile.is_rainbow
    )


def area_group(world: World, row: int, col: int, radius: int = AREA_BLAST_RADIUS) -> MatchGroup:
    rows, cols = require_dimensions(world)
    return MatchGroup.synthetic(
        (rr, cc)
        for rr in range(row - radius, row + radius + 1)
        for cc in range(col - radius, col + radius + 1)
        if 0 <= rr < rows and 0 <= cc < cols
    )


class LevelSystem:
    """Input boundary between the presentation layer and the resolution core.

    Every request is validated here (bounds, adjacency, charges, busy, level
    over) and rejected synchronously with the board untouched; accepted
    requests run a full resolve cycle to settlement before returning.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        board: Optional[BoardSystem] = None,
        resolver: Optional[MatchResolutionSystem] = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.board = board or BoardSystem(world, event_bus, populate=False)
        self.resolver = resolver or MatchResolutionSystem(world, event_bus)
        self.level_entity = self.world.create_entity()
        self.config: Optional[LevelConfig] = None
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def progress(self) -> LevelProgress:
        return self.world.component_for_entity(self.level_entity, LevelProgress)

    @property
    def goal(self) -> GoalState:
        return self.world.component_for_entity(self.level_entity, GoalState)

    @property
    def inventory(self) -> BoosterInventory:
        return self.world.component_for_entity(self.level_entity, BoosterInventory)

    @property
    def status(self) -> LevelStatus:
        return get_game_state(self.world).status

    @property
    def busy(self) -> bool:
        return get_or_create_resolve_state(self.world).busy

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------
    def start_level(self, config: Optional[LevelConfig] = None) -> Snapshot:
        config = config or LevelConfig.for_level(1, world_rng(self.world))
        config.validate()
        self.config = config
        get_palette(self.world).set_colors(config.colors)
        self.board.resize(config.rows, config.cols)
        self.board.populate()
        self.world.add_component(
            self.level_entity,
            LevelProgress(
                level=config.level,
                target_score=config.target_score,
                moves_left=config.move_budget,
                time_left=float(config.time_budget_seconds),
            ),
        )
        self.world.add_component(self.level_entity, GoalState(target_color=config.goal_color, remaining=config.goal_count))
        self.world.add_component(self.level_entity, BoosterInventory(charges=dict(config.boosters)))
        get_game_state(self.world).status = LevelStatus.PLAYING
        state = get_or_create_resolve_state(self.world)
        state.busy = False
        state.cascade_depth = 0
        self.event_bus.emit(EVENT_LEVEL_STARTED, level=config.level, config=config)
        return board_snapshot(self.world)

    def snapshot(self) -> Snapshot:
        return board_snapshot(self.world)

    def restart_level(self) -> Snapshot:
        if self.config is None:
            return self.start_level()
        return self.start_level(self.config)

    def advance_level(self) -> Snapshot:
        """Move on to the next level (wrapping after the last), keeping unused booster charges."""
        current = self.config or LevelConfig()
        next_level = current.level % TOTAL_LEVELS + 1
        charges = dict(self.inventory.charges) if self.world.has_component(self.level_entity, BoosterInventory) else dict(current.boosters)
        config = LevelConfig.for_level(
            next_level,
            world_rng(self.world),
            rows=current.rows,
            cols=current.cols,
            colors=current.colors,
            target_score=current.target_score,
            move_budget=current.move_budget,
            time_budget_seconds=current.time_budget_seconds,
            boosters=charges,
        )
        return self.start_level(config)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    def request_swap(self, r1: int, c1: int, r2: int, c2: int) -> SwapOutcome:
        rejected = self._guard("swap")
        if rejected is not None:
            return rejected
        if not (in_bounds(self.world, r1, c1) and in_bounds(self.world, r2, c2)):
            return self._reject("swap", RejectReason.OUT_OF_BOUNDS)
        src, dst = (r1, c1), (r2, c2)
        if not is_adjacent(src, dst):
            return self._reject("swap", RejectReason.NOT_ADJACENT)

        with self._resolving():
            swap_cells(self.world, src, dst)
            a = get_cell(self.world, *src)
            b = get_cell(self.world, *dst)
            reason = "swap"
            if a.is_rainbow != b.is_rainbow:
                other = b if a.is_rainbow else a
                groups = [color_group(self.world, other.color)]
                reason = "rainbow_swap"
            else:
                groups = find_all_matches(self.world)

            if not groups:
                inventory = self.inventory
                if inventory.free_swap_armed and inventory.spend(BOOSTER_FREE_SWAP):
                    inventory.free_swap_armed = False
                    self.event_bus.emit(EVENT_FREE_SWAP_USED, src=src, dst=dst)
                    self.event_bus.emit(EVENT_BOOSTER_USED, name=BOOSTER_FREE_SWAP, remaining=inventory.available(BOOSTER_FREE_SWAP), target=(src, dst))
                    return self._settle([], free_swap_used=True, swapped=(src, dst))
                swap_cells(self.world, src, dst)
                self.event_bus.emit(EVENT_SWAP_REVERTED, src=src, dst=dst)
                return self._unresolved_result(reverted=True)

            self.progress.moves_left -= 1
            steps = self.resolver.resolve(groups, reason=reason)
            return self._settle(steps, swapped=(src, dst))

    def request_area_blast(self, row: int, col: int) -> SwapOutcome:
        rejected = self._guard(BOOSTER_AREA_BLAST)
        if rejected is not None:
            return rejected
        if not in_bounds(self.world, row, col):
            return self._reject(BOOSTER_AREA_BLAST, RejectReason.OUT_OF_BOUNDS)
        if not self.inventory.spend(BOOSTER_AREA_BLAST):
            return self._reject(BOOSTER_AREA_BLAST, RejectReason.NO_CHARGES_LEFT)
        with self._resolving():
            group = area_group(self.world, row, col)
            self.event_bus.emit(EVENT_BOOSTER_USED, name=BOOSTER_AREA_BLAST, remaining=self.inventory.available(BOOSTER_AREA_BLAST), target=(row, col))
            steps = self.resolver.resolve([group], reason=BOOSTER_AREA_BLAST)
            return self._settle(steps, bonus=len(group) * AREA_BLAST_BONUS_PER_TILE)

    def request_color_clear(self, color: str) -> SwapOutcome:
        rejected = self._guard(BOOSTER_COLOR_CLEAR)
        if rejected is not None:
            return rejected
        if color not in get_palette(self.world):
            return self._reject(BOOSTER_COLOR_CLEAR, RejectReason.UNKNOWN_COLOR)
        if not self.inventory.spend(BOOSTER_COLOR_CLEAR):
            return self._reject(BOOSTER_COLOR_CLEAR, RejectReason.NO_CHARGES_LEFT)
        with self._resolving():
            group = color_group(self.world, color)
            self.event_bus.emit(EVENT_BOOSTER_USED, name=BOOSTER_COLOR_CLEAR, remaining=self.inventory.available(BOOSTER_COLOR_CLEAR), target=color)
            steps = self.resolver.resolve([group], reason=BOOSTER_COLOR_CLEAR)
            return self._settle(steps, bonus=len(group) * COLOR_CLEAR_BONUS_PER_TILE)

    def request_hint(self) -> Union[Move, NoMoveAvailable]:
        move = find_first_legal_move(self.world)
        return move if move is not None else NO_MOVE_AVAILABLE

    def arm_free_swap(self, armed: bool = True) -> Union[bool, Rejected]:
        rejected = self._guard(BOOSTER_FREE_SWAP)
        if rejected is not None:
            return rejected
        inventory = self.inventory
        if armed and not inventory.can_spend(BOOSTER_FREE_SWAP):
            return self._reject(BOOSTER_FREE_SWAP, RejectReason.NO_CHARGES_LEFT)
        inventory.free_swap_armed = armed
        if armed:
            self.event_bus.emit(EVENT_BOOSTER_ARMED, name=BOOSTER_FREE_SWAP)
        return inventory.free_swap_armed

    def request_time_bonus(self) -> Union[float, Rejected]:
        rejected = self._guard(BOOSTER_TIME_BONUS)
        if rejected is not None:
            return rejected
        if not self.inventory.spend(BOOSTER_TIME_BONUS):
            return self._reject(BOOSTER_TIME_BONUS, RejectReason.NO_CHARGES_LEFT)
        progress = self.progress
        progress.time_left += TIME_BONUS_SECONDS
        self.event_bus.emit(EVENT_BOOSTER_USED, name=BOOSTER_TIME_BONUS, remaining=self.inventory.available(BOOSTER_TIME_BONUS), target=None)
        self.event_bus.emit(EVENT_TIME_CHANGED, time_left=progress.time_left, delta=float(TIME_BONUS_SECONDS))
        return progress.time_left

    def request_reshuffle(self) -> Union[Snapshot, Rejected]:
        rejected = self._guard("reshuffle")
        if rejected is not None:
            return rejected
        with self._resolving():
            attempts = reshuffle(self.world, world_rng(self.world))
            self.event_bus.emit(EVENT_BOARD_RESHUFFLED, reason="manual", attempts=attempts)
            return board_snapshot(self.world)

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------
    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt')
        if dt is None:
            return
        self.tick(float(dt))

    def tick(self, dt: float) -> None:
        if self.config is None or self.status is not LevelStatus.PLAYING:
            return
        progress = self.progress
        if progress.time_expired or dt <= 0:
            return
        before = progress.time_left
        progress.time_left = max(0.0, progress.time_left - dt)
        self.event_bus.emit(EVENT_TIME_CHANGED, time_left=progress.time_left, delta=progress.time_left - before)
        if progress.time_left > 0:
            return
        progress.time_expired = True
        # An expiring timer never interrupts a resolve; settle picks it up.
        if not self.busy:
            self._end_level(won=False, reason="time")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _guard(self, action: str) -> Optional[Rejected]:
        if self.busy:
            return self._reject(action, RejectReason.BUSY)
        if self.config is None or self.status is not LevelStatus.PLAYING:
            return self._reject(action, RejectReason.LEVEL_OVER)
        return None

    def _reject(self, action: str, reason: RejectReason) -> Rejected:
        self.event_bus.emit(EVENT_REQUEST_REJECTED, action=action, reason=reason)
        return Rejected(reason=reason, action=action)

    @contextmanager
    def _resolving(self) -> Iterator[None]:
        state = get_or_create_resolve_state(self.world)
        state.busy = True
        try:
            yield
        finally:
            state.busy = False

    def _settle(
        self,
        steps: List[CascadeStep],
        *,
        bonus: int = 0,
        free_swap_used: bool = False,
        swapped: Optional[Tuple[Position, Position]] = None,
    ) -> ResolutionResult:
        total = sum(step.score_delta for step in steps)
        progress = self.progress
        if total or bonus:
            progress.score += total + bonus
            self.event_bus.emit(EVENT_SCORE_CHANGED, score=progress.score, delta=total + bonus)
        self._check_level_end()
        had_any_move, reshuffled = self.resolver.ensure_playable()
        return ResolutionResult(
            total_score_delta=total,
            cleared_cell_count=sum(step.cleared_count for step in steps),
            chain_depth=len(steps),
            board_snapshot=board_snapshot(self.world),
            goal_state=GoalState(target_color=self.goal.target_color, remaining=self.goal.remaining),
            had_any_move=had_any_move,
            steps=steps,
            bonus_score=bonus,
            reshuffled=reshuffled,
            free_swap_used=free_swap_used,
            status=self.status,
            moves_left=progress.moves_left,
            swapped=swapped,
        )

    def _unresolved_result(self, *, reverted: bool) -> ResolutionResult:
        return ResolutionResult(
            total_score_delta=0,
            cleared_cell_count=0,
            chain_depth=0,
            board_snapshot=board_snapshot(self.world),
            goal_state=GoalState(target_color=self.goal.target_color, remaining=self.goal.remaining),
            had_any_move=True,
            reverted=reverted,
            status=self.status,
            moves_left=self.progress.moves_left,
        )

    def _check_level_end(self) -> None:
        if self.status is not LevelStatus.PLAYING:
            return
        progress = self.progress
        if progress.score_reached and self.goal.reached:
            self._end_level(won=True)
        elif progress.moves_left <= 0:
            self._end_level(won=False, reason="moves")
        elif progress.time_expired:
            self._end_level(won=False, reason="time")

    def _end_level(self, *, won: bool, reason: str = "") -> None:
        progress = self.progress
        if won:
            get_game_state(self.world).status = LevelStatus.WON
            self.event_bus.emit(EVENT_LEVEL_WON, level=progress.level, score=progress.score)
        else:
            get_game_state(self.world).status = LevelStatus.LOST
            self.event_bus.emit(EVENT_LEVEL_LOST, level=progress.level, score=progress.score, reason=reason)
