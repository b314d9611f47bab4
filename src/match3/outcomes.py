"""Values handed back across the input boundary to the presentation layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from match3.components.game_state import LevelStatus
from match3.components.goal_state import GoalState
from match3.components.tile import TileKind
from match3.systems.board_ops import Position, Snapshot
from match3.systems.match import MatchGroup


class RejectReason(Enum):
    OUT_OF_BOUNDS = "out_of_bounds"
    NOT_ADJACENT = "not_adjacent"
    BUSY = "busy"
    NO_CHARGES_LEFT = "no_charges_left"
    UNKNOWN_COLOR = "unknown_color"
    LEVEL_OVER = "level_over"


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    action: str = ""

    def __bool__(self) -> bool:
        return False


class NoMoveAvailable:
    """Sentinel returned by a hint request on a deadlocked board."""

    _instance: Optional["NoMoveAvailable"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MOVE_AVAILABLE"


NO_MOVE_AVAILABLE = NoMoveAvailable()


@dataclass(slots=True)
class CascadeStep:
    depth: int
    groups: List[MatchGroup]
    cleared: List[Position]
    promoted: Dict[Position, TileKind]
    score_delta: int
    new_tiles: List[Position] = field(default_factory=list)

    @property
    def cleared_count(self) -> int:
        return len(self.cleared)


@dataclass(slots=True)
class ResolutionResult:
    total_score_delta: int
    cleared_cell_count: int
    chain_depth: int
    board_snapshot: Snapshot
    goal_state: GoalState
    had_any_move: bool
    steps: List[CascadeStep] = field(default_factory=list)
    bonus_score: int = 0
    reshuffled: bool = False
    reverted: bool = False
    free_swap_used: bool = False
    status: LevelStatus = LevelStatus.PLAYING
    moves_left: int = 0
    swapped: Optional[Tuple[Position, Position]] = None
