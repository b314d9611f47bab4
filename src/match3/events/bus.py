from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, /, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float (seconds)
EVENT_TIME_CHANGED = "time_changed"                # payload: time_left=float, delta=float


# ============================================================================
# INPUT BOUNDARY
# ============================================================================
EVENT_REQUEST_REJECTED = "request_rejected"        # payload: action=str, reason=RejectReason
EVENT_SWAP_REVERTED = "swap_reverted"              # payload: src=(r,c), dst=(r,c)
EVENT_FREE_SWAP_USED = "free_swap_used"            # payload: src=(r,c), dst=(r,c)
EVENT_BOOSTER_ARMED = "booster_armed"              # payload: name=str
EVENT_BOOSTER_USED = "booster_used"                # payload: name=str, remaining=int, target=Any


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], size=int, depth=int, reason=str
EVENT_SPECIAL_CREATED = "special_created"          # payload: position=(r,c), kind=TileKind, color=str
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], colors=[(r,c,color),...], depth=int
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[GravityMove,...]
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: step=CascadeStep
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int, cleared=int, score=int
EVENT_BOARD_RESHUFFLED = "board_reshuffled"        # payload: reason=str, attempts=int


# ============================================================================
# SCORE & GOALS
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int
EVENT_GOAL_PROGRESS = "goal_progress"              # payload: color=str, remaining=int


# ============================================================================
# LEVEL FLOW
# ============================================================================
EVENT_LEVEL_STARTED = "level_started"              # payload: level=int, config=LevelConfig
EVENT_LEVEL_WON = "level_won"                      # payload: level=int, score=int
EVENT_LEVEL_LOST = "level_lost"                    # payload: level=int, score=int, reason=str
