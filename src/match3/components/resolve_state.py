from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ResolveState:
    """Tracks the resolve cycle currently owning the board.

    busy is the re-entrancy guard checked at the input boundary.
    """

    busy: bool = False
    action_source: Optional[str] = None
    cascade_depth: int = 0
