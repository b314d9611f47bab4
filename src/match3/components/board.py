from dataclasses import dataclass

@dataclass(slots=True)
class Board:
    """Dimensions of the level's grid; one tile entity exists per cell."""
    rows: int
    cols: int
