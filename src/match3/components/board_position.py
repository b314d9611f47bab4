from dataclasses import dataclass

@dataclass(slots=True)
class BoardPosition:
    """Fixed (row, col) of a tile entity. Row 0 is the top; gravity pulls toward higher rows."""
    row: int
    col: int
