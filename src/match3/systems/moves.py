from __future__ import annotations

from typing import List, NamedTuple, Optional, Tuple

from esper import World

from match3.systems.board_ops import CellMap, Position, board_dimensions, cell_map
from match3.systems.match import find_matches_in

# East, North, West, South. Order only matters for which hint is offered first.
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((0, 1), (-1, 0), (0, -1), (1, 0))


class Move(NamedTuple):
    row: int
    col: int
    row2: int
    col2: int

    @property
    def src(self) -> Position:
        return (self.row, self.col)

    @property
    def dst(self) -> Position:
        return (self.row2, self.col2)


def swap_is_legal(cells: CellMap, rows: int, cols: int, src: Position, dst: Position) -> bool:
    """Hypothetically swap src/dst in cells and report whether it does anything.

    A swap involving a rainbow tile is always legal because it force-clears a
    color. cells is restored before returning.
    """
    a = cells.get(src)
    b = cells.get(dst)
    if a is None or b is None:
        return False
    if a.is_rainbow or b.is_rainbow:
        return True
    cells[src], cells[dst] = b, a
    try:
        return bool(find_matches_in(cells, rows, cols))
    finally:
        cells[src], cells[dst] = a, b


def iter_legal_moves(world: World):
    dims = board_dimensions(world)
    if not dims:
        return
    rows, cols = dims
    cells = cell_map(world)
    for row in range(rows):
        for col in range(cols):
            for dr, dc in DIRECTIONS:
                rr, cc = row + dr, col + dc
                if not (0 <= rr < rows and 0 <= cc < cols):
                    continue
                if swap_is_legal(cells, rows, cols, (row, col), (rr, cc)):
                    yield Move(row, col, rr, cc)


def find_first_legal_move(world: World) -> Optional[Move]:
    for move in iter_legal_moves(world):
        return move
    return None


def has_any_legal_move(world: World) -> bool:
    return find_first_legal_move(world) is not None


def find_legal_moves(world: World) -> List[Move]:
    """Every legal move, including both directions of the same pair."""
    return list(iter_legal_moves(world))
