from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Iterator, List, Set, Tuple

from esper import World

from match3.systems.board_ops import (
    CellMap,
    Position,
    board_dimensions,
    cell_map,
    color_compatible,
)

Run = FrozenSet[Position]


@dataclass(frozen=True)
class MatchGroup:
    """Connected set of cells cleared together.

    runs holds the row/column runs the group was merged from. Synthetic groups
    built by boosters have no runs.
    """
    cells: FrozenSet[Position]
    runs: Tuple[Run, ...] = field(default=())

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Position]:
        return iter(self.sorted_cells())

    def __contains__(self, position: object) -> bool:
        return position in self.cells

    def sorted_cells(self) -> List[Position]:
        return sorted(self.cells)

    def is_row(self) -> bool:
        return len({row for row, _ in self.cells}) == 1

    def is_column(self) -> bool:
        return len({col for _, col in self.cells}) == 1

    def overlap_cells(self) -> List[Position]:
        """Cells shared by two or more of the pre-merge runs."""
        coverage: dict[Position, int] = {}
        for run in self.runs:
            for pos in run:
                coverage[pos] = coverage.get(pos, 0) + 1
        return sorted(pos for pos, count in coverage.items() if count >= 2)

    @classmethod
    def synthetic(cls, positions: Iterable[Position]) -> "MatchGroup":
        return cls(cells=frozenset(positions))


def _scan_line(cells: CellMap, line: List[Position]) -> List[Run]:
    runs: List[Run] = []
    run: List[Position] = []
    for pos in line:
        if run and color_compatible(cells.get(run[-1]), cells.get(pos)):
            run.append(pos)
            continue
        if len(run) >= 3:
            runs.append(frozenset(run))
        run = [pos] if pos in cells else []
    if len(run) >= 3:
        runs.append(frozenset(run))
    return runs


def find_runs(cells: CellMap, rows: int, cols: int) -> List[Run]:
    """Every maximal horizontal then vertical run of length >= 3."""
    runs: List[Run] = []
    for r in range(rows):
        runs.extend(_scan_line(cells, [(r, c) for c in range(cols)]))
    for c in range(cols):
        runs.extend(_scan_line(cells, [(r, c) for r in range(rows)]))
    return runs


def merge_runs(runs: List[Run]) -> List[MatchGroup]:
    """Merge runs sharing a coordinate into connected groups."""
    pending = list(runs)
    merged: List[MatchGroup] = []
    while pending:
        first = pending.pop(0)
        component: Set[Position] = set(first)
        members: List[Run] = [first]
        changed = True
        while changed:
            changed = False
            for run in pending[:]:
                if component & run:
                    component |= run
                    members.append(run)
                    pending.remove(run)
                    changed = True
        merged.append(MatchGroup(cells=frozenset(component), runs=tuple(members)))
    merged.sort(key=lambda group: min(group.cells))
    return merged


def find_matches_in(cells: CellMap, rows: int, cols: int) -> List[MatchGroup]:
    runs = find_runs(cells, rows, cols)
    if not runs:
        return []
    return merge_runs(runs)


def find_all_matches(world: World) -> List[MatchGroup]:
    """Detect all merged horizontal/vertical matches of length >= 3 on the board."""
    dims = board_dimensions(world)
    if not dims:
        return []
    cells = cell_map(world)
    if not cells:
        return []
    return find_matches_in(cells, *dims)
