from __future__ import annotations

import random
from typing import Dict, Iterable, Optional, Tuple

from esper import World

from match3.components.tile import Tile, TileKind
from match3.systems.board_ops import Position, get_cell, random_color, set_cell
from match3.systems.match import MatchGroup


def classify_group(group: MatchGroup) -> Optional[Tuple[Position, TileKind]]:
    """Pick the cell a group upgrades and what it becomes; None for plain groups.

    Straight lines of five or more win over overlaps, overlaps win over
    straight fours. Three-cell groups never promote.
    """
    cells = group.sorted_cells()
    straight = group.is_row() or group.is_column()
    if len(cells) >= 5 and straight:
        return cells[len(cells) // 2], TileKind.RAINBOW
    overlaps = group.overlap_cells()
    if overlaps:
        return overlaps[0], TileKind.WRAPPED
    if len(cells) == 4 and straight:
        kind = TileKind.STRIPED_H if group.is_row() else TileKind.STRIPED_V
        return cells[1], kind
    return None


def promote_specials(
    world: World,
    groups: Iterable[MatchGroup],
    rng: random.Random | None = None,
) -> Dict[Position, TileKind]:
    """Upgrade at most one cell per group in place; returns the promoted cells."""
    promoted: Dict[Position, TileKind] = {}
    for group in groups:
        choice = classify_group(group)
        if choice is None:
            continue
        position, kind = choice
        current = get_cell(world, *position)
        if current is None:
            continue
        # Rainbow color is cosmetic, everything else keeps its color.
        color = random_color(world, rng) if kind is TileKind.RAINBOW else current.color
        set_cell(world, position[0], position[1], Tile(color=color, kind=kind))
        promoted[position] = kind
    return promoted
