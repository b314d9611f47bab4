from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from esper import World

from match3.components.active_switch import ActiveSwitch
from match3.components.board import Board
from match3.components.board_position import BoardPosition
from match3.components.tile import Tile, TileKind
from match3.components.tile_palette import TilePalette

Position = Tuple[int, int]
CellMap = Dict[Position, Tile]
Snapshot = Tuple[Tuple[Tile, ...], ...]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    color: str
    kind: TileKind


def get_palette(world: World) -> TilePalette:
    for _, palette in world.get_component(TilePalette):
        return palette
    raise RuntimeError("TilePalette definitions not found")


def world_rng(world: World) -> random.Random:
    rng = getattr(world, "random", None)
    if isinstance(rng, random.Random):
        return rng
    rng = random.Random()
    setattr(world, "random", rng)
    return rng


def random_color(world: World, rng: random.Random | None = None) -> str:
    colors = get_palette(world).colors
    if not colors:
        raise RuntimeError("TilePalette has no colors to spawn")
    return (rng or world_rng(world)).choice(colors)


def board_dimensions(world: World) -> Tuple[int, int] | None:
    for _, board in world.get_component(Board):
        return board.rows, board.cols
    return None


def require_dimensions(world: World) -> Tuple[int, int]:
    dims = board_dimensions(world)
    if dims is None:
        raise RuntimeError("Board component not found")
    return dims


def in_bounds(world: World, row: int, col: int) -> bool:
    dims = board_dimensions(world)
    if dims is None:
        return False
    rows, cols = dims
    return 0 <= row < rows and 0 <= col < cols


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def color_compatible(a: Tile | None, b: Tile | None) -> bool:
    """Rainbow tiles are wildcards for matching; holes never match."""
    if a is None or b is None:
        return False
    return a.color == b.color or a.is_rainbow or b.is_rainbow


def position_index(world: World) -> Dict[Position, int]:
    return {(pos.row, pos.col): entity for entity, pos in world.get_component(BoardPosition)}


def get_entity_at(world: World, row: int, col: int) -> int | None:
    for entity, position in world.get_component(BoardPosition):
        if position.row == row and position.col == col:
            return entity
    return None


def _require_entity(world: World, row: int, col: int) -> int:
    entity = get_entity_at(world, row, col)
    if entity is None:
        raise IndexError(f"No board cell at {(row, col)}")
    return entity


def get_cell(world: World, row: int, col: int) -> Tile | None:
    """Return the live Tile at (row, col), or None while the cell is a hole."""
    entity = _require_entity(world, row, col)
    if not world.component_for_entity(entity, ActiveSwitch).active:
        return None
    return world.component_for_entity(entity, Tile)


def set_cell(world: World, row: int, col: int, tile: Tile) -> None:
    entity = _require_entity(world, row, col)
    current: Tile = world.component_for_entity(entity, Tile)
    current.color = tile.color
    current.kind = tile.kind
    world.component_for_entity(entity, ActiveSwitch).active = True


def clear_cell(world: World, row: int, col: int) -> Tile | None:
    """Turn the cell into a hole; returns a copy of what was there."""
    entity = _require_entity(world, row, col)
    switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
    if not switch.active:
        return None
    switch.active = False
    return world.component_for_entity(entity, Tile).copy()


def swap_cells(world: World, a: Position, b: Position) -> None:
    """Exchange two cells unconditionally. Adjacency is the caller's problem."""
    ent_a = _require_entity(world, *a)
    ent_b = _require_entity(world, *b)
    tile_a: Tile = world.component_for_entity(ent_a, Tile)
    tile_b: Tile = world.component_for_entity(ent_b, Tile)
    switch_a: ActiveSwitch = world.component_for_entity(ent_a, ActiveSwitch)
    switch_b: ActiveSwitch = world.component_for_entity(ent_b, ActiveSwitch)
    tile_a.color, tile_b.color = tile_b.color, tile_a.color
    tile_a.kind, tile_b.kind = tile_b.kind, tile_a.kind
    switch_a.active, switch_b.active = switch_b.active, switch_a.active


def cell_map(world: World) -> CellMap:
    """Return copies of every present tile keyed by position."""
    mapping: CellMap = {}
    for entity, position in world.get_component(BoardPosition):
        try:
            switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if not switch.active:
                continue
            tile: Tile = world.component_for_entity(entity, Tile)
        except KeyError:
            continue
        mapping[(position.row, position.col)] = tile.copy()
    return mapping


def board_snapshot(world: World) -> Snapshot:
    rows, cols = require_dimensions(world)
    cells = cell_map(world)
    missing = [(r, c) for r in range(rows) for c in range(cols) if (r, c) not in cells]
    if missing:
        raise RuntimeError(f"Cannot snapshot an unsettled board; holes at {missing}")
    return tuple(tuple(cells[(r, c)] for c in range(cols)) for r in range(rows))


def color_counts(world: World) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for tile in cell_map(world).values():
        counts[tile.color] = counts.get(tile.color, 0) + 1
    return counts


def apply_layout(world: World, layout: Iterable[Iterable[str]]) -> None:
    """Write a row-major grid of colors onto the board as NORMAL tiles."""
    index = position_index(world)
    for row, values in enumerate(layout):
        for col, color in enumerate(values):
            entity = index.get((row, col))
            if entity is None:
                raise IndexError(f"No board cell at {(row, col)}")
            tile: Tile = world.component_for_entity(entity, Tile)
            tile.color = color
            tile.kind = TileKind.NORMAL
            world.component_for_entity(entity, ActiveSwitch).active = True


def clear_tiles(world: World, positions: Iterable[Position]) -> List[Tuple[int, int, str]]:
    """Deactivate every present tile at positions; returns (row, col, color) per cleared tile."""
    cleared: List[Tuple[int, int, str]] = []
    index = position_index(world)
    for row, col in sorted(set(positions)):
        entity = index.get((row, col))
        if entity is None:
            raise IndexError(f"No board cell at {(row, col)}")
        switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if not switch.active:
            continue
        tile: Tile = world.component_for_entity(entity, Tile)
        cleared.append((row, col, tile.color))
        switch.active = False
    return cleared


def compute_gravity_moves(world: World) -> List[GravityMove]:
    """Moves that compact each column toward the highest row index."""
    dims = board_dimensions(world)
    if dims is None:
        return []
    rows, cols = dims
    cells = cell_map(world)
    moves: List[GravityMove] = []
    for col in range(cols):
        target_row = rows - 1
        for row in range(rows - 1, -1, -1):
            tile = cells.get((row, col))
            if tile is None:
                continue
            if row != target_row:
                moves.append(GravityMove(source=(row, col), target=(target_row, col), color=tile.color, kind=tile.kind))
            target_row -= 1
    return moves


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    index = position_index(world)
    for move in moves:
        src_entity = index.get(move.source)
        dst_entity = index.get(move.target)
        if src_entity is None or dst_entity is None:
            raise IndexError(f"Gravity move outside the board: {move.source} -> {move.target}")
        src_switch: ActiveSwitch = world.component_for_entity(src_entity, ActiveSwitch)
        dst_switch: ActiveSwitch = world.component_for_entity(dst_entity, ActiveSwitch)
        if not src_switch.active:
            continue
        dst_tile: Tile = world.component_for_entity(dst_entity, Tile)
        dst_tile.color = move.color
        dst_tile.kind = move.kind
        dst_switch.active = True
        src_switch.active = False


def refill_inactive_tiles(world: World, rng: random.Random | None = None) -> List[Position]:
    """Spawn fresh NORMAL tiles into every hole, row-major."""
    rng = rng or world_rng(world)
    colors = get_palette(world).colors
    spawned: List[Position] = []
    index = position_index(world)
    for position in sorted(index):
        entity = index[position]
        tile_switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if tile_switch.active:
            continue
        tile: Tile = world.component_for_entity(entity, Tile)
        tile.color = rng.choice(colors)
        tile.kind = TileKind.NORMAL
        tile_switch.active = True
        spawned.append(position)
    return spawned


def collapse_and_refill(world: World, rng: random.Random | None = None) -> Tuple[List[GravityMove], List[Position]]:
    moves = compute_gravity_moves(world)
    if moves:
        apply_gravity_moves(world, moves)
    new_tiles = refill_inactive_tiles(world, rng)
    return moves, new_tiles
