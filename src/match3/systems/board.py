import random
from typing import Iterable, List, Optional

from esper import World

from match3.components.active_switch import ActiveSwitch
from match3.components.board import Board
from match3.components.board_position import BoardPosition
from match3.components.tile import Tile
from match3.constants import GRID_COLS, GRID_ROWS, RESPAWN_MAX_ATTEMPTS
from match3.events.bus import EventBus
from match3.systems.board_ops import apply_layout, get_entity_at, get_palette, world_rng
from match3.systems.match import find_all_matches
from match3.systems.moves import has_any_legal_move
from match3.systems.reshuffle import reshuffle


class BoardSystem:
    """Owns the board entity and its tile entities.

    A board is created per level: ``resize`` throws the old tile entities away
    and ``populate`` fills the new ones with a match-free layout that has at
    least one legal move.
    """

    def __init__(self, world: World, event_bus: EventBus, rows: int = GRID_ROWS, cols: int = GRID_COLS, *, populate: bool = True):
        self.world = world
        self.event_bus = event_bus
        self.board_entity = self.world.create_entity()
        self.world.add_component(self.board_entity, Board(rows=rows, cols=cols))
        self._tile_entities: List[int] = []
        self._create_tiles()
        if populate:
            self.populate()

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    def resize(self, rows: int, cols: int) -> None:
        for entity in self._tile_entities:
            self.world.delete_entity(entity, immediate=True)
        self._tile_entities = []
        board = self.board
        board.rows = rows
        board.cols = cols
        self._create_tiles()

    def _create_tiles(self) -> None:
        board = self.board
        colors = get_palette(self.world).colors
        for r in range(board.rows):
            for c in range(board.cols):
                ent = self.world.create_entity(
                    BoardPosition(row=r, col=c),
                    Tile(color=colors[(r + c) % len(colors)]),
                    ActiveSwitch(active=True),
                )
                self._tile_entities.append(ent)

    def populate(self, rng: Optional[random.Random] = None, *, max_attempts: int = RESPAWN_MAX_ATTEMPTS) -> None:
        """Fill the board with fresh NORMAL tiles: no matches and at least one legal move."""
        rng = rng or world_rng(self.world)
        choices = list(get_palette(self.world).colors)
        board = self.board
        for _ in range(max_attempts):
            layout = self._generate_layout(board.rows, board.cols, choices, rng)
            if layout is None:
                continue
            apply_layout(self.world, layout)
            if find_all_matches(self.world):
                continue
            if not has_any_legal_move(self.world):
                reshuffle(self.world, rng)
            return
        raise RuntimeError("Unable to populate board without matches")

    @staticmethod
    def _generate_layout(rows: int, cols: int, choices: List[str], rng: random.Random) -> Optional[List[List[str]]]:
        layout: List[List[str]] = []
        for row in range(rows):
            row_values: List[str] = []
            for col in range(cols):
                available = list(choices)
                # Prevent horizontal triple: if last two cells share a color, exclude it.
                if col >= 2:
                    left1 = row_values[col - 1]
                    left2 = row_values[col - 2]
                    if left1 == left2 and left1 in available:
                        available = [t for t in available if t != left1]
                # Prevent vertical triple the same way.
                if row >= 2:
                    up1 = layout[row - 1][col]
                    up2 = layout[row - 2][col]
                    if up1 == up2 and up1 in available:
                        available = [t for t in available if t != up1]
                if not available:
                    return None
                row_values.append(rng.choice(available))
            layout.append(row_values)
        return layout

    def load_layout(self, layout: Iterable[Iterable[str]]) -> None:
        """Paint an explicit color layout (debug tools and tests)."""
        apply_layout(self.world, layout)

    def entity_at(self, row: int, col: int) -> Optional[int]:
        return get_entity_at(self.world, row, col)
