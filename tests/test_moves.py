from match3.systems.board_ops import cell_map
from match3.systems.moves import (
    Move,
    find_first_legal_move,
    find_legal_moves,
    has_any_legal_move,
    swap_is_legal,
)
from tests.helpers import DEADLOCK_8X8, SINGLE_MOVE_8X8, make_board_env, set_rainbow


def test_deadlocked_board_has_no_legal_move():
    _, world, _ = make_board_env(DEADLOCK_8X8)
    assert not has_any_legal_move(world)
    assert find_first_legal_move(world) is None
    assert find_legal_moves(world) == []


def test_first_legal_move_follows_row_major_scan():
    _, world, _ = make_board_env(SINGLE_MOVE_8X8)
    assert has_any_legal_move(world)
    assert find_first_legal_move(world) == Move(6, 2, 7, 2)
    assert find_legal_moves(world) == [Move(6, 2, 7, 2), Move(7, 2, 6, 2)]


def test_oracle_does_not_mutate_board():
    _, world, _ = make_board_env(SINGLE_MOVE_8X8)
    before = cell_map(world)
    find_legal_moves(world)
    assert cell_map(world) == before


def test_any_swap_with_rainbow_is_legal():
    _, world, _ = make_board_env(DEADLOCK_8X8)
    set_rainbow(world, 0, 0)
    move = find_first_legal_move(world)
    assert move == Move(0, 0, 0, 1), "East neighbour is scanned first"
    assert move.src == (0, 0) and move.dst == (0, 1)


def test_swap_is_legal_restores_cells():
    _, world, _ = make_board_env(SINGLE_MOVE_8X8)
    cells = cell_map(world)
    snapshot = dict(cells)
    assert swap_is_legal(cells, 8, 8, (6, 2), (7, 2))
    assert not swap_is_legal(cells, 8, 8, (0, 0), (0, 1))
    assert cells == snapshot
