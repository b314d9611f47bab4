from match3.components.tile import Tile, TileKind
from match3.systems.board_ops import get_cell
from match3.systems.match import MatchGroup, find_all_matches
from match3.systems.specials import classify_group, promote_specials
from tests.helpers import make_board_env


def _kinds(world, rows, cols):
    return {
        (r, c): get_cell(world, r, c).kind
        for r in range(rows)
        for c in range(cols)
        if get_cell(world, r, c).kind is not TileKind.NORMAL
    }


def test_straight_five_promotes_single_rainbow_at_median():
    _, world, _ = make_board_env([
        "BGBGB",
        "GBGBG",
        "RRRRR",
        "BGBGB",
        "GBGBG",
    ])
    groups = find_all_matches(world)
    assert len(groups) == 1
    promoted = promote_specials(world, groups)
    assert promoted == {(2, 2): TileKind.RAINBOW}
    assert _kinds(world, 5, 5) == {(2, 2): TileKind.RAINBOW}
    assert get_cell(world, 2, 2).color in ('red', 'blue', 'green', 'purple', 'yellow', 'orange')


def test_straight_four_horizontal_promotes_striped_h_at_index_one():
    _, world, _ = make_board_env([
        "RRRRG",
        "GBGBY",
        "BGBGB",
        "GBGBG",
        "BGBGB",
    ])
    promoted = promote_specials(world, find_all_matches(world))
    assert promoted == {(0, 1): TileKind.STRIPED_H}
    assert get_cell(world, 0, 1) == Tile(color='red', kind=TileKind.STRIPED_H)
    assert _kinds(world, 5, 5) == {(0, 1): TileKind.STRIPED_H}


def test_straight_four_vertical_promotes_striped_v():
    _, world, _ = make_board_env([
        "BRBGB",
        "GRGBG",
        "BRBGB",
        "GRGBG",
        "BGBGB",
    ])
    promoted = promote_specials(world, find_all_matches(world))
    assert promoted == {(1, 1): TileKind.STRIPED_V}
    assert get_cell(world, 1, 1) == Tile(color='red', kind=TileKind.STRIPED_V)


def test_three_in_a_row_is_not_promoted():
    group = MatchGroup(cells=frozenset({(0, 0), (0, 1), (0, 2)}), runs=(frozenset({(0, 0), (0, 1), (0, 2)}),))
    assert classify_group(group) is None


def test_line_of_five_beats_overlap():
    row = frozenset({(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)})
    # A second run over the same line still counts every cell twice.
    group = MatchGroup(cells=row, runs=(row, frozenset({(0, 1), (0, 2), (0, 3)})))
    assert classify_group(group) == ((0, 2), TileKind.RAINBOW)


def test_synthetic_non_line_group_is_not_promoted():
    block = MatchGroup.synthetic((r, c) for r in range(3) for c in range(3))
    assert classify_group(block) is None
