import pytest

from match3.components.game_state import LevelStatus
from match3.components.tile import TileKind
from match3.constants import BOOSTER_AREA_BLAST, BOOSTER_COLOR_CLEAR, BOOSTER_FREE_SWAP, BOOSTER_TIME_BONUS
from match3.events.bus import (
    EVENT_BOOSTER_USED,
    EVENT_CASCADE_STEP,
    EVENT_FREE_SWAP_USED,
    EVENT_LEVEL_LOST,
    EVENT_LEVEL_STARTED,
    EVENT_LEVEL_WON,
    EVENT_MATCH_FOUND,
    EVENT_REQUEST_REJECTED,
    EVENT_SWAP_REVERTED,
    EVENT_TICK,
)
from match3.outcomes import NO_MOVE_AVAILABLE, Rejected, RejectReason, ResolutionResult
from match3.systems.board_ops import board_snapshot, get_cell
from match3.systems.moves import Move
from tests.helpers import DEADLOCK_8X8, ROW_ZERO_FOUR_8X8, paint, set_rainbow, make_level_env


def test_non_matching_swap_is_reverted_and_costs_nothing(level_env):
    bus, world, level, _ = level_env
    reverted = []
    bus.subscribe(EVENT_SWAP_REVERTED, lambda s, **k: reverted.append((k['src'], k['dst'])))
    before = board_snapshot(world)

    result = level.request_swap(0, 0, 0, 1)

    assert isinstance(result, ResolutionResult)
    assert result.reverted
    assert result.chain_depth == 0
    assert result.total_score_delta == 0
    assert result.board_snapshot == before
    assert level.progress.moves_left == 20
    assert reverted == [((0, 0), (0, 1))]


def test_armed_free_swap_keeps_non_matching_swap(level_env):
    bus, world, level, _ = level_env
    used = []
    bus.subscribe(EVENT_FREE_SWAP_USED, lambda s, **k: used.append(k['src']))

    assert level.arm_free_swap() is True
    result = level.request_swap(0, 0, 0, 1)

    assert result.free_swap_used
    assert not result.reverted
    assert get_cell(world, 0, 0).color == 'blue'
    assert get_cell(world, 0, 1).color == 'red'
    assert level.inventory.available(BOOSTER_FREE_SWAP) == 4
    assert not level.inventory.free_swap_armed
    assert level.progress.moves_left == 20
    assert used == [(0, 0)]


def test_armed_free_swap_is_not_spent_on_a_matching_swap(level_env):
    _, _, level, _ = level_env
    level.arm_free_swap()
    result = level.request_swap(6, 2, 7, 2)
    assert result.chain_depth >= 1
    assert not result.free_swap_used
    assert level.inventory.available(BOOSTER_FREE_SWAP) == 5
    assert level.inventory.free_swap_armed


def test_arm_free_swap_without_charges_is_rejected():
    _, _, level, _ = make_level_env(boosters={BOOSTER_FREE_SWAP: 0})
    result = level.arm_free_swap()
    assert isinstance(result, Rejected)
    assert result.reason is RejectReason.NO_CHARGES_LEFT


def test_successful_swap_spends_a_move_and_scores():
    _, world, level, rng = make_level_env(ROW_ZERO_FOUR_8X8)
    rng.script(['blue', 'green', 'orange'])
    result = level.request_swap(0, 3, 1, 3)
    assert result.swapped == ((0, 3), (1, 3))
    assert level.progress.moves_left == 19
    assert level.progress.score == 330
    assert result.status is LevelStatus.PLAYING


@pytest.mark.parametrize("coords, reason", [
    ((0, 0, 0, 2), RejectReason.NOT_ADJACENT),
    ((0, 0, 1, 1), RejectReason.NOT_ADJACENT),
    ((0, 7, 0, 8), RejectReason.OUT_OF_BOUNDS),
    ((-1, 0, 0, 0), RejectReason.OUT_OF_BOUNDS),
])
def test_invalid_swaps_are_rejected_without_touching_the_board(level_env, coords, reason):
    bus, world, level, _ = level_env
    rejected = []
    bus.subscribe(EVENT_REQUEST_REJECTED, lambda s, **k: rejected.append(k['reason']))
    before = board_snapshot(world)

    result = level.request_swap(*coords)

    assert isinstance(result, Rejected)
    assert not result
    assert result.reason is reason
    assert rejected == [reason]
    assert board_snapshot(world) == before


def test_rainbow_swap_clears_every_tile_of_the_partner_color(level_env):
    bus, world, level, _ = level_env
    reasons = []
    bus.subscribe(EVENT_MATCH_FOUND, lambda s, **k: reasons.append(k['reason']))
    set_rainbow(world, 0, 0)

    result = level.request_swap(0, 0, 0, 1)

    assert reasons[0] == "rainbow_swap"
    first = result.steps[0]
    assert first.cleared_count == 11
    assert (0, 1) not in first.cleared
    assert first.score_delta == 11 * 110
    assert level.progress.moves_left == 19


def test_area_blast_clears_clipped_square_and_awards_bonus(level_env):
    bus, _, level, _ = level_env
    used = []
    bus.subscribe(EVENT_BOOSTER_USED, lambda s, **k: used.append((k['name'], k['remaining'])))

    result = level.request_area_blast(0, 0)

    assert result.steps[0].cleared == [(0, 0), (0, 1), (1, 0), (1, 1)]
    assert result.bonus_score == 4 * 60
    assert level.progress.score == result.total_score_delta + result.bonus_score
    assert level.progress.moves_left == 20
    assert used == [(BOOSTER_AREA_BLAST, 2)]


def test_area_blast_rejections_keep_charges():
    _, _, level, _ = make_level_env(boosters={BOOSTER_AREA_BLAST: 0})
    assert level.request_area_blast(0, 0).reason is RejectReason.NO_CHARGES_LEFT

    _, _, level, _ = make_level_env()
    assert level.request_area_blast(8, 0).reason is RejectReason.OUT_OF_BOUNDS
    assert level.inventory.available(BOOSTER_AREA_BLAST) == 3


def test_color_clear_removes_every_tile_of_that_color(level_env):
    _, _, level, _ = level_env
    result = level.request_color_clear('red')
    assert result.steps[0].cleared_count == 11
    assert result.bonus_score == 11 * 50
    assert level.inventory.available(BOOSTER_COLOR_CLEAR) == 1


def test_rainbow_sharing_its_partners_color_is_not_cleared(level_env):
    _, world, level, _ = level_env
    set_rainbow(world, 0, 0, color='blue')

    result = level.request_swap(0, 0, 0, 1)

    first = result.steps[0]
    assert (0, 1) not in first.cleared
    assert first.cleared_count == 11
    assert first.score_delta == 11 * 110


def test_color_clear_leaves_rainbows_alone(level_env):
    _, world, level, _ = level_env
    set_rainbow(world, 0, 0, color='red')

    result = level.request_color_clear('red')

    assert (0, 0) not in result.steps[0].cleared
    assert result.steps[0].cleared_count == 10
    assert result.bonus_score == 10 * 50


def test_color_clear_unknown_color_is_rejected(level_env):
    _, _, level, _ = level_env
    result = level.request_color_clear('black')
    assert result.reason is RejectReason.UNKNOWN_COLOR
    assert level.inventory.available(BOOSTER_COLOR_CLEAR) == 2


def test_requests_during_resolve_are_rejected_as_busy(level_env):
    bus, _, level, _ = level_env
    attempts = []

    def _interfere(sender, **kwargs):
        attempts.append(level.request_swap(6, 2, 7, 2))
        attempts.append(level.request_hint())

    bus.subscribe(EVENT_CASCADE_STEP, _interfere)
    result = level.request_area_blast(0, 0)

    assert isinstance(result, ResolutionResult)
    assert attempts[0].reason is RejectReason.BUSY
    # Hints are read-only and stay available mid-resolve.
    assert not isinstance(attempts[1], Rejected)
    assert not level.busy


def test_hint_returns_first_move_or_sentinel(level_env):
    _, world, level, _ = level_env
    assert level.request_hint() == Move(6, 2, 7, 2)

    paint(world, DEADLOCK_8X8)
    assert level.request_hint() is NO_MOVE_AVAILABLE
    assert not level.request_hint()


def test_manual_reshuffle_restores_a_move(level_env):
    _, world, level, _ = level_env
    paint(world, DEADLOCK_8X8)
    snapshot = level.request_reshuffle()
    assert snapshot == board_snapshot(world)
    assert level.request_hint() is not NO_MOVE_AVAILABLE
    assert all(tile.kind is TileKind.NORMAL for row in snapshot for tile in row)


def test_time_bonus_and_countdown(level_env):
    bus, _, level, _ = level_env
    assert level.request_time_bonus() == 150.0
    assert level.inventory.available(BOOSTER_TIME_BONUS) == 1
    bus.emit(EVENT_TICK, dt=10)
    assert level.progress.time_left == 140.0


def test_timer_expiry_loses_the_level(level_env):
    bus, _, level, _ = level_env
    lost = []
    bus.subscribe(EVENT_LEVEL_LOST, lambda s, **k: lost.append(k['reason']))

    level.tick(500)

    assert level.status is LevelStatus.LOST
    assert level.progress.time_left == 0.0
    assert lost == ["time"]
    assert level.request_swap(6, 2, 7, 2).reason is RejectReason.LEVEL_OVER
    assert level.request_time_bonus().reason is RejectReason.LEVEL_OVER


def test_timer_expiring_mid_cascade_is_applied_at_settle():
    bus, _, level, rng = make_level_env(ROW_ZERO_FOUR_8X8)
    lost, seen_mid_cascade = [], []
    bus.subscribe(EVENT_LEVEL_LOST, lambda s, **k: lost.append(k['reason']))

    def _expire(sender, **kwargs):
        bus.emit(EVENT_TICK, dt=1000)
        seen_mid_cascade.append((level.status, level.progress.time_expired))

    bus.subscribe(EVENT_CASCADE_STEP, _expire)
    rng.script(['blue', 'green', 'orange'])

    result = level.request_swap(0, 3, 1, 3)

    assert seen_mid_cascade == [(LevelStatus.PLAYING, True)]
    assert result.cleared_cell_count == 3
    assert result.total_score_delta == 330
    assert result.status is LevelStatus.LOST
    assert lost == ["time"]


def test_running_out_of_moves_loses():
    bus, _, level, rng = make_level_env(ROW_ZERO_FOUR_8X8, move_budget=1)
    lost = []
    bus.subscribe(EVENT_LEVEL_LOST, lambda s, **k: lost.append(k['reason']))
    rng.script(['blue', 'green', 'orange'])

    result = level.request_swap(0, 3, 1, 3)

    assert result.status is LevelStatus.LOST
    assert result.moves_left == 0
    assert lost == ["moves"]


def test_reaching_score_and_goal_wins_then_advance_keeps_charges():
    bus, _, level, rng = make_level_env(ROW_ZERO_FOUR_8X8, target_score=300, goal_color='red', goal_count=3)
    won, started = [], []
    bus.subscribe(EVENT_LEVEL_WON, lambda s, **k: won.append(k['score']))
    bus.subscribe(EVENT_LEVEL_STARTED, lambda s, **k: started.append(k['level']))
    level.request_time_bonus()
    rng.script(['blue', 'green', 'orange'])

    result = level.request_swap(0, 3, 1, 3)

    assert result.status is LevelStatus.WON
    assert result.goal_state.remaining == 0
    assert won == [330]
    assert level.request_swap(6, 2, 7, 2).reason is RejectReason.LEVEL_OVER

    level.advance_level()

    assert level.status is LevelStatus.PLAYING
    assert level.progress.level == 2
    assert level.goal.remaining == 18 + 3
    assert level.progress.score == 0
    assert level.inventory.available(BOOSTER_TIME_BONUS) == 1
    assert started == [2]


def test_restart_level_resets_progress(level_env):
    _, _, level, _ = level_env
    level.request_area_blast(0, 0)
    level.restart_level()
    assert level.progress.score == 0
    assert level.progress.moves_left == 20
    assert level.inventory.available(BOOSTER_AREA_BLAST) == 3
    assert level.status is LevelStatus.PLAYING
