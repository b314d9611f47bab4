GRID_ROWS = 8
GRID_COLS = 8

# Default tile palette; order is the spawn order used by tests and the text renderer.
COLORS = ('red', 'blue', 'green', 'purple', 'yellow', 'orange')

# Smallest board/palette for which the reshuffle loop can find a settled layout.
MIN_BOARD_DIMENSION = 3
MIN_DISTINCT_COLORS = 2


# ============================================================================
# SCORING
# ============================================================================
POINTS_PER_CLEARED_TILE = 110    # multiplied by chain depth
AREA_BLAST_BONUS_PER_TILE = 60
COLOR_CLEAR_BONUS_PER_TILE = 50
AREA_BLAST_RADIUS = 1            # 3x3 neighbourhood


# ============================================================================
# LEVEL DEFAULTS
# ============================================================================
TARGET_SCORE = 5000
MOVE_BUDGET = 20
TIME_BUDGET_SECONDS = 120
TIME_BONUS_SECONDS = 30
TOTAL_LEVELS = 15
GOAL_BASE_COUNT = 18
GOAL_COUNT_STEP = 3              # added every second level


# ============================================================================
# BOOSTERS
# ============================================================================
BOOSTER_AREA_BLAST = "area_blast"
BOOSTER_COLOR_CLEAR = "color_clear"
BOOSTER_FREE_SWAP = "free_swap"
BOOSTER_TIME_BONUS = "time_bonus"

DEFAULT_BOOSTER_CHARGES = {
    BOOSTER_AREA_BLAST: 3,
    BOOSTER_COLOR_CLEAR: 2,
    BOOSTER_FREE_SWAP: 5,
    BOOSTER_TIME_BONUS: 2,
}


# ============================================================================
# BOARD GENERATION
# ============================================================================
RESPAWN_MAX_ATTEMPTS = 200
RESHUFFLE_MAX_ATTEMPTS = 10_000
