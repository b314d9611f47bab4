from dataclasses import dataclass


@dataclass(slots=True)
class LevelProgress:
    """Score, move budget and countdown for the level being played."""
    level: int = 1
    score: int = 0
    target_score: int = 0
    moves_left: int = 0
    time_left: float = 0.0
    time_expired: bool = False

    @property
    def score_reached(self) -> bool:
        return self.score >= self.target_score
