"""Game state resource describing whether the level is still being played."""
from dataclasses import dataclass
from enum import Enum, auto


class LevelStatus(Enum):
    PLAYING = auto()
    WON = auto()
    LOST = auto()


@dataclass
class GameState:
    """Singleton component storing the status of the current level."""
    status: LevelStatus = LevelStatus.PLAYING
