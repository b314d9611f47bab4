from dataclasses import dataclass
from enum import Enum


class TileKind(Enum):
    NORMAL = "normal"
    STRIPED_H = "striped_h"
    STRIPED_V = "striped_v"
    WRAPPED = "wrapped"
    RAINBOW = "rainbow"


@dataclass(slots=True)
class Tile:
    """Per-cell tile data.

    color is a palette name. A RAINBOW tile still carries a color but it is
    cosmetic: for matching it is compatible with everything.
    """
    color: str
    kind: TileKind = TileKind.NORMAL

    @property
    def is_rainbow(self) -> bool:
        return self.kind is TileKind.RAINBOW

    def copy(self) -> "Tile":
        return Tile(color=self.color, kind=self.kind)
