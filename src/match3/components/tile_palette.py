from dataclasses import dataclass, field
from typing import Iterable, List


@dataclass(slots=True)
class TilePalette:
    """Colors the board may spawn, stored on a single registry entity."""
    colors: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        filtered: List[str] = []
        for name in self.colors:
            if name and name not in seen:
                filtered.append(name)
                seen.add(name)
        self.colors = filtered

    def __contains__(self, color: object) -> bool:
        return color in self.colors

    def set_colors(self, colors: Iterable[str]) -> None:
        self.colors = list(colors)
        self.__post_init__()
