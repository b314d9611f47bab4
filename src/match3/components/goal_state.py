from dataclasses import dataclass


@dataclass(slots=True)
class GoalState:
    """Collection goal: clear ``remaining`` more tiles of ``target_color``."""
    target_color: str
    remaining: int = 0

    def record_cleared(self, color: str) -> bool:
        if color != self.target_color or self.remaining <= 0:
            return False
        self.remaining -= 1
        return True

    @property
    def reached(self) -> bool:
        return self.remaining == 0
