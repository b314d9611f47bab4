from dataclasses import dataclass, field
from typing import Dict


@dataclass(slots=True)
class BoosterInventory:
    """Remaining charges per booster name plus the armed free-swap token.

    free_swap_armed: the player selected the free-swap booster; its charge is
    only spent once a swap actually needs it.
    """
    charges: Dict[str, int] = field(default_factory=dict)
    free_swap_armed: bool = False

    def available(self, name: str) -> int:
        return self.charges.get(name, 0)

    def can_spend(self, name: str, amount: int = 1) -> bool:
        return self.charges.get(name, 0) >= amount

    def spend(self, name: str, amount: int = 1) -> bool:
        if not self.can_spend(name, amount):
            return False
        self.charges[name] -= amount
        return True
