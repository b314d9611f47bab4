from dataclasses import dataclass

@dataclass(slots=True)
class ActiveSwitch:
    """Per-tile occupancy flag.

    active: True if the cell currently holds a tile; False while it is a hole
    waiting for gravity/refill. Holes only exist in the middle of a resolve.
    """
    active: bool = True
