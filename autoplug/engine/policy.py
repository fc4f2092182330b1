"""Threshold policy: maps a load sample to a scaling decision."""

from enum import Enum

from autoplug.engine.tables import ThresholdTables, lookup


class Decision(Enum):
    """Scaling decision, in priority order."""
    SCALE_ALL_UP = "scale_all_up"
    SCALE_UP_ONE = "scale_up_one"
    SCALE_DOWN_ONE = "scale_down_one"
    HOLD = "hold"

    @property
    def is_scale_up(self) -> bool:
        return self in (Decision.SCALE_ALL_UP, Decision.SCALE_UP_ONE)


def evaluate(
    load: int,
    online_count: int,
    min_online: int,
    capacity: int,
    multiplier: int,
    tables: ThresholdTables
) -> Decision:
    """Decide what the pool should do for this sample.

    A threshold of 0 disables its rule at that occupancy. Only the
    scale-up threshold is inflated by ``multiplier``; the scale-down
    threshold is used as-is.
    """
    spare = online_count < capacity

    enable_all = tables.enable_all_load
    if spare and enable_all and load >= enable_all:
        return Decision.SCALE_ALL_UP

    enable = lookup(tables.enable_load, online_count)
    if spare and enable and load >= enable * multiplier:
        return Decision.SCALE_UP_ONE

    disable = lookup(tables.disable_load, online_count)
    if online_count > min_online and disable and load <= disable:
        return Decision.SCALE_DOWN_ONE

    return Decision.HOLD
