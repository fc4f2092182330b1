"""Sampling interval controller."""

from autoplug.engine.policy import Decision
from autoplug.engine.tables import ThresholdTables, lookup

DEFAULT_FLOOR_MS = 20


class IntervalController:
    """Computes the delay before the next tick.

    The table interval for the current occupancy is scaled by the
    multiplier. With ``scale_up_interval_ms`` set, a tick that added units
    re-checks sooner (``scale_up_interval_ms`` per online unit) while the
    load is still climbing. Never returns less than ``floor_ms``.
    """

    def __init__(self, floor_ms: int = DEFAULT_FLOOR_MS, scale_up_interval_ms: int = 0):
        if floor_ms <= 0:
            raise ValueError("floor_ms must be positive")
        self.floor_ms = floor_ms
        self.scale_up_interval_ms = scale_up_interval_ms

    def next_interval(
        self,
        tables: ThresholdTables,
        online_count: int,
        multiplier: int,
        action: Decision = Decision.HOLD
    ) -> int:
        interval = lookup(tables.sample_interval_ms, online_count) * multiplier

        if self.scale_up_interval_ms and action.is_scale_up:
            boosted = self.scale_up_interval_ms * online_count
            interval = min(interval, boosted) if interval > 0 else boosted

        return max(interval, self.floor_ms)
