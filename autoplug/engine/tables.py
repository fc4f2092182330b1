"""Per-occupancy threshold tables."""

from dataclasses import dataclass
from typing import List

from autoplug.core.config import ThresholdConfig, TableValue

# Per-count defaults for small pools, index 0 unused. Larger pools
# continue the series (enable: 100 per online unit, interval: 50ms per unit).
DEFAULT_ENABLE_LOAD = (0, 200, 235, 300)
DEFAULT_SAMPLE_INTERVAL_MS = (0, 50, 100, 150)


def lookup(table: List[int], online_count: int) -> int:
    """Read a per-count table, clamping past the end to the last entry."""
    if not table:
        return 0
    return table[min(online_count, len(table) - 1)]


def _expand(value: TableValue, capacity: int) -> List[int]:
    if isinstance(value, list):
        return list(value)
    return [0] + [value] * capacity


@dataclass
class ThresholdTables:
    """Live thresholds, indexed by the current online count.

    Tables carry capacity + 1 entries so full occupancy has its own
    interval and disable threshold. Index 0 is never consulted.
    """
    enable_all_load: int
    enable_load: List[int]
    disable_load: List[int]
    sample_interval_ms: List[int]
    online_hysteresis: List[int]
    offline_hysteresis: List[int]

    @classmethod
    def defaults(cls, capacity: int) -> "ThresholdTables":
        return cls.from_config(ThresholdConfig(), capacity)

    @classmethod
    def from_config(cls, config: ThresholdConfig, capacity: int) -> "ThresholdTables":
        enable_load = config.enable_load
        if isinstance(enable_load, list) and not enable_load:
            enable_load = [
                DEFAULT_ENABLE_LOAD[n] if n < len(DEFAULT_ENABLE_LOAD) else 100 * n
                for n in range(capacity + 1)
            ]

        sample_interval = config.sample_interval_ms
        if isinstance(sample_interval, list) and not sample_interval:
            sample_interval = [
                DEFAULT_SAMPLE_INTERVAL_MS[n] if n < len(DEFAULT_SAMPLE_INTERVAL_MS) else 50 * n
                for n in range(capacity + 1)
            ]

        return cls(
            enable_all_load=config.enable_all_load,
            enable_load=_expand(enable_load, capacity),
            disable_load=_expand(config.disable_load, capacity),
            sample_interval_ms=_expand(sample_interval, capacity),
            online_hysteresis=_expand(config.online_hysteresis, capacity),
            offline_hysteresis=_expand(config.offline_hysteresis, capacity),
        )
