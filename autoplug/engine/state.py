"""Shared control loop state."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from autoplug.engine.hysteresis import HysteresisGate
from autoplug.engine.pool import UnitPool
from autoplug.engine.sampler import LoadSampler
from autoplug.engine.tables import ThresholdTables


class Mode(Enum):
    """Suspend/resume mode."""
    NORMAL = "normal"
    SUSPENDED = "suspended"


@dataclass
class ControlLoopState:
    """Everything the tick and the mode controller share.

    Pool membership, streaks, multiplier and min_online are only
    changed while holding ``lock``.
    """
    pool: UnitPool
    tables: ThresholdTables
    sampler: LoadSampler
    gate: HysteresisGate = field(default_factory=HysteresisGate)
    multiplier: int = 1
    min_online: int = 1
    base_min_online: int = 1
    sampling_interval_ms: int = 0
    mode: Mode = Mode.NORMAL
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def capacity(self) -> int:
        return self.pool.capacity
