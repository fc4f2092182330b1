"""psutil-backed load source."""

import logging
from typing import Callable, List, Optional, Set

import psutil

from autoplug.core.errors import MetricUnavailable
from autoplug.core.interfaces import ILoadSource, LoadReading

logger = logging.getLogger(__name__)

LOADAVG = "loadavg"
UTILIZATION = "utilization"


class PsutilLoadSource(ILoadSource):
    """Reads system load through psutil.

    Modes:
        loadavg: 1-minute run-queue average x100, already smoothed
            upstream (pair it with sampler smoothing off)
        utilization: sum of per-CPU busy percentages since the previous
            read, i.e. instantaneous busy units x100

    I/O wait is the integer iowait percentage where the platform reports it.
    """

    def __init__(self, mode: str = LOADAVG, online_units: Optional[Callable[[], Set[int]]] = None):
        if mode not in (LOADAVG, UTILIZATION):
            raise ValueError(f"Unknown load source mode '{mode}'")
        self.mode = mode
        self.online_units = online_units
        self._per_cpu: List[float] = []
        
        # Prime the counters so the first reading covers a real interval
        psutil.cpu_percent(percpu=True)
        psutil.cpu_times_percent(interval=None)
        logger.info(f"psutil load source ready (mode={mode})")

    def read_load(self) -> LoadReading:
        try:
            self._per_cpu = psutil.cpu_percent(percpu=True)
            times = psutil.cpu_times_percent(interval=None)
            if self.mode == LOADAVG:
                load = int(psutil.getloadavg()[0] * 100)
            else:
                load = int(sum(self._per_cpu))
        except (OSError, psutil.Error) as e:
            raise MetricUnavailable(f"psutil read failed: {e}") from e
        
        io_wait = int(getattr(times, "iowait", 0.0))
        return LoadReading(load=load, io_wait=io_wait)

    def unit_utilization(self, unit: int) -> int:
        """Busy percentage of one CPU as of the last read_load()."""
        if not self._per_cpu:
            raise MetricUnavailable("no per-unit sample yet")
        
        # /proc/stat only lists online CPUs, in ascending order
        if self.online_units is not None:
            online = sorted(self.online_units())
            if len(online) != len(self._per_cpu) or unit not in online:
                raise MetricUnavailable(f"no utilization for unit {unit}")
            return int(self._per_cpu[online.index(unit)])
        
        if unit >= len(self._per_cpu):
            raise MetricUnavailable(f"no utilization for unit {unit}")
        return int(self._per_cpu[unit])
