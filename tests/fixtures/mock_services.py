"""Mock services for testing."""

from typing import Callable, Dict, Iterable, List, Optional

from autoplug.core.errors import MetricUnavailable
from autoplug.core.interfaces import ILoadSource, ISuspendSource, LoadReading


class MockLoadSource(ILoadSource):
    """Load source returning a fixed or scripted load.

    A ``None`` entry in the script raises MetricUnavailable for that read.
    Once the script runs out, the last entry repeats.
    """
    
    def __init__(
        self,
        load: Optional[int] = 0,
        io_wait: int = 0,
        script: Optional[Iterable[Optional[int]]] = None,
        utilization: Optional[Dict[int, int]] = None
    ):
        self.load = load
        self.io_wait = io_wait
        self.script: List[Optional[int]] = list(script or [])
        self.utilization: Dict[int, int] = dict(utilization or {})
        self.reads = 0
    
    def read_load(self) -> LoadReading:
        self.reads += 1
        if self.script:
            self.load = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if self.load is None:
            raise MetricUnavailable("scripted outage")
        return LoadReading(load=self.load, io_wait=self.io_wait)
    
    def unit_utilization(self, unit: int) -> int:
        if unit not in self.utilization:
            raise MetricUnavailable(f"no utilization for unit {unit}")
        return self.utilization[unit]


class MockSuspendSource(ISuspendSource):
    """Suspend source fired by hand from tests."""
    
    def __init__(self):
        self.callbacks: List[Callable[[bool], None]] = []
    
    def subscribe(self, callback: Callable[[bool], None]) -> None:
        self.callbacks.append(callback)
    
    def fire(self, suspended: bool):
        for callback in self.callbacks:
            callback(suspended)
