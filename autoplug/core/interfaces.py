"""Interface definitions for the external collaborators of the engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Set


@dataclass
class LoadReading:
    """One load measurement.

    Load is scaled x100 relative to one fully busy unit, so 250 means
    two and a half units' worth of runnable work.
    """
    load: int
    io_wait: int = 0  # non-zero while the system is I/O bound


class ILoadSource(ABC):
    """Load metric source interface."""

    @abstractmethod
    def read_load(self) -> LoadReading:
        """Read the current load.

        Raises:
            MetricUnavailable: if the metric cannot be read right now
        """
        pass

    @abstractmethod
    def unit_utilization(self, unit: int) -> int:
        """Get the utilization of a single unit (same x100 scale)."""
        pass


class IUnitDriver(ABC):
    """Unit activation interface."""

    @abstractmethod
    def capacity(self) -> int:
        """Get the number of units in the pool."""
        pass

    @abstractmethod
    def online_units(self) -> Set[int]:
        """Get the set of units currently online."""
        pass

    @abstractmethod
    def unit_online(self, unit: int) -> None:
        """Activate a unit.

        Raises:
            ActivationError: if the platform refused
        """
        pass

    @abstractmethod
    def unit_offline(self, unit: int) -> None:
        """Deactivate a unit.

        Raises:
            DeactivationError: if the platform refused
        """
        pass


class ISuspendSource(ABC):
    """Suspend/resume notification interface."""

    @abstractmethod
    def subscribe(self, callback: Callable[[bool], None]) -> None:
        """Register a callback, called with True on suspend and False on resume.

        The callback may be invoked from a signal handler or a foreign
        thread and must not block.
        """
        pass
