"""Unit pool bookkeeping, selection and mutation."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from autoplug.core.errors import ActivationError, DeactivationError, MetricUnavailable
from autoplug.core.interfaces import ILoadSource, IUnitDriver

logger = logging.getLogger(__name__)


class UnitState(Enum):
    """Unit state."""
    ONLINE = "online"
    OFFLINE = "offline"


class SelectionPolicy(Enum):
    """How the unit to take offline is picked."""
    FIXED = "fixed"  # highest online ordinal
    IDLEST = "idlest"  # lowest measured utilization


@dataclass
class ToggleFailure:
    """A driver call that was refused."""
    unit: int
    target_online: bool
    error: str


class UnitPool:
    """Tracks which units are online and toggles them through the driver.

    Unit 0 is never toggled. A unit's state only changes after the driver
    call succeeds, and ``online_count`` is updated together with it.
    """

    def __init__(
        self,
        driver: IUnitDriver,
        capacity: Optional[int] = None,
        selection: SelectionPolicy = SelectionPolicy.FIXED,
        metrics: Optional[ILoadSource] = None
    ):
        self.driver = driver
        self.capacity = capacity or driver.capacity()
        self.selection = selection
        self.metrics = metrics

        if selection is SelectionPolicy.IDLEST and metrics is None:
            raise ValueError("idlest selection needs a load source for unit utilization")

        online = driver.online_units()
        self._states: Dict[int, UnitState] = {
            unit: UnitState.ONLINE if unit in online or unit == 0 else UnitState.OFFLINE
            for unit in range(self.capacity)
        }
        self._online_count = sum(1 for s in self._states.values() if s is UnitState.ONLINE)
        self._failures: List[ToggleFailure] = []

        logger.info(
            f"Unit pool initialized (capacity={self.capacity}, online={self._online_count}, "
            f"selection={selection.value})"
        )

    @property
    def online_count(self) -> int:
        return self._online_count

    def state(self, unit: int) -> UnitState:
        return self._states[unit]

    def is_online(self, unit: int) -> bool:
        return self._states[unit] is UnitState.ONLINE

    def online_units(self) -> List[int]:
        return [u for u in range(self.capacity) if self._states[u] is UnitState.ONLINE]

    def offline_units(self) -> List[int]:
        return [u for u in range(self.capacity) if self._states[u] is UnitState.OFFLINE]

    def _activate(self, unit: int) -> bool:
        try:
            self.driver.unit_online(unit)
        except ActivationError as e:
            logger.warning(f"Unit {unit} up failed: {e}")
            self._failures.append(ToggleFailure(unit, True, str(e)))
            return False
        self._states[unit] = UnitState.ONLINE
        self._online_count += 1
        logger.info(f"Unit {unit} up ({self._online_count}/{self.capacity} online)")
        return True

    def _deactivate(self, unit: int) -> bool:
        try:
            self.driver.unit_offline(unit)
        except DeactivationError as e:
            logger.warning(f"Unit {unit} down failed: {e}")
            self._failures.append(ToggleFailure(unit, False, str(e)))
            return False
        self._states[unit] = UnitState.OFFLINE
        self._online_count -= 1
        logger.info(f"Unit {unit} down ({self._online_count}/{self.capacity} online)")
        return True

    def bring_one_online(self) -> Optional[int]:
        """Activate the lowest-ordinal offline unit.

        Returns:
            The unit brought online, or None if none was (pool full or
            the driver refused)
        """
        for unit in self.offline_units():
            if unit == 0:
                continue
            return unit if self._activate(unit) else None
        return None

    def bring_all_online(self) -> List[int]:
        """Activate every offline unit in ordinal order, skipping failures."""
        return [unit for unit in self.offline_units() if unit != 0 and self._activate(unit)]

    def take_one_offline(self, min_online: int = 1) -> Optional[int]:
        """Deactivate one unit according to the selection policy.

        Returns:
            The unit taken offline, or None if the floor was reached or
            the driver refused
        """
        if self._online_count <= min_online:
            return None

        unit = self._select_victim()
        if unit is None:
            return None
        return unit if self._deactivate(unit) else None

    def take_all_offline(self, keep: int = 1) -> List[int]:
        """Deactivate online units, highest first, until ``keep`` remain.

        Unit 0 is never a candidate. Refused units are skipped.
        """
        offlined = []
        for unit in reversed(self.online_units()):
            if unit == 0 or self._online_count <= keep:
                break
            if self._deactivate(unit):
                offlined.append(unit)
        return offlined

    def pop_failures(self) -> List[ToggleFailure]:
        """Driver refusals since the last call."""
        failures, self._failures = self._failures, []
        return failures

    def _select_victim(self) -> Optional[int]:
        candidates = [u for u in self.online_units() if u != 0]
        if not candidates:
            return None

        if self.selection is SelectionPolicy.IDLEST:
            idlest = self._idlest(candidates)
            if idlest is not None:
                return idlest
            logger.debug("No unit utilization readable, falling back to highest ordinal")

        return candidates[-1]

    def _idlest(self, candidates: List[int]) -> Optional[int]:
        idlest, min_load = None, None
        for unit in candidates:
            try:
                load = self.metrics.unit_utilization(unit)
            except MetricUnavailable:
                continue
            if min_load is None or load < min_load:
                idlest, min_load = unit, load
        return idlest
