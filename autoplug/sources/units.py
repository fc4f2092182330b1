"""Unit drivers: Linux CPU hotplug through sysfs, and an in-memory pool."""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

import psutil

from autoplug.core.errors import ActivationError, DeactivationError
from autoplug.core.interfaces import IUnitDriver

logger = logging.getLogger(__name__)

SYSFS_CPU_ROOT = "/sys/devices/system/cpu"

_CPU_DIR = re.compile(r"^cpu(\d+)$")


class SysfsUnitDriver(IUnitDriver):
    """Toggles CPUs through /sys/devices/system/cpu/cpuN/online.

    Needs root. CPUs without an ``online`` file (usually cpu0) cannot be
    hotplugged and always count as online.
    """

    def __init__(self, root: str = SYSFS_CPU_ROOT):
        self.root = Path(root)
        self._units = []
        for path in self.root.glob("cpu*"):
            match = _CPU_DIR.match(path.name)
            if match:
                self._units.append(int(match.group(1)))
        self._units.sort()
        if not self._units:
            count = psutil.cpu_count(logical=True) or 1
            logger.warning(f"No CPUs under {self.root}, assuming {count}")
            self._units = list(range(count))
        logger.info(f"sysfs driver: {len(self._units)} CPUs under {self.root}")

    def _online_file(self, unit: int) -> Path:
        return self.root / f"cpu{unit}" / "online"

    def capacity(self) -> int:
        return len(self._units)

    def online_units(self) -> Set[int]:
        online = set()
        for unit in self._units:
            path = self._online_file(unit)
            try:
                if not path.exists() or path.read_text().strip() == "1":
                    online.add(unit)
            except OSError as e:
                logger.warning(f"Cannot read {path}: {e}")
        return online

    def unit_online(self, unit: int) -> None:
        try:
            self._online_file(unit).write_text("1")
        except OSError as e:
            raise ActivationError(unit, str(e)) from e

    def unit_offline(self, unit: int) -> None:
        try:
            self._online_file(unit).write_text("0")
        except OSError as e:
            raise DeactivationError(unit, str(e)) from e


class SimulatedUnitDriver(IUnitDriver):
    """In-memory pool for dry runs and tests.

    Units listed in ``refuse_online`` / ``refuse_offline`` fail their
    toggle, the way a platform refuses to take its last core down.
    """

    def __init__(
        self,
        capacity: int,
        online: Optional[Iterable[int]] = None,
        refuse_online: Optional[Iterable[int]] = None,
        refuse_offline: Optional[Iterable[int]] = None
    ):
        self._capacity = capacity
        self.online: Set[int] = set(online) if online is not None else {0}
        self.online.add(0)
        self.refuse_online: Set[int] = set(refuse_online or ())
        self.refuse_offline: Set[int] = set(refuse_offline or ())
        self.calls: List[Tuple[str, int]] = []

    def capacity(self) -> int:
        return self._capacity

    def online_units(self) -> Set[int]:
        return set(self.online)

    def unit_online(self, unit: int) -> None:
        self.calls.append(("up", unit))
        if unit in self.refuse_online:
            raise ActivationError(unit, "refused by platform")
        self.online.add(unit)

    def unit_offline(self, unit: int) -> None:
        self.calls.append(("down", unit))
        if unit in self.refuse_offline:
            raise DeactivationError(unit, "refused by platform")
        self.online.discard(unit)
