"""Live tunable store.

Reads and writes go straight to the shared tables without taking the
state lock; the next tick picks them up. Values are checked for type
and range only.
"""

import logging
from typing import Any, Dict, List

from autoplug.engine.state import ControlLoopState, Mode
from autoplug.utils.validation import (
    ValidationError,
    validate_load,
    validate_min_online,
    validate_positive,
    validate_table,
)

logger = logging.getLogger(__name__)

# name -> entries must be strictly positive
TABLES = {
    "enable_load": False,
    "disable_load": False,
    "sample_interval_ms": True,
    "online_hysteresis": True,
    "offline_hysteresis": True,
}

SCALARS = ("enable_all_load", "min_online")


class TunableStore:
    """Operator-facing view of the live thresholds."""

    def __init__(self, state: ControlLoopState):
        self.state = state

    def names(self) -> List[str]:
        return list(SCALARS) + list(TABLES)

    def get(self, name: str) -> Any:
        if name == "min_online":
            return self.state.base_min_online
        if name == "enable_all_load":
            return self.state.tables.enable_all_load
        if name in TABLES:
            return list(getattr(self.state.tables, name))
        raise KeyError(name)

    def set(self, name: str, value: Any):
        """Replace a scalar or a whole table.

        Raises:
            KeyError: unknown tunable
            ValidationError: wrong type or out of range
        """
        if name == "enable_all_load":
            self.state.tables.enable_all_load = validate_load(value)
        elif name == "min_online":
            self._set_min_online(value)
        elif name in TABLES:
            table = validate_table(value, self.state.capacity, positive=TABLES[name])
            setattr(self.state.tables, name, table)
        else:
            raise KeyError(name)
        logger.info(f"Tunable {name} set to {value}")

    def set_entry(self, name: str, online_count: int, value: int):
        """Change one entry of a per-count table."""
        if name not in TABLES:
            raise KeyError(name)
        table = getattr(self.state.tables, name)
        if not 1 <= online_count < len(table):
            raise ValidationError(f"{name} has no entry for {online_count} online units")
        if TABLES[name]:
            value = validate_positive(value, f"{name}[{online_count}]")
        else:
            value = validate_load(value)
        table[online_count] = value
        logger.info(f"Tunable {name}[{online_count}] set to {value}")

    def snapshot(self) -> Dict[str, Any]:
        return {name: self.get(name) for name in self.names()}

    def _set_min_online(self, value: Any):
        value = validate_min_online(value, self.state.capacity)
        self.state.base_min_online = value
        # The suspend floor stays in force until resume
        if self.state.mode is Mode.NORMAL:
            self.state.min_online = value
