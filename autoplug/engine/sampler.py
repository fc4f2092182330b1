"""Load sampling with optional ring-buffer smoothing."""

import logging
from typing import List, Optional

from autoplug.core.errors import MetricUnavailable
from autoplug.core.interfaces import ILoadSource, LoadReading

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 10


class LoadSampler:
    """Takes one reading per tick.

    With smoothing on, the instantaneous load goes into a pre-zeroed ring
    of ``window`` slots and the mean of all slots is returned, so the
    first ``window`` ticks read low.
    """

    def __init__(self, source: ILoadSource, smoothing: bool = True, window: int = DEFAULT_WINDOW):
        if window < 1:
            raise ValueError("window must be at least 1")
        self.source = source
        self.smoothing = smoothing
        self.window = window
        self._ring: List[int] = [0] * window
        self._index = 0

    def sample(self) -> Optional[LoadReading]:
        """Get this tick's load, or None if the source is unavailable."""
        try:
            reading = self.source.read_load()
        except MetricUnavailable as e:
            logger.debug(f"Load source unavailable: {e}")
            return None

        if not self.smoothing:
            return reading

        self._ring[self._index] = reading.load
        self._index = (self._index + 1) % self.window
        return LoadReading(load=sum(self._ring) // self.window, io_wait=reading.io_wait)

    def history(self) -> List[int]:
        """Ring contents, oldest first."""
        return self._ring[self._index:] + self._ring[:self._index]
