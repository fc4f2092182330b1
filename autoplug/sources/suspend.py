"""Suspend/resume notification sources."""

import asyncio
import logging
import signal
from typing import Callable

from autoplug.core.interfaces import ISuspendSource

logger = logging.getLogger(__name__)


class SignalSuspendSource(ISuspendSource):
    """Maps POSIX signals to suspend/resume (SIGUSR1/SIGUSR2 by default).

    Lets a screen-off hook or a power manager script notify the daemon
    with ``kill -USR1 <pid>``.
    """

    def __init__(self, suspend_signal: int = signal.SIGUSR1, resume_signal: int = signal.SIGUSR2):
        self.suspend_signal = suspend_signal
        self.resume_signal = resume_signal

    def subscribe(self, callback: Callable[[bool], None]) -> None:
        """Install the signal handlers on the running loop."""
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(self.suspend_signal, callback, True)
        loop.add_signal_handler(self.resume_signal, callback, False)
        logger.info(
            f"Suspend on {signal.Signals(self.suspend_signal).name}, "
            f"resume on {signal.Signals(self.resume_signal).name}"
        )
