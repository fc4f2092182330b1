"""Concrete collaborators for the engine.

This module provides the platform side of the control loop:
- Load metrics from psutil (load average or per-CPU utilization)
- CPU hotplug through Linux sysfs
- An in-memory unit pool for dry runs
- Suspend/resume notifications from POSIX signals

Usage:
    from autoplug.sources import create_sources

    driver, load_source = create_sources(config)
"""

from autoplug.sources.load import PsutilLoadSource
from autoplug.sources.units import SysfsUnitDriver, SimulatedUnitDriver
from autoplug.sources.suspend import SignalSuspendSource

__all__ = [
    "PsutilLoadSource",
    "SysfsUnitDriver",
    "SimulatedUnitDriver",
    "SignalSuspendSource",
]


def create_sources(config):
    """Factory function to create the driver and load source from config.

    Args:
        config: SystemConfig; pool.driver picks 'sysfs' or 'simulated',
            control.load_source picks the psutil mode

    Returns:
        (IUnitDriver, ILoadSource)
    """
    if config.pool.driver == "simulated":
        capacity = config.pool.capacity or 4
        driver = SimulatedUnitDriver(capacity, online=range(capacity))
    else:
        driver = SysfsUnitDriver()

    load_source = PsutilLoadSource(
        mode=config.control.load_source,
        online_units=driver.online_units if config.pool.driver == "sysfs" else None,
    )
    return driver, load_source
