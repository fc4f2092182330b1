"""Hotplug decision engine.

The engine is synchronous and scheduler-independent: ``run_tick`` takes
the shared state, acts on the pool and returns the delay it wants
before the next tick.

Pipeline per tick:
- LoadSampler: one reading, optionally smoothed over a ring buffer
- evaluate: threshold policy (bulk up > one up > one down > hold)
- HysteresisGate: streak of qualifying samples before single steps
- UnitPool: picks and toggles units through the driver
- IntervalController: next sampling delay

Usage:
    from autoplug.engine import build_state, run_tick, IntervalController

    state = build_state(config, driver, load_source)
    result = run_tick(state, IntervalController())
    print(result.action, result.next_delay_ms)
"""

from autoplug.core.config import SystemConfig
from autoplug.core.interfaces import ILoadSource, IUnitDriver
from autoplug.engine.hysteresis import HysteresisGate
from autoplug.engine.interval import IntervalController
from autoplug.engine.policy import Decision, evaluate
from autoplug.engine.pool import SelectionPolicy, ToggleFailure, UnitPool, UnitState
from autoplug.engine.sampler import LoadSampler
from autoplug.engine.state import ControlLoopState, Mode
from autoplug.engine.tables import ThresholdTables, lookup
from autoplug.engine.tick import TickResult, run_tick

__all__ = [
    "Decision",
    "evaluate",
    "HysteresisGate",
    "IntervalController",
    "SelectionPolicy",
    "UnitPool",
    "UnitState",
    "ToggleFailure",
    "LoadSampler",
    "ControlLoopState",
    "Mode",
    "ThresholdTables",
    "lookup",
    "TickResult",
    "run_tick",
    "build_state",
]


def build_state(
    config: SystemConfig,
    driver: IUnitDriver,
    load_source: ILoadSource
) -> ControlLoopState:
    """Factory function to create the shared state from configuration.

    Args:
        config: SystemConfig with pool, sampler and threshold settings
        driver: IUnitDriver that toggles units
        load_source: ILoadSource for load and per-unit utilization

    Returns:
        ControlLoopState in normal mode
    """
    pool = UnitPool(
        driver,
        capacity=config.pool.capacity or None,
        selection=SelectionPolicy(config.pool.selection),
        metrics=load_source,
    )
    sampler = LoadSampler(
        load_source,
        smoothing=config.sampler.smoothing,
        window=config.sampler.window,
    )
    return ControlLoopState(
        pool=pool,
        tables=ThresholdTables.from_config(config.thresholds, pool.capacity),
        sampler=sampler,
        min_online=config.pool.min_online,
        base_min_online=config.pool.min_online,
    )
