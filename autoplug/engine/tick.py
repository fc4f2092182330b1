"""One pass of the decision engine.

The tick never touches the scheduler: it returns the delay it wants
before the next pass, so it can be driven with synthetic time.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from autoplug.engine.interval import IntervalController
from autoplug.engine.policy import Decision, evaluate
from autoplug.engine.pool import ToggleFailure
from autoplug.engine.state import ControlLoopState
from autoplug.engine.tables import lookup

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Outcome of one tick."""
    load: Optional[int]
    io_wait: int
    decision: Decision  # what the policy asked for
    action: Decision  # what the gate let through
    next_delay_ms: int
    onlined: List[int] = field(default_factory=list)
    offlined: List[int] = field(default_factory=list)
    failures: List[ToggleFailure] = field(default_factory=list)
    skipped: bool = False


def run_tick(
    state: ControlLoopState,
    intervals: IntervalController,
    io_wait_veto: bool = True
) -> TickResult:
    """Sample, decide, act and compute the next delay.

    Must be called with ``state.lock`` held.
    """
    multiplier = state.multiplier
    min_online = state.min_online
    pool = state.pool
    tables = state.tables

    # A raised floor (tunable edit, resume) is restored before deciding
    restored = []
    while pool.online_count < min_online:
        unit = pool.bring_one_online()
        if unit is None:
            break
        restored.append(unit)

    reading = state.sampler.sample()
    if reading is None:
        # Unreadable metric: neither streak moves
        delay = intervals.next_interval(tables, pool.online_count, multiplier)
        state.sampling_interval_ms = delay
        return TickResult(
            load=None, io_wait=0, decision=Decision.HOLD, action=Decision.HOLD,
            next_delay_ms=delay, onlined=restored, failures=pool.pop_failures(), skipped=True
        )

    online_count = pool.online_count
    decision = evaluate(
        reading.load, online_count, min_online, pool.capacity, multiplier, tables
    )
    vetoed = io_wait_veto and reading.io_wait != 0
    action = state.gate.observe(
        decision,
        online_threshold=lookup(tables.online_hysteresis, online_count),
        offline_threshold=lookup(tables.offline_hysteresis, online_count),
        vetoed=vetoed,
    )

    result = TickResult(
        load=reading.load, io_wait=reading.io_wait, decision=decision, action=action,
        next_delay_ms=0, onlined=restored
    )

    if action is Decision.SCALE_ALL_UP:
        logger.info(f"Onlining all units, load: {reading.load} io_wait: {reading.io_wait}")
        result.onlined.extend(pool.bring_all_online())
    elif action is Decision.SCALE_UP_ONE:
        unit = pool.bring_one_online()
        if unit is not None:
            result.onlined.append(unit)
    elif action is Decision.SCALE_DOWN_ONE:
        unit = pool.take_one_offline(min_online)
        if unit is not None:
            result.offlined.append(unit)
    elif decision is Decision.SCALE_DOWN_ONE and vetoed:
        logger.debug(f"Scale-down held by I/O wait ({reading.io_wait})")

    result.failures = pool.pop_failures()
    result.next_delay_ms = intervals.next_interval(tables, pool.online_count, multiplier, action)
    state.sampling_interval_ms = result.next_delay_ms

    logger.debug(
        f"Tick load={reading.load} io_wait={reading.io_wait} online={pool.online_count} "
        f"decision={decision.value} action={action.value} next={result.next_delay_ms}ms "
        f"streaks={state.gate.online_streak}/{state.gate.offline_streak}"
    )
    return result
