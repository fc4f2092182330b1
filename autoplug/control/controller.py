"""Tick loop: arms, runs and re-arms the decision engine on the event loop."""

import logging
import asyncio
from typing import Optional

from autoplug.core.config import SystemConfig
from autoplug.core.errors import SchedulingFailure
from autoplug.core.events import (
    EventBus,
    BoostRequested,
    TickSkipped,
    UnitOfflined,
    UnitOnlined,
    UnitToggleFailed,
)
from autoplug.engine.interval import IntervalController
from autoplug.engine.state import ControlLoopState, Mode
from autoplug.engine.tick import TickResult, run_tick

logger = logging.getLogger(__name__)


class HotplugController:
    """Drives the tick from a one-shot timer that is re-armed after each pass.

    Only one tick runs at a time: the timer spawns a task, the task takes
    the state lock, runs the engine and arms the next timer before it
    finishes.
    """

    def __init__(
        self,
        config: SystemConfig,
        state: ControlLoopState,
        event_bus: EventBus
    ):
        self.config = config
        self.state = state
        self.event_bus = event_bus
        self.intervals = IntervalController(
            floor_ms=config.control.interval_floor_ms,
            scale_up_interval_ms=config.control.scale_up_interval_ms,
        )

        self._timer: Optional[asyncio.TimerHandle] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._running = False
        self._startup_deadline: Optional[float] = None
        self.armed_delay_ms: Optional[int] = None
        self.ticks = 0
        self.failure: Optional[SchedulingFailure] = None
        self.stalled = asyncio.Event()

        self.event_bus.subscribe(BoostRequested, self._on_boost_requested)

        logger.info("Hotplug controller initialized")

    def is_running(self) -> bool:
        return self._running

    async def start(self):
        """Arm the first tick after the start-up delay.

        Raises:
            SchedulingFailure: if the first tick cannot be armed
        """
        if self._running:
            return

        self._running = True
        loop = asyncio.get_running_loop()
        self._startup_deadline = loop.time() + self.config.control.startup_delay_ms / 1000
        try:
            self.arm(self.config.control.startup_delay_ms)
        except SchedulingFailure:
            self._running = False
            raise
        logger.info(
            f"Hotplug monitoring started (first tick in {self.config.control.startup_delay_ms}ms)"
        )

    async def stop(self):
        """Cancel the pending tick and wait for an in-flight one to finish."""
        if not self._running and self._tick_task is None:
            return

        self._running = False
        await self.pause()

        if self.config.pool.online_all_on_stop:
            async with self.state.lock:
                onlined = self.state.pool.bring_all_online()
            if onlined:
                logger.info(f"Units {onlined} brought online for shutdown")

        logger.info(f"Hotplug monitoring stopped after {self.ticks} ticks")

    async def pause(self):
        """Cancel the armed timer and wait for any in-flight tick.

        Must not be called with the state lock held.
        """
        if self._timer:
            self._timer.cancel()
            self._timer = None

        task = self._tick_task
        if task and not task.done() and task is not asyncio.current_task():
            await asyncio.wait({task})

    def arm(self, delay_ms: int):
        """Schedule the next tick, replacing any pending one.

        Raises:
            SchedulingFailure: if no timer could be registered
        """
        if not self._running:
            return

        if self._timer:
            self._timer.cancel()
            self._timer = None

        try:
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(max(delay_ms, 0) / 1000, self._fire)
        except RuntimeError as e:
            raise SchedulingFailure(f"Cannot arm tick in {delay_ms}ms: {e}") from e
        self.armed_delay_ms = delay_ms

    def startup_remaining_ms(self) -> int:
        """Time left of the start-up delay, 0 once the first tick has run."""
        if self.ticks or self._startup_deadline is None:
            return 0
        left = (self._startup_deadline - asyncio.get_running_loop().time()) * 1000
        return max(int(left), 0)

    def _fire(self):
        self._timer = None
        self._tick_task = asyncio.get_running_loop().create_task(self.run_once())

    async def run_once(self) -> Optional[TickResult]:
        """Run one tick now and re-arm the loop."""
        result = None
        async with self.state.lock:
            if not self._running:
                return None

            try:
                result = run_tick(self.state, self.intervals, self.config.control.io_wait_veto)
                delay = result.next_delay_ms
            except Exception as e:
                logger.error(f"Tick failed: {e}", exc_info=True)
                delay = self.intervals.floor_ms
            self.ticks += 1

            try:
                self.arm(delay)
            except SchedulingFailure as e:
                logger.critical(f"Tick loop stalled: {e}")
                self.failure = e
                self._running = False
                self.stalled.set()

        if result is not None:
            await self._publish(result)
        return result

    async def boost_pulse(self, reason: str = "boost pulse") -> Optional[int]:
        """Bring one unit online right away, outside the tick.

        Ignored while suspended or when the pool is already full.
        """
        async with self.state.lock:
            if self.state.mode is Mode.SUSPENDED:
                logger.debug("Boost ignored while suspended")
                return None
            unit = self.state.pool.bring_one_online()
            self.state.gate.reset()
            online_count = self.state.pool.online_count
            failures = self.state.pool.pop_failures()

        for failure in failures:
            await self.event_bus.publish(UnitToggleFailed(
                unit=failure.unit, target_online=failure.target_online, error=failure.error
            ))
        if unit is not None:
            logger.info(f"Boost: unit {unit} up ({reason})")
            await self.event_bus.publish(UnitOnlined(
                unit=unit, online_count=online_count, reason=reason
            ))
        return unit

    async def _on_boost_requested(self, event: BoostRequested):
        await self.boost_pulse(event.reason or "boost pulse")

    async def _publish(self, result: TickResult):
        online_count = self.state.pool.online_count

        if result.skipped:
            await self.event_bus.publish(TickSkipped(reason="load metric unavailable"))

        for unit in result.onlined:
            await self.event_bus.publish(UnitOnlined(
                unit=unit, online_count=online_count, load=result.load, reason=result.action.value
            ))
        for unit in result.offlined:
            await self.event_bus.publish(UnitOfflined(
                unit=unit, online_count=online_count, load=result.load, reason=result.action.value
            ))
        for failure in result.failures:
            await self.event_bus.publish(UnitToggleFailed(
                unit=failure.unit, target_online=failure.target_online, error=failure.error
            ))
