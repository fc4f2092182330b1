"""Suspend/resume mode controller."""

import asyncio
import logging
from typing import List

from autoplug.control.controller import HotplugController
from autoplug.core.config import SuspendConfig
from autoplug.core.events import (
    EventBus,
    ModeChanged,
    ResumeRequested,
    SuspendRequested,
    UnitOfflined,
    UnitOnlined,
    UnitToggleFailed,
)
from autoplug.core.interfaces import ISuspendSource
from autoplug.engine.pool import ToggleFailure
from autoplug.engine.state import ControlLoopState, Mode

logger = logging.getLogger(__name__)

PASSIVE = "passive"
FORCED = "forced"
RESUME_ONE = "one"
RESUME_ALL = "all"


class ModeController:
    """Reacts to suspend/resume by retuning the shared state.

    Notifications are only queued on the event bus; the transitions run
    on the bus worker and take the same lock as the tick.

    Suspend raises the multiplier (scale-up gets harder, scale-down does
    not) and applies the suspend floor. With the 'passive' policy the
    ticks drift the pool down on their own; with 'forced' every unit but
    the floor goes offline immediately. Resume restores the multiplier,
    brings one or all units back and re-arms the tick after a short delay.
    """

    def __init__(
        self,
        config: SuspendConfig,
        state: ControlLoopState,
        controller: HotplugController,
        event_bus: EventBus
    ):
        self.config = config
        self.state = state
        self.controller = controller
        self.event_bus = event_bus
        # Serializes whole transitions, including the wait for an in-flight tick
        self._transition = asyncio.Lock()

        self.event_bus.subscribe(SuspendRequested, self._on_suspend_requested)
        self.event_bus.subscribe(ResumeRequested, self._on_resume_requested)

        logger.info(
            f"Mode controller initialized (policy={config.policy}, resume={config.resume_policy}, "
            f"multiplier={config.multiplier})"
        )

    def attach(self, source: ISuspendSource):
        """Listen to an external suspend/resume source."""
        source.subscribe(self._on_signal)

    def _on_signal(self, suspended: bool):
        # May run in signal or thread context: hand off, never act inline
        event = SuspendRequested() if suspended else ResumeRequested()
        self.event_bus.publish_threadsafe(event)

    async def _on_suspend_requested(self, event: SuspendRequested):
        await self.suspend()

    async def _on_resume_requested(self, event: ResumeRequested):
        await self.resume()

    def is_suspended(self) -> bool:
        return self.state.mode is Mode.SUSPENDED

    async def suspend(self) -> bool:
        """Enter suspended mode."""
        if not self.config.enabled:
            logger.debug("Suspend handling disabled in config")
            return False

        async with self._transition:
            if self.state.mode is Mode.SUSPENDED:
                return True

            logger.info("Early suspend handler")
            forced = self.config.policy == FORCED

            if forced:
                # No tick may run between the cancel and the bulk offline
                await self.controller.pause()

            async with self.state.lock:
                self.state.multiplier = self.config.multiplier
                self.state.min_online = min(self.config.min_online, self.state.capacity)
                self.state.mode = Mode.SUSPENDED
                self.state.gate.reset()

                offlined = []
                if forced:
                    offlined = self.state.pool.take_all_offline(keep=self.state.min_online)
                    logger.info(f"Offlining units {offlined} for suspend")
                online_count = self.state.pool.online_count
                failures = self.state.pool.pop_failures()

                if forced:
                    delay = self.controller.intervals.next_interval(
                        self.state.tables, online_count, self.state.multiplier
                    )
                    self.state.sampling_interval_ms = delay
                    # A suspend during the start-up delay keeps the settle period
                    self.controller.arm(max(delay, self.controller.startup_remaining_ms()))

            for unit in offlined:
                await self.event_bus.publish(UnitOfflined(
                    unit=unit, online_count=online_count, reason="suspend"
                ))
            await self._publish_failures(failures)
            await self.event_bus.publish(ModeChanged(
                old_mode=Mode.NORMAL.value,
                new_mode=Mode.SUSPENDED.value,
                multiplier=self.config.multiplier,
                online_count=online_count,
            ))
            return True

    async def resume(self) -> bool:
        """Return to normal mode."""
        async with self._transition:
            if self.state.mode is Mode.NORMAL:
                return True

            logger.info("Late resume handler")

            # Cancel the pending tick so the short resume delay is not overridden
            await self.controller.pause()

            async with self.state.lock:
                self.state.multiplier = 1
                self.state.min_online = self.state.base_min_online
                self.state.mode = Mode.NORMAL
                self.state.gate.reset()

                if self.config.resume_policy == RESUME_ALL:
                    onlined = self.state.pool.bring_all_online()
                else:
                    unit = self.state.pool.bring_one_online()
                    onlined = [unit] if unit is not None else []
                online_count = self.state.pool.online_count
                failures = self.state.pool.pop_failures()

                self.controller.arm(self.config.resume_delay_ms)

            for unit in onlined:
                await self.event_bus.publish(UnitOnlined(
                    unit=unit, online_count=online_count, reason="resume"
                ))
            await self._publish_failures(failures)
            await self.event_bus.publish(ModeChanged(
                old_mode=Mode.SUSPENDED.value,
                new_mode=Mode.NORMAL.value,
                multiplier=1,
                online_count=online_count,
            ))
            return True

    async def _publish_failures(self, failures: List[ToggleFailure]):
        for failure in failures:
            await self.event_bus.publish(UnitToggleFailed(
                unit=failure.unit, target_online=failure.target_online, error=failure.error
            ))
