"""Event system for decoupled communication between components."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Type
from enum import Enum
import asyncio
import inspect
import logging

logger = logging.getLogger(__name__)


class EventPriority(Enum):
    """Event priority levels."""
    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


@dataclass
class Event:
    """Base event class.

    Note: All fields have defaults to allow subclasses to add required fields.
    """
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    priority: EventPriority = EventPriority.NORMAL
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UnitOnlined(Event):
    """A unit was brought online."""
    unit: int = 0
    online_count: int = 0
    load: Optional[int] = None
    reason: str = ""


@dataclass
class UnitOfflined(Event):
    """A unit was taken offline."""
    unit: int = 0
    online_count: int = 0
    load: Optional[int] = None
    reason: str = ""


@dataclass
class UnitToggleFailed(Event):
    """The driver refused to toggle a unit."""
    unit: int = 0
    target_online: bool = True
    error: str = ""


@dataclass
class TickSkipped(Event):
    """A tick was skipped without a decision."""
    reason: str = ""


@dataclass
class ModeChanged(Event):
    """Suspend/resume transition completed."""
    old_mode: str = ""
    new_mode: str = ""
    multiplier: int = 1
    online_count: int = 0


@dataclass
class SuspendRequested(Event):
    """The system is entering suspend."""
    priority: EventPriority = EventPriority.HIGH


@dataclass
class ResumeRequested(Event):
    """The system is resuming."""
    priority: EventPriority = EventPriority.HIGH


@dataclass
class BoostRequested(Event):
    """An external party wants one more unit right now."""
    reason: str = ""


class EventBus:
    """Central event bus for system-wide communication with backpressure."""

    def __init__(self, max_queue_size: int = 1000):
        self._handlers: Dict[Type[Event], List[Callable]] = {}
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._running = False
        self._task = None
        logger.info(f"Event bus initialized (max_queue_size={max_queue_size})")

    def subscribe(self, event_type: Type[Event], handler: Callable):
        """Register an event handler."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {handler.__name__} to {event_type.__name__}")

    def unsubscribe(self, event_type: Type[Event], handler: Callable):
        """Remove an event handler."""
        if event_type in self._handlers:
            self._handlers[event_type].remove(handler)

    async def publish(self, event: Event):
        """Publish an event to all subscribers."""
        try:
            await asyncio.wait_for(self._queue.put(event), timeout=1.0)
        except asyncio.TimeoutError:
            logger.error(f"Event queue full, dropping {type(event).__name__}")

    def publish_threadsafe(self, event: Event):
        """Publish from a signal handler or a thread outside the event loop.

        Never blocks; drops the event if the queue is full.
        """
        if self._loop is None:
            logger.error(f"Event bus not started, dropping {type(event).__name__}")
            return
        self._loop.call_soon_threadsafe(self._enqueue_nowait, event)

    def _enqueue_nowait(self, event: Event):
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.error(f"Event queue full, dropping {type(event).__name__}")

    async def start(self):
        """Start processing events."""
        self._running = True
        self._loop = asyncio.get_running_loop()
        self._task = asyncio.create_task(self._process_events())
        logger.info("Event bus started")

    async def stop(self):
        """Stop processing events."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Event bus stopped")

    async def drain(self, timeout: float = 1.0):
        """Wait until every queued event has been dispatched."""
        await asyncio.wait_for(self._queue.join(), timeout=timeout)

    async def _process_events(self):
        """Process events from queue."""
        while self._running:
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=0.1)
            except asyncio.TimeoutError:
                continue
            try:
                await self._dispatch(event)
            except Exception as e:
                logger.error(f"Error processing event: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    async def _dispatch(self, event: Event):
        """Dispatch event to handlers with error isolation."""
        event_type = type(event)
        handlers = self._handlers.get(event_type, [])

        if not handlers:
            logger.debug(f"No handlers for {event_type.__name__}")
            return

        logger.debug(f"Dispatching {event_type.__name__} to {len(handlers)} handlers")

        for handler in handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {handler.__name__} failed for {event_type.__name__}: {e}",
                    exc_info=True
                )
