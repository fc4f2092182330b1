import logging
from pathlib import Path
import json

from autoplug.core.events import (
    EventBus,
    UnitOnlined,
    UnitOfflined,
    UnitToggleFailed,
    ModeChanged,
    TickSkipped
)

logger = logging.getLogger(__name__)


class HotplugEventLogger:
    def __init__(self, log_dir: str = "data/logs"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.metrics_file = self.log_dir / "metrics.jsonl"
        self.skipped_ticks = 0
        
    async def on_unit_onlined(self, event: UnitOnlined):
        await self._write_metric({
            "event": "unit_online",
            "timestamp": event.timestamp.isoformat(),
            "unit": event.unit,
            "online_count": event.online_count,
            "load": event.load,
            "reason": event.reason
        })
    
    async def on_unit_offlined(self, event: UnitOfflined):
        await self._write_metric({
            "event": "unit_offline",
            "timestamp": event.timestamp.isoformat(),
            "unit": event.unit,
            "online_count": event.online_count,
            "load": event.load,
            "reason": event.reason
        })
    
    async def on_unit_toggle_failed(self, event: UnitToggleFailed):
        direction = "up" if event.target_online else "down"
        logger.warning(f"Unit {event.unit} {direction} refused: {event.error}")
        
        await self._write_metric({
            "event": "unit_toggle_failed",
            "timestamp": event.timestamp.isoformat(),
            "unit": event.unit,
            "target_online": event.target_online,
            "error": event.error
        })
    
    async def on_mode_changed(self, event: ModeChanged):
        logger.info(
            f"Mode {event.old_mode} -> {event.new_mode} "
            f"(multiplier={event.multiplier}, online={event.online_count})"
        )
        
        await self._write_metric({
            "event": "mode_changed",
            "timestamp": event.timestamp.isoformat(),
            "old_mode": event.old_mode,
            "new_mode": event.new_mode,
            "multiplier": event.multiplier,
            "online_count": event.online_count
        })
    
    async def on_tick_skipped(self, event: TickSkipped):
        self.skipped_ticks += 1
        logger.debug(f"Tick skipped: {event.reason} ({self.skipped_ticks} so far)")
    
    async def _write_metric(self, data: dict):
        try:
            with open(self.metrics_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(data) + '\n')
        except OSError as e:
            logger.error(f"Failed to write metric: {e}")


def register_event_listeners(event_bus: EventBus, log_dir: str = "data/logs"):
    event_logger = HotplugEventLogger(log_dir)
    
    event_bus.subscribe(UnitOnlined, event_logger.on_unit_onlined)
    event_bus.subscribe(UnitOfflined, event_logger.on_unit_offlined)
    event_bus.subscribe(UnitToggleFailed, event_logger.on_unit_toggle_failed)
    event_bus.subscribe(ModeChanged, event_logger.on_mode_changed)
    event_bus.subscribe(TickSkipped, event_logger.on_tick_skipped)
    
    logger.info("Event listeners registered")
    return event_logger
