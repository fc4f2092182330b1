"""Main entry point for the autoplug daemon."""

import asyncio
import logging
import signal
import sys

from autoplug import __version__
from autoplug.core.config import load_config, validate_config
from autoplug.core.errors import SchedulingFailure
from autoplug.core.events import EventBus
from autoplug.core.events_listener import register_event_listeners
from autoplug.control import create_controller
from autoplug.engine import build_state
from autoplug.sources import create_sources, SignalSuspendSource
from autoplug.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def main() -> int:
    """Main application entry point."""
    # Load configuration
    config = load_config()
    
    # Setup logging
    setup_logging(config.debug_mode, config.log_level, config.log_dir)
    
    # Validate configuration
    errors = validate_config(config)
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        return 1
    
    logger.info("=" * 60)
    logger.info(f"autoplug {__version__} initializing")
    logger.info("=" * 60)
    
    # Service references for cleanup
    event_bus = None
    controller = None
    
    try:
        # Initialize event bus
        event_bus = EventBus(max_queue_size=1000)
        await event_bus.start()
        register_event_listeners(event_bus, config.log_dir)
        
        # Initialize collaborators and shared state
        driver, load_source = create_sources(config)
        state = build_state(config, driver, load_source)
        
        controller, modes, tunables = create_controller(config, state, event_bus)
        logger.info(f"Tunables: {tunables.snapshot()}")
        
        if config.suspend.enabled:
            modes.attach(SignalSuspendSource())
        
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop.set)
        
        # Start the tick loop
        await controller.start()
        
        logger.info("=" * 60)
        logger.info(f"System Ready - managing {state.capacity} units")
        logger.info("=" * 60)
        
        stop_wait = asyncio.create_task(stop.wait())
        stall_wait = asyncio.create_task(controller.stalled.wait())
        await asyncio.wait({stop_wait, stall_wait}, return_when=asyncio.FIRST_COMPLETED)
        stop_wait.cancel()
        stall_wait.cancel()
        
        if controller.failure:
            logger.critical(f"Controller stalled: {controller.failure}")
            return 1
        logger.info("Shutdown signal received")
        return 0
    
    except SchedulingFailure as e:
        logger.critical(f"Cannot start tick loop: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1
    finally:
        logger.info("Shutting down...")
        
        # Graceful shutdown in reverse order
        if controller:
            await controller.stop()
        
        if event_bus:
            await event_bus.stop()
        
        logger.info("Shutdown complete")


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nShutdown complete.")
