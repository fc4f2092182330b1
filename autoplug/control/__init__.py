"""Control loop and suspend/resume handling.

This module runs the decision engine on the asyncio event loop and
adapts it to suspend/resume transitions.

Key Features:
- One-shot timer re-armed after every tick (never re-entrant)
- Cancel-and-wait shutdown
- Boost pulse to add a unit outside the tick
- Passive or forced suspend, one-or-all resume
- Live tunables without taking the tick lock

Usage:
    from autoplug.control import create_controller

    controller, modes, tunables = create_controller(config, state, event_bus)

    await controller.start()
    modes.attach(SignalSuspendSource())

    tunables.set_entry("enable_load", 2, 250)
"""

from autoplug.control.controller import HotplugController
from autoplug.control.mode import ModeController
from autoplug.control.tunables import TunableStore

__all__ = [
    "HotplugController",
    "ModeController",
    "TunableStore",
]


def create_controller(config, state, event_bus):
    """Factory function to wire the controller, mode controller and tunables.

    Args:
        config: SystemConfig
        state: ControlLoopState built with autoplug.engine.build_state
        event_bus: EventBus carrying suspend/resume and transition events

    Returns:
        (HotplugController, ModeController, TunableStore), not started
    """
    controller = HotplugController(config, state, event_bus)
    modes = ModeController(config.suspend, state, controller, event_bus)
    return controller, modes, TunableStore(state)
