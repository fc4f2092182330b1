"""Core system components.

This module contains the foundational pieces shared by the engine and
the control loop:
- Configuration loading and validation
- Event bus for transition and suspend/resume events
- Collaborator interfaces and the load reading model
- Error taxonomy
- Transition logging

Usage:
    from autoplug.core import SystemConfig, EventBus, load_config
    from autoplug.engine import build_state
"""

from autoplug.core.config import (
    SystemConfig,
    ThresholdConfig,
    SamplerConfig,
    PoolConfig,
    ControlConfig,
    SuspendConfig,
    load_config,
    validate_config,
)
from autoplug.core.errors import (
    HotplugError,
    ActivationError,
    DeactivationError,
    MetricUnavailable,
    SchedulingFailure,
)
from autoplug.core.events import (
    EventBus,
    Event,
    EventPriority,
    UnitOnlined,
    UnitOfflined,
    UnitToggleFailed,
    TickSkipped,
    ModeChanged,
    SuspendRequested,
    ResumeRequested,
    BoostRequested,
)
from autoplug.core.interfaces import (
    LoadReading,
    ILoadSource,
    IUnitDriver,
    ISuspendSource,
)
from autoplug.core.events_listener import (
    HotplugEventLogger,
    register_event_listeners
)

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    
    # Configuration
    "SystemConfig",
    "ThresholdConfig",
    "SamplerConfig",
    "PoolConfig",
    "ControlConfig",
    "SuspendConfig",
    "load_config",
    "validate_config",
    
    # Errors
    "HotplugError",
    "ActivationError",
    "DeactivationError",
    "MetricUnavailable",
    "SchedulingFailure",
    
    # Event System
    "EventBus",
    "Event",
    "EventPriority",
    "UnitOnlined",
    "UnitOfflined",
    "UnitToggleFailed",
    "TickSkipped",
    "ModeChanged",
    "SuspendRequested",
    "ResumeRequested",
    "BoostRequested",
    
    # Interfaces & Models
    "LoadReading",
    "ILoadSource",
    "IUnitDriver",
    "ISuspendSource",
    
    # Logging & Listeners
    "HotplugEventLogger",
    "register_event_listeners",
]
