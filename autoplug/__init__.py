"""
autoplug - load-driven unit hotplug controller.

Keeps just enough execution units (CPU cores on Linux) online for the
current load: units are added when load stays above a per-occupancy
threshold, removed when it stays below one, and all are brought up at
once under extreme load.

Key Features:
    - Hysteresis: single-step changes need a streak of samples
    - Per-occupancy tables: thresholds and sampling interval depend on
      how many units are online
    - Suspend awareness: scale-up is damped while the system is suspended
    - Scheduler-independent engine that can be driven with synthetic time

Usage:
    from autoplug import load_config, build_state

    config = load_config()
    # See main.py for full initialization
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Core exports
from autoplug.core import (
    SystemConfig,
    load_config,
    validate_config,
    EventBus,
)

# Engine exports
from autoplug.engine import (
    Decision,
    ControlLoopState,
    build_state,
    run_tick,
)

# Control exports
from autoplug.control import (
    HotplugController,
    ModeController,
    TunableStore,
    create_controller,
)

# Utility exports
from autoplug.utils import setup_logging

__all__ = [
    # Version info
    "__version__",
    "__license__",
    
    # Core
    "SystemConfig",
    "load_config",
    "validate_config",
    "EventBus",
    
    # Engine
    "Decision",
    "ControlLoopState",
    "build_state",
    "run_tick",
    
    # Control
    "HotplugController",
    "ModeController",
    "TunableStore",
    "create_controller",
    
    # Utilities
    "setup_logging",
]
