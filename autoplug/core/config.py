"""Configuration models and loading."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from pathlib import Path
import yaml
import os
from dotenv import load_dotenv

# A scalar expands to a flat table, a list is used per online count.
TableValue = Union[int, List[int]]


@dataclass
class ThresholdConfig:
    """Load thresholds and per-occupancy tables.

    Empty lists mean "use the built-in defaults for the detected capacity".
    """
    enable_all_load: int = 700
    enable_load: TableValue = field(default_factory=list)
    disable_load: TableValue = 70
    sample_interval_ms: TableValue = field(default_factory=list)
    online_hysteresis: TableValue = 3
    offline_hysteresis: TableValue = 5


@dataclass
class SamplerConfig:
    """Load sampling configuration."""
    smoothing: bool = False  # the default loadavg source is already smoothed upstream
    window: int = 10


@dataclass
class PoolConfig:
    """Unit pool configuration."""
    capacity: int = 0  # 0 = ask the driver
    driver: str = "sysfs"  # 'sysfs' or 'simulated'
    selection: str = "fixed"  # 'fixed' or 'idlest'
    min_online: int = 1
    online_all_on_stop: bool = True


@dataclass
class ControlConfig:
    """Tick loop configuration."""
    startup_delay_ms: int = 10000
    interval_floor_ms: int = 20
    scale_up_interval_ms: int = 0  # 0 = table interval only
    io_wait_veto: bool = True
    load_source: str = "loadavg"  # 'loadavg' or 'utilization'


@dataclass
class SuspendConfig:
    """Suspend/resume behavior."""
    enabled: bool = True
    policy: str = "passive"  # 'passive' or 'forced'
    resume_policy: str = "one"  # 'one' or 'all'
    multiplier: int = 2
    min_online: int = 1
    resume_delay_ms: int = 10


@dataclass
class SystemConfig:
    """Main system configuration."""
    debug_mode: bool = False
    log_level: str = "INFO"
    log_dir: str = "data/logs"

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    pool: PoolConfig = field(default_factory=PoolConfig)
    control: ControlConfig = field(default_factory=ControlConfig)
    suspend: SuspendConfig = field(default_factory=SuspendConfig)


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


def _apply_section(section: Any, data: Dict[str, Any]):
    for key, value in data.items():
        if hasattr(section, key):
            setattr(section, key, value)


def load_config(path: Optional[str] = None) -> SystemConfig:
    """Load configuration from environment and files.

    Order of precedence (last wins): defaults, YAML file, environment.
    """
    load_dotenv()

    config = SystemConfig()

    # YAML file first so the environment can override it
    config_path = Path(path or os.getenv("AUTOPLUG_CONFIG", "config/autoplug.yaml"))
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        for name in ("thresholds", "sampler", "pool", "control", "suspend"):
            if name in data:
                _apply_section(getattr(config, name), data[name] or {})
        _apply_section(config, {k: v for k, v in data.items() if not isinstance(v, dict)})

    config.debug_mode = _env_bool("DEBUG_MODE", config.debug_mode)
    config.log_level = os.getenv("LOG_LEVEL", config.log_level)
    config.log_dir = os.getenv("LOG_DIR", config.log_dir)

    # Pool
    config.pool.capacity = int(os.getenv("AUTOPLUG_CAPACITY", str(config.pool.capacity)))
    config.pool.driver = os.getenv("AUTOPLUG_DRIVER", config.pool.driver)
    config.pool.selection = os.getenv("AUTOPLUG_SELECTION", config.pool.selection)
    config.pool.min_online = int(os.getenv("AUTOPLUG_MIN_ONLINE", str(config.pool.min_online)))

    # Thresholds
    config.thresholds.enable_all_load = int(
        os.getenv("AUTOPLUG_ENABLE_ALL_LOAD", str(config.thresholds.enable_all_load))
    )

    # Sampler
    config.sampler.smoothing = _env_bool("AUTOPLUG_SMOOTHING", config.sampler.smoothing)

    # Control
    config.control.startup_delay_ms = int(
        os.getenv("AUTOPLUG_STARTUP_DELAY_MS", str(config.control.startup_delay_ms))
    )
    config.control.io_wait_veto = _env_bool("AUTOPLUG_IO_WAIT_VETO", config.control.io_wait_veto)
    config.control.load_source = os.getenv("AUTOPLUG_LOAD_SOURCE", config.control.load_source)

    # Suspend
    config.suspend.enabled = _env_bool("AUTOPLUG_SUSPEND_ENABLED", config.suspend.enabled)
    config.suspend.policy = os.getenv("AUTOPLUG_SUSPEND_POLICY", config.suspend.policy)
    config.suspend.resume_policy = os.getenv("AUTOPLUG_RESUME_POLICY", config.suspend.resume_policy)
    config.suspend.multiplier = int(
        os.getenv("AUTOPLUG_SUSPEND_MULTIPLIER", str(config.suspend.multiplier))
    )

    return config


def _table_errors(name: str, table: TableValue, capacity: int, positive: bool) -> List[str]:
    values = table if isinstance(table, list) else [table]
    errors = []
    if any(not isinstance(v, int) or isinstance(v, bool) for v in values):
        errors.append(f"{name} must contain integers only")
        return errors
    # index 0 is unused, so only entries 1.. must be positive
    checked = values[1:] if isinstance(table, list) else values
    if any(v < 0 for v in values):
        errors.append(f"{name} must not contain negative values")
    elif positive and any(v <= 0 for v in checked):
        errors.append(f"{name} must be positive")
    if isinstance(table, list) and capacity and table and len(table) < capacity:
        errors.append(f"{name} has {len(table)} entries, needs at least {capacity}")
    return errors


def validate_config(config: SystemConfig) -> List[str]:
    """Validate configuration and return errors."""
    errors = []
    capacity = config.pool.capacity

    # Pool validation
    if capacity < 0:
        errors.append("capacity must be >= 0 (0 = detect)")

    if config.pool.driver not in ("sysfs", "simulated"):
        errors.append(f"Unknown driver '{config.pool.driver}'")

    if config.pool.selection not in ("fixed", "idlest"):
        errors.append(f"Unknown selection policy '{config.pool.selection}'")

    if config.pool.min_online < 1:
        errors.append("min_online must be at least 1")
    elif capacity and config.pool.min_online > capacity:
        errors.append(f"min_online ({config.pool.min_online}) exceeds capacity ({capacity})")

    # Threshold validation
    t = config.thresholds
    if t.enable_all_load < 0:
        errors.append("enable_all_load must be >= 0")
    errors.extend(_table_errors("enable_load", t.enable_load, capacity, positive=False))
    errors.extend(_table_errors("disable_load", t.disable_load, capacity, positive=False))
    errors.extend(_table_errors("sample_interval_ms", t.sample_interval_ms, capacity, positive=True))
    errors.extend(_table_errors("online_hysteresis", t.online_hysteresis, capacity, positive=True))
    errors.extend(_table_errors("offline_hysteresis", t.offline_hysteresis, capacity, positive=True))

    # Sampler validation
    if config.sampler.window < 1:
        errors.append("sampler window must be at least 1")

    # Control validation
    if config.control.startup_delay_ms < 0:
        errors.append("startup_delay_ms must be >= 0")

    if config.control.interval_floor_ms <= 0:
        errors.append("interval_floor_ms must be positive")

    if config.control.scale_up_interval_ms < 0:
        errors.append("scale_up_interval_ms must be >= 0")

    if config.control.load_source not in ("loadavg", "utilization"):
        errors.append(f"Unknown load source '{config.control.load_source}'")

    # Suspend validation
    s = config.suspend
    if s.policy not in ("passive", "forced"):
        errors.append(f"Unknown suspend policy '{s.policy}'")

    if s.resume_policy not in ("one", "all"):
        errors.append(f"Unknown resume policy '{s.resume_policy}'")

    if s.multiplier < 2:
        errors.append("suspend multiplier must be at least 2")

    if s.min_online < 1:
        errors.append("suspend min_online must be at least 1")

    if s.resume_delay_ms <= 0:
        errors.append("resume_delay_ms must be positive")

    return errors
