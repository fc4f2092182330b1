"""Error taxonomy for the hotplug engine."""


class HotplugError(Exception):
    """Base class for all hotplug errors."""
    pass


class ActivationError(HotplugError):
    """A unit could not be brought online."""
    
    def __init__(self, unit: int, reason: str = ""):
        self.unit = unit
        self.reason = reason
        super().__init__(f"unit {unit} activation failed: {reason}" if reason else f"unit {unit} activation failed")


class DeactivationError(HotplugError):
    """A unit could not be taken offline (e.g. the platform refused)."""
    
    def __init__(self, unit: int, reason: str = ""):
        self.unit = unit
        self.reason = reason
        super().__init__(f"unit {unit} deactivation failed: {reason}" if reason else f"unit {unit} deactivation failed")


class MetricUnavailable(HotplugError):
    """The load source could not be read for this tick."""
    pass


class SchedulingFailure(HotplugError):
    """The next tick could not be armed."""
    pass
