"""Input validation utilities for live tunables."""

from typing import Any, List


class ValidationError(Exception):
    """Validation error."""
    pass


def validate_load(value: Any) -> int:
    """Validate a load threshold (x100 scale, 0 disables the rule)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"load threshold must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"load threshold must be >= 0, got {value}")
    return value


def validate_positive(value: Any, what: str = "value") -> int:
    """Validate a strictly positive integer (intervals, streak lengths)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{what} must be an integer, got {value!r}")
    if value <= 0:
        raise ValidationError(f"{what} must be positive, got {value}")
    return value


def validate_min_online(value: Any, capacity: int) -> int:
    """Validate a minimum-online floor against the pool capacity."""
    value = validate_positive(value, "min_online")
    if value > capacity:
        raise ValidationError(f"min_online ({value}) exceeds capacity ({capacity})")
    return value


def validate_table(values: Any, capacity: int, positive: bool = False) -> List[int]:
    """Validate a per-count table.

    Index 0 is never consulted and is accepted as-is.
    """
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"table must be a list, got {type(values).__name__}")
    if len(values) < capacity:
        raise ValidationError(f"table needs at least {capacity} entries, got {len(values)}")
    
    checked = [values[0]] if values else []
    for value in values[1:]:
        checked.append(validate_positive(value, "table entry") if positive else validate_load(value))
    return checked
