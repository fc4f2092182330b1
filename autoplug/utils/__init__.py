"""Utility functions and helpers.

This module provides common utilities used throughout the system:
- Logging configuration
- Tunable validation

Usage:
    from autoplug.utils import setup_logging, validate_table

    # Setup logging
    setup_logging(debug_mode=True, log_level="DEBUG")

    # Validate a per-count table before installing it
    table = validate_table([0, 200, 235, 300], capacity=4)
"""

from autoplug.utils.logging_config import setup_logging
from autoplug.utils.validation import (
    ValidationError,
    validate_load,
    validate_positive,
    validate_min_online,
    validate_table,
)

__all__ = [
    # Logging
    "setup_logging",

    # Validation
    "ValidationError",
    "validate_load",
    "validate_positive",
    "validate_min_online",
    "validate_table",
]
