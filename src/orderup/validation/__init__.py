"""Runtime invariant checks for the round engine.

Modules:
- types.py: ValidationViolation, ValidationSeverity
- exceptions.py: ValidationError for fail-fast use
- invariants.py: O.*, S.*, C.* rule checks
"""

from .types import ValidationSeverity, ValidationViolation
from .exceptions import ValidationError
from .invariants import (
    validate_active_orders,
    validate_round_teardown,
    validate_score,
    validate_clock,
)

__all__ = [
    "ValidationSeverity",
    "ValidationViolation",
    "ValidationError",
    "validate_active_orders",
    "validate_round_teardown",
    "validate_score",
    "validate_clock",
]
