"""Validation exceptions."""

from orderup.exceptions import OrderUpError
from .types import ValidationViolation


class ValidationError(OrderUpError):
    """Raised by a fail-fast validator when violations are detected."""

    def __init__(self, violations: list[ValidationViolation]):
        self.violations = violations
        count = len(violations)
        errors = sum(1 for v in violations if v.severity.value == "error")
        super().__init__(f"Validation failed with {count} violation(s) ({errors} errors)")

    def __str__(self) -> str:
        if not self.violations:
            return "ValidationError(no violations)"
        lines = [f"ValidationError({len(self.violations)} violations):"]
        for v in self.violations:
            lines.append(f"  [{v.severity.value.upper()}] {v.rule_id}: {v.message}")
        return "\n".join(lines)
