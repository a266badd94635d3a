"""RoundValidator - runtime invariant hooks for the round engine.

Usage:
    # In tests or stress runs
    validator = CollectingValidator()
    session = GameSession(config, validator=validator)
    violations = validator.get_violations()

    # No overhead in production (validator=None)
    session = GameSession(config)
"""

from typing import Protocol, TYPE_CHECKING

from orderup.validation import (
    ValidationError,
    ValidationViolation,
    validate_active_orders,
    validate_clock,
    validate_round_teardown,
    validate_score,
)

if TYPE_CHECKING:
    from orderup.engine.session import GameSession


class RoundValidator(Protocol):
    """Hooks called by GameSession at key points of a round."""

    def on_round_start(self, session: "GameSession") -> None:
        """Called after the round started and the initial batch spawned."""
        ...

    def on_tick(self, session: "GameSession") -> None:
        """Called after every tick."""
        ...

    def on_order_completed(self, session: "GameSession") -> None:
        """Called after a successful completion."""
        ...

    def on_round_end(self, session: "GameSession") -> None:
        """Called once the round summary has been published."""
        ...

    def get_violations(self) -> list[ValidationViolation]:
        ...


class NoOpValidator:
    """Validator that checks nothing."""

    def on_round_start(self, session: "GameSession") -> None:
        pass

    def on_tick(self, session: "GameSession") -> None:
        pass

    def on_order_completed(self, session: "GameSession") -> None:
        pass

    def on_round_end(self, session: "GameSession") -> None:
        pass

    def get_violations(self) -> list[ValidationViolation]:
        return []


class CollectingValidator:
    """Runs every invariant check and collects the violations.

    Args:
        fail_fast: Raise ValidationError as soon as a check fails.
    """

    def __init__(self, fail_fast: bool = False):
        self._fail_fast = fail_fast
        self._violations: list[ValidationViolation] = []
        self._seen_ids: set[int] = set()
        self._retired_ids: set[int] = set()

    def get_violations(self) -> list[ValidationViolation]:
        """Get all collected violations."""
        return list(self._violations)

    def clear(self) -> None:
        self._violations.clear()
        self._seen_ids.clear()
        self._retired_ids.clear()

    def on_round_start(self, session: "GameSession") -> None:
        self._seen_ids.clear()
        self._retired_ids.clear()
        self._check_running(session)

    def on_tick(self, session: "GameSession") -> None:
        self._check_running(session)

    def on_order_completed(self, session: "GameSession") -> None:
        self._check_running(session)

    def on_round_end(self, session: "GameSession") -> None:
        violations = validate_round_teardown(session.scheduler)
        violations.extend(validate_score(session.ledger))
        violations.extend(validate_clock(session.controller))
        self._record(violations)

    def _check_running(self, session: "GameSession") -> None:
        active_ids = {instance.instance_id for instance in session.scheduler.active_orders}

        violations = validate_active_orders(
            session.scheduler,
            session.config.max_active_orders,
            self._retired_ids,
        )
        violations.extend(validate_score(session.ledger))
        violations.extend(validate_clock(session.controller))
        self._record(violations)

        self._retired_ids |= self._seen_ids - active_ids
        self._seen_ids |= active_ids

    def _record(self, violations: list[ValidationViolation]) -> None:
        self._violations.extend(violations)
        if violations and self._fail_fast:
            raise ValidationError(violations)


def create_validator(collect: bool = False, fail_fast: bool = False) -> RoundValidator:
    """Factory function to create the appropriate validator.

    Args:
        collect: If True, returns a CollectingValidator, otherwise a
                 NoOpValidator.
        fail_fast: Passed to CollectingValidator.
    """
    if collect:
        return CollectingValidator(fail_fast=fail_fast)
    return NoOpValidator()
