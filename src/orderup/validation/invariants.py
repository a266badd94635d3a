"""Engine invariant checks.

Rules:
- O.1: active order count never exceeds max_active_orders
- O.2: active instance ids are unique
- O.3: active instance ids were allocated by the scheduler (below the next id)
- O.4: an instance id removed during a round is never active again
- O.5: no active orders outside a round
- S.1: orders_completed == standard + express completions
- S.2: timed completions never exceed completions
- C.1: remaining time stays within [0, round_duration]
- C.2: a finished round has no remaining time
"""

from typing import TYPE_CHECKING

from orderup.events import RoundState
from .types import ValidationViolation, ValidationSeverity

if TYPE_CHECKING:
    from orderup.engine.order_scheduler import OrderScheduler
    from orderup.engine.round_controller import RoundController
    from orderup.engine.score_ledger import ScoreLedger


def validate_active_orders(
    scheduler: "OrderScheduler",
    max_active_orders: int,
    retired_ids: set[int] | None = None,
) -> list[ValidationViolation]:
    """Validate active order rules O.1-O.4.

    Args:
        scheduler: Scheduler to inspect.
        max_active_orders: Configured capacity.
        retired_ids: Ids removed earlier in the current round.
    """
    violations: list[ValidationViolation] = []
    active = scheduler.active_orders
    ids = [instance.instance_id for instance in active]

    if len(active) > max_active_orders:
        violations.append(ValidationViolation(
            rule_id="O.1",
            category="Active Orders",
            message="active order count exceeds max_active_orders",
            context={"active": len(active), "max": max_active_orders},
        ))

    if len(set(ids)) != len(ids):
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        violations.append(ValidationViolation(
            rule_id="O.2",
            category="Active Orders",
            message="active instance ids must be unique",
            context={"duplicates": duplicates},
        ))

    unallocated = [i for i in ids if i < 0 or i >= scheduler.next_instance_id]
    if unallocated:
        violations.append(ValidationViolation(
            rule_id="O.3",
            category="Active Orders",
            message="active instance id was never allocated",
            context={"ids": unallocated, "next_instance_id": scheduler.next_instance_id},
        ))

    if retired_ids:
        reused = sorted(set(ids) & retired_ids)
        if reused:
            violations.append(ValidationViolation(
                rule_id="O.4",
                category="Active Orders",
                message="instance id reused after removal",
                context={"ids": reused},
            ))

    return violations


def validate_round_teardown(scheduler: "OrderScheduler") -> list[ValidationViolation]:
    """Validate O.5 after a round has ended."""
    if scheduler.active_count == 0:
        return []
    return [ValidationViolation(
        rule_id="O.5",
        category="Active Orders",
        message="orders still active after round end",
        context={"active": scheduler.active_count},
    )]


def validate_score(ledger: "ScoreLedger") -> list[ValidationViolation]:
    """Validate score rules S.1-S.2."""
    violations: list[ValidationViolation] = []
    state = ledger.snapshot()

    by_type = state.standard_orders_completed + state.express_orders_completed
    if state.orders_completed != by_type:
        violations.append(ValidationViolation(
            rule_id="S.1",
            category="Score",
            message="orders_completed must equal standard plus express completions",
            context={"orders_completed": state.orders_completed, "by_type": by_type},
        ))

    if state.timed_orders_completed > state.orders_completed:
        violations.append(ValidationViolation(
            rule_id="S.2",
            category="Score",
            message="more timed completions than completions",
            severity=ValidationSeverity.WARNING,
            context={
                "timed": state.timed_orders_completed,
                "completed": state.orders_completed,
            },
        ))

    return violations


def validate_clock(controller: "RoundController") -> list[ValidationViolation]:
    """Validate clock rules C.1-C.2."""
    violations: list[ValidationViolation] = []
    remaining = controller.remaining_time
    duration = controller.config.round_duration

    if remaining < 0 or remaining > duration:
        violations.append(ValidationViolation(
            rule_id="C.1",
            category="Round Clock",
            message="remaining time out of range",
            context={"remaining": remaining, "duration": duration},
        ))

    if controller.state == RoundState.SUMMARY and remaining != 0:
        violations.append(ValidationViolation(
            rule_id="C.2",
            category="Round Clock",
            message="finished round still has remaining time",
            context={"remaining": remaining},
        ))

    return violations
