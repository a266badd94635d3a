"""ScoreLedger - team score and order completion statistics."""

import logging
from typing import Optional
from pydantic import BaseModel

from orderup.events import (
    EventHub,
    EventKind,
    RoundEvent,
    OrderExpired,
    ScoreChanged,
    OrdersCompletedChanged,
)

logger = logging.getLogger(__name__)


class ScoreState(BaseModel):
    """Counters tracked over one round."""

    current_score: int = 0
    orders_completed: int = 0
    standard_orders_completed: int = 0
    express_orders_completed: int = 0
    missed_express_orders: int = 0
    total_completion_time: float = 0.0
    timed_orders_completed: int = 0

    @property
    def has_completion_time_data(self) -> bool:
        return self.timed_orders_completed > 0

    @property
    def average_completion_time(self) -> Optional[float]:
        """Mean completion time of timed orders, None without data."""
        if not self.has_completion_time_data:
            return None
        return self.total_completion_time / self.timed_orders_completed


class ScoreLedger:
    """Accumulates the score and completion statistics of a round.

    The ledger is the only writer of its ScoreState. Call attach() to
    reset on round start and to count missed express orders from
    ORDER_EXPIRED; call detach() before discarding it.
    """

    def __init__(self, hub: EventHub):
        self._hub = hub
        self._state = ScoreState()

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def attach(self) -> None:
        self._hub.subscribe(EventKind.ROUND_START, self._handle_round_start)
        self._hub.subscribe(EventKind.ORDER_EXPIRED, self._handle_order_expired)

    def detach(self) -> None:
        self._hub.unsubscribe(EventKind.ROUND_START, self._handle_round_start)
        self._hub.unsubscribe(EventKind.ORDER_EXPIRED, self._handle_order_expired)

    def _handle_round_start(self, event: RoundEvent) -> None:
        self.reset_score()

    def _handle_order_expired(self, event: RoundEvent) -> None:
        if isinstance(event, OrderExpired) and event.definition.is_express:
            self.record_missed_express_order()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def current_score(self) -> int:
        return self._state.current_score

    @property
    def orders_completed(self) -> int:
        return self._state.orders_completed

    @property
    def standard_orders_completed(self) -> int:
        return self._state.standard_orders_completed

    @property
    def express_orders_completed(self) -> int:
        return self._state.express_orders_completed

    @property
    def missed_express_orders(self) -> int:
        return self._state.missed_express_orders

    @property
    def has_completion_time_data(self) -> bool:
        return self._state.has_completion_time_data

    @property
    def average_completion_time(self) -> Optional[float]:
        return self._state.average_completion_time

    def snapshot(self) -> ScoreState:
        """Copy of the current counters."""
        return self._state.model_copy()

    # =========================================================================
    # Mutators
    # =========================================================================

    def reset_score(self) -> None:
        """Zero every counter at the start of a round."""
        logger.debug("Resetting score for new round")
        self._state = ScoreState()
        self._hub.publish(ScoreChanged(score=0))

    def add_score(self, points: int) -> None:
        """Add points to the team score.

        No floor or ceiling is applied; callers pass non-negative values.
        """
        self._state.current_score += points
        logger.debug("Added %d points, total %d", points, self._state.current_score)
        self._hub.publish(ScoreChanged(score=self._state.current_score))

    def complete_order(
        self,
        is_express: bool,
        points: int,
        completion_time: Optional[float] = None,
    ) -> None:
        """Record a completed order.

        Args:
            is_express: Whether the completed order was an Express order.
            points: Points earned.
            completion_time: Seconds from spawn to completion. None means
                unmeasured and leaves the average untouched.
        """
        self._state.orders_completed += 1
        if is_express:
            self._state.express_orders_completed += 1
        else:
            self._state.standard_orders_completed += 1

        if completion_time is not None:
            self._state.total_completion_time += completion_time
            self._state.timed_orders_completed += 1

        self.add_score(points)
        self._hub.publish(OrdersCompletedChanged(total=self._state.orders_completed))

        logger.info(
            "Order completed, total %d (standard %d, express %d)",
            self._state.orders_completed,
            self._state.standard_orders_completed,
            self._state.express_orders_completed,
        )

    def record_missed_express_order(self) -> None:
        """Count an Express order that expired before completion."""
        self._state.missed_express_orders += 1
        logger.info("Express order missed, total missed %d", self._state.missed_express_orders)

    # =========================================================================
    # Summary
    # =========================================================================

    def get_game_summary(self) -> str:
        """Human-readable round summary. Has no side effects."""
        state = self._state
        average = state.average_completion_time
        average_text = f"{average:.1f}s" if average is not None else "N/A"

        lines = [
            f"Final Score: {state.current_score}",
            f"Orders Completed: {state.orders_completed}",
            f"Standard Orders: {state.standard_orders_completed}",
            f"Express Orders: {state.express_orders_completed}",
            f"Missed Express Orders: {state.missed_express_orders}",
            f"Average Completion Time: {average_text}",
        ]
        return "\n".join(lines)
