"""Event types published by the round engine."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel

from orderup.models.order import OrderDefinition


class RoundState(str, Enum):
    """Round lifecycle states."""

    WAITING_FOR_ROUND = "WAITING_FOR_ROUND"
    IN_ROUND = "IN_ROUND"
    PAUSED = "PAUSED"
    SUMMARY = "SUMMARY"


class EventKind(str, Enum):
    """Names under which events are published on the EventHub."""

    # Round controller
    ROUND_START = "ROUND_START"
    ROUND_END = "ROUND_END"
    ROUND_SUMMARY = "ROUND_SUMMARY"
    ROUND_PAUSED = "ROUND_PAUSED"
    ROUND_RESUMED = "ROUND_RESUMED"
    TIMER_UPDATE = "TIMER_UPDATE"
    TIMER_WARNING = "TIMER_WARNING"
    STATE_CHANGED = "STATE_CHANGED"

    # Order scheduler
    ORDER_SPAWNED = "ORDER_SPAWNED"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    ORDER_EXPIRED = "ORDER_EXPIRED"

    # Score ledger
    SCORE_CHANGED = "SCORE_CHANGED"
    ORDERS_COMPLETED_CHANGED = "ORDERS_COMPLETED_CHANGED"


class RoundEvent(BaseModel):
    """Base class for all engine events."""

    kind: EventKind

    def __str__(self) -> str:
        return f"{self.__class__.__name__}()"


# ============================================================================
# Round controller events
# ============================================================================


class RoundStarted(RoundEvent):
    """A round has started (or restarted)."""

    kind: EventKind = EventKind.ROUND_START
    round_number: int
    duration: float

    def __str__(self) -> str:
        return f"RoundStarted(round={self.round_number}, duration={self.duration:.0f}s)"


class RoundEnded(RoundEvent):
    """The round clock stopped, either by timeout or by an explicit end."""

    kind: EventKind = EventKind.ROUND_END
    round_number: int

    def __str__(self) -> str:
        return f"RoundEnded(round={self.round_number})"


class RoundSummary(RoundEvent):
    """Last event of a round; observers fetch the score summary on it."""

    kind: EventKind = EventKind.ROUND_SUMMARY
    round_number: int

    def __str__(self) -> str:
        return f"RoundSummary(round={self.round_number})"


class RoundPaused(RoundEvent):
    kind: EventKind = EventKind.ROUND_PAUSED
    remaining: float

    def __str__(self) -> str:
        return f"RoundPaused(remaining={self.remaining:.1f}s)"


class RoundResumed(RoundEvent):
    kind: EventKind = EventKind.ROUND_RESUMED
    remaining: float

    def __str__(self) -> str:
        return f"RoundResumed(remaining={self.remaining:.1f}s)"


class TimerUpdate(RoundEvent):
    """Fired on every active tick with the remaining round time."""

    kind: EventKind = EventKind.TIMER_UPDATE
    remaining: float

    def __str__(self) -> str:
        return f"TimerUpdate(remaining={self.remaining:.1f}s)"


class TimerWarning(RoundEvent):
    """One-shot notification when the clock crosses a warning threshold."""

    kind: EventKind = EventKind.TIMER_WARNING
    threshold: float
    remaining: float

    def __str__(self) -> str:
        return f"TimerWarning({self.threshold:.0f}s left)"


class StateChanged(RoundEvent):
    kind: EventKind = EventKind.STATE_CHANGED
    previous: RoundState
    state: RoundState

    def __str__(self) -> str:
        return f"StateChanged({self.previous.value} -> {self.state.value})"


# ============================================================================
# Order scheduler events
# ============================================================================


class OrderEvent(RoundEvent):
    """Base class for events about one order instance."""

    instance_id: int
    definition: OrderDefinition

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(#{self.instance_id} {self.definition})"


class OrderSpawned(OrderEvent):
    kind: EventKind = EventKind.ORDER_SPAWNED
    spawn_time: float = 0.0


class OrderCompleted(OrderEvent):
    kind: EventKind = EventKind.ORDER_COMPLETED
    points: int
    completion_time: Optional[float] = None  # None = unmeasured

    def __str__(self) -> str:
        return f"OrderCompleted(#{self.instance_id} {self.definition}, +{self.points})"


class OrderExpired(OrderEvent):
    kind: EventKind = EventKind.ORDER_EXPIRED


# ============================================================================
# Score ledger events
# ============================================================================


class ScoreChanged(RoundEvent):
    kind: EventKind = EventKind.SCORE_CHANGED
    score: int

    def __str__(self) -> str:
        return f"ScoreChanged(score={self.score})"


class OrdersCompletedChanged(RoundEvent):
    kind: EventKind = EventKind.ORDERS_COMPLETED_CHANGED
    total: int

    def __str__(self) -> str:
        return f"OrdersCompletedChanged(total={self.total})"
