"""Events package."""

from orderup.events.round_events import (
    # Enums
    RoundState,
    EventKind,
    # Base
    RoundEvent,
    OrderEvent,
    # Round controller
    RoundStarted,
    RoundEnded,
    RoundSummary,
    RoundPaused,
    RoundResumed,
    TimerUpdate,
    TimerWarning,
    StateChanged,
    # Order scheduler
    OrderSpawned,
    OrderCompleted,
    OrderExpired,
    # Score ledger
    ScoreChanged,
    OrdersCompletedChanged,
)

from orderup.events.event_hub import EventHub, Subscriber
from orderup.events.event_log import EventRecorder, RoundLog

__all__ = [
    # Enums
    "RoundState",
    "EventKind",
    # Base
    "RoundEvent",
    "OrderEvent",
    # Round controller
    "RoundStarted",
    "RoundEnded",
    "RoundSummary",
    "RoundPaused",
    "RoundResumed",
    "TimerUpdate",
    "TimerWarning",
    "StateChanged",
    # Order scheduler
    "OrderSpawned",
    "OrderCompleted",
    "OrderExpired",
    # Score ledger
    "ScoreChanged",
    "OrdersCompletedChanged",
    # Hub and logs
    "EventHub",
    "Subscriber",
    "EventRecorder",
    "RoundLog",
]
