"""RoundController - round state machine and countdown clock.

State machine:
    WAITING_FOR_ROUND -> IN_ROUND <-> PAUSED
    IN_ROUND -> SUMMARY (timer reaches 0 or end_round)
    SUMMARY -> IN_ROUND (start_round)
"""

import logging
from typing import Optional, TYPE_CHECKING

from orderup.engine.config import RoundConfig
from orderup.events import (
    EventHub,
    RoundState,
    RoundStarted,
    RoundEnded,
    RoundSummary,
    RoundPaused,
    RoundResumed,
    TimerUpdate,
    TimerWarning,
    StateChanged,
)

if TYPE_CHECKING:
    from orderup.engine.order_scheduler import OrderScheduler

logger = logging.getLogger(__name__)


class RoundController:
    """Owns the round state and the countdown clock.

    tick() is driven externally. Within one tick the clock is decremented
    and warning thresholds are checked before the scheduler ticks.
    Invalid transitions are ignored.
    """

    def __init__(
        self,
        hub: EventHub,
        config: Optional[RoundConfig] = None,
        scheduler: Optional["OrderScheduler"] = None,
    ):
        self._hub = hub
        self._config = config or RoundConfig()
        self._scheduler = scheduler

        self._state = RoundState.WAITING_FOR_ROUND
        self._remaining = 0.0
        self._round_number = 0
        # threshold -> already fired this round
        self._warnings_fired: dict[float, bool] = {}

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def is_round_active(self) -> bool:
        """True while a round is in progress, paused or not."""
        return self._state in (RoundState.IN_ROUND, RoundState.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self._state == RoundState.PAUSED

    @property
    def remaining_time(self) -> float:
        return self._remaining

    @property
    def round_number(self) -> int:
        """Number of rounds started so far."""
        return self._round_number

    @property
    def config(self) -> RoundConfig:
        return self._config

    def warning_fired(self, threshold: float) -> bool:
        return self._warnings_fired.get(threshold, False)

    # =========================================================================
    # Commands
    # =========================================================================

    def start_round(self) -> None:
        """Start a round. Restarts the clock if a round is already running."""
        logger.info("Starting round %d", self._round_number + 1)
        self._round_number += 1
        self._remaining = self._config.round_duration
        # Thresholds above the starting duration are never crossed
        self._warnings_fired = {
            threshold: threshold > self._config.round_duration
            for threshold in self._config.warning_thresholds
        }
        self._set_state(RoundState.IN_ROUND)
        self._hub.publish(
            RoundStarted(round_number=self._round_number, duration=self._config.round_duration)
        )

    def tick(self, elapsed: float) -> None:
        """Advance the clock by `elapsed` seconds. No-op unless IN_ROUND."""
        if self._state != RoundState.IN_ROUND:
            return
        if elapsed < 0:
            logger.debug("Negative elapsed %.3f treated as zero", elapsed)
            elapsed = 0.0

        self._remaining = max(0.0, self._remaining - elapsed)
        self._hub.publish(TimerUpdate(remaining=self._remaining))
        self._check_warnings()

        if self._remaining <= 0:
            self.end_round()
            return

        if self._scheduler is not None:
            self._scheduler.tick(elapsed)

    def pause_round(self) -> None:
        if self._state != RoundState.IN_ROUND:
            logger.debug("Ignoring pause in state %s", self._state.value)
            return
        self._set_state(RoundState.PAUSED)
        self._hub.publish(RoundPaused(remaining=self._remaining))

    def resume_round(self) -> None:
        if self._state != RoundState.PAUSED:
            logger.debug("Ignoring resume in state %s", self._state.value)
            return
        self._set_state(RoundState.IN_ROUND)
        self._hub.publish(RoundResumed(remaining=self._remaining))

    def end_round(self) -> None:
        """End the round from any state. RoundSummary is always published last."""
        logger.info("Ending round %d", self._round_number)
        self._remaining = 0.0
        self._set_state(RoundState.SUMMARY)
        self._hub.publish(RoundEnded(round_number=self._round_number))
        self._hub.publish(RoundSummary(round_number=self._round_number))

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_warnings(self) -> None:
        # warning_thresholds is sorted descending by RoundConfig
        for threshold in self._config.warning_thresholds:
            if self._warnings_fired.get(threshold, True) or self._remaining > threshold:
                continue
            self._warnings_fired[threshold] = True
            logger.info("%.0f seconds remaining", threshold)
            self._hub.publish(TimerWarning(threshold=threshold, remaining=self._remaining))

    def _set_state(self, state: RoundState) -> None:
        if self._state == state:
            return
        previous = self._state
        self._state = state
        self._hub.publish(StateChanged(previous=previous, state=state))
