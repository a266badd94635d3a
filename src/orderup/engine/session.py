"""GameSession - builds and wires the round engine components.

One session is constructed by the entry point and passed to whatever
drives it (CLI, UI adapter, network layer, tests). It owns:

- EventHub: notifications to observers
- OrderCatalog: definitions to spawn from
- ScoreLedger: score and completion statistics
- OrderScheduler: active orders, spawning and expiry
- RoundController: round state and countdown clock
"""

import logging
import random
from typing import Optional

from orderup.engine.catalog import OrderCatalog, create_standard_catalog
from orderup.engine.config import RoundConfig
from orderup.engine.order_scheduler import OrderRef, OrderScheduler
from orderup.engine.round_controller import RoundController
from orderup.engine.score_ledger import ScoreLedger
from orderup.engine.validator import RoundValidator
from orderup.events import EventHub, EventKind, RoundEvent, RoundState
from orderup.models.order import ActiveOrderInstance

logger = logging.getLogger(__name__)


class GameSession:
    """Context object holding one wired set of engine components.

    Call close() (or use the session as a context manager) to remove the
    components' subscriptions from the hub.
    """

    def __init__(
        self,
        config: Optional[RoundConfig] = None,
        catalog: Optional[OrderCatalog] = None,
        hub: Optional[EventHub] = None,
        validator: Optional[RoundValidator] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the session.

        Args:
            config: Round tuning. Defaults to RoundConfig().
            catalog: Orders to spawn. Defaults to the standard catalog.
            hub: EventHub to publish on. A new one is created if omitted.
            validator: Optional validator for runtime invariant checks.
                       Pass None for production (zero overhead).
            rng: random.Random for order selection. Defaults to one seeded
                 from config.seed.
        """
        self.config = config or RoundConfig()
        self.catalog = catalog if catalog is not None else create_standard_catalog()
        self.hub = hub or EventHub()
        self._validator = validator

        self.ledger = ScoreLedger(self.hub)
        self.scheduler = OrderScheduler(
            self.hub,
            self.catalog,
            self.config,
            ledger=self.ledger,
            rng=rng if rng is not None else random.Random(self.config.seed),
        )
        self.controller = RoundController(self.hub, self.config, scheduler=self.scheduler)

        # Ledger first: the score is reset before the initial batch spawns
        self.ledger.attach()
        self.scheduler.attach()
        if self._validator is not None:
            self.hub.subscribe(EventKind.ROUND_START, self._validate_round_start)
            self.hub.subscribe(EventKind.ROUND_SUMMARY, self._validate_round_end)
        self._closed = False

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Detach every component from the hub."""
        if self._closed:
            return
        self.scheduler.detach()
        self.ledger.detach()
        if self._validator is not None:
            self.hub.unsubscribe(EventKind.ROUND_START, self._validate_round_start)
            self.hub.unsubscribe(EventKind.ROUND_SUMMARY, self._validate_round_end)
        self._closed = True

    # =========================================================================
    # Commands
    # =========================================================================

    def start_round(self) -> None:
        self.controller.start_round()

    def pause_round(self) -> None:
        self.controller.pause_round()

    def resume_round(self) -> None:
        self.controller.resume_round()

    def end_round(self) -> None:
        self.controller.end_round()

    def tick(self, elapsed: float) -> None:
        """Advance the round by `elapsed` seconds."""
        self.controller.tick(elapsed)
        if self._validator is not None and self.controller.state == RoundState.IN_ROUND:
            self._validator.on_tick(self)

    def complete_order(
        self,
        order_ref: OrderRef,
        validated: bool = True,
        points: Optional[int] = None,
        completion_time: Optional[float] = None,
        measure_time: bool = False,
    ) -> Optional[int]:
        """Complete an order whose contents a collaborator has checked.

        Args:
            order_ref: Instance id, instance, or definition to complete.
            validated: Result of the collaborator's content check. A failed
                       check leaves the order active.
            points: Award computed by the collaborator; defaults to the
                    definition's base points plus any express bonus.
            completion_time: Seconds from spawn to completion, if known.
            measure_time: When no completion_time is given, measure it
                          from the instance's spawn time on the round clock.

        Returns:
            Points awarded, or None if nothing was completed.
        """
        if not validated:
            logger.info("Order %s failed content validation, not completing", order_ref)
            return None

        if completion_time is None and measure_time:
            instance = self.scheduler.find(order_ref)
            if instance is not None:
                completion_time = instance.age(self.scheduler.clock)

        awarded = self.scheduler.complete_order(order_ref, completion_time=completion_time, points=points)
        if awarded is not None and self._validator is not None:
            self._validator.on_order_completed(self)
        return awarded

    def record_missed_express_order(self) -> None:
        self.ledger.record_missed_express_order()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def state(self) -> RoundState:
        return self.controller.state

    @property
    def round_number(self) -> int:
        return self.controller.round_number

    @property
    def is_round_active(self) -> bool:
        return self.controller.is_round_active

    @property
    def is_paused(self) -> bool:
        return self.controller.is_paused

    @property
    def remaining_time(self) -> float:
        return self.controller.remaining_time

    @property
    def current_score(self) -> int:
        return self.ledger.current_score

    @property
    def active_orders(self) -> list[ActiveOrderInstance]:
        """Snapshot of the active orders; mutating it has no effect."""
        return self.scheduler.active_orders

    def get_game_summary(self) -> str:
        return self.ledger.get_game_summary()

    # =========================================================================
    # Validator hooks
    # =========================================================================

    def _validate_round_start(self, event: RoundEvent) -> None:
        self._validator.on_round_start(self)

    def _validate_round_end(self, event: RoundEvent) -> None:
        self._validator.on_round_end(self)
