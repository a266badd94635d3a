"""OrderScheduler - spawns, completes and expires orders during a round.

Per tick:
1. Advance the scheduler's round clock
2. Expire every overdue Express order (collected first, removed after)
3. Accumulate spawn time and spawn at most one order
"""

import logging
import random
from typing import Optional, Union, TYPE_CHECKING

from orderup.engine.catalog import OrderCatalog
from orderup.engine.config import RoundConfig
from orderup.events import (
    EventHub,
    EventKind,
    RoundEvent,
    OrderSpawned,
    OrderCompleted,
    OrderExpired,
)
from orderup.models.order import ActiveOrderInstance, OrderDefinition

if TYPE_CHECKING:
    from orderup.engine.score_ledger import ScoreLedger

logger = logging.getLogger(__name__)

# An instance id, an instance, or a definition (oldest matching instance)
OrderRef = Union[int, ActiveOrderInstance, OrderDefinition]


class OrderScheduler:
    """Owns the active order instances of the current round.

    The scheduler follows the round lifecycle through the EventHub
    (attach() subscribes, detach() unsubscribes) and only ticks while
    the round is in progress and not paused.
    """

    def __init__(
        self,
        hub: EventHub,
        catalog: OrderCatalog,
        config: Optional[RoundConfig] = None,
        ledger: Optional["ScoreLedger"] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the scheduler.

        Args:
            hub: EventHub used for round lifecycle and order events.
            catalog: Pool of definitions to spawn from.
            config: Spawn interval and capacity settings.
            ledger: Ledger that receives completed orders. Optional so the
                    scheduler can be driven on its own in tests.
            rng: random.Random used for order selection. Defaults to one
                 seeded from config.seed.
        """
        self._hub = hub
        self._catalog = catalog
        self._config = config or RoundConfig()
        self._ledger = ledger
        self._rng = rng if rng is not None else random.Random(self._config.seed)

        self._active: list[ActiveOrderInstance] = []
        self._spawn_times: dict[int, float] = {}  # instance id -> spawn clock
        self._clock = 0.0
        self._time_since_last_spawn = 0.0
        self._next_instance_id = 0
        self._ticking = False

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def attach(self) -> None:
        self._hub.subscribe(EventKind.ROUND_START, self._handle_round_start)
        self._hub.subscribe(EventKind.ROUND_END, self._handle_round_end)
        self._hub.subscribe(EventKind.ROUND_PAUSED, self._handle_pause)
        self._hub.subscribe(EventKind.ROUND_RESUMED, self._handle_resume)

    def detach(self) -> None:
        self._hub.unsubscribe(EventKind.ROUND_START, self._handle_round_start)
        self._hub.unsubscribe(EventKind.ROUND_END, self._handle_round_end)
        self._hub.unsubscribe(EventKind.ROUND_PAUSED, self._handle_pause)
        self._hub.unsubscribe(EventKind.ROUND_RESUMED, self._handle_resume)

    def _handle_round_start(self, event: RoundEvent) -> None:
        self.on_round_start()

    def _handle_round_end(self, event: RoundEvent) -> None:
        self.on_round_end()

    def _handle_pause(self, event: RoundEvent) -> None:
        self._ticking = False

    def _handle_resume(self, event: RoundEvent) -> None:
        self._ticking = True

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def active_orders(self) -> list[ActiveOrderInstance]:
        """Snapshot of the active instances, oldest first."""
        return list(self._active)

    @property
    def active_definitions(self) -> list[OrderDefinition]:
        return [instance.definition for instance in self._active]

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def clock(self) -> float:
        """Round time seen by the scheduler since the round started."""
        return self._clock

    @property
    def is_ticking(self) -> bool:
        return self._ticking

    @property
    def next_instance_id(self) -> int:
        return self._next_instance_id

    def get_instance(self, instance_id: int) -> Optional[ActiveOrderInstance]:
        for instance in self._active:
            if instance.instance_id == instance_id:
                return instance
        return None

    def is_active(self, order_ref: OrderRef) -> bool:
        return self.find(order_ref) is not None

    # =========================================================================
    # Round lifecycle
    # =========================================================================

    def on_round_start(self) -> None:
        """Reset all round state and spawn the initial batch."""
        logger.info("Round started, spawning initial orders")
        self._active.clear()
        self._spawn_times.clear()
        self._clock = 0.0
        self._time_since_last_spawn = 0.0
        self._next_instance_id = 0
        self._ticking = True

        for _ in range(self._config.initial_batch_size):
            self.spawn_order()

    def on_round_end(self) -> None:
        """Drop all active orders without per-order expiry events."""
        logger.info("Round ended, clearing %d active orders", len(self._active))
        self._active.clear()
        self._spawn_times.clear()
        self._ticking = False

    def tick(self, elapsed: float) -> None:
        """Advance the scheduler by `elapsed` seconds of round time."""
        if not self._ticking:
            return
        if elapsed < 0:
            logger.debug("Negative elapsed %.3f treated as zero", elapsed)
            elapsed = 0.0

        self._clock += elapsed
        self._expire_overdue_orders()

        self._time_since_last_spawn += elapsed
        if (
            self._time_since_last_spawn >= self._config.spawn_interval
            and len(self._active) < self._config.max_active_orders
        ):
            self.spawn_order()
            self._time_since_last_spawn = 0.0

    # =========================================================================
    # Order lifecycle
    # =========================================================================

    def spawn_order(self) -> Optional[ActiveOrderInstance]:
        """Spawn one order picked uniformly from the catalog.

        Returns:
            The new instance, or None when the catalog is empty or the
            active set is full.
        """
        if len(self._active) >= self._config.max_active_orders:
            logger.debug("Active order limit %d reached, not spawning", self._config.max_active_orders)
            return None

        definition = self._catalog.choose(self._rng)
        if definition is None:
            logger.warning("No orders available to spawn")
            return None

        instance = ActiveOrderInstance(
            instance_id=self._next_instance_id,
            definition=definition,
            spawn_time=self._clock,
        )
        self._next_instance_id += 1
        self._active.append(instance)
        self._spawn_times[instance.instance_id] = instance.spawn_time

        logger.info("Spawned order %s as #%d", definition, instance.instance_id)
        self._hub.publish(
            OrderSpawned(
                instance_id=instance.instance_id,
                definition=definition,
                spawn_time=instance.spawn_time,
            )
        )
        return instance

    def complete_order(
        self,
        order_ref: OrderRef,
        completion_time: Optional[float] = None,
        points: Optional[int] = None,
    ) -> Optional[int]:
        """Complete an active order and forward the result to the ledger.

        Calling this for an order that is not active (never spawned,
        already completed or expired) changes nothing and emits nothing.

        Args:
            order_ref: Instance id, instance, or definition to complete.
            completion_time: Seconds from spawn to completion, or None if
                             unmeasured.
            points: Award decided by the caller. Defaults to the
                    definition's base points plus any express bonus.

        Returns:
            The points awarded, or None if the order was not active.
        """
        instance = self.find(order_ref)
        if instance is None:
            logger.warning("Trying to complete order %s that is not active", _describe(order_ref))
            return None

        self._remove(instance.instance_id)
        definition = instance.definition
        awarded = definition.points() if points is None else points

        if self._ledger is not None:
            self._ledger.complete_order(definition.is_express, awarded, completion_time)

        logger.info("Completed order %s for %d points", instance, awarded)
        self._hub.publish(
            OrderCompleted(
                instance_id=instance.instance_id,
                definition=definition,
                points=awarded,
                completion_time=completion_time,
            )
        )
        return awarded

    def expire_order(self, order_ref: OrderRef) -> bool:
        """Expire an active order immediately. Returns False if not active."""
        instance = self.find(order_ref)
        if instance is None:
            logger.warning("Trying to expire order %s that is not active", _describe(order_ref))
            return False
        self._expire(instance)
        return True

    def _expire_overdue_orders(self) -> None:
        # Collect first so the active list is not mutated while scanning
        expired: list[ActiveOrderInstance] = []
        for instance in self._active:
            if not instance.is_express:
                continue
            spawn_time = self._spawn_times.get(instance.instance_id)
            if spawn_time is None:
                continue
            if self._clock - spawn_time >= instance.definition.express_time_limit:
                expired.append(instance)

        for instance in expired:
            self._expire(instance)

    def _expire(self, instance: ActiveOrderInstance) -> None:
        self._remove(instance.instance_id)
        logger.info("Order %s expired", instance)
        self._hub.publish(
            OrderExpired(instance_id=instance.instance_id, definition=instance.definition)
        )

    def _remove(self, instance_id: int) -> None:
        self._active = [i for i in self._active if i.instance_id != instance_id]
        self._spawn_times.pop(instance_id, None)

    def find(self, order_ref: OrderRef) -> Optional[ActiveOrderInstance]:
        if isinstance(order_ref, ActiveOrderInstance):
            found = self.get_instance(order_ref.instance_id)
            if found is not None and found == order_ref:
                return found
            return None
        if isinstance(order_ref, OrderDefinition):
            for instance in self._active:
                if instance.definition == order_ref:
                    return instance
            return None
        if isinstance(order_ref, int) and not isinstance(order_ref, bool):
            return self.get_instance(order_ref)
        return None


def _describe(order_ref: OrderRef) -> str:
    if isinstance(order_ref, int):
        return f"#{order_ref}"
    return str(order_ref)
