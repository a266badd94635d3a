"""Tests for OrderScheduler spawning, completion and expiry."""

import logging
import random
from typing import Optional

from orderup.engine import OrderCatalog, OrderScheduler, RoundConfig, ScoreLedger
from orderup.events import (
    EventHub,
    EventKind,
    EventRecorder,
    RoundEnded,
    RoundPaused,
    RoundResumed,
    RoundStarted,
)
from orderup.models import OrderDefinition, OrderType

STANDARD = OrderDefinition(order_id="STD", order_type=OrderType.STANDARD)
EXPRESS = OrderDefinition(order_id="EXP", order_type=OrderType.EXPRESS, express_time_limit=60.0)


class CyclingRandom(random.Random):
    """Random whose choice() walks the sequence in order."""

    def __init__(self):
        super().__init__(0)
        self._next = 0

    def choice(self, seq):
        item = seq[self._next % len(seq)]
        self._next += 1
        return item


def make_scheduler(
    orders=(STANDARD,),
    ledger: bool = False,
    rng: Optional[random.Random] = None,
    **config_kwargs,
) -> tuple[EventHub, OrderScheduler, EventRecorder, Optional[ScoreLedger]]:
    """Helper to build an attached scheduler with a recorder on its hub."""
    hub = EventHub()
    score_ledger = ScoreLedger(hub) if ledger else None
    scheduler = OrderScheduler(
        hub,
        OrderCatalog(orders),
        RoundConfig(**config_kwargs),
        ledger=score_ledger,
        rng=rng or random.Random(0),
    )
    scheduler.attach()
    recorder = EventRecorder(hub)
    return hub, scheduler, recorder, score_ledger


def active_ids(scheduler: OrderScheduler) -> list[int]:
    return [instance.instance_id for instance in scheduler.active_orders]


class TestRoundStart:
    """Tests for the initial batch."""

    def test_initial_batch(self):
        _, scheduler, recorder, _ = make_scheduler()
        scheduler.on_round_start()

        assert active_ids(scheduler) == [0, 1, 2]
        assert recorder.count(EventKind.ORDER_SPAWNED) == 3
        assert all(instance.spawn_time == 0.0 for instance in scheduler.active_orders)

    def test_initial_batch_capped_by_capacity(self):
        _, scheduler, _, _ = make_scheduler(initial_spawn_count=4, max_active_orders=2)
        scheduler.on_round_start()
        assert scheduler.active_count == 2

    def test_no_initial_batch(self):
        _, scheduler, recorder, _ = make_scheduler(initial_spawn_count=0)
        scheduler.on_round_start()
        assert scheduler.active_count == 0
        assert recorder.events == []

    def test_round_start_event_triggers_reset(self):
        hub, scheduler, _, _ = make_scheduler()
        hub.publish(RoundStarted(round_number=1, duration=300))
        scheduler.complete_order(0)

        hub.publish(RoundStarted(round_number=2, duration=300))

        assert active_ids(scheduler) == [0, 1, 2]
        assert scheduler.clock == 0.0

    def test_spawned_event_carries_definition(self):
        _, scheduler, recorder, _ = make_scheduler(initial_spawn_count=1)
        scheduler.on_round_start()

        event = recorder.of_kind(EventKind.ORDER_SPAWNED)[0]
        assert event.instance_id == 0
        assert event.definition == STANDARD


class TestSpawning:
    """Tests for interval spawning and capacity."""

    def test_no_ticking_before_round_start(self):
        _, scheduler, recorder, _ = make_scheduler()
        scheduler.tick(100)
        assert scheduler.clock == 0.0
        assert recorder.events == []

    def test_spawns_fill_to_capacity(self):
        """Starting with 3 orders and capacity 5, spawns stop at 5."""
        _, scheduler, recorder, _ = make_scheduler(max_active_orders=5, spawn_interval=30)
        scheduler.on_round_start()

        scheduler.tick(30)
        assert scheduler.active_count == 4
        scheduler.tick(30)
        assert scheduler.active_count == 5
        for _ in range(4):
            scheduler.tick(30)
        assert scheduler.active_count == 5
        assert recorder.count(EventKind.ORDER_SPAWNED) == 5

    def test_at_most_one_spawn_per_tick(self):
        _, scheduler, _, _ = make_scheduler(spawn_interval=30)
        scheduler.on_round_start()
        scheduler.tick(100)
        assert scheduler.active_count == 4

    def test_partial_ticks_accumulate(self):
        _, scheduler, _, _ = make_scheduler(spawn_interval=30)
        scheduler.on_round_start()

        scheduler.tick(10)
        scheduler.tick(10)
        assert scheduler.active_count == 3
        scheduler.tick(10)
        assert scheduler.active_count == 4
        assert scheduler.active_orders[-1].spawn_time == 30.0

    def test_spawn_waits_for_free_slot(self):
        """Time keeps accumulating while full; a freed slot is filled on the next tick."""
        _, scheduler, _, _ = make_scheduler(max_active_orders=3, spawn_interval=30)
        scheduler.on_round_start()
        scheduler.tick(30)
        assert scheduler.active_count == 3

        scheduler.complete_order(0)
        scheduler.tick(1)

        assert active_ids(scheduler) == [1, 2, 3]

    def test_spawn_order_refuses_when_full(self):
        _, scheduler, _, _ = make_scheduler(max_active_orders=3)
        scheduler.on_round_start()
        assert scheduler.spawn_order() is None
        assert scheduler.active_count == 3

    def test_instance_ids_never_reused(self):
        _, scheduler, _, _ = make_scheduler(spawn_interval=30)
        scheduler.on_round_start()
        scheduler.complete_order(0)
        scheduler.complete_order(1)

        scheduler.tick(30)

        assert active_ids(scheduler) == [2, 3]
        assert scheduler.next_instance_id == 4

    def test_negative_elapsed_treated_as_zero(self):
        _, scheduler, _, _ = make_scheduler()
        scheduler.on_round_start()
        scheduler.tick(-5)
        assert scheduler.clock == 0.0

    def test_empty_catalog(self, caplog):
        """An empty catalog spawns nothing and only logs a warning."""
        _, scheduler, recorder, _ = make_scheduler(orders=())

        with caplog.at_level(logging.WARNING, logger="orderup.engine.order_scheduler"):
            scheduler.on_round_start()
            scheduler.tick(30)

        assert scheduler.active_count == 0
        assert recorder.events == []
        assert "No orders available" in caplog.text


class TestExpiry:
    """Tests for Express order expiry."""

    def test_express_expires_at_limit(self):
        _, scheduler, recorder, _ = make_scheduler(
            orders=(EXPRESS,), initial_spawn_count=1, spawn_interval=1000
        )
        scheduler.on_round_start()

        scheduler.tick(30)
        scheduler.tick(29)
        assert scheduler.active_count == 1

        scheduler.tick(1)
        assert scheduler.active_count == 0
        expired = recorder.of_kind(EventKind.ORDER_EXPIRED)
        assert len(expired) == 1
        assert expired[0].instance_id == 0

        scheduler.tick(30)
        assert recorder.count(EventKind.ORDER_EXPIRED) == 1

    def test_standard_orders_never_expire(self):
        _, scheduler, recorder, _ = make_scheduler(spawn_interval=10_000)
        scheduler.on_round_start()
        scheduler.tick(5_000)
        assert scheduler.active_count == 3
        assert recorder.count(EventKind.ORDER_EXPIRED) == 0

    def test_expiry_runs_before_spawning(self):
        """All overdue orders expire in one tick and free capacity for a spawn."""
        _, scheduler, recorder, _ = make_scheduler(
            orders=(EXPRESS,), max_active_orders=3, spawn_interval=60
        )
        scheduler.on_round_start()
        recorder.clear()

        scheduler.tick(60)

        assert recorder.kinds() == [EventKind.ORDER_EXPIRED] * 3 + [EventKind.ORDER_SPAWNED]
        assert active_ids(scheduler) == [3]

    def test_expired_order_cannot_be_completed(self):
        _, scheduler, recorder, _ = make_scheduler(
            orders=(EXPRESS,), initial_spawn_count=1, spawn_interval=1000
        )
        scheduler.on_round_start()
        scheduler.tick(60)

        assert scheduler.complete_order(0) is None
        assert recorder.count(EventKind.ORDER_COMPLETED) == 0

    def test_expire_order(self):
        _, scheduler, recorder, _ = make_scheduler()
        scheduler.on_round_start()

        assert scheduler.expire_order(1) is True
        assert scheduler.expire_order(1) is False
        assert active_ids(scheduler) == [0, 2]
        assert recorder.count(EventKind.ORDER_EXPIRED) == 1


class TestCompletion:
    """Tests for complete_order."""

    def test_complete_by_id(self):
        _, scheduler, recorder, _ = make_scheduler()
        scheduler.on_round_start()

        assert scheduler.complete_order(1) == 50
        assert active_ids(scheduler) == [0, 2]
        completed = recorder.of_kind(EventKind.ORDER_COMPLETED)
        assert len(completed) == 1
        assert completed[0].instance_id == 1
        assert completed[0].points == 50

    def test_completion_is_idempotent(self, caplog):
        _, scheduler, recorder, _ = make_scheduler()
        scheduler.on_round_start()
        scheduler.complete_order(0)

        with caplog.at_level(logging.WARNING, logger="orderup.engine.order_scheduler"):
            assert scheduler.complete_order(0) is None

        assert recorder.count(EventKind.ORDER_COMPLETED) == 1
        assert "not active" in caplog.text

    def test_unknown_order(self):
        _, scheduler, recorder, _ = make_scheduler()
        scheduler.on_round_start()
        recorder.clear()

        assert scheduler.complete_order(99) is None
        assert scheduler.active_count == 3
        assert recorder.events == []

    def test_complete_by_definition_takes_oldest(self):
        _, scheduler, _, _ = make_scheduler()
        scheduler.on_round_start()

        scheduler.complete_order(STANDARD)

        assert active_ids(scheduler) == [1, 2]

    def test_complete_right_definition_among_mixed(self):
        """Completing the express definition leaves standard orders active."""
        _, scheduler, _, ledger = make_scheduler(
            orders=(STANDARD, EXPRESS), ledger=True, rng=CyclingRandom()
        )
        scheduler.on_round_start()
        assert [i.definition for i in scheduler.active_orders] == [STANDARD, EXPRESS, STANDARD]

        assert scheduler.complete_order(EXPRESS) == 75

        assert active_ids(scheduler) == [0, 2]
        assert ledger.express_orders_completed == 1
        assert ledger.standard_orders_completed == 0

    def test_complete_by_instance(self):
        _, scheduler, _, _ = make_scheduler()
        scheduler.on_round_start()
        instance = scheduler.active_orders[2]

        assert scheduler.complete_order(instance) == 50
        assert scheduler.complete_order(instance) is None

    def test_stale_instance_from_previous_round(self):
        """An instance from an earlier round does not match a reused id."""
        _, scheduler, _, _ = make_scheduler(orders=(STANDARD, EXPRESS), rng=CyclingRandom())
        scheduler.on_round_start()
        old = scheduler.get_instance(0)
        scheduler.on_round_end()
        scheduler.on_round_start()

        assert scheduler.get_instance(0).definition == EXPRESS
        assert scheduler.complete_order(old) is None
        assert scheduler.active_count == 3

    def test_points_override(self):
        _, scheduler, recorder, ledger = make_scheduler(ledger=True)
        scheduler.on_round_start()

        assert scheduler.complete_order(0, points=20) == 20
        assert ledger.current_score == 20
        assert recorder.of_kind(EventKind.ORDER_COMPLETED)[0].points == 20

    def test_completion_forwarded_to_ledger(self):
        _, scheduler, recorder, ledger = make_scheduler(orders=(EXPRESS,), ledger=True)
        scheduler.on_round_start()

        scheduler.complete_order(0, completion_time=12.0)

        assert ledger.current_score == 75
        assert ledger.express_orders_completed == 1
        assert ledger.average_completion_time == 12.0
        assert recorder.of_kind(EventKind.ORDER_COMPLETED)[0].completion_time == 12.0
        assert recorder.kinds()[-3:] == [
            EventKind.SCORE_CHANGED,
            EventKind.ORDERS_COMPLETED_CHANGED,
            EventKind.ORDER_COMPLETED,
        ]

    def test_active_orders_is_snapshot(self):
        _, scheduler, _, _ = make_scheduler()
        scheduler.on_round_start()

        snapshot = scheduler.active_orders
        snapshot.clear()

        assert scheduler.active_count == 3


class TestLifecycleEvents:
    """Tests for pause, resume and teardown through the hub."""

    def test_pause_and_resume(self):
        hub, scheduler, _, _ = make_scheduler()
        hub.publish(RoundStarted(round_number=1, duration=300))

        hub.publish(RoundPaused(remaining=290))
        scheduler.tick(50)
        assert scheduler.clock == 0.0
        assert not scheduler.is_ticking

        hub.publish(RoundResumed(remaining=290))
        scheduler.tick(50)
        assert scheduler.clock == 50.0

    def test_round_end_clears_silently(self):
        hub, scheduler, recorder, _ = make_scheduler(orders=(EXPRESS,))
        hub.publish(RoundStarted(round_number=1, duration=300))
        recorder.clear()

        hub.publish(RoundEnded(round_number=1))
        scheduler.tick(100)

        assert scheduler.active_count == 0
        assert recorder.kinds() == [EventKind.ROUND_END]

    def test_detach(self):
        hub, scheduler, _, _ = make_scheduler()
        scheduler.detach()
        hub.publish(RoundStarted(round_number=1, duration=300))
        assert scheduler.active_count == 0
