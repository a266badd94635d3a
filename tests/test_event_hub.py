"""Tests for the EventHub publish/subscribe registry."""

import pytest

from orderup.events import (
    EventHub,
    EventKind,
    ScoreChanged,
    TimerUpdate,
)


class TestEventHubSubscribe:
    """Tests for subscribe/unsubscribe."""

    def test_publish_reaches_subscriber(self):
        hub = EventHub()
        received = []
        hub.subscribe(EventKind.SCORE_CHANGED, received.append)

        hub.publish(ScoreChanged(score=10))

        assert len(received) == 1
        assert received[0].score == 10

    def test_only_matching_kind_is_delivered(self):
        hub = EventHub()
        received = []
        hub.subscribe(EventKind.SCORE_CHANGED, received.append)

        hub.publish(TimerUpdate(remaining=5.0))

        assert received == []

    def test_subscribers_called_in_subscription_order(self):
        hub = EventHub()
        calls = []
        hub.subscribe(EventKind.SCORE_CHANGED, lambda e: calls.append("first"))
        hub.subscribe(EventKind.SCORE_CHANGED, lambda e: calls.append("second"))

        hub.publish(ScoreChanged(score=1))

        assert calls == ["first", "second"]

    def test_duplicate_subscription_ignored(self):
        """Subscribing the same callback twice delivers once."""
        hub = EventHub()
        received = []
        hub.subscribe(EventKind.SCORE_CHANGED, received.append)
        hub.subscribe(EventKind.SCORE_CHANGED, received.append)

        hub.publish(ScoreChanged(score=1))

        assert len(received) == 1
        assert hub.subscriber_count(EventKind.SCORE_CHANGED) == 1

    def test_unsubscribe(self):
        hub = EventHub()
        received = []
        hub.subscribe(EventKind.SCORE_CHANGED, received.append)

        assert hub.unsubscribe(EventKind.SCORE_CHANGED, received.append) is True
        hub.publish(ScoreChanged(score=1))

        assert received == []
        assert hub.subscriber_count(EventKind.SCORE_CHANGED) == 0

    def test_unsubscribe_unknown_returns_false(self):
        hub = EventHub()
        assert hub.unsubscribe(EventKind.SCORE_CHANGED, print) is False

    def test_subscribe_all_and_unsubscribe_all(self):
        hub = EventHub()
        received = []
        hub.subscribe_all(received.append)

        hub.publish(ScoreChanged(score=1))
        hub.publish(TimerUpdate(remaining=1.0))
        hub.unsubscribe_all(received.append)
        hub.publish(ScoreChanged(score=2))

        assert [e.kind for e in received] == [EventKind.SCORE_CHANGED, EventKind.TIMER_UPDATE]
        assert all(hub.subscriber_count(kind) == 0 for kind in EventKind)

    def test_clear(self):
        hub = EventHub()
        hub.subscribe(EventKind.SCORE_CHANGED, print)
        hub.clear()
        assert hub.subscriber_count(EventKind.SCORE_CHANGED) == 0


class TestEventHubPublish:
    """Tests for delivery semantics."""

    def test_publish_without_subscribers(self):
        EventHub().publish(ScoreChanged(score=0))

    def test_subscriber_may_unsubscribe_during_delivery(self):
        """A handler removing itself does not skip later handlers."""
        hub = EventHub()
        calls = []

        def once(event):
            calls.append("once")
            hub.unsubscribe(EventKind.SCORE_CHANGED, once)

        hub.subscribe(EventKind.SCORE_CHANGED, once)
        hub.subscribe(EventKind.SCORE_CHANGED, lambda e: calls.append("always"))

        hub.publish(ScoreChanged(score=1))
        hub.publish(ScoreChanged(score=2))

        assert calls == ["once", "always", "always"]

    def test_subscriber_exception_propagates(self):
        hub = EventHub()

        def broken(event):
            raise RuntimeError("boom")

        hub.subscribe(EventKind.SCORE_CHANGED, broken)
        with pytest.raises(RuntimeError):
            hub.publish(ScoreChanged(score=1))
