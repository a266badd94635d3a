"""Tests for the stub crew."""

import pytest

from orderup.ai import StubCrew, create_stub_crew
from orderup.engine import GameSession, OrderCatalog, RoundConfig
from orderup.models import OrderDefinition


def make_session() -> GameSession:
    session = GameSession(RoundConfig(), OrderCatalog([OrderDefinition(order_id="STD")]))
    session.start_round()
    return session


class TestStubCrew:
    """Tests for StubCrew.act."""

    def test_rejects_invalid_chances(self):
        with pytest.raises(ValueError):
            StubCrew(complete_chance=1.5)
        with pytest.raises(ValueError):
            StubCrew(mistake_chance=-0.1)

    def test_completes_every_eligible_order(self):
        session = make_session()
        crew = StubCrew(seed=1, complete_chance=1.0, min_pack_time=0.0, mistake_chance=0.0)

        assert crew.act(session) == [0, 1, 2]
        assert session.active_orders == []
        assert session.current_score == 150

    def test_never_completes_with_zero_chance(self):
        session = make_session()
        crew = StubCrew(seed=1, complete_chance=0.0, min_pack_time=0.0)
        assert crew.act(session) == []
        assert len(session.active_orders) == 3

    def test_mistakes_leave_orders_active(self):
        session = make_session()
        crew = StubCrew(seed=1, complete_chance=1.0, min_pack_time=0.0, mistake_chance=1.0)

        assert crew.act(session) == []
        assert crew.mistakes == 3
        assert len(session.active_orders) == 3

    def test_waits_for_pack_time(self):
        session = make_session()
        crew = StubCrew(seed=1, complete_chance=1.0, min_pack_time=10.0, mistake_chance=0.0)

        assert crew.act(session) == []
        session.tick(10)
        assert crew.act(session) == [0, 1, 2]
        assert session.ledger.average_completion_time == pytest.approx(10.0)

    def test_create_stub_crew(self):
        crew = create_stub_crew(seed=4, complete_chance=0.5)
        assert crew.complete_chance == 0.5
        assert crew.mistakes == 0
