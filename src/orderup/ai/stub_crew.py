"""Stub crew for simulated rounds.

The crew stands in for the players who pick and pack orders. It never
touches engine state directly: like any other collaborator it decides
whether a box passes the content check and calls
GameSession.complete_order() with that result.
"""

import random
from typing import Optional, Protocol

from orderup.engine.session import GameSession


class Crew(Protocol):
    """Anything that acts on a session once per simulation step."""

    def act(self, session: GameSession) -> list[int]:
        """Attempt completions; return the instance ids that were completed."""
        ...


class StubCrew:
    """Completes active orders at random.

    An order becomes eligible once it has been active for `min_pack_time`
    seconds. Each step, every eligible order is shipped with probability
    `complete_chance`; a shipped box fails its content check with
    probability `mistake_chance` and the order stays active.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        complete_chance: float = 0.15,
        min_pack_time: float = 10.0,
        mistake_chance: float = 0.05,
    ):
        if not 0.0 <= complete_chance <= 1.0:
            raise ValueError(f"complete_chance must be within [0, 1], got {complete_chance}")
        if not 0.0 <= mistake_chance <= 1.0:
            raise ValueError(f"mistake_chance must be within [0, 1], got {mistake_chance}")
        self._rng = random.Random(seed)
        self.complete_chance = complete_chance
        self.min_pack_time = min_pack_time
        self.mistake_chance = mistake_chance
        self.mistakes = 0

    def act(self, session: GameSession) -> list[int]:
        completed: list[int] = []
        now = session.scheduler.clock

        for instance in session.active_orders:
            if instance.age(now) < self.min_pack_time:
                continue
            if self._rng.random() >= self.complete_chance:
                continue

            validated = self._rng.random() >= self.mistake_chance
            if not validated:
                self.mistakes += 1

            awarded = session.complete_order(instance, validated=validated, measure_time=True)
            if awarded is not None:
                completed.append(instance.instance_id)

        return completed


def create_stub_crew(
    seed: Optional[int] = None,
    complete_chance: float = 0.15,
) -> StubCrew:
    """Create a stub crew with optional random seed."""
    return StubCrew(seed=seed, complete_chance=complete_chance)
