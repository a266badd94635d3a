"""Simulated crews that drive a session in place of players."""

from orderup.ai.stub_crew import (
    Crew,
    StubCrew,
    create_stub_crew,
)

__all__ = [
    "Crew",
    "StubCrew",
    "create_stub_crew",
]
