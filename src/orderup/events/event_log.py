"""Event recording and YAML export of a round's event stream."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
import yaml

from orderup.events.round_events import EventKind, RoundEvent
from orderup.events.event_hub import EventHub


class EventRecorder:
    """Subscribes to an EventHub and keeps every event in arrival order.

    Usage:
        recorder = EventRecorder(hub)
        session.start_round()
        spawned = recorder.of_kind(EventKind.ORDER_SPAWNED)
        recorder.detach()

    Args:
        hub: The hub to record from.
        kinds: Event kinds to record. Defaults to all kinds.
    """

    def __init__(self, hub: EventHub, kinds: Optional[set[EventKind]] = None):
        self._hub = hub
        self._kinds = set(kinds) if kinds is not None else set(EventKind)
        self.events: list[RoundEvent] = []
        for kind in self._kinds:
            hub.subscribe(kind, self._record)

    def _record(self, event: RoundEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[RoundEvent]:
        """Recorded events of one kind, in order."""
        return [event for event in self.events if event.kind == kind]

    def kinds(self) -> list[EventKind]:
        """Kinds of all recorded events, in order."""
        return [event.kind for event in self.events]

    def count(self, kind: EventKind) -> int:
        return sum(1 for event in self.events if event.kind == kind)

    def clear(self) -> None:
        self.events.clear()

    def detach(self) -> None:
        """Unsubscribe from the hub."""
        for kind in self._kinds:
            self._hub.unsubscribe(kind, self._record)


class RoundLog(BaseModel):
    """Serializable record of one simulated round."""

    round_id: str = Field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    round_number: int = 0
    seed: Optional[int] = None
    events: list[RoundEvent] = Field(default_factory=list)
    summary: str = ""
    metadata: dict = Field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"Round {self.round_number} ({self.round_id})"]
        for event in self.events:
            if event.kind == EventKind.TIMER_UPDATE:
                continue
            lines.append(f"  {event}")
        if self.summary:
            lines.append("")
            lines.extend(f"  {line}" for line in self.summary.splitlines())
        return "\n".join(lines)

    def to_yaml(self, include_timer_updates: bool = False) -> str:
        """Serialize the log to a YAML string.

        Timer updates fire every tick and are left out unless requested.
        """
        data = self.model_dump(mode="json", serialize_as_any=True)
        if not include_timer_updates:
            data["events"] = [
                event for event in data["events"]
                if event["kind"] != EventKind.TIMER_UPDATE.value
            ]
        return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def save_to_file(self, filepath: str, include_timer_updates: bool = False) -> None:
        """Serialize the log to a YAML file."""
        yaml_content = self.to_yaml(include_timer_updates=include_timer_updates)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(yaml_content)
