
"""
recorder.py
Collects GameEvent objects for a game in memory. Nothing is written to disk; the transcript lives as long as the recorder.
Related modules:
- events.py: Defines GameEvent type.
- serializer.py: Turns a transcript into JSON for display.
"""

from typing import List
from .events import GameEvent


class InMemoryRecorder:
    """
    Keeps the transcript of one game as a list, in the order events happened.
    Methods:
        record(event): Append one event.
        events(): Copy of the transcript.
        of_type(event_type): Only the events with that name.
        flush(): Start over with an empty transcript.
    """
    def __init__(self):
        self._events: List[GameEvent] = []

    def record(self, event: GameEvent) -> None:
        self._events.append(event)

    def events(self):
        return list(self._events)

    def of_type(self, event_type: str):
        return [e for e in self._events if e.event_type == event_type]

    def flush(self):
        self._events.clear()


def record_engine_events(engine, recorder: InMemoryRecorder, game_id: str) -> List[GameEvent]:
    """
    Move the events the engine emitted since the last call into the recorder.
    Args:
        engine (GameEngine): Engine to drain with pop_events().
        recorder (InMemoryRecorder): Destination.
        game_id (str): Identifier stamped on each event.
    Returns:
        list[GameEvent]: The events just recorded.
    """
    recorded = []
    for ev in engine.pop_events():
        payload = {k: v for k, v in ev.items() if k != "type"}
        event = GameEvent(game_id=game_id, event_type=ev["type"], payload=payload, player_type=ev.get("player"))
        recorder.record(event)
        recorded.append(event)
    return recorded
