from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Literal


EventName = Literal[
    "FormCreated",
    "QuestionCreated",
    "ResponderAdded",
    "ResponseSubmitted",
]


@dataclass(frozen=True)
class Event:
    seq: int
    name: str
    args: dict[str, Any] = field(default_factory=dict)
    timestamp: float = 0.0


class EventLog:
    """Append-only log of registry lifecycle notifications.

    Every committed mutation appends one event per generated identifier, so a
    caller that only knows "what it asked for" can scan the log (by name, after
    a cursor) to recover what the registry allocated.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._events: list[Event] = []
        self._seq = 0

    def append(self, name: str, **args: Any) -> Event:
        with self._lock:
            self._seq += 1
            ev = Event(seq=self._seq, name=str(name), args=dict(args), timestamp=time.time())
            self._events.append(ev)
            return ev

    def latest_seq(self) -> int:
        with self._lock:
            return self._seq

    def all(self, name: str | None = None) -> list[Event]:
        return self.since(0, name=name)

    def since(self, seq: int, name: str | None = None) -> list[Event]:
        with self._lock:
            # seq values are dense and start at 1, so position == seq - 1.
            start = max(0, int(seq))
            out = self._events[start:]
        if name is not None:
            out = [e for e in out if e.name == name]
        return out

    def find(self, name: str, since: int = 0) -> Event | None:
        for ev in self.since(since, name=name):
            return ev
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
