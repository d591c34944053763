"""Double-buffered events: writers send, readers see each event across one update."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any


class Events:
    """Events sent since the last update, plus those sent in the update before it.

    Each update moves the current events into the previous buffer and drops
    whatever was there. A reader that keeps up sees every event exactly once.
    """

    def __init__(self) -> None:
        self._next: list[Any] = []
        self._prev: list[Any] = []
        self._ticks = 1

    @property
    def ticks(self) -> int:
        """How many updates have happened, starting at 1."""
        return self._ticks

    @property
    def current(self) -> list[Any]:
        """Events sent since the last update."""
        return list(self._next)

    @property
    def previous(self) -> list[Any]:
        """Events sent before the last update, still readable until the next one."""
        return list(self._prev)

    def send(self, event: Any) -> None:
        """Queue an event for readers."""
        self._next.append(event)

    def update(self) -> None:
        """Age the buffers: current events become previous, older ones are dropped."""
        self._prev = self._next
        self._next = []
        self._ticks += 1


class EventCursor:
    """A reader's position within an Events buffer, kept between reads."""

    def __init__(self) -> None:
        self.ticks = 0
        self.index = 0

    def next(self, events: Events) -> Any:
        """Return the next unread event, or None if the reader is caught up."""
        if self.ticks + 1 < events.ticks:
            # More than one update was missed: the older events are gone.
            self.ticks = events.ticks - 1
            self.index = 0

        if self.ticks + 1 == events.ticks:
            if self.index < len(events._prev):
                event = events._prev[self.index]
                self.index += 1
                return event
            self.ticks += 1
            self.index = 0

        if self.index < len(events._next):
            event = events._next[self.index]
            self.index += 1
            return event
        return None


class InEvent:
    """Reads the unread events of a buffer, advancing a persistent cursor."""

    def __init__(self, events: Events, cursor: EventCursor) -> None:
        self._events = events
        self._cursor = cursor

    def __iter__(self) -> Iterator[Any]:
        while (event := self._cursor.next(self._events)) is not None:
            yield event


class OutEvent:
    """Sends events into a buffer."""

    def __init__(self, events: Events) -> None:
        self._events = events

    def send(self, event: Any) -> None:
        self._events.send(event)