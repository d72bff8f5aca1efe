# mailbox.py
# Single-slot holder for the most recent input event. Not a queue: a newer
# event overwrites an unhandled older one.

import enum
from typing import NamedTuple, Protocol, Tuple


class EventKind(enum.IntEnum):
    NONE = 0
    KEYBOARD = 1
    MOUSE = 2


class Event(NamedTuple):
    kind: EventKind = EventKind.NONE
    payload: Tuple = ()

    @classmethod
    def keyboard(cls, char: str) -> "Event":
        return cls(EventKind.KEYBOARD, (char,))

    @classmethod
    def mouse(cls, x: int, y: int) -> "Event":
        return cls(EventKind.MOUSE, (int(x), int(y)))

    @property
    def pending(self) -> bool:
        return self.kind != EventKind.NONE

    @property
    def char(self) -> str:
        return self.payload[0]

    @property
    def xy(self) -> Tuple[int, int]:
        return self.payload[0], self.payload[1]


NO_EVENT = Event()


class InputSource(Protocol):
    def listen(self) -> Event:
        """Return the next input event, or NO_EVENT if none is waiting."""

    def wait(self) -> Event:
        """Block until an input event arrives and return it."""


class Mailbox:
    def __init__(self, source: InputSource):
        self.source = source
        self.held: Event = NO_EVENT

    def poll(self) -> Event:
        # never blocks, never clears; a fresh event replaces the held one
        event = self.source.listen()
        if event.pending:
            self.held = event
        return self.held

    def wait_for_change(self) -> Event:
        """Return the pending event, blocking on the source until there is one.

        The holder is reset before returning, so the event is handed out
        exactly once and NO_EVENT is never returned.
        """
        while not self.held.pending:
            self.held = self.source.wait()
        event = self.held
        self.reset()
        return event

    def reset(self):
        self.held = NO_EVENT
