"""
Event representation for recorded distributed executions.

Each event belongs to exactly one process, is either a message send or
a message receive, and carries a snapshot of its process's vector clock
taken when the event executed.  Causal ordering between events is
derived purely from those clock snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union

from hbgraph.core.vector_clock import VectorClock


class EventKind(Enum):
    """Kind of a recorded event."""

    SEND = "send"
    RECEIVE = "receive"

    @property
    def label(self) -> str:
        """Short upper-case label used in listings and graph exports."""
        return "SEND" if self is EventKind.SEND else "RECV"

    @classmethod
    def parse(cls, s: str) -> EventKind:
        """
        Parse ``send``, ``receive`` or ``recv`` (any case).

        Raises:
            ValueError: For any other string.
        """
        value = s.strip().lower()
        if value == "recv":
            value = "receive"
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Event kind must be 'send' or 'receive', got '{s}'"
            ) from None

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class Event:
    """
    Immutable record of one Send or Receive action.

    The event stores a private copy of the clock it is given, so later
    mutation of the caller's clock never reaches the recorded snapshot.

    Attributes:
        kind: ``EventKind.SEND`` or ``EventKind.RECEIVE``.
        process: The process this event belongs to.
        clock: Vector clock snapshot at the time of the event.
        message_id: Optional id correlating a send with its receive.
    """

    kind: EventKind
    process: str
    clock: VectorClock
    message_id: Optional[int] = None

    def __post_init__(self) -> None:
        """Normalise the kind, validate fields and snapshot the clock."""
        kind: Union[EventKind, str] = self.kind
        if isinstance(kind, str):
            object.__setattr__(self, "kind", EventKind.parse(kind))
        elif not isinstance(kind, EventKind):
            raise ValueError(f"kind must be an EventKind, got {kind!r}")
        if not self.process:
            raise ValueError("Events require a non-empty process")
        if isinstance(self.clock, VectorClock):
            object.__setattr__(self, "clock", self.clock.copy())
        elif isinstance(self.clock, Mapping):
            object.__setattr__(self, "clock", VectorClock(self.clock))
        else:
            raise ValueError(f"clock must be a VectorClock, got {self.clock!r}")

    # ------------------------------------------------------------------ #
    # Type checks
    # ------------------------------------------------------------------ #

    def is_send(self) -> bool:
        """True if this is a message-send event."""
        return self.kind is EventKind.SEND

    def is_receive(self) -> bool:
        """True if this is a message-receive event."""
        return self.kind is EventKind.RECEIVE

    # ------------------------------------------------------------------ #
    # Causal ordering (vector clock based)
    # ------------------------------------------------------------------ #

    def happens_before(self, other: Event) -> bool:
        """True when ``VC(self) < VC(other)``."""
        return self.clock.happens_before(other.clock)

    def is_concurrent_with(self, other: Event) -> bool:
        """True when neither event happens before the other."""
        return self.clock.is_concurrent_with(other.clock)

    def own_counter(self) -> int:
        """This event's coordinate for its own process."""
        return self.clock.get(self.process)

    def describe(self) -> str:
        """One-line human-readable description (no id)."""
        msg = "-" if self.message_id is None else str(self.message_id)
        return f"Msg-{msg} {self.kind.label:<4} on {self.process}, VClock: {self.clock}"
