"""
Ordered, append-only event traces.

A trace is the arena every other structure indexes into: an event's
position in the trace is its stable integer id, and graphs refer to
events only by that id.  Trace order itself carries no causal meaning.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from hbgraph.core.event import Event


class Trace:
    """
    Ordered sequence of events with stable integer identifiers.

    Attributes:
        events: Tuple of all events in trace order.
        processes: Declared process IDs, or those inferred from the
            events and their clock keys when none were declared.
    """

    def __init__(
        self,
        events: Iterable[Event] = (),
        processes: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Create a trace.

        Args:
            events: Initial events, in order.
            processes: Optional declared process set.  Events on other
                processes are still accepted; they extend the set.
        """
        self._events: List[Event] = []
        self._declared: FrozenSet[str] = frozenset(processes or ())
        for event in events:
            self.append(event)

    def append(self, event: Event) -> int:
        """Append *event* and return its id."""
        if not isinstance(event, Event):
            raise TypeError(f"Trace entries must be Event instances, got {event!r}")
        self._events.append(event)
        return len(self._events) - 1

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    @property
    def events(self) -> Tuple[Event, ...]:
        """All events in trace order."""
        return tuple(self._events)

    @property
    def processes(self) -> FrozenSet[str]:
        """Declared processes plus every process seen in the events."""
        seen = set(self._declared)
        for event in self._events:
            seen.add(event.process)
            seen.update(event.clock.processes)
        return frozenset(seen)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __getitem__(self, eid: int) -> Event:
        return self._events[eid]

    # ------------------------------------------------------------------ #
    # Derived traces
    # ------------------------------------------------------------------ #

    def sorted_by_clock(self) -> Trace:
        """
        Return a new trace stably sorted by clock total, then process.

        Any causal predecessor has a strictly smaller clock total, so the
        result is a valid linearisation of the happens-before order.
        """
        ordered = sorted(self._events, key=lambda e: (e.clock.total(), e.process))
        return Trace(ordered, processes=self._declared)

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def clock_collisions(self) -> List[Tuple[int, int]]:
        """
        Return id pairs of events on *different* processes whose clocks
        are equal.  Such pairs are treated as concurrent.
        """
        buckets: Dict[Tuple[Tuple[str, int], ...], List[int]] = defaultdict(list)
        for eid, event in enumerate(self._events):
            key = tuple(sorted((p, c) for p, c in event.clock.clock.items() if c))
            buckets[key].append(eid)

        pairs: List[Tuple[int, int]] = []
        for ids in buckets.values():
            for i, a in enumerate(ids):
                for b in ids[i + 1:]:
                    if self._events[a].process != self._events[b].process:
                        pairs.append((a, b))
        return sorted(pairs)

    def validate(self) -> List[str]:
        """
        Check the trace against the clock-construction contract.

        Validates:
        - Every receive with a message id has a matching send
        - That send happens before the receive
        - No two events of one process share an own-coordinate value

        Returns:
            List of error messages (empty if valid).
        """
        errors: List[str] = []

        sends: Dict[int, int] = {}
        for eid, event in enumerate(self._events):
            if event.is_send() and event.message_id is not None:
                if event.message_id in sends:
                    errors.append(
                        f"e-{eid}: message {event.message_id} is sent twice "
                        f"(first at e-{sends[event.message_id]})"
                    )
                else:
                    sends[event.message_id] = eid

        for eid, event in enumerate(self._events):
            if not event.is_receive() or event.message_id is None:
                continue
            send_id = sends.get(event.message_id)
            if send_id is None:
                errors.append(f"e-{eid}: receive of unknown message {event.message_id}")
            elif not self._events[send_id].happens_before(event):
                errors.append(
                    f"e-{eid}: receive of message {event.message_id} does not "
                    f"happen after its send e-{send_id}"
                )

        owners: Dict[Tuple[str, int], int] = {}
        for eid, event in enumerate(self._events):
            key = (event.process, event.own_counter())
            if key in owners:
                errors.append(
                    f"e-{eid}: process {event.process} reuses own counter "
                    f"{key[1]} (first at e-{owners[key]})"
                )
            else:
                owners[key] = eid

        return errors

    def __str__(self) -> str:
        return "".join(
            f"e-{eid:02d}: {event.describe()}\n" for eid, event in enumerate(self._events)
        )

    def __repr__(self) -> str:
        return f"Trace({len(self._events)} events, processes={sorted(self.processes)})"
