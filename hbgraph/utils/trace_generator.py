"""
Random asynchronous trace generation.

Simulates processes exchanging point-to-point messages and records the
resulting send and receive events with correct vector clocks.  Useful
for exercising the analyzer on traces larger than hand-written ones.
"""

from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional, Tuple

from hbgraph.core.event import Event, EventKind
from hbgraph.core.trace import Trace
from hbgraph.core.vector_clock import VectorClock


class TraceGenerator:
    """
    Generates clock-respecting traces of asynchronous message passing.

    Each step picks a process uniformly at random.  If messages are
    waiting for it, it receives one of them (chosen at random) with
    probability 1/2; otherwise it sends a new message to some other
    process.  A send increments the sender's own coordinate; a receive
    merges the message clock into the receiver's and then increments
    the receiver's own coordinate.

    Attributes:
        processes: Process ids, in declaration order.
        rng: The random source; never the module-level one.
    """

    def __init__(
        self,
        processes: Iterable[str],
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        """
        Args:
            processes: At least two distinct process ids.
            rng: Random source to draw from.
            seed: Seed for a fresh ``random.Random`` when *rng* is omitted.

        Raises:
            ValueError: If fewer than two distinct processes are given.
        """
        self.processes: List[str] = list(dict.fromkeys(processes))
        if len(self.processes) < 2:
            raise ValueError("Trace generation needs at least two distinct processes")
        self.rng: random.Random = rng if rng is not None else random.Random(seed)

    def generate(self, num_events: int) -> Trace:
        """
        Generate a trace of exactly *num_events* events.

        Message ids are assigned sequentially from 0 and every receive
        carries the id of the send it consumes.

        Raises:
            ValueError: If *num_events* is negative.
        """
        if num_events < 0:
            raise ValueError(f"Event count must be non-negative, got {num_events}")

        clocks: Dict[str, VectorClock] = {
            p: VectorClock.zero(self.processes) for p in self.processes
        }
        pending: Dict[str, List[Tuple[int, VectorClock]]] = {p: [] for p in self.processes}
        trace = Trace(processes=self.processes)
        next_msg = 0

        while len(trace) < num_events:
            process = self.rng.choice(self.processes)
            inbox = pending[process]
            clock = clocks[process]

            if inbox and self.rng.randrange(2) == 0:
                msg_id, sent_clock = inbox.pop(self.rng.randrange(len(inbox)))
                clock.merge(sent_clock)
                clock.increment(process)
                trace.append(Event(EventKind.RECEIVE, process, clock, msg_id))
            else:
                receiver = self.rng.choice([p for p in self.processes if p != process])
                clock.increment(process)
                pending[receiver].append((next_msg, clock.copy()))
                trace.append(Event(EventKind.SEND, process, clock, next_msg))
                next_msg += 1

        return trace


def generate_trace(
    processes: Iterable[str],
    num_events: int,
    seed: Optional[int] = None,
) -> Trace:
    """Convenience wrapper: one seeded generator, one trace."""
    return TraceGenerator(processes, seed=seed).generate(num_events)
