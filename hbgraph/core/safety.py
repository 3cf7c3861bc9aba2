"""
Safety property checking over causal futures.

A safety property pairs a *precondition* selecting trigger events with a
*postcondition* that must hold for every event in each trigger's causal
future.  The future is explored along the (reduced) graph's edges, which
preserve reachability exactly.  A failing property is a normal outcome
reported through :class:`SafetyResult`, never an exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

from hbgraph.core.causal_graph import CausalGraph
from hbgraph.core.event import Event
from hbgraph.utils.logger import AnalysisLogger, LogLevel

Precondition = Callable[[Event], bool]
Postcondition = Callable[[int, Event, int, Event], bool]


@dataclass(frozen=True)
class Violation:
    """
    A trigger together with a descendant that failed the postcondition.

    Attributes:
        trigger_id: Id of the event satisfying the precondition.
        offending_id: Id of the descendant failing the postcondition.
        trigger: The trigger event.
        offending: The offending event.
    """

    trigger_id: int
    offending_id: int
    trigger: Event
    offending: Event

    def __str__(self) -> str:
        return (
            f"e-{self.trigger_id} ({self.trigger.kind.label} on {self.trigger.process}) "
            f"-> e-{self.offending_id} ({self.offending.kind.label} on "
            f"{self.offending.process}, VClock: {self.offending.clock})"
        )


@dataclass
class SafetyResult:
    """
    Outcome of checking a safety property.

    Attributes:
        holds: Whether the property holds.
        violations: Every violation found (at most one when failing fast).
        triggers_checked: Number of events that satisfied the precondition
            and had their future explored.
        events_evaluated: Total postcondition evaluations.
    """

    holds: bool
    violations: List[Violation] = field(default_factory=list)
    triggers_checked: int = 0
    events_evaluated: int = 0

    @property
    def violation(self) -> Optional[Violation]:
        """The first violation found, if any."""
        return self.violations[0] if self.violations else None

    @property
    def trigger_id(self) -> Optional[int]:
        return self.violation.trigger_id if self.violation else None

    @property
    def offending_id(self) -> Optional[int]:
        return self.violation.offending_id if self.violation else None

    def __bool__(self) -> bool:
        return self.holds


class SafetyChecker:
    """
    Verifies postconditions over the causal future of trigger events.

    Each trigger's descendants are traversed with an explicit stack and
    a per-trigger visited set, so every descendant is evaluated exactly
    once however many paths reach it.  The trigger itself is not
    evaluated.

    Attributes:
        graph: The (normally reduced) causal graph to traverse.
        logger: Logger for progress and violation output.
    """

    def __init__(self, graph: CausalGraph, logger: Optional[AnalysisLogger] = None) -> None:
        self.graph = graph
        self.logger: AnalysisLogger = logger or AnalysisLogger(LogLevel.SILENT)

    def check(
        self,
        precondition: Precondition,
        postcondition: Postcondition,
        fail_fast: bool = True,
    ) -> SafetyResult:
        """
        Check the property over every trigger's causal future.

        Args:
            precondition: Selects trigger events.
            postcondition: Called as ``postcondition(trigger_id, trigger,
                future_id, future)`` for each descendant of each trigger.
            fail_fast: Stop at the first violation.  When False every
                trigger is explored and every failing pair is recorded.

        Returns:
            SafetyResult describing the outcome.
        """
        result = SafetyResult(holds=True)
        events = self.graph.events

        for trigger_id, trigger in enumerate(events):
            if not precondition(trigger):
                continue
            result.triggers_checked += 1
            self.logger.debug(f"Trigger e-{trigger_id}: {trigger.describe()}")

            for future_id in self._causal_future(trigger_id):
                result.events_evaluated += 1
                if postcondition(trigger_id, trigger, future_id, events[future_id]):
                    continue
                violation = Violation(trigger_id, future_id, trigger, events[future_id])
                result.holds = False
                result.violations.append(violation)
                self.logger.violation(trigger_id, trigger, future_id, events[future_id])
                if fail_fast:
                    return result

        return result

    def _causal_future(self, start: int) -> Iterator[int]:
        """
        Yield each descendant of *start* once, in depth-first preorder.

        Successors are explored in adjacency order, matching a recursive
        traversal without its depth limit.
        """
        edges = self.graph.edges
        visited = set()
        stack = list(reversed(edges[start]))
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            yield node
            stack.extend(reversed(edges[node]))
