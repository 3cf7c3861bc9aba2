"""
Happens-before graph over the events of a trace.

The graph is an arena: nodes are trace positions and edges are lists of
integer successor ids.  :class:`CausalGraphBuilder` derives one edge for
every causally ordered pair of events; the
:class:`~hbgraph.core.reduction.TransitiveReducer` later shrinks the
edge lists in place to the minimal form.

Building compares every pair of events, costing O(n² · p) for ``n``
events and ``p`` processes.  This is the dominant cost of the pipeline
and the practical limit on trace size.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from hbgraph.core.event import Event
from hbgraph.core.trace import Trace
from hbgraph.utils.logger import AnalysisLogger, LogLevel


class CausalGraph:
    """
    Directed acyclic graph of happens-before relationships.

    Every event id in ``range(len(events))`` has an entry in
    :attr:`edges`, possibly empty.  Successor lists keep insertion order.

    Attributes:
        events: Tuple of all events, indexed by id.
        edges: Mapping from event id to its ordered successor ids.
    """

    def __init__(
        self,
        events: Iterable[Event],
        edges: Optional[Dict[int, Iterable[int]]] = None,
    ) -> None:
        """
        Create a graph over *events*, optionally with initial *edges*.

        Raises:
            ValueError: If an edge references an unknown id, is a self
                edge, or is duplicated.
        """
        self._events: Tuple[Event, ...] = tuple(events)
        self.edges: Dict[int, List[int]] = {i: [] for i in range(len(self._events))}
        for source, targets in (edges or {}).items():
            for target in targets:
                if not self.add_edge(source, target):
                    raise ValueError(f"Duplicate edge {source} -> {target}")

    # ------------------------------------------------------------------ #
    # Mutation
    # ------------------------------------------------------------------ #

    def add_edge(self, source: int, target: int) -> bool:
        """
        Add ``source -> target``.

        Returns:
            False if the edge already existed, True otherwise.

        Raises:
            ValueError: For unknown ids or a self edge.
        """
        self._check_id(source)
        self._check_id(target)
        if source == target:
            raise ValueError(f"Self edge on node {source} is not allowed")
        successors = self.edges[source]
        if target in successors:
            return False
        successors.append(target)
        return True

    def set_successors(self, source: int, targets: Iterable[int]) -> None:
        """Replace the successor list of *source* (used by reduction)."""
        self._check_id(source)
        self.edges[source] = list(targets)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @property
    def events(self) -> Tuple[Event, ...]:
        """All events in the graph, indexed by id."""
        return self._events

    def __len__(self) -> int:
        return len(self._events)

    def successors(self, node: int) -> Tuple[int, ...]:
        """Direct successors of *node*, in insertion order."""
        return tuple(self.edges[node])

    def edge_count(self) -> int:
        """Total number of edges."""
        return sum(len(targets) for targets in self.edges.values())

    def edge_list(self) -> List[Tuple[int, int]]:
        """All edges as ``(source, target)`` pairs, grouped by source id."""
        return [(u, v) for u in sorted(self.edges) for v in self.edges[u]]

    def has_edge(self, source: int, target: int) -> bool:
        return target in self.edges.get(source, ())

    def in_degrees(self) -> List[int]:
        """In-degree of every node, indexed by id."""
        degrees = [0] * len(self._events)
        for targets in self.edges.values():
            for v in targets:
                degrees[v] += 1
        return degrees

    def roots(self) -> List[int]:
        """Ids of nodes without predecessors, ascending."""
        return [i for i, d in enumerate(self.in_degrees()) if d == 0]

    def sinks(self) -> List[int]:
        """Ids of nodes without successors, ascending."""
        return [i for i in sorted(self.edges) if not self.edges[i]]

    def descendants(self, node: int) -> FrozenSet[int]:
        """All nodes reachable from *node* (excluding itself unless cyclic)."""
        self._check_id(node)
        seen: set[int] = set()
        stack = list(self.edges[node])
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self.edges[current])
        return frozenset(seen)

    def is_reachable(self, source: int, target: int) -> bool:
        """True when a non-empty path leads from *source* to *target*."""
        return target in self.descendants(source)

    def longest_path_length(self, order: Sequence[int]) -> int:
        """
        Number of edges on the longest path, given a topological *order*.
        """
        depth = [0] * len(self._events)
        longest = 0
        for u in order:
            for v in self.edges[u]:
                if depth[v] < depth[u] + 1:
                    depth[v] = depth[u] + 1
                    longest = max(longest, depth[v])
        return longest

    def out_degree_stats(self) -> Dict[str, float]:
        """Average and maximum out-degree."""
        degrees = [len(targets) for targets in self.edges.values()]
        if not degrees:
            return {"avg_out_degree": 0.0, "max_out_degree": 0}
        return {
            "avg_out_degree": sum(degrees) / len(degrees),
            "max_out_degree": max(degrees),
        }

    def copy(self) -> CausalGraph:
        """Return a graph sharing the events but with independent edge lists."""
        clone = CausalGraph(self._events)
        clone.edges = {u: list(targets) for u, targets in self.edges.items()}
        return clone

    def _check_id(self, node: int) -> None:
        if not 0 <= node < len(self._events):
            raise ValueError(f"Unknown node id {node} (graph has {len(self._events)} nodes)")

    def __repr__(self) -> str:
        return f"CausalGraph({len(self._events)} nodes, {self.edge_count()} edges)"


class CausalGraphBuilder:
    """
    Derives a :class:`CausalGraph` from a trace by exhaustive comparison.

    For each unordered pair ``(i, j)`` with ``i < j`` the builder adds
    ``i -> j`` when event ``i`` happens before event ``j``, otherwise
    ``j -> i`` when the converse holds.  Trace order is never assumed
    to be causal order.

    Events on different processes carrying equal clocks get no edge and
    are counted in :attr:`collisions`; they are reported as a warning.

    Attributes:
        logger: Logger for debug output.
        collisions: Pairs of equal-clock events seen by the last build.
    """

    def __init__(self, logger: Optional[AnalysisLogger] = None) -> None:
        self.logger: AnalysisLogger = logger or AnalysisLogger(LogLevel.SILENT)
        self.collisions: List[Tuple[int, int]] = []

    def build(self, trace: Union[Trace, Sequence[Event]]) -> CausalGraph:
        """
        Build the raw (unreduced) happens-before graph of *trace*.

        Never fails: every finite input yields a well-formed DAG,
        possibly without edges.
        """
        events = trace.events if isinstance(trace, Trace) else tuple(trace)
        graph = CausalGraph(events)
        self.collisions = []

        n = len(events)
        for i in range(n):
            ei = events[i]
            for j in range(i + 1, n):
                ej = events[j]
                if ei.happens_before(ej):
                    graph.add_edge(i, j)
                    self.logger.edge("added", i, j)
                elif ej.happens_before(ei):
                    graph.add_edge(j, i)
                    self.logger.edge("added", j, i)
                elif ei.process != ej.process and ei.clock == ej.clock:
                    self.collisions.append((i, j))

        if self.collisions:
            self.logger.warning(
                f"{len(self.collisions)} pair(s) of events on different processes "
                f"share a vector clock; they are treated as concurrent"
            )
            for i, j in self.collisions:
                self.logger.debug(f"Equal clocks on e-{i} and e-{j}: {events[i].clock}")

        self.logger.info(f"Built causal graph: {n} nodes, {graph.edge_count()} edges")
        return graph
