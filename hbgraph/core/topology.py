"""
Topological ordering of causal graphs (Kahn's algorithm).

A graph built from vector clocks is always acyclic, so failing to order
every node means clock construction or comparison is broken.  That is
reported as :class:`CycleDetected` and is never recovered from.
"""

from __future__ import annotations

import heapq
from typing import Dict, List, Optional, Sequence, Tuple

from hbgraph.core.causal_graph import CausalGraph


class CycleDetected(Exception):
    """
    Raised when a causal graph turns out to contain a cycle.

    Attributes:
        remaining: Ids that could not be ordered.
        cycle: One cycle among them, as a node list (first node repeated
            implicitly at the end), if one could be traced.
        closing_edge: The edge that closes ``cycle``.
    """

    def __init__(
        self,
        remaining: Sequence[int],
        cycle: Optional[Sequence[int]] = None,
    ) -> None:
        self.remaining: List[int] = sorted(remaining)
        self.cycle: List[int] = list(cycle or [])
        self.closing_edge: Optional[Tuple[int, int]] = (
            (self.cycle[-1], self.cycle[0]) if self.cycle else None
        )
        message = f"Causal graph contains a cycle; {len(self.remaining)} node(s) unordered"
        if self.cycle:
            path = " -> ".join(str(n) for n in self.cycle + [self.cycle[0]])
            message += f" (cycle {path}, closed by edge {self.closing_edge[0]} -> {self.closing_edge[1]})"
        super().__init__(message)


class TopologicalSorter:
    """
    Orders graph nodes consistently with their edges.

    Nodes whose in-degree drops to zero at the same time are emitted
    lowest id first, so the order is deterministic for a given graph.

    Attributes:
        graph: The graph to order.
    """

    def __init__(self, graph: CausalGraph) -> None:
        self.graph = graph

    def sort(self) -> List[int]:
        """
        Return a topological order of every node.

        Raises:
            CycleDetected: If the graph is not acyclic.
        """
        graph = self.graph
        in_degree = graph.in_degrees()
        ready = [i for i, d in enumerate(in_degree) if d == 0]
        heapq.heapify(ready)

        order: List[int] = []
        while ready:
            u = heapq.heappop(ready)
            order.append(u)
            for v in graph.edges[u]:
                in_degree[v] -= 1
                if in_degree[v] == 0:
                    heapq.heappush(ready, v)

        if len(order) < len(graph):
            placed = set(order)
            remaining = [i for i in range(len(graph)) if i not in placed]
            raise CycleDetected(remaining, self._trace_cycle(remaining))
        return order

    def _trace_cycle(self, remaining: List[int]) -> List[int]:
        """
        Find one cycle among the unordered nodes.

        Every unordered node keeps a predecessor that is also unordered,
        so walking predecessors must eventually revisit a node.
        """
        pending = set(remaining)
        predecessor: Dict[int, int] = {}
        for u in remaining:
            for v in self.graph.edges[u]:
                if v in pending and v not in predecessor:
                    predecessor[v] = u

        path: List[int] = []
        position: Dict[int, int] = {}
        node = remaining[0]
        while node not in position:
            position[node] = len(path)
            path.append(node)
            node = predecessor[node]

        # path walks backwards along edges; reverse to follow them forwards
        return list(reversed(path[position[node]:]))


def topological_sort(graph: CausalGraph) -> List[int]:
    """Convenience wrapper around :meth:`TopologicalSorter.sort`."""
    return TopologicalSorter(graph).sort()
