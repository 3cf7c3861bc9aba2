"""
Transitive reduction of causal graphs.

The transitive reduction of a DAG is the unique smallest edge set with
the same reachability.  For a happens-before graph it keeps exactly the
*direct* causal dependencies: program order on each process plus the
send → receive edges that are not implied by anything else.

Reach sets can grow to O(n) entries per node on dense graphs, so memory
is O(n²) in the worst case.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set

from hbgraph.core.causal_graph import CausalGraph
from hbgraph.core.topology import TopologicalSorter
from hbgraph.utils.logger import AnalysisLogger, LogLevel


class TransitiveReducer:
    """
    Removes redundant edges from a :class:`CausalGraph` in place.

    Nodes are visited in reverse topological order while maintaining
    ``reach[u]``, the set of nodes reachable from ``u`` through retained
    edges.  Each child's reach set is final before its parent is visited.
    An edge ``u -> v`` is dropped when ``v`` is already in ``reach[u]``.

    Successors are examined in ascending topological rank: a successor
    reachable through a sibling always ranks after that sibling, so it
    is found redundant whatever order the edges were inserted in.
    Retained edges keep their original relative order.

    Attributes:
        graph: The graph to reduce.
        logger: Logger for debug output.
    """

    def __init__(self, graph: CausalGraph, logger: Optional[AnalysisLogger] = None) -> None:
        self.graph = graph
        self.logger: AnalysisLogger = logger or AnalysisLogger(LogLevel.SILENT)

    def reduce(self, order: Optional[Sequence[int]] = None) -> int:
        """
        Reduce the graph in place.

        Args:
            order: Topological order of the graph's nodes.  Computed
                when omitted.

        Returns:
            Number of edges removed (0 on an already reduced graph).

        Raises:
            CycleDetected: If *order* is omitted and the graph is cyclic.
            ValueError: If *order* does not cover every node once or
                is not topological.
        """
        graph = self.graph
        if order is None:
            order = TopologicalSorter(graph).sort()
        if len(order) != len(graph) or set(order) != set(range(len(graph))):
            raise ValueError("Topological order must list every node exactly once")

        rank: Dict[int, int] = {node: position for position, node in enumerate(order)}
        reach: Dict[int, Set[int]] = {}
        removed = 0

        for u in reversed(order):
            reachable: Set[int] = set()
            kept: Set[int] = set()
            for v in sorted(graph.edges[u], key=rank.__getitem__):
                if rank[v] <= rank[u]:
                    raise ValueError(f"Order is not topological: edge {u} -> {v}")
                if v in reachable:
                    removed += 1
                    self.logger.edge("dropped", u, v)
                    continue
                kept.add(v)
                reachable.add(v)
                reachable |= reach[v]
            reach[u] = reachable
            graph.set_successors(u, [v for v in graph.edges[u] if v in kept])

        self.logger.info(
            f"Transitive reduction removed {removed} edge(s); "
            f"{graph.edge_count()} direct edge(s) remain"
        )
        return removed


def reduce_graph(graph: CausalGraph, order: Optional[Sequence[int]] = None) -> List[int]:
    """
    Reduce *graph* in place and return the topological order used.
    """
    if order is None:
        order = TopologicalSorter(graph).sort()
    TransitiveReducer(graph).reduce(order)
    return list(order)
