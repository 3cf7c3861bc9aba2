"""
Tests for transitive reduction of causal graphs.

Tests cover the reference scenarios, reachability preservation,
idempotence, insertion-order independence and order validation.
"""

from io import StringIO

import pytest

from hbgraph.core.causal_graph import CausalGraph, CausalGraphBuilder
from hbgraph.core.event import Event
from hbgraph.core.reduction import TransitiveReducer, reduce_graph
from hbgraph.core.topology import CycleDetected
from hbgraph.core.trace import Trace
from hbgraph.core.vector_clock import VectorClock
from hbgraph.utils.logger import AnalysisLogger, LogLevel


def _graph(n: int, edges: dict) -> CausalGraph:
    events = [Event("send", f"P{i}", VectorClock({f"P{i}": 1})) for i in range(n)]
    return CausalGraph(events, edges)


def _closure(graph: CausalGraph) -> set:
    return {(u, v) for u in graph.edges for v in graph.descendants(u)}


class TestReferenceScenarios:
    """Reduced graphs for known traces."""

    def test_chain(self, chain_trace: Trace) -> None:
        """0 -> 2 is implied by 0 -> 1 -> 2 and is removed."""
        g = CausalGraphBuilder().build(chain_trace)
        removed = TransitiveReducer(g).reduce()
        assert removed == 1
        assert g.edges == {0: [1], 1: [2], 2: []}

    def test_concurrent(self, concurrent_trace: Trace) -> None:
        g = CausalGraphBuilder().build(concurrent_trace)
        assert TransitiveReducer(g).reduce() == 0
        assert g.edges == {0: [], 1: []}

    def test_two_branches(self, diamond_trace: Trace) -> None:
        """Only direct dependencies survive, in insertion order."""
        g = CausalGraphBuilder().build(diamond_trace)
        TransitiveReducer(g).reduce()
        assert g.edges == {
            0: [1, 3],
            1: [2],
            2: [6],
            3: [4],
            4: [5],
            5: [6],
            6: [],
        }

    def test_cross_process_chain(self) -> None:
        """A message chain across processes reduces to a path."""
        events = [
            Event("send", "A", VectorClock({"A": 1, "B": 0})),
            Event("receive", "B", VectorClock({"A": 1, "B": 1})),
            Event("send", "A", VectorClock({"A": 2, "B": 1})),
        ]
        g = CausalGraphBuilder().build(events)
        TransitiveReducer(g).reduce()
        assert g.edges == {0: [1], 1: [2], 2: []}


class TestReductionProperties:
    """Invariants that hold for any input graph."""

    def test_reachability_preserved(self, diamond_trace: Trace) -> None:
        g = CausalGraphBuilder().build(diamond_trace)
        before = _closure(g)
        TransitiveReducer(g).reduce()
        assert _closure(g) == before

    def test_idempotent(self, diamond_trace: Trace) -> None:
        g = CausalGraphBuilder().build(diamond_trace)
        TransitiveReducer(g).reduce()
        once = {u: list(vs) for u, vs in g.edges.items()}
        assert TransitiveReducer(g).reduce() == 0
        assert g.edges == once

    def test_never_adds_edges(self, diamond_trace: Trace) -> None:
        g = CausalGraphBuilder().build(diamond_trace)
        raw = set(g.edge_list())
        TransitiveReducer(g).reduce()
        assert set(g.edge_list()) <= raw

    def test_minimal_for_reversed_trace(self, chain_trace: Trace) -> None:
        """A redundant edge inserted before its witness path is still removed."""
        g = CausalGraphBuilder().build(list(reversed(chain_trace.events)))
        assert g.edges[2] == [0, 1]
        TransitiveReducer(g).reduce()
        assert g.edges == {0: [], 1: [0], 2: [1]}

    def test_retained_edges_keep_order(self) -> None:
        """Successor lists are filtered, never re-sorted."""
        g = _graph(4, {0: [3, 2, 1], 1: [], 2: [], 3: []})
        TransitiveReducer(g).reduce()
        assert g.edges[0] == [3, 2, 1]


class TestReducerInputs:
    """Test order handling and errors."""

    def test_explicit_order(self) -> None:
        g = _graph(3, {0: [1, 2], 1: [2]})
        assert TransitiveReducer(g).reduce([0, 1, 2]) == 1

    def test_incomplete_order_rejected(self) -> None:
        g = _graph(3, {0: [1]})
        with pytest.raises(ValueError):
            TransitiveReducer(g).reduce([0, 1])

    def test_non_topological_order_rejected(self) -> None:
        g = _graph(2, {0: [1]})
        with pytest.raises(ValueError, match="not topological"):
            TransitiveReducer(g).reduce([1, 0])

    def test_cycle_raises(self) -> None:
        g = _graph(2, {0: [1], 1: [0]})
        with pytest.raises(CycleDetected):
            TransitiveReducer(g).reduce()

    def test_reduce_graph_returns_order(self, chain_trace: Trace) -> None:
        g = CausalGraphBuilder().build(chain_trace)
        assert reduce_graph(g) == [0, 1, 2]
        assert g.edge_count() == 2

    def test_debug_logs_dropped_edges(self, chain_trace: Trace) -> None:
        buf = StringIO()
        g = CausalGraphBuilder().build(chain_trace)
        TransitiveReducer(g, AnalysisLogger(LogLevel.DEBUG, buf)).reduce()
        assert "[DEBUG] Edge e-0 -> e-2 dropped" in buf.getvalue()
