"""
Tests for safety property checking over causal futures.

Tests cover trigger selection, descendant traversal, fail-fast and
exhaustive policies, result bookkeeping and violation logging.
"""

from io import StringIO

from hbgraph.core.causal_graph import CausalGraph, CausalGraphBuilder
from hbgraph.core.event import Event
from hbgraph.core.reduction import reduce_graph
from hbgraph.core.safety import SafetyChecker, SafetyResult
from hbgraph.core.trace import Trace
from hbgraph.core.vector_clock import VectorClock
from hbgraph.utils.logger import AnalysisLogger, LogLevel


def _reduced(trace: Trace) -> CausalGraph:
    g = CausalGraphBuilder().build(trace)
    reduce_graph(g)
    return g


def _always(*_args) -> bool:
    return True


def _never(*_args) -> bool:
    return False


class TestSafetyHolds:
    """Properties that hold."""

    def test_future_happens_after_trigger(self, diamond_trace: Trace) -> None:
        """Every descendant causally follows its trigger."""
        g = _reduced(diamond_trace)
        result = SafetyChecker(g).check(
            _always,
            lambda tid, trig, fid, fut: trig.happens_before(fut),
        )
        assert result.holds
        assert bool(result)
        assert result.violation is None
        assert result.trigger_id is None
        assert result.triggers_checked == 7

    def test_no_triggers(self, diamond_trace: Trace) -> None:
        result = SafetyChecker(_reduced(diamond_trace)).check(_never, _never)
        assert result.holds
        assert result.triggers_checked == 0
        assert result.events_evaluated == 0

    def test_sink_trigger_has_empty_future(self, chain_trace: Trace) -> None:
        """A trigger without descendants cannot violate anything."""
        g = _reduced(chain_trace)
        result = SafetyChecker(g).check(lambda e: e.clock.total() == 3, _never)
        assert result.holds
        assert result.triggers_checked == 1


class TestSafetyViolated:
    """Properties that fail."""

    def test_fail_fast_reports_first_pair(self, diamond_trace: Trace) -> None:
        """The first failing descendant in depth-first order is reported."""
        g = _reduced(diamond_trace)
        result = SafetyChecker(g).check(
            lambda e: e.process == "B" and e.is_receive(),
            lambda tid, trig, fid, fut: fut.process != "C",
        )
        assert not result.holds
        assert (result.trigger_id, result.offending_id) == (1, 6)
        assert result.violation.trigger.process == "B"
        assert result.violation.offending.process == "C"
        assert len(result.violations) == 1

    def test_fail_fast_stops_early(self, diamond_trace: Trace) -> None:
        g = _reduced(diamond_trace)
        result = SafetyChecker(g).check(_always, _never)
        assert (result.trigger_id, result.offending_id) == (0, 1)
        assert result.triggers_checked == 1
        assert result.events_evaluated == 1

    def test_collect_all_violations(self, diamond_trace: Trace) -> None:
        """With fail_fast off, every failing pair is recorded."""
        g = _reduced(diamond_trace)
        result = SafetyChecker(g).check(
            lambda e: e.process == "A",
            lambda tid, trig, fid, fut: fut.process != "C",
            fail_fast=False,
        )
        pairs = [(v.trigger_id, v.offending_id) for v in result.violations]
        assert pairs == [(0, 6), (0, 4), (0, 5), (3, 4), (3, 5), (3, 6)]
        assert result.triggers_checked == 2

    def test_violation_str(self, chain_trace: Trace) -> None:
        g = _reduced(chain_trace)
        result = SafetyChecker(g).check(lambda e: e.process == "A", _never)
        assert str(result.violation) == (
            "e-0 (SEND on A) -> e-1 (RECV on B, VClock: <A:1, B:1>)"
        )

    def test_violation_logged(self, chain_trace: Trace) -> None:
        buf = StringIO()
        g = _reduced(chain_trace)
        SafetyChecker(g, AnalysisLogger(LogLevel.VERBOSE, buf)).check(_always, _never)
        assert "[VIOLATION] Precondition met at e-0" in buf.getvalue()


class TestTraversal:
    """Test descendant exploration."""

    def test_each_descendant_evaluated_once(self) -> None:
        """A node reachable along two paths is evaluated once per trigger."""
        events = [Event("send", f"P{i}", VectorClock({f"P{i}": 1})) for i in range(4)]
        g = CausalGraph(events, {0: [1, 2], 1: [3], 2: [3]})
        seen = []
        result = SafetyChecker(g).check(
            lambda e: e.process == "P0",
            lambda tid, trig, fid, fut: seen.append(fid) is None,
        )
        assert result.holds
        assert seen == [1, 3, 2]
        assert result.events_evaluated == 3

    def test_trigger_not_evaluated(self, chain_trace: Trace) -> None:
        seen = []
        SafetyChecker(_reduced(chain_trace)).check(
            lambda e: e.process == "A",
            lambda tid, trig, fid, fut: seen.append(fid) is None,
        )
        assert 0 not in seen

    def test_deep_chain_without_recursion(self) -> None:
        """Long chains do not hit the interpreter recursion limit."""
        n = 5000
        events = [Event("send", "A", VectorClock({"A": i + 1})) for i in range(n)]
        g = CausalGraph(events, {i: [i + 1] for i in range(n - 1)})
        result = SafetyChecker(g).check(lambda e: e.clock["A"] == 1, _always)
        assert result.holds
        assert result.events_evaluated == n - 1


class TestSafetyResult:
    """Test the result container."""

    def test_defaults(self) -> None:
        result = SafetyResult(holds=True)
        assert result.violations == []
        assert result.offending_id is None
