"""
Analysis orchestration for recorded traces.

Coordinates happens-before graph construction, topological ordering,
transitive reduction, graph statistics and safety property checking,
and reports verdicts through the logger.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from hbgraph.core.causal_graph import CausalGraph, CausalGraphBuilder
from hbgraph.core.reduction import TransitiveReducer
from hbgraph.core.safety import Postcondition, Precondition, SafetyChecker, SafetyResult
from hbgraph.core.topology import TopologicalSorter
from hbgraph.core.trace import Trace
from hbgraph.parser.property import SafetyProperty, load_property
from hbgraph.utils.logger import AnalysisLogger, LogLevel
from hbgraph.utils.trace_reader import TraceReader


@dataclass
class AnalysisResult:
    """
    Result of analyzing a trace.

    Attributes:
        graph: The transitively reduced causal graph.
        order: Topological order of the graph's nodes.
        statistics: Dictionary of graph and timing statistics.
        safety: Outcome of the property check, if a property was given.
    """

    graph: CausalGraph
    order: List[int]
    statistics: Dict[str, Any]
    safety: Optional[SafetyResult] = None

    @property
    def holds(self) -> bool:
        """True unless a checked property was violated."""
        return self.safety is None or self.safety.holds


class CausalAnalyzer:
    """
    Builds and reduces the causal graph of a trace and checks properties.

    Orchestrates:
    1. Building the raw happens-before graph
    2. Ordering it topologically
    3. Reducing it to direct dependencies
    4. Computing statistics
    5. Checking an optional safety property

    The graph is analyzed once, on first use; later checks reuse it.

    Attributes:
        trace: The trace under analysis.
        property: Safety property loaded by :meth:`from_files`, if any.
        logger: Logger for output.
    """

    def __init__(
        self,
        trace: Trace,
        logger: Optional[AnalysisLogger] = None,
    ) -> None:
        """
        Initialize the analyzer.

        Args:
            trace: The trace to analyze.
            logger: Optional logger for progress output.
        """
        self.trace: Trace = trace
        self.property: Optional[SafetyProperty] = None
        self.logger: AnalysisLogger = logger or AnalysisLogger(LogLevel.SILENT)

        self._graph: Optional[CausalGraph] = None
        self._order: List[int] = []
        self._statistics: Dict[str, Any] = {}

    @classmethod
    def from_files(
        cls,
        trace_file: Path,
        property_file: Optional[Path] = None,
        logger: Optional[AnalysisLogger] = None,
    ) -> CausalAnalyzer:
        """
        Create an analyzer from a trace file and optional property file.

        Args:
            trace_file: Path to trace CSV file.
            property_file: Path to a property file (``pre:`` / ``post:``).
            logger: Optional logger.

        Returns:
            Configured CausalAnalyzer ready to run.
        """
        trace_data = TraceReader(Path(trace_file)).read_all()
        analyzer = cls(trace_data.trace, logger=logger)
        if property_file is not None:
            analyzer.property = load_property(Path(property_file))
        return analyzer

    # ------------------------------------------------------------------ #
    # Pipeline
    # ------------------------------------------------------------------ #

    @property
    def graph(self) -> CausalGraph:
        """The reduced causal graph (analyzed on first access)."""
        self.analyze()
        assert self._graph is not None
        return self._graph

    @property
    def order(self) -> List[int]:
        """Topological order of the graph's nodes."""
        self.analyze()
        return list(self._order)

    @property
    def statistics(self) -> Dict[str, Any]:
        """Graph and timing statistics."""
        self.analyze()
        return dict(self._statistics)

    def analyze(self) -> CausalGraph:
        """
        Build, order and reduce the causal graph.

        Returns:
            The reduced graph.

        Raises:
            CycleDetected: If the trace's clocks induce a cycle.
        """
        if self._graph is not None:
            return self._graph

        procs = sorted(self.trace.processes)
        self.logger.info(f"Loaded {len(self.trace)} events from {len(procs)} processes")
        self.logger.info(f"Processes: {', '.join(procs)}")
        for eid, event in enumerate(self.trace):
            self.logger.event_info(eid, event)

        builder = CausalGraphBuilder(self.logger)
        started = time.perf_counter()
        graph = builder.build(self.trace)
        build_time = time.perf_counter() - started
        raw_edges = graph.edge_count()

        started = time.perf_counter()
        order = TopologicalSorter(graph).sort()
        removed = TransitiveReducer(graph, self.logger).reduce(order)
        reduce_time = time.perf_counter() - started

        stats: Dict[str, Any] = {
            "nodes": len(graph),
            "raw_edges": raw_edges,
            "direct_edges": graph.edge_count(),
            "removed_edges": removed,
        }
        stats.update(graph.out_degree_stats())
        stats["longest_path"] = graph.longest_path_length(order)
        stats["clock_collisions"] = len(builder.collisions)
        stats["build_time"] = build_time
        stats["reduce_time"] = reduce_time

        self._graph = graph
        self._order = order
        self._statistics = stats
        return graph

    def check(
        self,
        precondition: Precondition,
        postcondition: Postcondition,
        fail_fast: bool = True,
    ) -> SafetyResult:
        """
        Check a safety property over the reduced graph.

        Args:
            precondition: Selects trigger events.
            postcondition: Must hold for every descendant of a trigger.
            fail_fast: Stop at the first violation.

        Returns:
            SafetyResult with verdict and witness.
        """
        graph = self.analyze()

        started = time.perf_counter()
        result = SafetyChecker(graph, self.logger).check(
            precondition, postcondition, fail_fast=fail_fast,
        )
        self._statistics["check_time"] = time.perf_counter() - started
        self._statistics["triggers_checked"] = result.triggers_checked
        self._statistics["events_evaluated"] = result.events_evaluated

        if result.holds:
            self.logger.verdict_holds()
        else:
            self.logger.verdict_violated(result.trigger_id, result.offending_id)
        return result

    def check_property(self, prop: SafetyProperty, fail_fast: bool = True) -> SafetyResult:
        """Check a parsed :class:`SafetyProperty`."""
        graph = self.analyze()
        self.logger.info(f"Checking property {prop}")
        return self.check(
            prop.precondition_fn(graph.events),
            prop.postcondition_fn(),
            fail_fast=fail_fast,
        )

    def run(
        self,
        property: Optional[SafetyProperty] = None,
        fail_fast: bool = True,
    ) -> AnalysisResult:
        """
        Run the whole pipeline.

        Args:
            property: Property to check; defaults to the one loaded by
                :meth:`from_files`.  No check runs when neither is set.
            fail_fast: Stop at the first violation.

        Returns:
            AnalysisResult with graph, order, statistics and verdict.
        """
        graph = self.analyze()
        prop = property if property is not None else self.property

        safety = None
        if prop is not None:
            safety = self.check_property(prop, fail_fast=fail_fast)

        self.logger.statistics(self._statistics)
        return AnalysisResult(
            graph=graph,
            order=list(self._order),
            statistics=dict(self._statistics),
            safety=safety,
        )
