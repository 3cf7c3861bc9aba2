"""
Command-line interface for the HBGRAPH causal graph analyzer.

Provides argument parsing and orchestration for building and reducing
the happens-before graph of a trace (read from CSV or generated), checking
safety properties over it, and exporting the result.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import hbgraph
from hbgraph.core.analyzer import CausalAnalyzer
from hbgraph.core.trace import Trace
from hbgraph.parser.property import SafetyProperty, load_property
from hbgraph.utils.logger import AnalysisLogger, LogLevel
from hbgraph.utils.trace_generator import TraceGenerator
from hbgraph.utils.trace_reader import TraceReader
from hbgraph.utils.trace_writer import TraceWriter
from hbgraph.utils.visualization import GraphVisualizer


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the HBGRAPH CLI."""
    parser = argparse.ArgumentParser(
        prog="hbgraph",
        description=(
            "HBGRAPH: Happens-Before Graph analyzer - "
            "builds the minimal causal graph of a vector-clock trace "
            "and checks safety properties over causal futures"
        ),
    )

    source = parser.add_argument_group("trace source (one required)")
    exclusive = source.add_mutually_exclusive_group(required=True)
    exclusive.add_argument(
        "-t",
        "--trace",
        type=Path,
        help="Path to trace file (.csv)",
    )
    exclusive.add_argument(
        "-g",
        "--generate",
        type=int,
        metavar="N",
        help="Generate a random trace of N events instead of reading one",
    )
    source.add_argument(
        "--processes",
        default="A,B,C",
        help="Comma-separated process ids for --generate (default: A,B,C)",
    )
    source.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for --generate",
    )

    prop = parser.add_argument_group("safety property")
    prop.add_argument(
        "-p",
        "--property",
        type=Path,
        default=None,
        help="Path to property file with 'pre:' and 'post:' clauses",
    )
    prop.add_argument("--pre", default=None, metavar="EXPR", help="Precondition predicate")
    prop.add_argument("--post", default=None, metavar="EXPR", help="Postcondition predicate")
    prop.add_argument(
        "--all-violations",
        action="store_true",
        help="Report every violation instead of stopping at the first",
    )

    parser.add_argument(
        "--save-trace",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write the analyzed trace to FILE as CSV",
    )
    parser.add_argument(
        "--print-trace",
        action="store_true",
        help="Print the trace, one event per line",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=["silent", "normal", "verbose"],
        default="normal",
        help="Output level (default: normal)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        type=int,
        choices=[0, 1, 2, 3],
        default=0,
        help="Debug level 0-3 (default: 0)",
    )
    parser.add_argument(
        "--visualize",
        nargs="?",
        const="__stdout__",
        default=None,
        metavar="FILE",
        help="Export the reduced graph (DOT to stdout, or FILE: .dot .png .svg .pdf .json)",
    )
    parser.add_argument(
        "--visualize-ascii",
        action="store_true",
        help="Print ASCII adjacency listing of the reduced graph",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print graph statistics after analysis",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"hbgraph {hbgraph.__version__}",
    )

    return parser


def _resolve_log_level(output: str, debug: int) -> LogLevel:
    """Determine the effective log level from output and debug settings."""
    if debug >= 3:
        return LogLevel.DEBUG
    if output == "verbose" or debug >= 1:
        return LogLevel.VERBOSE
    if output == "silent":
        return LogLevel.SILENT
    return LogLevel.NORMAL


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``hbgraph`` CLI command."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        _run(args)
    except SystemExit:
        raise
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


def _load_property(args: argparse.Namespace) -> Optional[SafetyProperty]:
    """Resolve the property from -p or --pre/--post."""
    inline = args.pre is not None or args.post is not None
    if args.property is not None and inline:
        raise ValueError("Use either --property or --pre/--post, not both")
    if inline:
        if args.pre is None or args.post is None:
            raise ValueError("--pre and --post must be given together")
        return SafetyProperty.parse(args.pre, args.post, name="inline")
    if args.property is not None:
        return load_property(args.property)
    return None


def _load_trace(args: argparse.Namespace, logger: AnalysisLogger) -> Trace:
    """Read the trace file or generate a trace."""
    if args.trace is not None:
        if not args.trace.exists():
            raise FileNotFoundError(f"Trace file not found: {args.trace}")
        trace = TraceReader(args.trace).read_all().trace
        for problem in trace.validate():
            logger.warning(problem)
        return trace

    processes = [p.strip() for p in args.processes.split(",") if p.strip()]
    trace = TraceGenerator(processes, seed=args.seed).generate(args.generate)
    logger.info(
        f"Generated {len(trace)} events over {len(processes)} processes"
        + (f" (seed {args.seed})" if args.seed is not None else "")
    )
    return trace


def _run(args: argparse.Namespace) -> None:
    """Execute the analysis pipeline."""
    log_level = _resolve_log_level(args.output, args.debug)
    logger = AnalysisLogger(level=log_level, stream=sys.stdout)

    # Parse the property first so syntax errors surface before any work
    prop = _load_property(args)
    trace = _load_trace(args, logger)

    if args.save_trace is not None:
        TraceWriter(trace).save(args.save_trace)
        logger.info(f"Trace written to {args.save_trace}")

    if args.print_trace:
        print(str(trace), end="")

    analyzer = CausalAnalyzer(trace, logger=logger)
    result = analyzer.run(prop, fail_fast=not args.all_violations)

    if (
        args.all_violations
        and result.safety is not None
        and not result.safety.holds
        and logger.enabled(LogLevel.NORMAL)
    ):
        print(f"{len(result.safety.violations)} violation(s):")
        for violation in result.safety.violations:
            print(f"  {violation}")

    if args.visualize_ascii:
        print()
        print(GraphVisualizer(result.graph).to_ascii())

    if args.visualize is not None:
        viz = GraphVisualizer(result.graph)
        if args.visualize == "__stdout__":
            print(viz.to_dot())
        else:
            filepath = Path(args.visualize)
            try:
                viz.save(filepath)
            except RuntimeError as e:
                dot_path = filepath.with_suffix(".dot")
                print(f"Warning: {e}; wrote {dot_path} instead", file=sys.stderr)
                viz.save_dot(dot_path)

    # Statistics (skip if verbose already printed them)
    if args.stats and log_level.value < LogLevel.VERBOSE.value:
        print()
        print("=== Statistics ===")
        for key, value in result.statistics.items():
            label = key.replace("_", " ").title()
            if isinstance(value, float):
                value = f"{value:.3f}"
            print(f"  {label}: {value}")

    sys.exit(0 if result.holds else 1)
